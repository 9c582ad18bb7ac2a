"""SCC Caption Converter: line-21 closed captions to styled caption timelines.

WHY: Legacy broadcast and DVD captions are delivered as Scenarist SCC files,
a dump of raw CEA-608 byte pairs. No modern player or editor reads them
directly. This package replays those bytes like a decoder chip, turns the
resulting screens into timed, positioned caption trees with nested styles,
and writes them out as WebVTT, JSON, or plain text.

HOW: Four-stage pipeline: decode (core.decoder), transform
(core.transformer), filter (filters.caption_filter, optional), format
(pluggable formatters). Each stage is independently testable.

RULES:
- All formatters consume the same Caption model from core.ir
- Adding a new output format = one new formatter module, no core changes
- Only pop-on captions on data channel 1 are decoded
"""

__version__ = "0.1.0"
