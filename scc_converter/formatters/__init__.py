"""Output formatter registry: pluggable format hub.

WHY: The CLI needs a single lookup to find the right formatter by name. A
central dict makes it trivial to add new formats: create the formatter
class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["webvtt"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags, config, etc.)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from scc_converter.formatters.plain_text import PlainTextFormatter
from scc_converter.formatters.timeline_json import TimelineJSONFormatter
from scc_converter.formatters.webvtt import WebVTTFormatter

if TYPE_CHECKING:
    from scc_converter.formatters.base import BaseFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "webvtt": WebVTTFormatter,
    "timeline_json": TimelineJSONFormatter,
    "plain_text": PlainTextFormatter,
}
