"""JSON caption timeline formatter.

WHY: Downstream tools (editing software importers, QA scripts, web players
with custom rendering) want captions as data rather than WebVTT markup:
exact times, the grid-derived position, and the full style tree.

HOW: Each caption becomes an object with start/end in seconds, the same
times as SMPTE-style timecodes, position, alignment, the flattened text,
and the content tree as nested ``{"type": ..., "children": [...]}``
objects. The document is validated with jsonschema against
caption_timeline_schema.json (bundled next to this module) before it is
returned.

RULES:
- Schema version is "1.0.0"
- Times in seconds are rounded to 3 decimals
- position is ``{"x": .., "y": ..}`` or the string "top"/"bottom"
- Color nodes carry a "color" key with the lower-case color name
- Output suffix: "-captions.json"
- Validate output against the schema before returning; raise on failure
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import jsonschema

from scc_converter.core.ir import (
    Caption,
    CaptionNode,
    ColorNode,
    Position,
    ScreenRegion,
    TextNode,
    flatten_text,
)
from scc_converter.formatters.base import BaseFormatter, FormatterOutput

SCHEMA_VERSION = "1.0.0"

_SCHEMA_PATH = Path(__file__).resolve().parent / "caption_timeline_schema.json"


def _load_schema() -> Dict[str, Any]:
    """Load the caption timeline JSON schema from disk.

    Cached at module level after first call to avoid repeated I/O.
    """
    with open(_SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)


_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        _CACHED_SCHEMA = _load_schema()
    return _CACHED_SCHEMA


def node_to_dict(node: CaptionNode) -> Dict[str, Any]:
    """Convert a caption node tree into plain JSON-compatible dicts."""
    if isinstance(node, TextNode):
        return {"type": node.kind.value, "text": node.text}
    result: Dict[str, Any] = {"type": node.kind.value}
    if isinstance(node, ColorNode):
        result["color"] = node.color.label
    result["children"] = [node_to_dict(child) for child in node.children]
    return result


def _position_to_json(position: Union[Position, ScreenRegion]) -> Union[Dict[str, float], str]:
    if isinstance(position, ScreenRegion):
        return position.value
    return {"x": round(position.x, 6), "y": round(position.y, 6)}


def caption_to_dict(caption: Caption) -> Dict[str, Any]:
    start = caption.timespan.start
    end = caption.timespan.end
    return {
        "start": round(start.to_seconds(), 3),
        "end": round(end.to_seconds(), 3),
        "start_timecode": str(start),
        "end_timecode": str(end),
        "position": _position_to_json(caption.position),
        "align": caption.align.value,
        "text": flatten_text(caption.content),
        "content": node_to_dict(caption.content),
    }


class TimelineJSONFormatter(BaseFormatter):
    """Formatter that produces a schema-validated JSON caption timeline.

    RULES:
    - Returns a 1-element list
    - Raises jsonschema.ValidationError if the document does not match
      the bundled schema
    """

    @property
    def name(self) -> str:
        return "Caption Timeline JSON"

    def format(self, captions: Sequence[Caption]) -> List[FormatterOutput]:
        """Convert captions into a JSON caption timeline document.

        Returns:
            A single-element list containing the JSON output.
        """
        document = {
            "version": SCHEMA_VERSION,
            "captions": [caption_to_dict(caption) for caption in captions],
        }

        jsonschema.validate(instance=document, schema=_get_schema())

        return [
            FormatterOutput(
                suffix="-captions.json",
                content=json.dumps(document, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
