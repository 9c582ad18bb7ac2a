"""WebVTT formatter: captions as positioned, styled cues.

WHY: WebVTT is the caption format browsers and most players accept, and it
can express everything CEA-608 pop-on captions carry: screen position,
italics, underline, color, and flash (as a CSS class).

HOW: Writes the ``WEBVTT`` header, then one cue per caption. Cue settings
come from the caption's alignment and position. The caption tree is
rendered recursively; each node kind maps to a markup function.

RULES:
- Timestamps are ``HH:MM:SS.mmm``, rounded to the nearest millisecond
- ``align`` is omitted when it is middle (the WebVTT default)
- XY positions: ``line:<y%> position:<x%>`` with three decimals
- TOP is ``line:5%`` (``line:0`` is not supported by every browser);
  BOTTOM is ``line:-1,end``
- Text escapes: ``&`` -> ``&amp;``, ``<`` -> ``&lt;``, ``>`` -> ``&gt;``
- Markup: ``<i>``, ``<u>``, ``<c.blink>``, ``<c.{color}>``
- trim_line_whitespace strips each output line of the cue text
- Output suffix: ".vtt", media type "text/vtt"
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from scc_converter.core.ir import (
    Alignment,
    Caption,
    CaptionNode,
    ContainerNode,
    NodeKind,
    Position,
    ScreenRegion,
    TextNode,
)
from scc_converter.core.timecode import Timecode
from scc_converter.formatters.base import BaseFormatter, FormatterOutput

FILE_MAGIC = "WEBVTT"

_REGION_LINE = {
    ScreenRegion.TOP: "5%",
    ScreenRegion.BOTTOM: "-1,end",
}


def format_timestamp(timecode: Timecode) -> str:
    """Format a timecode as a WebVTT timestamp, e.g. ``00:01:02.500``."""
    total_ms = int(round(timecode.to_seconds() * 1000))
    hours, remainder = divmod(total_ms, 3600 * 1000)
    minutes, remainder = divmod(remainder, 60 * 1000)
    seconds, milliseconds = divmod(remainder, 1000)
    return "{:02d}:{:02d}:{:02d}.{:03d}".format(hours, minutes, seconds, milliseconds)


def _percentage(value: float) -> str:
    return "{:.3f}%".format(value * 100.0)


def escape_text(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def cue_settings(caption: Caption) -> str:
    """Build the cue settings string for a caption's alignment and position."""
    settings: List[str] = []
    if caption.align is not Alignment.MIDDLE:
        settings.append("align:" + caption.align.value)
    if isinstance(caption.position, Position):
        settings.append("line:" + _percentage(caption.position.y))
        settings.append("position:" + _percentage(caption.position.x))
    else:
        settings.append("line:" + _REGION_LINE[caption.position])
    return " ".join(settings)


def _children_markup(node: ContainerNode) -> str:
    return "".join(node_markup(child) for child in node.children)


_MARKUP: Dict[NodeKind, Callable[[ContainerNode], str]] = {
    NodeKind.ROOT: _children_markup,
    NodeKind.ITALICS: lambda node: "<i>" + _children_markup(node) + "</i>",
    NodeKind.UNDERLINE: lambda node: "<u>" + _children_markup(node) + "</u>",
    NodeKind.FLASH: lambda node: "<c.blink>" + _children_markup(node) + "</c>",
    NodeKind.COLOR: lambda node: (
        "<c." + node.color.label + ">" + _children_markup(node) + "</c>"  # type: ignore[attr-defined]
    ),
}


def node_markup(node: CaptionNode) -> str:
    """Render a caption node and its descendants as WebVTT cue text."""
    if isinstance(node, TextNode):
        return escape_text(node.text)
    return _MARKUP[node.kind](node)


class WebVTTFormatter(BaseFormatter):
    """Formatter that produces a single WebVTT file.

    Args:
        trim_line_whitespace: Strip leading and trailing whitespace from
            every line of cue text. Caption authors pad lines with spaces
            for on-screen placement; WebVTT positions cues itself.
    """

    def __init__(self, trim_line_whitespace: bool = False) -> None:
        self.trim_line_whitespace = trim_line_whitespace

    @property
    def name(self) -> str:
        return "WebVTT"

    def format_cue(self, caption: Caption) -> str:
        header = "{} --> {} {}".format(
            format_timestamp(caption.timespan.start),
            format_timestamp(caption.timespan.end),
            cue_settings(caption),
        )
        text = node_markup(caption.content)
        if self.trim_line_whitespace:
            text = "\n".join(line.strip() for line in text.split("\n"))
        return header + "\n" + text + "\n\n"

    def format(self, captions: Sequence[Caption]) -> List[FormatterOutput]:
        """Convert captions into one WebVTT document.

        Returns:
            A single-element list containing the WebVTT output.
        """
        parts = [FILE_MAGIC + "\n\n"]
        parts.extend(self.format_cue(caption) for caption in captions)
        return [
            FormatterOutput(
                suffix=".vtt",
                content="".join(parts),
                media_type="text/vtt",
            )
        ]
