"""Caption tree model shared by the transformer, filter, and formatters.

WHY: The grid snapshots produced by the decoder say nothing about which
characters belong together or how their styles nest. Output formats such as
WebVTT need text spans wrapped in properly nested style tags, plus a
timespan and screen position per caption. This module is the stable
contract between the transformer and everything downstream.

HOW: Caption content is a small tree. TextNode holds text; RootNode,
ItalicsNode, UnderlineNode, FlashNode and ColorNode are containers. Every
node class carries a NodeKind discriminant, so consumers dispatch through
dicts keyed by kind instead of isinstance chains. Position is a normalized
XY pair; ScreenRegion is the symbolic top/bottom alternative used after
filtering. Caption bundles timespan, position, alignment and content.

RULES:
- Node equality is structural: same class, same children, same color
- Trees are acyclic and never shared between captions
- Position coordinates must lie in [0, 1] (PositionRangeError otherwise)
- Positions compare equal when both coordinates differ by less than 0.01
- Alignment is START for transformer output; the filter may set MIDDLE
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Union

from scc_converter.core.errors import PositionRangeError
from scc_converter.core.grid import Color
from scc_converter.core.timecode import Timespan

# Positions closer than this are treated as the same screen location
POSITION_TOLERANCE = 0.01


class NodeKind(Enum):
    TEXT = "text"
    ROOT = "root"
    ITALICS = "italics"
    UNDERLINE = "underline"
    FLASH = "flash"
    COLOR = "color"


@dataclass
class TextNode:
    """Leaf node holding a run of caption text."""

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    text: str


@dataclass
class ContainerNode:
    """Base for nodes that wrap other nodes."""

    kind: ClassVar[NodeKind]

    children: List["CaptionNode"] = field(default_factory=list)


@dataclass
class RootNode(ContainerNode):
    """Top-level node of every caption's content."""

    kind: ClassVar[NodeKind] = NodeKind.ROOT


@dataclass
class ItalicsNode(ContainerNode):
    kind: ClassVar[NodeKind] = NodeKind.ITALICS


@dataclass
class UnderlineNode(ContainerNode):
    kind: ClassVar[NodeKind] = NodeKind.UNDERLINE


@dataclass
class FlashNode(ContainerNode):
    kind: ClassVar[NodeKind] = NodeKind.FLASH


@dataclass
class ColorNode(ContainerNode):
    """Container whose text is rendered in a CEA-608 color."""

    kind: ClassVar[NodeKind] = NodeKind.COLOR

    color: Color = Color.WHITE


CaptionNode = Union[TextNode, ContainerNode]


def flatten_text(node: CaptionNode) -> str:
    """Concatenate all text below node in document order."""
    if isinstance(node, TextNode):
        return node.text
    return "".join(flatten_text(child) for child in node.children)


def tree_string(node: CaptionNode, level: int = 0) -> str:
    """Render a node tree as an indented outline, one node per line.

    Used for debug logging and readable test failure output, e.g.::

        RootNode
            ColorNode red
                TextNode "Test"
    """
    label = type(node).__name__
    if isinstance(node, TextNode):
        label += ' "{}"'.format(node.text)
    elif isinstance(node, ColorNode):
        label += " {}".format(node.color.label)
    result = "    " * level + label + "\n"
    if isinstance(node, ContainerNode):
        for child in node.children:
            result += tree_string(child, level + 1)
    return result


@dataclass(frozen=True, eq=False)
class Position:
    """Screen position relative to the video frame, both axes in [0, 1]."""

    x: float
    y: float

    def __post_init__(self) -> None:
        for axis in ("x", "y"):
            value = float(getattr(self, axis))
            if not 0.0 <= value <= 1.0:
                raise PositionRangeError(
                    "{} position {} not between 0 and 1".format(axis.upper(), value)
                )
            object.__setattr__(self, axis, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            abs(self.x - other.x) < POSITION_TOLERANCE
            and abs(self.y - other.y) < POSITION_TOLERANCE
        )

    __hash__ = None  # type: ignore[assignment]


class ScreenRegion(Enum):
    """Symbolic vertical placement used instead of an XY position."""

    TOP = "top"
    BOTTOM = "bottom"


class Alignment(Enum):
    START = "start"
    MIDDLE = "middle"
    END = "end"


@dataclass
class Caption:
    """A caption displayed at one screen position for a span of time.

    WHY: This is the unit every formatter consumes: one positioned block of
    styled text with a start and end time.

    RULES:
    - timespan.start < timespan.end (enforced by Timespan)
    - position is a Position or a ScreenRegion
    - content is always a RootNode
    """

    timespan: Timespan
    position: Union[Position, ScreenRegion]
    content: RootNode
    align: Alignment = Alignment.START
