"""Style-tree transformer: grid snapshots to timed, positioned caption trees.

WHY: The decoder produces full-screen grid snapshots. Output formats want
individual captions (one per block of text on screen) whose content is
text wrapped in nested style nodes, with a start and end time. Building
those trees naively produces one node per character or arbitrary nesting;
the output must be minimal and identical for identical input.

HOW: Two passes.
  1. Lifecycle: walk the snapshots in order. A new snapshot (or a cleared
     screen) closes every caption that is currently open, with the new
     snapshot's timecode as the end. Each maximal run of non-empty cells in
     a row ("chunk") of the new grid opens a caption.
  2. Chunk to tree: walk the chunk's characters keeping a stack of open
     style nodes. When the style changes, close the nodes whose property
     changed away from a non-default value, reopen anything that was popped
     along with them but did not change, and open nodes for the new
     non-default values. Properties that stay unchanged for more upcoming
     characters are opened first so they end up outermost.

RULES:
- Empty input gives empty output
- Position: x = ((col / 32) * 0.8 + 0.1) * 0.75 + 0.125,
  y = (row / 15) * 0.8 + 0.1 (tuned for 16:9 video)
- Alignment of every transformed caption is START
- Captions still open at the end are closed tail_seconds after the last
  snapshot, using the frame rate of the first snapshot
- Property priority for tie-breaking: color > underline > italics > flash
- Reopened properties are taken from popped nodes that are not closing;
  a property to close with no open node in the stack raises StyleTreeError
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Type

from scc_converter.config import DEFAULT_CAPTION_TAIL_S
from scc_converter.core.decoder import RawCaption
from scc_converter.core.errors import StyleTreeError
from scc_converter.core.grid import GRID_COLUMNS, GRID_ROWS, Character, CharacterStyle
from scc_converter.core.ir import (
    Alignment,
    Caption,
    ColorNode,
    ContainerNode,
    FlashNode,
    ItalicsNode,
    Position,
    RootNode,
    TextNode,
    UnderlineNode,
    tree_string,
)
from scc_converter.core.timecode import Timecode, Timespan

logger = logging.getLogger(__name__)

# Style properties, highest priority first
PROPERTIES = ("color", "underline", "italics", "flash")

_PROPERTY_NODE_CLASS: Dict[str, Type[ContainerNode]] = {
    "color": ColorNode,
    "underline": UnderlineNode,
    "italics": ItalicsNode,
    "flash": FlashNode,
}

_NODE_CLASS_PROPERTY = {cls: prop for prop, cls in _PROPERTY_NODE_CLASS.items()}


class _OpenCaption:
    """A caption whose end time is not known yet."""

    __slots__ = ("start", "position", "content")

    def __init__(self, start: Timecode, position: Position, content: RootNode) -> None:
        self.start = start
        self.position = position
        self.content = content

    def close(self, end: Timecode) -> Caption:
        return Caption(
            timespan=Timespan(self.start, end),
            position=self.position,
            content=self.content,
            align=Alignment.START,
        )


def _property_priority(prop: str) -> int:
    """Higher value means higher priority (color is highest)."""
    return len(PROPERTIES) - 1 - PROPERTIES.index(prop)


def _style_differences(a: CharacterStyle, b: CharacterStyle) -> List[str]:
    return [prop for prop in PROPERTIES if getattr(a, prop) != getattr(b, prop)]


def position_from_grid(row: int, column: int) -> Position:
    """Convert a grid cell to a normalized screen position inside the video.

    The mapping assumes 16:9 video; the caption safe area covers the central
    80% of a 4:3 region that is itself centered horizontally.
    """
    x = ((column / GRID_COLUMNS) * 0.8 + 0.1) * 0.75 + 0.125
    y = (row / GRID_ROWS) * 0.8 + 0.1
    return Position(x, y)


def collect_chunks(row: Sequence[Optional[Character]]) -> Dict[int, List[Character]]:
    """Split a grid row into maximal runs of non-empty cells.

    Returns:
        Dict mapping each run's starting column to its characters, in
        left-to-right order.
    """
    chunks: Dict[int, List[Character]] = {}
    current: Optional[List[Character]] = None
    for column, cell in enumerate(row):
        if cell is None:
            current = None
        elif current is None:
            current = [cell]
            chunks[column] = current
        else:
            current.append(cell)
    return chunks


def _new_node(prop: str, style: CharacterStyle) -> ContainerNode:
    if prop == "color":
        return ColorNode(color=style.color)
    if not getattr(style, prop):
        raise StyleTreeError("Cannot open a {} node for a property that is off".format(prop))
    return _PROPERTY_NODE_CLASS[prop]()


def _run_length(chunk: Sequence[Character], start: int, prop: str) -> int:
    """Count characters from start on that keep chunk[start]'s value of prop."""
    value = getattr(chunk[start].style, prop)
    length = 1
    for character in chunk[start + 1:]:
        if getattr(character.style, prop) != value:
            break
        length += 1
    return length


def build_tree(chunk: Sequence[Character]) -> RootNode:
    """Turn one chunk of styled characters into a minimal style-node tree.

    WHY: Style attributes in CEA-608 are per character. Markup formats need
    nested spans, and the nesting should follow how long each attribute
    lasts so visually continuous spans are not split into several nodes.

    HOW: Keeps a stack of open container nodes (starting with the root) and
    a text buffer. On every style change: flush the buffer, pop the stack
    down to the shallowest node whose property must close, remember popped
    nodes that should stay open, then push new nodes ordered by descending
    (run length, priority).

    RULES:
    - A property closes when it changed and its previous value was not the
      default
    - Popped nodes whose property did not close are reopened
    - A property opens when it changed (or was reopened) and its new value
      is not the default
    - Longer-lasting properties are opened first (outermost); ties go to
      the higher-priority property
    """
    default_style = CharacterStyle.default()
    current_style = default_style
    text = ""
    root = RootNode()
    stack: List[ContainerNode] = [root]

    for index, character in enumerate(chunk):
        differences = _style_differences(current_style, character.style)

        if differences:
            if text:
                stack[-1].children.append(TextNode(text))
                text = ""

            non_default_before = _style_differences(current_style, default_style)
            to_close = [prop for prop in differences if prop in non_default_before]

            if to_close:
                close_classes = tuple(_PROPERTY_NODE_CLASS[prop] for prop in to_close)
                match_index = next(
                    (i for i, node in enumerate(stack) if type(node) in close_classes),
                    None,
                )
                if match_index is None:
                    raise StyleTreeError(
                        "No node for properties {} found in stack".format(", ".join(to_close))
                    )

                reopen = [
                    _NODE_CLASS_PROPERTY[type(node)]
                    for node in stack[match_index:]
                    if type(node) not in close_classes
                ]
                differences += [prop for prop in reopen if prop not in differences]
                del stack[match_index:]

            non_default_after = _style_differences(character.style, default_style)
            to_open = [prop for prop in differences if prop in non_default_after]
            to_open.sort(
                key=lambda prop: (_run_length(chunk, index, prop), _property_priority(prop)),
                reverse=True,
            )

            for prop in to_open:
                node = _new_node(prop, character.style)
                stack[-1].children.append(node)
                stack.append(node)

            current_style = character.style

        text += character.glyph

    if text:
        stack[-1].children.append(TextNode(text))

    return root


def transform(
    raw_captions: Sequence[RawCaption],
    tail_seconds: float = DEFAULT_CAPTION_TAIL_S,
) -> List[Caption]:
    """Convert decoder snapshots into timed, positioned caption trees.

    Args:
        raw_captions: Snapshots from the decoder, in time order.
        tail_seconds: How long captions that are still on screen at the end
            of the stream stay visible.

    Returns:
        Captions ordered by start time, then by row and column.
    """
    if not raw_captions:
        return []

    fps = raw_captions[0].timecode.fps
    result: List[Caption] = []
    open_captions: List[_OpenCaption] = []
    last_time = Timecode(0, fps)

    for raw in raw_captions:
        if raw.grid is None or open_captions:
            result.extend(caption.close(raw.timecode) for caption in open_captions)
            open_captions = []

        if raw.grid is not None:
            for row_number, row in enumerate(raw.grid):
                for start_column, chunk in collect_chunks(row).items():
                    content = build_tree(chunk)
                    if logger.isEnabledFor(logging.DEBUG):
                        logger.debug(
                            "Caption at %s row %d column %d:\n%s",
                            raw.timecode, row_number, start_column, tree_string(content),
                        )
                    open_captions.append(_OpenCaption(
                        start=raw.timecode,
                        position=position_from_grid(row_number, start_column),
                        content=content,
                    ))

        last_time = raw.timecode

    if open_captions:
        end = last_time + Timecode.from_seconds(tail_seconds, fps)
        result.extend(caption.close(end) for caption in open_captions)

    return result

