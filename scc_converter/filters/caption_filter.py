"""Caption post-processing: style stripping, simple positions, merging.

WHY: Many players render WebVTT color classes and blink poorly or not at
all, and exact XY positions from a 4:3 caption grid often look wrong on
modern video. Editors want the option to strip styles, place captions
simply at the top or bottom of the screen, and combine lines that share a
region into one cue.

HOW: CaptionFilter walks the transformer output in order, tracking the
captions seen in the current timespan. Each caption is deep-copied before
it is changed, so the input list and its trees are never touched. Node
removal and text-node merging run per caption after all merging is done.

RULES:
- With all options off, the output equals the input
- remove_color / remove_flash replace such nodes by their children,
  recursively
- simple_positions: y < 0.5 is TOP; a caption less than 0.08 below the
  previous TOP caption of the same timespan stays TOP; everything else is
  BOTTOM. Alignment becomes MIDDLE.
- merge_by_position: a caption with the same timespan and position as an
  earlier one is appended to it, separated by a "\\n" text node
- Input must be ordered by timespan, then by row (the transformer's order)
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Type, Union

from scc_converter.core.ir import (
    Alignment,
    Caption,
    CaptionNode,
    ColorNode,
    ContainerNode,
    FlashNode,
    Position,
    ScreenRegion,
    TextNode,
)
from scc_converter.core.timecode import Timespan

logger = logging.getLogger(__name__)

# A caption directly below a top caption by less than this stays at the top
TOP_CONTINUATION_GAP = 0.08


@dataclass
class FilterOptions:
    """Switches for CaptionFilter. All default to off."""

    remove_color: bool = False
    remove_flash: bool = False
    simple_positions: bool = False
    merge_by_position: bool = False


def _merge_text_nodes(node: CaptionNode) -> None:
    """Join adjacent TextNode children in every container below node."""
    if not isinstance(node, ContainerNode):
        return
    merged: List[CaptionNode] = []
    for child in node.children:
        if isinstance(child, TextNode) and merged and isinstance(merged[-1], TextNode):
            merged[-1] = TextNode(merged[-1].text + child.text)
        else:
            _merge_text_nodes(child)
            merged.append(child)
    node.children = merged


def _remove_nodes(node: CaptionNode, node_types: Tuple[Type[ContainerNode], ...]) -> None:
    """Replace every container of node_types below node by its children."""
    if not isinstance(node, ContainerNode):
        return
    children: List[CaptionNode] = []
    for child in node.children:
        _remove_nodes(child, node_types)
        if isinstance(child, node_types):
            children.extend(child.children)
        else:
            children.append(child)
    node.children = children


class CaptionFilter:
    """Apply FilterOptions to a list of captions.

    Usage::

        options = FilterOptions(remove_color=True, simple_positions=True)
        filtered = CaptionFilter(options).process(captions)
    """

    def __init__(self, options: Optional[FilterOptions] = None) -> None:
        self.options = options or FilterOptions()
        node_types: List[Type[ContainerNode]] = []
        if self.options.remove_color:
            node_types.append(ColorNode)
        if self.options.remove_flash:
            node_types.append(FlashNode)
        self._removed_node_types = tuple(node_types)

    def _simple_position(
        self, position: Union[Position, ScreenRegion], last_top_y: Optional[float]
    ) -> Tuple[ScreenRegion, Optional[float]]:
        """Map an XY position to TOP or BOTTOM.

        Returns:
            The region and the y value to remember as the last top caption.
        """
        if isinstance(position, ScreenRegion):
            return position, last_top_y
        if position.y < 0.5:
            return ScreenRegion.TOP, position.y
        if last_top_y is not None and position.y - last_top_y < TOP_CONTINUATION_GAP:
            # Keep continuous lines that start in the top half together
            return ScreenRegion.TOP, position.y
        return ScreenRegion.BOTTOM, last_top_y

    def process(self, captions: Sequence[Caption]) -> List[Caption]:
        """Return a filtered copy of captions.

        Args:
            captions: Transformer output, ordered by timespan and row.

        Returns:
            New Caption objects; merged captions are dropped from the list.
        """
        result: List[Caption] = []
        last_timespan: Optional[Timespan] = None
        last_top_y: Optional[float] = None
        # (position, caption) pairs of the current timespan; Position is unhashable
        open_captions: List[Tuple[Union[Position, ScreenRegion], Caption]] = []

        for original in captions:
            caption = copy.deepcopy(original)
            same_timespan = last_timespan == caption.timespan
            if not same_timespan:
                last_top_y = None
                open_captions = []

            if self.options.simple_positions:
                region, last_top_y = self._simple_position(caption.position, last_top_y)
                caption = dataclasses.replace(caption, position=region, align=Alignment.MIDDLE)

            if self.options.merge_by_position and same_timespan:
                target = next(
                    (open_caption for position, open_caption in open_captions
                     if position == caption.position),
                    None,
                )
                if target is not None:
                    target.content.children.append(TextNode("\n"))
                    target.content.children.extend(caption.content.children)
                    logger.debug("Merged caption at %s into previous caption", caption.position)
                    continue

            last_timespan = caption.timespan
            open_captions.append((caption.position, caption))
            result.append(caption)

        for caption in result:
            if self._removed_node_types:
                _remove_nodes(caption.content, self._removed_node_types)
            _merge_text_nodes(caption.content)

        return result
