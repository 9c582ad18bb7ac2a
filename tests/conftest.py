"""Shared test fixtures for the scc_converter test suite.

WHY: The decoder, transformer, filter, and formatter tests all need the
same small vocabulary: a frame rate, a few timecodes, a grid holding
"Test", and ready-made captions. Centralizing them here keeps the expected
values identical across modules.

HOW: Pytest fixtures provide the values. Builder fixtures (scc_at_zero,
single_caption) return functions so tests can vary the content while the
surrounding timing and position stay fixed.

RULES:
- default_fps is 25 so frame counts convert to round milliseconds
- t1/t2/t3 are frames 10/20/30; caption fixtures span t1 to t2
- left_top is Position(0.2, 0.1): "line:10.000% position:20.000%" in WebVTT
"""

from typing import Callable, List, Sequence, Union

import pytest

from scc_converter.core.grid import Color, Grid
from scc_converter.core.ir import (
    Alignment,
    Caption,
    CaptionNode,
    ColorNode,
    FlashNode,
    ItalicsNode,
    Position,
    RootNode,
    TextNode,
    UnderlineNode,
)
from scc_converter.core.timecode import Timecode, Timespan


@pytest.fixture
def default_fps() -> int:
    return 25


@pytest.fixture
def t1(default_fps) -> Timecode:
    return Timecode(10, default_fps)


@pytest.fixture
def t2(default_fps) -> Timecode:
    return Timecode(20, default_fps)


@pytest.fixture
def t3(default_fps) -> Timecode:
    return Timecode(30, default_fps)


@pytest.fixture
def t1_2(t1, t2) -> Timespan:
    return Timespan(t1, t2)


@pytest.fixture
def t2_3(t2, t3) -> Timespan:
    return Timespan(t2, t3)


@pytest.fixture
def test_grid() -> Grid:
    return Grid().insert_text(0, 0, "Test")


@pytest.fixture
def left_top() -> Position:
    return Position(0.2, 0.1)


@pytest.fixture
def scc_at_zero() -> Callable[[str], List[str]]:
    """Build the lines of an SCC file with one data line at 00:00:00:00."""

    def build(data: str) -> List[str]:
        return ["Scenarist_SCC V1.0", "", "00:00:00:00\t" + data]

    return build


@pytest.fixture
def single_caption(t1_2, left_top) -> Callable[..., List[Caption]]:
    """Build a one-caption list spanning t1 to t2 at left_top.

    Accepts a string (wrapped in a TextNode), one node, or a list of nodes.
    """

    def build(content: Union[str, CaptionNode, Sequence[CaptionNode]]) -> List[Caption]:
        if isinstance(content, str):
            content = TextNode(content)
        if not isinstance(content, (list, tuple)):
            content = [content]
        return [Caption(
            timespan=t1_2,
            position=left_top,
            content=RootNode(list(content)),
            align=Alignment.START,
        )]

    return build


@pytest.fixture
def all_node_types_caption(single_caption) -> List[Caption]:
    """One caption using every style node kind once."""
    return single_caption([
        ColorNode(color=Color.BLUE, children=[TextNode("1")]),
        FlashNode([TextNode("2")]),
        ItalicsNode([TextNode("3")]),
        UnderlineNode([TextNode("4")]),
    ])
