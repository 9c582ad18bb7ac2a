"""End-to-end properties of decode + transform.

WHY: Unit tests pin individual commands and trees. These tests check the
guarantees the whole pipeline gives on a realistic multi-caption stream:
monotonic snapshots, no duplicates, well-formed and non-overlapping
timespans, deterministic output, and text that survives tree building.

HOW: A small SCC document exercising doubled commands, indents, mid-row
styles, tab offsets, and erase-displayed is decoded and transformed once
per test. Properties are asserted over the resulting lists.
"""

import pytest

from scc_converter.core.decoder import decode
from scc_converter.core.errors import FormatError, ParityError
from scc_converter.core.grid import Color
from scc_converter.core.ir import ColorNode, ItalicsNode, Position, RootNode, TextNode, flatten_text
from scc_converter.core.timecode import Timecode
from scc_converter.core.transformer import collect_chunks, position_from_grid, transform

FPS = 25

STREAM = (
    "Scenarist_SCC V1.0\n"
    "\n"
    "00:00:01:00\t9420 9420 94ae 94ae 91d0 91d0 54e5 73f4 9152 9152 c1c2 942f 942f\n"
    "\n"
    "00:00:03:00\t9420 94ae 9440 91a8 c1c2 91ae 54e5 73f4 942f\n"
    "\n"
    "00:00:05:00\t942c 942c\n"
    "\n"
    "00:00:06:00\t9420 94ae 1340 c180 97a2 c280 942f\n"
)


@pytest.fixture
def raw_captions():
    return decode(STREAM.splitlines(), FPS)


@pytest.fixture
def captions(raw_captions):
    return transform(raw_captions)


class TestDecodedStream:

    def test_timecodes_non_decreasing(self, raw_captions):
        times = [raw.timecode for raw in raw_captions]
        assert times == sorted(times)

    def test_no_duplicate_consecutive_snapshots(self, raw_captions):
        for previous, current in zip(raw_captions, raw_captions[1:]):
            assert previous.grid != current.grid

    def test_erase_displayed_emits_cleared_snapshot(self, raw_captions):
        cleared = [raw for raw in raw_captions if raw.grid is None]
        assert [raw.timecode for raw in cleared] == [Timecode.parse("00:00:05:00", FPS)]


class TestTransformedStream:

    def test_timespans_well_formed(self, captions):
        assert captions
        for caption in captions:
            assert caption.timespan.start < caption.timespan.end

    def test_no_overlap_at_same_position(self, captions):
        for index, first in enumerate(captions):
            for second in captions[index + 1:]:
                if first.position == second.position:
                    assert (
                        first.timespan.end <= second.timespan.start
                        or second.timespan.end <= first.timespan.start
                    )

    def test_idempotent_rebuild(self, captions):
        assert transform(decode(STREAM.splitlines(), FPS)) == captions

    def test_flatten_law(self, raw_captions, captions):
        expected = []
        for raw in raw_captions:
            if raw.grid is None:
                continue
            for row in raw.grid:
                for chunk in collect_chunks(row).values():
                    expected.append("".join(character.glyph for character in chunk))
        assert [flatten_text(caption.content) for caption in captions] == expected

    def test_erase_closes_without_opening(self, captions):
        erase_time = Timecode.parse("00:00:05:00", FPS)
        closed = [c for c in captions if c.timespan.end == erase_time]
        assert [flatten_text(c.content) for c in closed] == [" AB Test"]
        assert not [c for c in captions if c.timespan.start == erase_time]

    def test_tab_offset_splits_chunks(self, captions):
        last_screen = captions[-2:]
        assert [flatten_text(c.content) for c in last_screen] == ["A", "B"]
        assert last_screen[0].position == position_from_grid(11, 0)
        assert last_screen[1].position == position_from_grid(11, 3)


class TestScenarios:

    def test_single_test_caption(self, scc_at_zero):
        captions = transform(decode(scc_at_zero("9420 91d0 54e5 73f4 942f"), FPS))
        assert len(captions) == 1
        assert captions[0].content == RootNode([TextNode("Test")])
        assert captions[0].position == Position(0.2, 0.1)

    def test_color_then_italics_mid_row(self, scc_at_zero):
        # <red>Test<italics>AB: the italics mid-row code keeps the color
        captions = transform(decode(scc_at_zero("9420 91d0 91a8 54e5 73f4 91ae c1c2 942f"), FPS))
        assert captions[0].content == RootNode([
            TextNode(" "),
            ColorNode(color=Color.RED, children=[
                TextNode("Test "),
                ItalicsNode([TextNode("AB")]),
            ]),
        ])

    def test_italics_pac_on_later_row_resets_color(self, scc_at_zero):
        captions = transform(decode(scc_at_zero("9420 91d0 91a8 54e5 73f4 916e c1c2 942f"), FPS))
        assert [c.content for c in captions] == [
            RootNode([TextNode(" "), ColorNode(color=Color.RED, children=[TextNode("Test")])]),
            RootNode([ItalicsNode([TextNode("AB")])]),
        ]

    def test_malformed_data_returns_nothing(self, scc_at_zero):
        with pytest.raises(FormatError):
            decode(scc_at_zero("9420 91d0 54e5 73fz 942f"), FPS)

    def test_wrong_parity_returns_nothing(self, scc_at_zero):
        with pytest.raises(ParityError):
            decode(scc_at_zero("9420 91d0 54e5 73f4 942f 9420 11d0"), FPS)
