"""Unit tests for Timecode and Timespan.

WHY: Every caption time in every output format is derived from these
types. A drop-frame miscount drifts captions by seconds over an hour of
video; an empty timespan produces cues players reject.

HOW: Parse known SMPTE strings, check arithmetic and string rendering,
and verify the Timespan invariants raise.
"""

import pytest

from scc_converter.core.errors import InvalidTimespanError
from scc_converter.core.timecode import Timecode, Timespan


class TestTimecodeParse:
    """SMPTE string parsing, non-drop and drop-frame."""

    def test_non_drop_frame(self):
        assert Timecode.parse("00:00:01:04", 25) == Timecode(29, 25)

    def test_hours_minutes_seconds(self):
        assert Timecode.parse("01:02:03:04", 25).frames == ((62 * 60) + 3) * 25 + 4

    def test_drop_frame_skips_two_numbers_per_minute(self):
        assert Timecode.parse("00:01:00;02", 29.97).frames == 1800

    def test_drop_frame_keeps_every_tenth_minute(self):
        assert Timecode.parse("00:10:00;00", 29.97).frames == 17982

    def test_colon_separator_is_not_drop_frame(self):
        assert Timecode.parse("00:10:00:00", 29.97).frames == 18000

    @pytest.mark.parametrize("text", [
        "garbage",
        "00:00:00",
        "00:60:00:00",
        "00:00:60:00",
        "00:00:00:25",
        "00-00-00-00",
    ])
    def test_invalid_timecodes_raise(self, text):
        with pytest.raises(ValueError):
            Timecode.parse(text, 25)


class TestTimecodeValue:
    """Arithmetic, conversion, ordering, and rendering."""

    def test_negative_frames_rejected(self):
        with pytest.raises(ValueError):
            Timecode(-1, 25)

    def test_zero_fps_rejected(self):
        with pytest.raises(ValueError):
            Timecode(0, 0)

    def test_from_seconds(self):
        assert Timecode.from_seconds(5.0, 25) == Timecode(125, 25)

    def test_to_seconds(self):
        assert Timecode(10, 25).to_seconds() == pytest.approx(0.4)

    def test_add_frames(self, t1):
        assert t1 + 5 == Timecode(15, 25)

    def test_add_timecode(self, t1, t2):
        assert t1 + t2 == Timecode(30, 25)

    def test_ordering(self, t1, t2):
        assert t1 < t2
        assert max(t2, t1) == t2

    def test_str_renders_smpte(self):
        assert str(Timecode(29, 25)) == "00:00:01:04"
        assert str(Timecode.parse("01:02:03:04", 25)) == "01:02:03:04"


class TestTimespan:
    """Timespan construction invariants."""

    def test_valid_span(self, t1, t2):
        span = Timespan(t1, t2)
        assert (span.start, span.end) == (t1, t2)

    def test_end_before_start_raises(self, t1, t2):
        with pytest.raises(InvalidTimespanError, match="before start"):
            Timespan(t2, t1)

    def test_empty_span_raises(self, t1):
        with pytest.raises(InvalidTimespanError, match="empty"):
            Timespan(t1, t1)

    def test_spans_compare_by_value(self, t1, t2, t1_2):
        assert Timespan(Timecode(10, 25), Timecode(20, 25)) == t1_2
