"""SMPTE timecode and timespan value types.

WHY: SCC lines are stamped with SMPTE timecodes (HH:MM:SS:FF, or with a
semicolon for drop-frame). The decoder advances time one frame per data
word, and the transformer needs caption start/end times that can be
compared, added to, and converted to seconds for output formats.

HOW: Timecode stores an absolute frame count plus the frame rate. Parsing
converts the four fields to a frame count, applying SMPTE drop-frame
numbering when the last separator is ";". Arithmetic works on frames.
Timespan pairs two timecodes and validates that the span is non-empty.

RULES:
- Frame counts are never negative
- ";" before the frame field means drop-frame (29.97 / 59.94 style numbering)
- Frame rate may be fractional; the nominal rate is the rounded value
- to_seconds() = frames / fps
- Timespan requires start < end strictly
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from scc_converter.core.errors import InvalidTimespanError

_TIMECODE_RE = re.compile(
    r"^(?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2})(?P<sep>[:;])(?P<frames>\d{2})$"
)


@dataclass(frozen=True, order=True)
class Timecode:
    """An absolute position in a video, counted in frames."""

    frames: int
    fps: float

    def __post_init__(self) -> None:
        if self.frames < 0:
            raise ValueError("Timecode frame count must not be negative: {}".format(self.frames))
        if self.fps <= 0:
            raise ValueError("Frame rate must be positive: {}".format(self.fps))

    @property
    def nominal_fps(self) -> int:
        """Integer frame rate used for HH:MM:SS:FF field arithmetic."""
        return int(round(self.fps))

    @classmethod
    def parse(cls, text: str, fps: float) -> "Timecode":
        """Parse an SMPTE timecode string.

        WHY: Every SCC data line starts with a timecode; the decoder needs
        it as a frame count to detect non-monotonic input and to stamp
        emitted captions.

        HOW: Split into hours/minutes/seconds/frames, validate the field
        ranges against the nominal frame rate, then count frames. For
        drop-frame (";") the skipped frame numbers are subtracted.

        RULES:
        - Minutes and seconds must be below 60
        - The frame field must be below the nominal frame rate
        - Drop-frame drops 2 frame numbers per minute per 30 nominal fps,
          except in every tenth minute

        Raises:
            ValueError: If the text is not a valid timecode.
        """
        match = _TIMECODE_RE.match(text.strip())
        if match is None:
            raise ValueError("Invalid timecode '{}'".format(text))

        hours = int(match.group("hours"))
        minutes = int(match.group("minutes"))
        seconds = int(match.group("seconds"))
        frames = int(match.group("frames"))
        drop_frame = match.group("sep") == ";"

        nominal = int(round(fps))
        if minutes >= 60 or seconds >= 60:
            raise ValueError("Invalid timecode '{}': field out of range".format(text))
        if frames >= nominal:
            raise ValueError(
                "Invalid timecode '{}': frame {} not below {} fps".format(text, frames, nominal)
            )

        total_minutes = hours * 60 + minutes
        count = (total_minutes * 60 + seconds) * nominal + frames
        if drop_frame:
            dropped_per_minute = 2 * max(1, nominal // 30)
            count -= dropped_per_minute * (total_minutes - total_minutes // 10)
        return cls(count, fps)

    @classmethod
    def from_seconds(cls, seconds: float, fps: float) -> "Timecode":
        return cls(int(round(seconds * fps)), fps)

    def to_seconds(self) -> float:
        return self.frames / self.fps

    def __add__(self, other: Union[int, "Timecode"]) -> "Timecode":
        if isinstance(other, Timecode):
            return Timecode(self.frames + other.frames, self.fps)
        if isinstance(other, int):
            return Timecode(self.frames + other, self.fps)
        return NotImplemented

    def __str__(self) -> str:
        nominal = self.nominal_fps
        frames = self.frames % nominal
        total_seconds = self.frames // nominal
        return "{:02d}:{:02d}:{:02d}:{:02d}".format(
            total_seconds // 3600,
            (total_seconds // 60) % 60,
            total_seconds % 60,
            frames,
        )


@dataclass(frozen=True)
class Timespan:
    """Half-open interval [start, end) during which a caption is shown."""

    start: Timecode
    end: Timecode

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidTimespanError("Timespan end time is before start time")
        if self.end == self.start:
            raise InvalidTimespanError("Timespan is empty")
