"""Error types raised by the decoder, transformer, and caption model.

WHY: Callers (the CLI, tests, library users) need to tell a malformed input
file apart from a bad byte or a programming error. A small hierarchy lets
the CLI catch everything caused by the input with one except clause.

HOW: DecodeError is the base for all input problems and subclasses
ValueError, so code that already treats bad input as ValueError keeps
working. Model invariants get their own ValueError subclasses; transformer
logic failures are RuntimeErrors because they are never the input's fault.

RULES:
- FormatError: bad magic line, malformed data line, timecode going backwards
- ParityError: a byte failed the odd parity check (only when checking is on)
- Both abort decoding immediately; no partial result is returned
- PositionRangeError / InvalidTimespanError: construction-time invariants
- StyleTreeError: internal invariant of the style-tree builder was violated
"""


class DecodeError(ValueError):
    """Base class for errors caused by the SCC input stream."""


class FormatError(DecodeError):
    """The stream does not follow the SCC file layout."""


class ParityError(DecodeError):
    """A byte in a data word does not have odd parity."""


class PositionRangeError(ValueError):
    """A normalized screen coordinate is outside [0, 1]."""


class InvalidTimespanError(ValueError):
    """A timespan is empty or ends before it starts."""


class StyleTreeError(RuntimeError):
    """The style-tree builder reached an inconsistent stack state."""
