"""SCC stream decoder: replays CEA-608 byte pairs into caption grid snapshots.

WHY: Scenarist SCC files carry raw line-21 byte pairs, not text. To know what
was on screen at which time, the stream has to be replayed the way a
CEA-608 decoder chip would: moving a cursor, tracking the pen style, and
composing captions off-screen before flipping them into view.

HOW: SCCDecoder reads the magic line, then each "<timecode>\\t<words>" line.
Every 4-hex-digit word is parity checked, stripped of its parity bits, and
either written as two characters or dispatched as a command. Commands
mutate a _DecoderState holding the cursor and two grids (displayed and
non-displayed memory). Whenever the displayed grid changes, a RawCaption
snapshot is recorded, but only if it differs from the previous one.

RULES:
- First line must be exactly "Scenarist_SCC V1.0" (FormatError otherwise)
- Data lines: timecode, TAB, space-separated 4-digit hex words
- A line timecode earlier than the current stream position (the previous
  line's timecode plus one frame per word decoded since) is a FormatError
- Odd parity per byte is required when check_parity is True (ParityError)
- "now" advances by one frame per word, even when the word raised
- A command identical to the one just before it is a transmission duplicate
  and is dropped once; tracking resets at each line and after characters
- Only data channel 1 and pop-on captions are decoded; the rest is skipped
- Cursor row/column are clamped into the grid, never an error
- Empty displayed grids are recorded as grid=None ("caption cleared")
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from scc_converter.core.errors import FormatError, ParityError
from scc_converter.core.grid import (
    GRID_COLUMNS,
    GRID_ROWS,
    Character,
    CharacterStyle,
    Color,
    Grid,
)
from scc_converter.core.timecode import Timecode

logger = logging.getLogger(__name__)

FILE_MAGIC = "Scenarist_SCC V1.0"

# One line of data: timecode, tab, then 4-digit hex words separated by spaces
LINE_RE = re.compile(r"^(?P<timecode>[0-9:;]+)\t(?P<data>[0-9a-fA-F]{4}(?: [0-9a-fA-F]{4})*) ?$")

# Standard characters that differ from ASCII; everything else passes through
STANDARD_CHARACTER_MAP = {
    0x2A: "\u00e1",  # a acute
    0x5C: "\u00e9",  # e acute
    0x5E: "\u00ed",  # i acute
    0x5F: "\u00f3",  # o acute
    0x60: "\u00fa",  # u acute
    0x7B: "\u00e7",  # c cedilla
    0x7C: "\u00f7",  # division sign
    0x7D: "\u00d1",  # N tilde
    0x7E: "\u00f1",  # n tilde
    0x7F: "\u2588",  # solid block
}

# Special characters (high byte 0x11, low byte 0x30-0x3F).
# 0x39 is the transparent space and is handled separately.
SPECIAL_CHARACTER_MAP = {
    0x30: "\u00ae",  # registered sign
    0x31: "\u00b0",  # degree sign
    0x32: "\u00bd",  # one half
    0x33: "\u00bf",  # inverted question mark
    0x34: "\u2122",  # trademark
    0x35: "\u00a2",  # cent
    0x36: "\u00a3",  # pound
    0x37: "\u266a",  # eighth note
    0x38: "\u00e0",  # a grave
    0x3A: "\u00e8",  # e grave
    0x3B: "\u00e2",  # a circumflex
    0x3C: "\u00ea",  # e circumflex
    0x3D: "\u00ee",  # i circumflex
    0x3E: "\u00f4",  # o circumflex
    0x3F: "\u00fb",  # u circumflex
}

TRANSPARENT_SPACE = 0x39

# Preamble address code high byte -> base row (0-based)
PREAMBLE_ROW_MAP = {
    0x10: 10,
    0x11: 0,
    0x12: 2,
    0x13: 11,
    0x14: 13,
    0x15: 4,
    0x16: 6,
    0x17: 8,
}

# Miscellaneous control codes (high byte 0x14)
RESUME_CAPTION_LOADING = 0x20
BACKSPACE = 0x21
DELETE_TO_END_OF_ROW = 0x24
FLASH_ON = 0x28
ERASE_DISPLAYED_MEMORY = 0x2C
ERASE_NON_DISPLAYED_MEMORY = 0x2E
END_OF_CAPTION = 0x2F

# "Color" 7 in PAC and mid-row codes means italics
ITALICS_CODE = 0x7

_NO_COMMAND: Tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class RawCaption:
    """Snapshot of the displayed grid at the moment it changed.

    grid is None when the screen was cleared.
    """

    timecode: Timecode
    grid: Optional[Grid] = None


@dataclass
class CursorState:
    """Pen position and style; row/column writes are clamped into the grid."""

    row: int = 0
    column: int = 0
    style: CharacterStyle = field(default_factory=CharacterStyle.default)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "row":
            value = min(max(int(value), 0), GRID_ROWS - 1)  # type: ignore[call-overload]
        elif name == "column":
            value = min(max(int(value), 0), GRID_COLUMNS - 1)  # type: ignore[call-overload]
        super().__setattr__(name, value)


@dataclass
class _DecoderState:
    """Everything one decode pass owns: both memories, cursor, and clock."""

    now: Timecode
    foreground: Grid = field(default_factory=Grid)
    background: Grid = field(default_factory=Grid)
    cursor: CursorState = field(default_factory=CursorState)
    last_grid: Optional[Grid] = None
    data_channel: int = 0

    def swap_grids(self) -> None:
        self.foreground, self.background = self.background, self.foreground


def has_odd_parity(byte: int) -> bool:
    return bin(byte).count("1") % 2 == 1


class SCCDecoder:
    """Decode an SCC caption stream into a list of RawCaption snapshots.

    A decoder instance can be reused; every call to decode() starts from a
    fresh state and nothing is shared between calls.
    """

    def __init__(self) -> None:
        self._state: Optional[_DecoderState] = None
        self._captions: List[RawCaption] = []

    def decode(
        self,
        lines: Iterable[str],
        fps: float,
        check_parity: bool = True,
    ) -> List[RawCaption]:
        """Replay an SCC stream and return the displayed-grid snapshots.

        Args:
            lines: The file's lines (with or without line endings), magic
                line first. Any iterable works, including an open file.
            fps: Frame rate used to interpret timecodes.
            check_parity: Reject words whose bytes fail the odd parity check.

        Returns:
            One RawCaption per change of the displayed grid, in time order.

        Raises:
            FormatError: On a bad magic line, a malformed data line, or a
                timecode that goes backwards.
            ParityError: On a parity failure when check_parity is True.
        """
        self._state = _DecoderState(now=Timecode(0, fps))
        self._captions = []

        iterator = iter(lines)
        magic = next(iterator, None)
        if magic is None or magic.rstrip("\r\n") != FILE_MAGIC:
            raise FormatError('File does not start with "{}"'.format(FILE_MAGIC))

        for line_number, raw_line in enumerate(iterator, start=2):
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue

            match = LINE_RE.match(line)
            if match is None:
                raise FormatError('Invalid line {}: "{}"'.format(line_number, line))

            try:
                timecode = Timecode.parse(match.group("timecode"), fps)
            except ValueError as e:
                raise FormatError("Invalid line {}: {}".format(line_number, e)) from e
            if timecode < self._state.now:
                raise FormatError(
                    "Timecode {} on line {} is behind the stream position {}".format(
                        match.group("timecode"), line_number, self._state.now
                    )
                )
            self._state.now = timecode

            self._parse_data(match.group("data"), check_parity)

        captions = self._captions
        logger.info("Decoded %d caption snapshots", len(captions))
        self._state = None
        self._captions = []
        return captions

    # ------------------------------------------------------------------
    # Word level
    # ------------------------------------------------------------------

    def _parse_data(self, data: str, check_parity: bool) -> None:
        state = self._state
        last_command = _NO_COMMAND

        for word_string in data.split():
            try:
                hi, lo = bytes.fromhex(word_string)
                if check_parity and not (has_odd_parity(hi) and has_odd_parity(lo)):
                    raise ParityError(
                        "At least one byte in word {} has even parity, odd required".format(
                            word_string
                        )
                    )
                hi &= 0x7F
                lo &= 0x7F

                if 0x20 <= hi <= 0x7F:
                    if state.data_channel != 0:
                        logger.debug("Skipping characters %s on channel 2", word_string)
                        continue
                    last_command = _NO_COMMAND
                    self._handle_character(hi)
                    self._handle_character(lo)
                    continue

                if (hi, lo) == last_command:
                    # Redundant transmission; a third copy executes again
                    logger.debug("Dropping repeated command %s", word_string)
                    last_command = _NO_COMMAND
                    continue

                state.data_channel = (hi >> 3) & 1
                if state.data_channel != 0:
                    logger.debug("Skipping command %s on channel 2", word_string)
                    continue

                self._dispatch_command(hi, lo)
                last_command = (hi, lo)
            finally:
                state.now = state.now + 1

    def _dispatch_command(self, hi: int, lo: int) -> None:
        if hi == 0x11 and 0x30 <= lo <= 0x3F:
            self._handle_special_character(lo)
        elif 0x10 <= hi <= 0x17 and lo >= 0x40:
            self._handle_preamble_address_code(hi, lo)
        elif hi in (0x14, 0x17) and 0x20 <= lo <= 0x2F:
            self._handle_control_code(hi, lo)
        elif hi == 0x11 and 0x20 <= lo <= 0x2F:
            self._handle_mid_row_code(lo)
        elif hi == 0x00 and lo == 0x00:
            pass  # filler
        else:
            logger.debug("Ignoring unknown command %02x/%02x", hi, lo)

    # ------------------------------------------------------------------
    # Characters
    # ------------------------------------------------------------------

    def _insert_character(self, glyph: str) -> None:
        cursor = self._state.cursor
        self._state.background[cursor.row][cursor.column] = Character(glyph, cursor.style)
        cursor.column += 1

    def _handle_character(self, byte: int) -> None:
        if byte == 0:
            return
        self._insert_character(STANDARD_CHARACTER_MAP.get(byte, chr(byte)))

    def _handle_special_character(self, lo: int) -> None:
        if lo == TRANSPARENT_SPACE:
            # Open a hole at the cursor instead of drawing a character
            cursor = self._state.cursor
            self._state.background[cursor.row][cursor.column] = None
            cursor.column += 1
        else:
            self._insert_character(SPECIAL_CHARACTER_MAP[lo])

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _handle_preamble_address_code(self, hi: int, lo: int) -> None:
        """Set cursor row, base style, and either indent column or color.

        Low byte layout: bit 5 adds one to the row, bit 4 selects indent
        (set) or color/italics (clear), bits 1-3 carry the indent or color
        value, bit 0 turns on underline. Flash and italics always reset.
        """
        cursor = self._state.cursor
        row = PREAMBLE_ROW_MAP[hi]
        if lo & 0x20:
            row += 1
        cursor.row = row

        is_indent = bool(lo & 0x10)
        color_or_indent = (lo >> 1) & 0x7
        style = replace(cursor.style, underline=bool(lo & 1), flash=False, italics=False)

        if is_indent:
            # One indent step is four columns; indents always mean white
            style = replace(style, color=Color.WHITE)
            cursor.column = color_or_indent * 4
        elif color_or_indent == ITALICS_CODE:
            style = replace(style, color=Color.WHITE, italics=True)
        else:
            style = replace(style, color=Color.for_code(color_or_indent))
        cursor.style = style

    def _handle_control_code(self, hi: int, lo: int) -> None:
        state = self._state
        cursor = state.cursor

        if hi == 0x17:
            if 0x21 <= lo <= 0x23:
                # Tab offset 1-3
                cursor.column += lo & 0x3
            else:
                logger.debug("Ignoring unknown control code %02x/%02x", hi, lo)
            return

        if lo == RESUME_CAPTION_LOADING:
            pass  # only pop-on captions are supported anyway
        elif lo == BACKSPACE:
            if cursor.column != 0:
                cursor.column -= 1
                state.background[cursor.row][cursor.column] = None
        elif lo == DELETE_TO_END_OF_ROW:
            row = state.background[cursor.row]
            for column in range(cursor.column, GRID_COLUMNS):
                row[column] = None
        elif lo == FLASH_ON:
            # Flash on is a spacing attribute
            self._insert_character(" ")
            cursor.style = replace(cursor.style, flash=True)
        elif lo == ERASE_DISPLAYED_MEMORY:
            state.foreground = Grid()
            self._post_frame()
        elif lo == ERASE_NON_DISPLAYED_MEMORY:
            state.background = Grid()
        elif lo == END_OF_CAPTION:
            state.swap_grids()
            self._post_frame()
        else:
            logger.debug("Ignoring unsupported control code %02x/%02x", hi, lo)

    def _handle_mid_row_code(self, lo: int) -> None:
        cursor = self._state.cursor
        # Mid-row codes occupy a cell, drawn with the style before the change
        self._insert_character(" ")

        color = (lo >> 1) & 0x7
        style = replace(cursor.style, underline=bool(lo & 1), flash=False)
        if color == ITALICS_CODE:
            style = replace(style, italics=True)
        else:
            style = replace(style, italics=False, color=Color.for_code(color))
        cursor.style = style

    def _post_frame(self) -> None:
        """Record the displayed grid if it changed since the last snapshot."""
        state = self._state
        if self._captions and state.foreground == state.last_grid:
            return
        snapshot = state.foreground.copy()
        grid = None if snapshot.is_empty() else snapshot
        self._captions.append(RawCaption(timecode=state.now, grid=grid))
        state.last_grid = snapshot


def decode(
    lines: Iterable[str],
    fps: float,
    check_parity: bool = True,
) -> List[RawCaption]:
    """Decode an SCC stream; see SCCDecoder.decode()."""
    return SCCDecoder().decode(lines, fps, check_parity)
