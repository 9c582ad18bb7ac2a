"""Character grid primitives: colors, character styles, cells, and the 15x32 grid.

WHY: A CEA-608 decoder renders captions into a fixed character grid, exactly
like the decoder chip in a TV set. Every later stage (emission, chunk
detection, style-tree construction) works on these grids, so the cell and
style types must be simple, comparable values.

HOW: Color is a closed Enum keyed by its CEA-608 code. CharacterStyle and
Character are frozen dataclasses, so storing a character with the current
style never aliases the cursor's style. Grid wraps 15 rows of 32 optional
cells; None marks an empty cell.

RULES:
- Colors are looked up by code via Color.for_code(); unknown codes raise
- CharacterStyle.default() is white, no italics, no underline, no flash
- An empty cell (None) is different from a cell holding a space character
- A grid is empty when no cell holds a character
- Grids compare structurally (same characters with the same styles)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

GRID_ROWS = 15
GRID_COLUMNS = 32


class Color(Enum):
    """CEA-608 foreground colors, valued by their 3-bit code."""

    WHITE = 0
    GREEN = 1
    BLUE = 2
    CYAN = 3
    RED = 4
    YELLOW = 5
    MAGENTA = 6

    @property
    def code(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        """Lower-case CEA-608 color name, e.g. "magenta"."""
        return self.name.lower()

    @classmethod
    def for_code(cls, code: int) -> "Color":
        """Return the color for a CEA-608 color code.

        Raises:
            ValueError: If the code does not name one of the seven colors.
        """
        try:
            return cls(code)
        except ValueError:
            raise ValueError("Color value {} is unknown".format(code)) from None

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class CharacterStyle:
    """Display attributes of one character cell."""

    color: Color = Color.WHITE
    italics: bool = False
    underline: bool = False
    flash: bool = False

    @classmethod
    def default(cls) -> "CharacterStyle":
        return cls()


@dataclass(frozen=True)
class Character:
    """One glyph in the caption grid together with its style."""

    glyph: str
    style: CharacterStyle = CharacterStyle()


class Grid:
    """Fixed 15x32 caption grid; each cell holds a Character or None.

    Rows are addressed as ``grid[row][column]``. The decoder owns two of
    these (displayed and non-displayed memory) and swaps them on
    end-of-caption; snapshots handed to later stages are taken with copy().
    """

    def __init__(self) -> None:
        self._rows: List[List[Optional[Character]]] = [
            [None] * GRID_COLUMNS for _ in range(GRID_ROWS)
        ]

    def __getitem__(self, row: int) -> List[Optional[Character]]:
        return self._rows[row]

    def __iter__(self) -> Iterator[List[Optional[Character]]]:
        return iter(self._rows)

    def __len__(self) -> int:
        return GRID_ROWS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._rows == other._rows

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        lines = []
        for index, row in enumerate(self._rows):
            if any(cell is not None for cell in row):
                text = "".join(cell.glyph if cell is not None else "." for cell in row)
                lines.append("{:2d}|{}|".format(index, text.rstrip(".")))
        return "Grid({})".format(", ".join(lines) if lines else "empty")

    def is_empty(self) -> bool:
        return all(cell is None for row in self._rows for cell in row)

    def insert_text(
        self,
        row: int,
        column: int,
        text: str,
        style: Optional[CharacterStyle] = None,
    ) -> "Grid":
        """Write continuous text starting at (row, column); returns self for chaining."""
        if style is None:
            style = CharacterStyle.default()
        for glyph in text:
            self._rows[row][column] = Character(glyph, style)
            column += 1
        return self

    def copy(self) -> "Grid":
        duplicate = Grid()
        # Cells are immutable, a shallow copy per row is enough
        duplicate._rows = [list(row) for row in self._rows]
        return duplicate
