"""Character-cell screen buffer and the differential renderer.

The :class:`ScreenBuffer` is a grid of :class:`Cell` values that widgets
draw into.  The :class:`Screen` owns the buffer, compares it with the frame
last sent to the terminal, and writes only the cells that changed.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Iterator, NamedTuple, Sequence

import grapheme
from rich.color import ColorSystem

from cellview.errors import ScreenError
from cellview.layout import Rect
from cellview.style import DEFAULT_STYLE, Style
from cellview.tags import StyledRune
from cellview.utils import Align, align_offset, char_width

if TYPE_CHECKING:
    from cellview.terminal import Terminal

__all__ = ["Cell", "ScreenBuffer", "Screen"]

logger = logging.getLogger(__name__)

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J"
_RESET = "\x1b[0m"
_MOVE_FMT = "\x1b[{};{}H"


class Cell(NamedTuple):
    """One screen position.

    ``char`` is a single grapheme cluster.  The empty string marks the
    right half of a double-width glyph stored in the cell to its left.
    """

    char: str = " "
    style: Style = DEFAULT_STYLE

    @property
    def is_continuation(self) -> bool:
        return self.char == ""


_BLANK = Cell()


# ---------------------------------------------------------------------------
# ScreenBuffer
# ---------------------------------------------------------------------------


class ScreenBuffer:
    """A width x height grid of cells with clipping.

    Writes outside the buffer or outside the active clip rectangle are
    ignored.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._width = 0
        self._height = 0
        self._cells: list[list[Cell]] = []
        self._clip: Rect = Rect(0, 0, 0, 0)
        self.cursor: tuple[int, int] | None = None
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def rect(self) -> Rect:
        return Rect(0, 0, self._width, self._height)

    def resize(self, width: int, height: int) -> None:
        """Reallocate the grid; all content is cleared."""
        self._width = max(0, width)
        self._height = max(0, height)
        self._cells = [[_BLANK] * self._width for _ in range(self._height)]
        self._clip = self.rect
        self.cursor = None

    def clear(self, style: Style = DEFAULT_STYLE) -> None:
        blank = Cell(" ", style)
        self._cells = [[blank] * self._width for _ in range(self._height)]
        self.cursor = None

    # -- clipping -----------------------------------------------------------

    @contextlib.contextmanager
    def clip(self, rect: Rect) -> Iterator[None]:
        """Restrict drawing to *rect* (intersected with the current clip)."""
        saved = self._clip
        self._clip = saved.intersect(rect)
        try:
            yield
        finally:
            self._clip = saved

    # -- cell access --------------------------------------------------------

    def get_content(self, x: int, y: int) -> Cell:
        """Return the cell at (*x*, *y*), or a blank cell when out of range."""
        if 0 <= x < self._width and 0 <= y < self._height:
            return self._cells[y][x]
        return _BLANK

    def set_content(self, x: int, y: int, char: str, style: Style = DEFAULT_STYLE) -> int:
        """Write one grapheme cluster at (*x*, *y*).

        Returns the number of columns the glyph occupies (0 if nothing was
        written).  A double-width glyph that does not fit before the clip
        edge is replaced with a space.
        """
        if not self._clip.contains(x, y):
            return 0
        w = char_width(char)
        if w == 0:
            return 0
        if w == 2 and not self._clip.contains(x + 1, y):
            char, w = " ", 1

        row = self._cells[y]
        self._release(row, x)
        if w == 2:
            self._release(row, x + 1)
            row[x] = Cell(char, style)
            row[x + 1] = Cell("", style)
        else:
            row[x] = Cell(char, style)
        return w

    def _release(self, row: list[Cell], x: int) -> None:
        """Blank the other half of any wide glyph that covers column *x*."""
        cell = row[x]
        if cell.char == "":
            if x > 0 and char_width(row[x - 1].char) == 2:
                row[x - 1] = Cell(" ", row[x - 1].style)
        elif char_width(cell.char) == 2 and x + 1 < self._width:
            if row[x + 1].char == "":
                row[x + 1] = Cell(" ", row[x + 1].style)

    def fill(self, rect: Rect, char: str = " ", style: Style = DEFAULT_STYLE) -> None:
        area = rect.intersect(self._clip)
        for y in range(area.y, area.bottom):
            for x in range(area.x, area.right):
                self.set_content(x, y, char, style)

    # -- printing -----------------------------------------------------------

    def print_runes(
        self,
        x: int,
        y: int,
        runes: Sequence[StyledRune],
        width: int,
        align: Align = Align.LEFT,
        skip: int = 0,
    ) -> int:
        """Print styled runes into the span ``[x, x + width)`` of row *y*.

        *skip* columns of the text are scrolled off to the left.  Returns
        the number of columns printed.
        """
        if width <= 0:
            return 0
        total = sum(char_width(r.char) for r in runes) - skip
        offset = align_offset(total, width, align) if total < width else 0
        col = -skip
        printed = 0
        for rune in runes:
            w = char_width(rune.char)
            if w == 0:
                continue
            if col < 0:
                col += w
                continue
            if col + w > width:
                break
            self.set_content(x + offset + col, y, rune.char, rune.style)
            col += w
            printed = col
        return printed

    def print_text(
        self,
        x: int,
        y: int,
        text: str,
        width: int,
        style: Style = DEFAULT_STYLE,
        align: Align = Align.LEFT,
    ) -> int:
        """Print untagged *text* in a single style.  See :meth:`print_runes`."""
        runes = [StyledRune(g, style) for g in grapheme.graphemes(text)]
        return self.print_runes(x, y, runes, width, align)

    # -- inspection ---------------------------------------------------------

    def row(self, y: int) -> list[Cell]:
        return self._cells[y]

    def row_text(self, y: int) -> str:
        """Plain text of row *y* (continuation cells omitted)."""
        if not 0 <= y < self._height:
            return ""
        return "".join(c.char for c in self._cells[y])

    def lines(self) -> list[str]:
        return [self.row_text(y) for y in range(self._height)]

    def snapshot(self) -> list[list[Cell]]:
        return [list(row) for row in self._cells]


# ---------------------------------------------------------------------------
# Screen (differential renderer)
# ---------------------------------------------------------------------------


class Screen:
    """Flush a :class:`ScreenBuffer` to a terminal, sending only changes.

    A full repaint happens on the first flush, after :meth:`resize`, and
    after :meth:`sync`.
    """

    def __init__(self, terminal: Terminal, truecolor: bool = True) -> None:
        self.terminal = terminal
        self.buffer = ScreenBuffer(terminal.columns, terminal.rows)
        self._front: list[list[Cell]] | None = None
        self._color_system = ColorSystem.TRUECOLOR if truecolor else ColorSystem.EIGHT_BIT
        self.full_redraws = 0

    def size(self) -> tuple[int, int]:
        return self.buffer.width, self.buffer.height

    def resize(self) -> None:
        """Pick up the terminal's current size and force a full repaint."""
        width, height = self.terminal.columns, self.terminal.rows
        logger.debug("screen resized to %dx%d", width, height)
        self.buffer.resize(width, height)
        self._front = None

    def sync(self) -> None:
        """Force the next :meth:`flush` to repaint every cell."""
        self._front = None

    def flush(self) -> None:
        """Write changed cells to the terminal.

        Raises :class:`ScreenError` if the terminal cannot be written.
        """
        out: list[str] = [_HIDE_CURSOR]
        full = self._front is None
        if full:
            out.append(_RESET + _CLEAR_SCREEN)
            self.full_redraws += 1

        current_style: Style | None = None
        cursor_at: tuple[int, int] | None = None
        for y in range(self.buffer.height):
            row = self.buffer.row(y)
            front_row = None if self._front is None else self._front[y]
            for x, cell in enumerate(row):
                if cell.char == "":
                    continue
                if front_row is not None and front_row[x] == cell:
                    # A wide glyph must be resent if its right half changed.
                    if not (
                        x + 1 < len(row)
                        and row[x + 1].char == ""
                        and front_row[x + 1] != row[x + 1]
                    ):
                        continue
                if cursor_at != (x, y):
                    out.append(_MOVE_FMT.format(y + 1, x + 1))
                if cell.style != current_style:
                    out.append(cell.style.sgr(self._color_system))
                    current_style = cell.style
                out.append(cell.char)
                cursor_at = (x + char_width(cell.char), y)

        out.append(_RESET)
        if self.buffer.cursor is not None:
            cx, cy = self.buffer.cursor
            out.append(_MOVE_FMT.format(cy + 1, cx + 1) + _SHOW_CURSOR)

        try:
            self.terminal.write("".join(out))
        except OSError as exc:
            raise ScreenError(f"failed to write to terminal: {exc}") from exc
        self._front = self.buffer.snapshot()
