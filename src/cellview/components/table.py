"""Table: a scrollable grid of cells drawn from a :class:`TableContent`.

The table only asks its content for the rows and columns it is about to
draw, plus one row and one column beyond the visible window, so contents
with millions of rows or an unbounded count are cheap to display.
"""

from __future__ import annotations

import logging
from typing import Callable

from cellview.content import (
    Count,
    EditableTableContent,
    MemoryTableContent,
    TableCell,
    TableContent,
    count_value,
)
from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import Attr, Style, Theme
from cellview.tags import tagged_width

__all__ = ["Table"]

logger = logging.getLogger(__name__)

CellCallback = Callable[[int, int], None]


class Table(Widget):
    """Rows and columns of :class:`TableCell` values.

    Fixed rows and columns stay in place while the rest scrolls.  When
    rows and/or columns are selectable, a selection is kept and moved with
    the arrow keys; otherwise the arrow keys scroll.

    Callbacks: ``selected_func(row, column)`` on Enter,
    ``selection_changed_func(row, column)`` when the selection moves, and
    ``done_func(key)`` on Escape, Tab or Shift+Tab.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.content: TableContent = MemoryTableContent()
        self.borders = False
        self.borders_style = Style(fg=self.theme.graphics, bg=self.theme.background)
        self.separator = " "
        self.fixed_rows = 0
        self.fixed_columns = 0
        self.rows_selectable = False
        self.columns_selectable = False
        self.selected_row = 0
        self.selected_column = 0
        self.row_offset = 0
        self.column_offset = 0
        self.selected_style: Style | None = None

        self.selected_func: CellCallback | None = None
        self.selection_changed_func: CellCallback | None = None
        self.done_func: Callable[[str], None] | None = None

        # Scrolling rows and columns that fit at the last draw.
        self._visible_rows = 0
        self._visible_columns = 0

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def set_content(self, content: TableContent) -> None:
        self.content = content
        self.row_offset = 0
        self.column_offset = 0
        self.selected_row = 0
        self.selected_column = 0

    def get_content(self) -> TableContent:
        return self.content

    def get_cell(self, row: int, column: int) -> TableCell | None:
        return self.content.get_cell(row, column)

    def get_row_count(self) -> Count:
        return self.content.get_row_count()

    def get_column_count(self) -> Count:
        return self.content.get_column_count()

    def _editable(self, operation: str) -> EditableTableContent | None:
        if not self.content.editable:
            logger.warning("ignoring %s on read-only table content", operation)
            return None
        return self.content  # type: ignore[return-value]

    def set_cell(self, row: int, column: int, cell: TableCell | None) -> None:
        content = self._editable("set_cell")
        if content is not None:
            content.set_cell(row, column, cell)

    def set_cell_simple(self, row: int, column: int, text: str) -> None:
        self.set_cell(row, column, TableCell(text))

    def insert_row(self, row: int) -> None:
        content = self._editable("insert_row")
        if content is not None:
            content.insert_row(row)

    def insert_column(self, column: int) -> None:
        content = self._editable("insert_column")
        if content is not None:
            content.insert_column(column)

    def remove_row(self, row: int) -> None:
        content = self._editable("remove_row")
        if content is not None:
            content.remove_row(row)
            self._clamp_selection()

    def remove_column(self, column: int) -> None:
        content = self._editable("remove_column")
        if content is not None:
            content.remove_column(column)
            self._clamp_selection()

    def clear(self) -> None:
        content = self._editable("clear")
        if content is not None:
            content.clear()
            self._clamp_selection()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_borders(self, borders: bool) -> None:
        self.borders = borders

    def set_borders_color(self, color: str) -> None:
        self.borders_style = self.borders_style.foreground(color)

    def set_separator(self, separator: str) -> None:
        self.separator = separator[:1] or " "

    def set_fixed(self, rows: int, columns: int) -> None:
        self.fixed_rows = max(0, rows)
        self.fixed_columns = max(0, columns)

    def set_selectable(self, rows: bool, columns: bool) -> None:
        self.rows_selectable = rows
        self.columns_selectable = columns

    def set_selected_style(self, style: Style | None) -> None:
        self.selected_style = style

    def set_selected_func(self, fn: CellCallback | None) -> None:
        self.selected_func = fn

    def set_selection_changed_func(self, fn: CellCallback | None) -> None:
        self.selection_changed_func = fn

    def set_done_func(self, fn: Callable[[str], None] | None) -> None:
        self.done_func = fn

    # ------------------------------------------------------------------
    # Selection and scrolling
    # ------------------------------------------------------------------

    def _clamp_index(self, value: int, count: Count) -> int:
        limit = count_value(count)
        if limit is not None:
            value = min(value, limit - 1)
        return max(0, value)

    def _clamp_selection(self) -> None:
        self.selected_row = self._clamp_index(self.selected_row, self.content.get_row_count())
        self.selected_column = self._clamp_index(
            self.selected_column, self.content.get_column_count()
        )

    def select(self, row: int, column: int) -> None:
        """Select the cell at (*row*, *column*), clamped to the content."""
        row = self._clamp_index(row, self.content.get_row_count())
        column = self._clamp_index(column, self.content.get_column_count())
        if (row, column) == (self.selected_row, self.selected_column):
            return
        self.selected_row = row
        self.selected_column = column
        if self.selection_changed_func is not None:
            self.selection_changed_func(row, column)

    def get_selection(self) -> tuple[int, int]:
        return self.selected_row, self.selected_column

    def set_offset(self, row: int, column: int) -> None:
        self.row_offset = max(0, row)
        self.column_offset = max(0, column)

    def get_offset(self) -> tuple[int, int]:
        return self.row_offset, self.column_offset

    def scroll_to_beginning(self) -> None:
        self.row_offset = 0
        self.column_offset = 0

    def scroll_to_end(self) -> None:
        """Scroll to the last row.  Does nothing when the row count is unbounded."""
        rows = count_value(self.content.get_row_count())
        if rows is None:
            return
        self.row_offset = max(0, rows - self.fixed_rows - max(1, self._visible_rows))

    def _cell_selectable(self, row: int, column: int) -> bool:
        cell = self.content.get_cell(row, column)
        return cell is None or cell.selectable

    def _step_row(self, step: int) -> None:
        rows = count_value(self.content.get_row_count())
        row = self.selected_row
        # Look ahead at most one screen for a selectable cell.
        for _ in range(max(1, self._visible_rows) + 1):
            row += step
            if row < 0 or (rows is not None and row >= rows):
                return
            if self._cell_selectable(row, self.selected_column):
                self.select(row, self.selected_column)
                return

    def _step_column(self, step: int) -> None:
        columns = count_value(self.content.get_column_count())
        column = self.selected_column
        for _ in range(max(1, self._visible_columns) + 1):
            column += step
            if column < 0 or (columns is not None and column >= columns):
                return
            if self._cell_selectable(self.selected_row, column):
                self.select(self.selected_row, column)
                return

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _visible_row_indices(self, available: int, rows: int | None) -> list[int]:
        fixed = min(self.fixed_rows, available)
        if rows is not None:
            fixed = min(fixed, rows)
        scrolling = available - fixed
        self._visible_rows = scrolling

        if self.rows_selectable and self.selected_row >= fixed and scrolling > 0:
            first = fixed + self.row_offset
            if self.selected_row < first:
                self.row_offset = self.selected_row - fixed
            elif self.selected_row >= first + scrolling:
                self.row_offset = self.selected_row - fixed - scrolling + 1
        if rows is not None:
            self.row_offset = min(self.row_offset, max(0, rows - fixed - scrolling))
        self.row_offset = max(0, self.row_offset)

        indices = list(range(fixed))
        indices.extend(fixed + self.row_offset + i for i in range(scrolling))
        if rows is not None:
            indices = [r for r in indices if r < rows]
        return indices

    def _column_width(self, column: int, rows: list[int]) -> tuple[int, int]:
        """Width and expansion weight of *column* over *rows*."""
        width = 0
        expansion = 0
        for row in rows:
            cell = self.content.get_cell(row, column)
            if cell is None:
                continue
            w = tagged_width(cell.text)
            if cell.max_width > 0:
                w = min(w, cell.max_width)
            width = max(width, w)
            expansion = max(expansion, cell.expansion)
        return width, expansion

    def _layout_columns(
        self, available: int, columns: int | None, rows: list[int]
    ) -> list[tuple[int, int]]:
        """``(column, width)`` pairs of the columns to draw."""
        gap = 1
        fixed = self.fixed_columns if columns is None else min(self.fixed_columns, columns)

        if self.columns_selectable and self.selected_column >= fixed:
            if self.selected_column < fixed + self.column_offset:
                self.column_offset = self.selected_column - fixed
        self.column_offset = max(0, self.column_offset)

        def fits(candidates: list[int]) -> tuple[list[tuple[int, int, int]], bool]:
            chosen: list[tuple[int, int, int]] = []
            used = 0
            for column in candidates:
                width, expansion = self._column_width(column, rows)
                needed = width + (gap if chosen else 0)
                if chosen and used + needed > available:
                    return chosen, False
                chosen.append((column, width, expansion))
                used += needed
            return chosen, True

        def candidates() -> list[int]:
            result = list(range(fixed))
            column = fixed + self.column_offset
            # One column of lookahead beyond what can possibly fit.
            while len(result) <= available // (gap + 1) + 1:
                if columns is not None and column >= columns:
                    break
                result.append(column)
                column += 1
            return result

        chosen, _ = fits(candidates())
        if (
            self.columns_selectable
            and self.selected_column >= fixed
            and self.selected_column not in [c for c, _, _ in chosen]
        ):
            # Put the selected column at the right edge and pull in as
            # many preceding columns as fit.
            used = sum(width for column, width, _ in chosen if column < fixed)
            used += gap * fixed
            used += self._column_width(self.selected_column, rows)[0]
            first = self.selected_column
            while first - 1 >= fixed:
                width = self._column_width(first - 1, rows)[0]
                if used + gap + width > available:
                    break
                used += gap + width
                first -= 1
            self.column_offset = first - fixed
            chosen, _ = fits(candidates())
        self._visible_columns = max(0, len(chosen) - fixed)

        used = sum(width for _, width, _ in chosen) + gap * max(0, len(chosen) - 1)
        spare = max(0, available - used)
        total_expansion = sum(e for _, _, e in chosen)
        expanding = [i for i, (_, _, e) in enumerate(chosen) if e > 0]
        result: list[tuple[int, int]] = []
        given = 0
        for index, (column, width, expansion) in enumerate(chosen):
            if expansion > 0:
                extra = spare * expansion // total_expansion
                given += extra
                if index == expanding[-1]:
                    extra += spare - given
                width += extra
            result.append((column, width))
        return result

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        if inner.is_empty():
            return
        rows_total = count_value(self.content.get_row_count())
        columns_total = count_value(self.content.get_column_count())

        row_height = 2 if self.borders else 1
        top = inner.y + (1 if self.borders else 0)
        left = inner.x + (1 if self.borders else 0)
        available_rows = max(0, (inner.height - (top - inner.y)) // row_height)
        available_width = max(0, inner.width - 2 * (left - inner.x))

        rows = self._visible_row_indices(available_rows, rows_total)
        measure = list(rows)
        if rows:
            lookahead = rows[-1] + 1
            if rows_total is None or lookahead < rows_total:
                measure.append(lookahead)
        columns = self._layout_columns(available_width, columns_total, measure)

        with screen.clip(inner):
            if self.borders:
                self._draw_borders(screen, top, left, rows, columns)
            for line, row in enumerate(rows):
                y = top + line * row_height
                x = left
                for index, (column, width) in enumerate(columns):
                    if index > 0:
                        if not self.borders:
                            screen.set_content(x, y, self.separator, self.borders_style)
                        x += 1
                    self._draw_cell(screen, row, column, x, y, width)
                    x += width

    def _draw_cell(self, screen: ScreenBuffer, row: int, column: int, x: int, y: int, width: int) -> None:
        cell = self.content.get_cell(row, column)
        if cell is None:
            return
        selected = (
            (self.rows_selectable or self.columns_selectable)
            and (not self.rows_selectable or row == self.selected_row)
            and (not self.columns_selectable or column == self.selected_column)
            and cell.selectable
        )
        style = cell.style
        if selected:
            style = cell.selected_style or self.selected_style or style.add(Attr.REVERSE)
            screen.fill(Rect(x, y, width, 1), " ", style)
        print_tagged(screen, x, y, cell.text, width, style, cell.align, self.theme.ellipsis)

    def _draw_borders(
        self,
        screen: ScreenBuffer,
        top: int,
        left: int,
        rows: list[int],
        columns: list[tuple[int, int]],
    ) -> None:
        t = self.theme
        style = self.borders_style
        edges = [left - 1]
        x = left
        for _, width in columns:
            x += width
            edges.append(x)
            x += 1
        bottom = top + len(rows) * 2 - 1
        for line in range(len(rows) + 1):
            y = top - 1 + line * 2
            for x in range(edges[0], edges[-1] + 1):
                screen.set_content(x, y, t.horizontal, style)
            for i, ex in enumerate(edges):
                if line == 0:
                    glyph = t.top_left if i == 0 else t.top_right if i == len(edges) - 1 else t.t_down
                elif y == bottom:
                    glyph = t.bottom_left if i == 0 else t.bottom_right if i == len(edges) - 1 else t.t_up
                else:
                    glyph = t.t_right if i == 0 else t.t_left if i == len(edges) - 1 else t.cross
                screen.set_content(ex, y, glyph, style)
            if line < len(rows):
                for ex in edges:
                    screen.set_content(ex, y + 1, t.vertical, style)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("escape", "tab", "shift+tab"):
            if self.done_func is not None:
                self.done_func(event.key)
                return True
            return False

        selecting = self.rows_selectable or self.columns_selectable
        page = max(1, self._visible_rows)
        rows_total = count_value(self.content.get_row_count())

        if event.matches("enter"):
            if selecting and self.selected_func is not None:
                self.selected_func(self.selected_row, self.selected_column)
                return True
            return False

        if not selecting:
            return self._scroll_key(event, page)

        if event.matches("down", "j") and self.rows_selectable:
            self._step_row(1)
        elif event.matches("up", "k") and self.rows_selectable:
            self._step_row(-1)
        elif event.matches("right", "l") and self.columns_selectable:
            self._step_column(1)
        elif event.matches("left", "h") and self.columns_selectable:
            self._step_column(-1)
        elif event.matches("home", "g"):
            if self.rows_selectable:
                self.select(0, self.selected_column)
            else:
                self.select(self.selected_row, 0)
        elif event.matches("end", "G"):
            if rows_total is not None and self.rows_selectable:
                self.select(rows_total - 1, self.selected_column)
        elif event.matches("pageDown", "ctrl+f") and self.rows_selectable:
            self.select(self.selected_row + page, self.selected_column)
        elif event.matches("pageUp", "ctrl+b") and self.rows_selectable:
            self.select(self.selected_row - page, self.selected_column)
        else:
            return self._scroll_key(event, page)
        return True

    def _scroll_key(self, event: KeyEvent, page: int) -> bool:
        if event.matches("down", "j"):
            self.row_offset += 1
        elif event.matches("up", "k"):
            self.row_offset = max(0, self.row_offset - 1)
        elif event.matches("right", "l"):
            self.column_offset += 1
        elif event.matches("left", "h"):
            self.column_offset = max(0, self.column_offset - 1)
        elif event.matches("home", "g"):
            self.scroll_to_beginning()
        elif event.matches("end", "G"):
            self.scroll_to_end()
        elif event.matches("pageDown", "ctrl+f"):
            self.row_offset += page
        elif event.matches("pageUp", "ctrl+b"):
            self.row_offset = max(0, self.row_offset - page)
        else:
            return False
        return True

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        if event.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            return True, None
        if event.action is MouseAction.WHEEL_UP:
            if self.rows_selectable:
                self._step_row(-1)
            else:
                self.row_offset = max(0, self.row_offset - 1)
            return True, None
        if event.action is MouseAction.WHEEL_DOWN:
            if self.rows_selectable:
                self._step_row(1)
            else:
                self.row_offset += 1
            return True, None
        return False, None
