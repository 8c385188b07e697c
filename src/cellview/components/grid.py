"""Grid: places children on a grid of rows and columns."""

from __future__ import annotations

from dataclasses import dataclass

from cellview.keys import KeyEvent
from cellview.layout import GridPlacement, Rect, grid_layout, grid_tracks, select_placements
from cellview.primitive import Container, Primitive, SetFocus
from cellview.screen import ScreenBuffer
from cellview.style import Style, Theme

__all__ = ["Grid"]

_UP, _DOWN, _LEFT, _RIGHT = 1, 2, 4, 8


@dataclass
class GridItem:
    item: Primitive
    placement: GridPlacement
    focus: bool = False


class Grid(Container):
    """Children laid out on a grid, optionally with breakpoints.

    Row and column templates use the same convention: a positive value is
    an absolute size, zero or a negative value is a proportional weight.
    The same primitive may be added several times with different minimum
    grid sizes; the placement whose minimum the grid satisfies (largest
    minimum width first) is used.

    When the tracks need more room than the grid has, the grid can be
    scrolled with the arrow keys while it has focus itself.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.rows: list[int] = []
        self.columns: list[int] = []
        self.min_height = 0
        self.min_width = 0
        self.gap_rows = 0
        self.gap_columns = 0
        self.borders = False
        self.borders_style = Style(fg=self.theme.graphics, bg=self.theme.background)
        self.items: list[GridItem] = []
        self.row_offset = 0
        self.column_offset = 0
        self.tab_navigation = False

    # -- configuration ------------------------------------------------------

    def set_rows(self, *rows: int) -> None:
        self.rows = list(rows)

    def set_columns(self, *columns: int) -> None:
        self.columns = list(columns)

    def set_size(self, num_rows: int, num_columns: int, row_size: int, column_size: int) -> None:
        self.rows = [row_size] * num_rows
        self.columns = [column_size] * num_columns

    def set_min_size(self, row: int, column: int) -> None:
        self.min_height = max(0, row)
        self.min_width = max(0, column)

    def set_gap(self, row: int, column: int) -> None:
        self.gap_rows = max(0, row)
        self.gap_columns = max(0, column)

    def set_borders(self, borders: bool) -> None:
        """Draw lines between the items.  Gaps are then fixed at one cell."""
        self.borders = borders

    def set_borders_color(self, color: str) -> None:
        self.borders_style = self.borders_style.foreground(color)

    def set_tab_navigation(self, enabled: bool) -> None:
        self.tab_navigation = enabled

    def set_offset(self, rows: int, columns: int) -> None:
        self.row_offset = max(0, rows)
        self.column_offset = max(0, columns)

    def get_offset(self) -> tuple[int, int]:
        return self.row_offset, self.column_offset

    # -- items --------------------------------------------------------------

    def add_item(
        self,
        item: Primitive,
        row: int,
        column: int,
        row_span: int = 1,
        column_span: int = 1,
        min_grid_width: int = 0,
        min_grid_height: int = 0,
        focus: bool = False,
    ) -> None:
        """Place *item* at (*row*, *column*).

        The placement applies only while the grid is at least
        *min_grid_width* x *min_grid_height* cells.  A span of zero hides
        the item for that size range.
        """
        placement = GridPlacement(
            id(item), row, column, row_span, column_span, min_grid_width, min_grid_height
        )
        self.items.append(GridItem(item, placement, focus))

    def remove_item(self, item: Primitive) -> None:
        """Remove every placement of *item*."""
        self.items = [entry for entry in self.items if entry.item is not item]

    def clear(self) -> None:
        self.items = []

    def children(self) -> list[Primitive]:
        seen: set[int] = set()
        result: list[Primitive] = []
        for entry in self.items:
            if id(entry.item) not in seen:
                seen.add(id(entry.item))
                result.append(entry.item)
        return result

    # -- layout -------------------------------------------------------------

    def _grid_area(self) -> Rect:
        inner = self.box.inner_rect()
        if self.borders:
            return inner.inset(1, 1, 1, 1)
        return inner

    def _gaps(self) -> tuple[int, int]:
        if self.borders:
            return 1, 1
        return self.gap_rows, self.gap_columns

    def _scroll_shift(self, area: Rect) -> tuple[int, int]:
        """Cells to shift the grid by for the current offsets.

        Offsets are clamped so the grid does not scroll past its last track.
        """
        placements = [entry.placement for entry in self.items]
        active = select_placements(placements, area.width, area.height)
        row_count = max([len(self.rows)] + [p.row + p.row_span for p in active.values()])
        column_count = max([len(self.columns)] + [p.column + p.column_span for p in active.values()])
        gap_rows, gap_columns = self._gaps()

        def shift(extent: int, template: list[int], count: int, minimum: int, gap: int, offset: int) -> tuple[int, int]:
            tracks = grid_tracks(extent, template, count, minimum, gap)
            if not tracks:
                return 0, 0
            total = tracks[-1][0] + tracks[-1][1]
            if total <= extent:
                return 0, 0
            offset = min(offset, len(tracks) - 1)
            # Stop once the remaining tracks fit.
            while offset > 0 and total - tracks[offset - 1][0] <= extent:
                offset -= 1
            return tracks[offset][0], offset

        row_shift, self.row_offset = shift(
            area.height, self.rows, row_count, self.min_height, gap_rows, self.row_offset
        )
        column_shift, self.column_offset = shift(
            area.width, self.columns, column_count, self.min_width, gap_columns, self.column_offset
        )
        return row_shift, column_shift

    def layout(self) -> list[tuple[Primitive, Rect]]:
        """Rectangles of the visible items for the current grid rect."""
        area = self._grid_area()
        if area.is_empty():
            return []
        row_shift, column_shift = self._scroll_shift(area)
        gap_rows, gap_columns = self._gaps()
        shifted = Rect(area.x - column_shift, area.y - row_shift, area.width, area.height)
        rects = grid_layout(
            shifted,
            self.rows,
            self.columns,
            [entry.placement for entry in self.items],
            self.min_height,
            self.min_width,
            gap_rows,
            gap_columns,
        )
        return [(child, rects[id(child)]) for child in self.children() if id(child) in rects]

    # -- drawing ------------------------------------------------------------

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        visible = self.layout()
        area = self._grid_area()

        focused: Primitive | None = None
        with screen.clip(area):
            for child, rect in visible:
                child.set_rect(rect)
                if child.has_focus():
                    focused = child
                    continue
                child.draw(screen)
            if focused is not None:
                focused.draw(screen)

        if self.borders:
            with screen.clip(area.inset(-1, -1, -1, -1)):
                self._draw_borders(screen, [rect for _, rect in visible])

    def _draw_borders(self, screen: ScreenBuffer, rects: list[Rect]) -> None:
        """Frame every item, merging lines where frames meet."""
        joints: dict[tuple[int, int], int] = {}

        def mark(x: int, y: int, bits: int) -> None:
            joints[(x, y)] = joints.get((x, y), 0) | bits

        for rect in rects:
            if rect.is_empty():
                continue
            left, top = rect.x - 1, rect.y - 1
            right, bottom = rect.right, rect.bottom
            for x in range(rect.x, rect.right):
                mark(x, top, _LEFT | _RIGHT)
                mark(x, bottom, _LEFT | _RIGHT)
            for y in range(rect.y, rect.bottom):
                mark(left, y, _UP | _DOWN)
                mark(right, y, _UP | _DOWN)
            mark(left, top, _RIGHT | _DOWN)
            mark(right, top, _LEFT | _DOWN)
            mark(left, bottom, _RIGHT | _UP)
            mark(right, bottom, _LEFT | _UP)

        t = self.theme
        glyphs = {
            _LEFT | _RIGHT: t.horizontal,
            _UP | _DOWN: t.vertical,
            _RIGHT | _DOWN: t.top_left,
            _LEFT | _DOWN: t.top_right,
            _RIGHT | _UP: t.bottom_left,
            _LEFT | _UP: t.bottom_right,
            _LEFT | _RIGHT | _DOWN: t.t_down,
            _LEFT | _RIGHT | _UP: t.t_up,
            _UP | _DOWN | _RIGHT: t.t_right,
            _UP | _DOWN | _LEFT: t.t_left,
            _UP | _DOWN | _LEFT | _RIGHT: t.cross,
        }
        for (x, y), bits in joints.items():
            glyph = glyphs.get(bits, t.horizontal if bits & (_LEFT | _RIGHT) else t.vertical)
            screen.set_content(x, y, glyph, self.borders_style)

    # -- input --------------------------------------------------------------

    def focus(self, delegate: SetFocus) -> None:
        for entry in self.items:
            if entry.focus:
                delegate(entry.item)
                return
        super().focus(delegate)

    def default_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if self.tab_navigation and self.cycle_focus(event, set_focus):
            return True
        if not self.box.focused:
            return False
        if event.matches("up", "k"):
            self.row_offset = max(0, self.row_offset - 1)
        elif event.matches("down", "j"):
            self.row_offset += 1
        elif event.matches("left", "h"):
            self.column_offset = max(0, self.column_offset - 1)
        elif event.matches("right", "l"):
            self.column_offset += 1
        elif event.matches("home", "g"):
            self.row_offset = 0
            self.column_offset = 0
        elif event.matches("end", "G"):
            # Clamped on the next draw.
            self.row_offset = len(self.rows) + len(self.items)
        else:
            return False
        return True
