"""Geometry: rectangles, linear (flex) layout, grid layout, overlay placement.

Everything here is a pure function of its inputs.  Layout is recomputed on
every draw, so calling any of these twice with the same arguments gives the
same rectangles.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Hashable, Literal, Sequence, TypedDict, Union

__all__ = [
    "Rect",
    "Direction",
    "FlexSize",
    "flex_layout",
    "grid_tracks",
    "GridPlacement",
    "select_placements",
    "grid_layout",
    "OverlayAnchor",
    "OverlayMargin",
    "OverlayOptions",
    "SizeValue",
    "resolve_overlay_rect",
]


# ---------------------------------------------------------------------------
# Rect
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rect:
    """Integer rectangle.  Negative sizes are clamped to zero."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0:
            object.__setattr__(self, "width", 0)
        if self.height < 0:
            object.__setattr__(self, "height", 0)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def inset(self, top: int = 0, bottom: int = 0, left: int = 0, right: int = 0) -> Rect:
        return Rect(
            self.x + left,
            self.y + top,
            self.width - left - right,
            self.height - top - bottom,
        )

    def union(self, other: Rect) -> Rect:
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return Rect(x, y, max(self.right, other.right) - x, max(self.bottom, other.bottom) - y)

    def intersect(self, other: Rect) -> Rect:
        x = max(self.x, other.x)
        y = max(self.y, other.y)
        return Rect(x, y, min(self.right, other.right) - x, min(self.bottom, other.bottom) - y)


# ---------------------------------------------------------------------------
# Linear layout
# ---------------------------------------------------------------------------


class Direction(enum.Enum):
    """Stacking direction of a linear container.

    ``ROW`` stacks children top to bottom (each child is a row);
    ``COLUMN`` places them side by side (each child is a column).
    """

    ROW = "row"
    COLUMN = "column"


@dataclass(frozen=True)
class FlexSize:
    """Size request of one linear-layout child.

    A positive *fixed* extent wins; otherwise the child takes a share of
    the leftover space proportional to *proportion*.
    """

    fixed: int = 0
    proportion: int = 1


def _distribute(extent: int, items: Sequence[FlexSize]) -> list[int]:
    sizes = [0] * len(items)
    remaining = max(0, extent)

    for i, item in enumerate(items):
        if item.fixed > 0:
            sizes[i] = min(item.fixed, remaining)
            remaining -= sizes[i]

    weighted = [i for i, item in enumerate(items) if item.fixed <= 0 and item.proportion > 0]
    total = sum(items[i].proportion for i in weighted)
    if total <= 0:
        return sizes

    given = 0
    for i in weighted:
        sizes[i] = remaining * items[i].proportion // total
        given += sizes[i]
    sizes[weighted[-1]] += remaining - given
    return sizes


def flex_layout(rect: Rect, direction: Direction, items: Sequence[FlexSize]) -> list[Rect]:
    """Assign each child a slice of *rect* along *direction*.

    Fixed sizes are taken first, in declaration order, and clipped so they
    never exceed the container.  The rest is split by weight with floor
    division; the rounding remainder goes to the last weighted child, so
    when any child has a positive weight the slices cover the container
    exactly.  Children with zero weight get zero size.
    """
    horizontal = direction is Direction.COLUMN
    extent = rect.width if horizontal else rect.height
    sizes = _distribute(extent, items)

    rects: list[Rect] = []
    pos = rect.x if horizontal else rect.y
    for size in sizes:
        if horizontal:
            rects.append(Rect(pos, rect.y, size, rect.height))
        else:
            rects.append(Rect(rect.x, pos, rect.width, size))
        pos += size
    return rects


# ---------------------------------------------------------------------------
# Grid layout
# ---------------------------------------------------------------------------


def grid_tracks(
    extent: int,
    template: Sequence[int],
    count: int,
    minimum: int = 0,
    gap: int = 0,
) -> list[tuple[int, int]]:
    """Compute ``(offset, size)`` of *count* tracks along one axis.

    Template values greater than zero are absolute sizes; values of zero or
    less are proportional weights (0 counts as -1).  Tracks beyond the end
    of the template are proportional with weight 1.  Offsets are relative
    to the start of the grid.  *minimum* is always honoured, even if the
    tracks then overflow *extent*.
    """
    if count <= 0:
        return []

    values = [template[i] if i < len(template) else 0 for i in range(count)]
    sizes = [0] * count
    remaining = extent - gap * (count - 1)
    weights: list[tuple[int, int]] = []

    for i, value in enumerate(values):
        if value > 0:
            sizes[i] = max(value, minimum)
            remaining -= sizes[i]
        else:
            weights.append((i, -value if value < 0 else 1))

    if weights:
        total = sum(w for _, w in weights)
        remaining = max(0, remaining)
        given = 0
        for i, w in weights:
            sizes[i] = remaining * w // total
            given += sizes[i]
        last = weights[-1][0]
        sizes[last] += remaining - given
        for i, _ in weights:
            sizes[i] = max(sizes[i], minimum)

    tracks: list[tuple[int, int]] = []
    pos = 0
    for size in sizes:
        tracks.append((pos, size))
        pos += size + gap
    return tracks


@dataclass(frozen=True)
class GridPlacement:
    """Position of *key* in a grid, active when the grid is large enough.

    A span of zero hides the item while this placement is active.
    """

    key: Hashable
    row: int
    column: int
    row_span: int = 1
    column_span: int = 1
    min_grid_width: int = 0
    min_grid_height: int = 0


def select_placements(
    placements: Sequence[GridPlacement],
    width: int,
    height: int,
) -> dict[Hashable, GridPlacement]:
    """Pick the applicable placement of every key for a *width* x *height* grid.

    A placement applies when the grid meets its minimum size.  Among the
    applicable placements of one key, the one with the largest minimum
    width wins, then the largest minimum height, then the last added.
    Keys whose winning placement has a zero span are left out.
    """
    chosen: dict[Hashable, GridPlacement] = {}
    for placement in placements:
        if width < placement.min_grid_width or height < placement.min_grid_height:
            continue
        current = chosen.get(placement.key)
        if current is None or (placement.min_grid_width, placement.min_grid_height) >= (
            current.min_grid_width,
            current.min_grid_height,
        ):
            chosen[placement.key] = placement
    return {
        key: p for key, p in chosen.items() if p.row_span > 0 and p.column_span > 0
    }


def grid_layout(
    rect: Rect,
    rows: Sequence[int],
    columns: Sequence[int],
    placements: Sequence[GridPlacement],
    min_row_height: int = 0,
    min_column_width: int = 0,
    gap_rows: int = 0,
    gap_columns: int = 0,
) -> dict[Hashable, Rect]:
    """Compute the rectangle of every visible item of a grid.

    The number of tracks is the larger of the template length and the
    extent of the placements.  A spanning item receives the union of the
    cells it covers, including the gaps between them; it does not affect
    the size of any track.
    """
    active = select_placements(placements, rect.width, rect.height)

    row_count = len(rows)
    column_count = len(columns)
    for p in active.values():
        row_count = max(row_count, p.row + p.row_span)
        column_count = max(column_count, p.column + p.column_span)

    row_tracks = grid_tracks(rect.height, rows, row_count, min_row_height, gap_rows)
    column_tracks = grid_tracks(rect.width, columns, column_count, min_column_width, gap_columns)

    result: dict[Hashable, Rect] = {}
    for key, p in active.items():
        if p.row < 0 or p.column < 0:
            continue
        top, _ = row_tracks[p.row]
        last_top, last_height = row_tracks[p.row + p.row_span - 1]
        left, _ = column_tracks[p.column]
        last_left, last_width = column_tracks[p.column + p.column_span - 1]
        result[key] = Rect(
            rect.x + left,
            rect.y + top,
            last_left + last_width - left,
            last_top + last_height - top,
        )
    return result


# ---------------------------------------------------------------------------
# Overlay placement
# ---------------------------------------------------------------------------

OverlayAnchor = Literal[
    "center",
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
    "top-center",
    "bottom-center",
    "left-center",
    "right-center",
]


class OverlayMargin(TypedDict, total=False):
    top: int
    right: int
    bottom: int
    left: int


# int  ->  exact number of columns/rows
# str  ->  percentage string like "50%"
SizeValue = Union[int, str]


class OverlayOptions(TypedDict, total=False):
    width: SizeValue
    height: SizeValue
    min_width: int
    max_height: SizeValue
    anchor: OverlayAnchor
    offset_x: int
    offset_y: int
    row: SizeValue
    col: SizeValue
    margin: OverlayMargin | int


def _parse_size_value(value: SizeValue | None, reference_size: int) -> int | None:
    """Resolve a ``SizeValue`` against *reference_size*.

    * ``None``  -> ``None``
    * ``int``   -> returned as-is
    * ``"50%"`` -> ``math.floor(reference_size * 50 / 100)``
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.endswith("%"):
        try:
            return math.floor(reference_size * float(value[:-1]) / 100)
        except ValueError:
            return None
    return None


def _anchor_row(anchor: OverlayAnchor, screen_height: int, height: int, top: int, bottom: int) -> int:
    if anchor in ("top-left", "top-right", "top-center"):
        return top
    if anchor in ("bottom-left", "bottom-right", "bottom-center"):
        return screen_height - height - bottom
    available = screen_height - top - bottom
    return top + max(0, (available - height) // 2)


def _anchor_col(anchor: OverlayAnchor, screen_width: int, width: int, left: int, right: int) -> int:
    if anchor in ("top-left", "bottom-left", "left-center"):
        return left
    if anchor in ("top-right", "bottom-right", "right-center"):
        return screen_width - width - right
    available = screen_width - left - right
    return left + max(0, (available - width) // 2)


def resolve_overlay_rect(
    options: OverlayOptions | None,
    screen: Rect,
    content_width: int | None = None,
    content_height: int | None = None,
) -> Rect:
    """Compute the rectangle of a modal layer on a screen of size *screen*.

    Without a width or height the layer fills the area inside the margins.
    *content_width* and *content_height*, when known, are used instead of
    filling that dimension.
    The result is clamped to the screen.
    """
    options = options or {}

    margin_raw = options.get("margin")
    if isinstance(margin_raw, int):
        margin: OverlayMargin = {"top": margin_raw, "right": margin_raw, "bottom": margin_raw, "left": margin_raw}
    else:
        margin = margin_raw or {}
    m_top = margin.get("top", 0)
    m_right = margin.get("right", 0)
    m_bottom = margin.get("bottom", 0)
    m_left = margin.get("left", 0)

    available_width = screen.width - m_left - m_right
    available_height = screen.height - m_top - m_bottom

    width = _parse_size_value(options.get("width"), screen.width)
    if width is None:
        width = content_width if content_width is not None else available_width
    min_width = options.get("min_width")
    if min_width is not None and width < min_width:
        width = min_width
    width = max(1, min(width, screen.width))

    height = _parse_size_value(options.get("height"), screen.height)
    if height is None:
        height = content_height if content_height is not None else available_height
    max_height = _parse_size_value(options.get("max_height"), screen.height)
    if max_height is not None and height > max_height:
        height = max_height
    height = max(1, min(height, max(1, available_height)))

    anchor: OverlayAnchor = options.get("anchor", "center")
    explicit_row = _parse_size_value(options.get("row"), screen.height)
    explicit_col = _parse_size_value(options.get("col"), screen.width)
    if explicit_row is not None:
        row = explicit_row
    else:
        row = _anchor_row(anchor, screen.height, height, m_top, m_bottom)
    if explicit_col is not None:
        col = explicit_col
    else:
        col = _anchor_col(anchor, screen.width, width, m_left, m_right)
    row += options.get("offset_y", 0)
    col += options.get("offset_x", 0)

    row = max(0, min(row, screen.height - height))
    col = max(0, min(col, screen.width - width))
    return Rect(screen.x + col, screen.y + row, width, height)
