"""Tests for cellview.layout -- rectangles, linear and grid layout, overlays."""

from __future__ import annotations

import pytest

from cellview.layout import (
    Direction,
    FlexSize,
    GridPlacement,
    Rect,
    flex_layout,
    grid_layout,
    grid_tracks,
    resolve_overlay_rect,
    select_placements,
)


class TestRect:
    """Integer rectangle helpers."""

    def test_negative_size_is_clamped(self) -> None:
        assert Rect(0, 0, -3, -1) == Rect(0, 0, 0, 0)

    def test_contains_is_half_open(self) -> None:
        rect = Rect(1, 1, 2, 2)
        assert rect.contains(1, 1)
        assert rect.contains(2, 2)
        assert not rect.contains(3, 1)

    def test_inset(self) -> None:
        assert Rect(0, 0, 10, 5).inset(1, 1, 2, 2) == Rect(2, 1, 6, 3)

    def test_union(self) -> None:
        assert Rect(0, 0, 2, 2).union(Rect(3, 1, 2, 2)) == Rect(0, 0, 5, 3)

    def test_disjoint_intersection_is_empty(self) -> None:
        assert Rect(0, 0, 2, 2).intersect(Rect(5, 5, 2, 2)).is_empty()


# ---------------------------------------------------------------------------
# Linear layout
# ---------------------------------------------------------------------------


class TestFlexLayout:
    """Splitting a rectangle among children."""

    @pytest.mark.parametrize("extent", [0, 1, 7, 10, 33, 101])
    @pytest.mark.parametrize("weights", [[1], [1, 1, 1], [1, 2, 3], [5, 1]])
    def test_weighted_sizes_cover_container(self, extent: int, weights: list[int]) -> None:
        rects = flex_layout(
            Rect(0, 0, extent, 1),
            Direction.COLUMN,
            [FlexSize(proportion=w) for w in weights],
        )
        assert sum(r.width for r in rects) == extent

    def test_children_are_adjacent(self) -> None:
        rects = flex_layout(Rect(2, 0, 10, 1), Direction.COLUMN, [FlexSize(), FlexSize(), FlexSize()])
        assert rects[0].x == 2
        for a, b in zip(rects, rects[1:]):
            assert a.right == b.x

    def test_remainder_goes_to_last_weighted_child(self) -> None:
        rects = flex_layout(Rect(0, 0, 10, 1), Direction.COLUMN, [FlexSize(), FlexSize(), FlexSize()])
        assert [r.width for r in rects] == [3, 3, 4]

    def test_fixed_sizes_are_taken_first(self) -> None:
        rects = flex_layout(
            Rect(0, 0, 10, 1),
            Direction.COLUMN,
            [FlexSize(proportion=1), FlexSize(fixed=4)],
        )
        assert [r.width for r in rects] == [6, 4]

    def test_overflowing_fixed_sizes_are_clipped_in_order(self) -> None:
        rects = flex_layout(
            Rect(0, 0, 10, 1),
            Direction.COLUMN,
            [FlexSize(fixed=6), FlexSize(fixed=6), FlexSize(proportion=1)],
        )
        assert [r.width for r in rects] == [6, 4, 0]

    def test_zero_weight_gets_nothing(self) -> None:
        rects = flex_layout(
            Rect(0, 0, 10, 1),
            Direction.COLUMN,
            [FlexSize(proportion=0), FlexSize(proportion=1)],
        )
        assert [r.width for r in rects] == [0, 10]

    def test_row_direction_stacks_vertically(self) -> None:
        rects = flex_layout(Rect(0, 0, 4, 6), Direction.ROW, [FlexSize(), FlexSize()])
        assert rects == [Rect(0, 0, 4, 3), Rect(0, 3, 4, 3)]

    def test_layout_is_deterministic(self) -> None:
        items = [FlexSize(fixed=2), FlexSize(proportion=3), FlexSize(proportion=1)]
        rect = Rect(0, 0, 17, 1)
        assert flex_layout(rect, Direction.COLUMN, items) == flex_layout(rect, Direction.COLUMN, items)


# ---------------------------------------------------------------------------
# Grid layout
# ---------------------------------------------------------------------------


class TestGridTracks:
    """Track sizes along one axis."""

    def test_mixed_absolute_and_proportional(self) -> None:
        assert grid_tracks(10, [3, 0, -2], 3) == [(0, 3), (3, 2), (5, 5)]

    def test_gap_between_tracks(self) -> None:
        assert grid_tracks(10, [], 2, gap=2) == [(0, 4), (6, 4)]

    def test_minimum_is_honoured(self) -> None:
        tracks = grid_tracks(4, [], 4, minimum=2)
        assert [size for _, size in tracks] == [2, 2, 2, 2]

    def test_no_tracks(self) -> None:
        assert grid_tracks(10, [1, 2], 0) == []


class TestPlacementSelection:
    """Responsive placements."""

    def test_larger_minimum_wins_when_it_applies(self) -> None:
        small = GridPlacement("a", 0, 0)
        large = GridPlacement("a", 1, 1, min_grid_width=50)
        assert select_placements([small, large], 60, 10)["a"] is large
        assert select_placements([small, large], 40, 10)["a"] is small

    def test_zero_span_hides_item(self) -> None:
        placements = [GridPlacement("a", 0, 0), GridPlacement("a", 0, 0, 0, 0, min_grid_width=10)]
        assert "a" not in select_placements(placements, 20, 5)

    def test_no_applicable_placement(self) -> None:
        assert select_placements([GridPlacement("a", 0, 0, min_grid_height=9)], 10, 5) == {}


class TestGridLayout:
    """Item rectangles in a grid."""

    def test_spanning_item_covers_cells_and_gaps(self) -> None:
        rects = grid_layout(
            Rect(0, 0, 11, 5),
            rows=[],
            columns=[],
            placements=[GridPlacement("wide", 0, 0, column_span=2), GridPlacement("last", 0, 2)],
            gap_columns=1,
        )
        assert rects["wide"] == Rect(0, 0, 7, 5)
        assert rects["last"] == Rect(8, 0, 3, 5)

    def test_spanning_item_equals_union_of_cells(self) -> None:
        rect = Rect(3, 2, 20, 9)
        placements = [
            GridPlacement("span", 0, 0, 2, 2),
            GridPlacement("a", 0, 0),
            GridPlacement("b", 1, 1),
        ]
        span = grid_layout(rect, [2, 0], [0, 0, 5], placements[:1])["span"]
        cells = grid_layout(rect, [2, 0], [0, 0, 5], placements[1:])
        # Track count is taken from the template, so both layouts agree.
        assert span == cells["a"].union(cells["b"])

    def test_offset_by_container_origin(self) -> None:
        rects = grid_layout(Rect(5, 7, 4, 4), [], [], [GridPlacement("a", 0, 0)])
        assert rects["a"] == Rect(5, 7, 4, 4)


# ---------------------------------------------------------------------------
# Overlay placement
# ---------------------------------------------------------------------------


class TestOverlayRect:
    """Modal layer rectangles."""

    SCREEN = Rect(0, 0, 80, 24)

    def test_no_options_fills_screen(self) -> None:
        assert resolve_overlay_rect(None, self.SCREEN) == self.SCREEN

    def test_centered_by_default(self) -> None:
        rect = resolve_overlay_rect({"width": 20, "height": 10}, self.SCREEN)
        assert rect == Rect(30, 7, 20, 10)

    def test_percentage_width(self) -> None:
        rect = resolve_overlay_rect({"width": "50%", "height": 1}, self.SCREEN)
        assert rect.width == 40

    def test_top_left_anchor_with_margin(self) -> None:
        rect = resolve_overlay_rect(
            {"width": 10, "height": 5, "anchor": "top-left", "margin": 2}, self.SCREEN
        )
        assert (rect.x, rect.y) == (2, 2)

    def test_bottom_right_anchor(self) -> None:
        rect = resolve_overlay_rect(
            {"width": 10, "height": 5, "anchor": "bottom-right"}, self.SCREEN
        )
        assert (rect.right, rect.bottom) == (80, 24)

    def test_explicit_position_is_clamped(self) -> None:
        rect = resolve_overlay_rect({"width": 10, "height": 5, "row": 100, "col": 100}, self.SCREEN)
        assert (rect.x, rect.y) == (70, 19)

    def test_content_size_replaces_fill(self) -> None:
        rect = resolve_overlay_rect({"anchor": "top-left"}, self.SCREEN, 12, 3)
        assert rect == Rect(0, 0, 12, 3)
        rect = resolve_overlay_rect(None, self.SCREEN, content_width=12, content_height=4)
        assert rect == Rect(34, 10, 12, 4)

    def test_explicit_size_beats_content_size(self) -> None:
        rect = resolve_overlay_rect({"width": 20, "height": 2}, self.SCREEN, 12, 3)
        assert (rect.width, rect.height) == (20, 2)

    def test_size_is_clamped_to_screen(self) -> None:
        rect = resolve_overlay_rect({"width": 500, "height": 500}, self.SCREEN)
        assert rect == self.SCREEN
