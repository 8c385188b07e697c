"""Tests for cellview.utils -- width measurement, truncation, wrapping."""

from __future__ import annotations

from cellview.style import Style
from cellview.tags import StyledRune
from cellview.utils import (
    Align,
    align_offset,
    char_width,
    split_lines,
    take_columns,
    truncate_to_width,
    visible_width,
    wrap_runes,
)


def _runes(text: str) -> list[StyledRune]:
    return [StyledRune(ch, Style()) for ch in text]


def _texts(lines) -> list[str]:
    return ["".join(r.char for r in line) for line in lines]


class TestWidths:
    """Cell widths of text."""

    def test_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty(self) -> None:
        assert visible_width("") == 0

    def test_wide_characters(self) -> None:
        assert visible_width("中文") == 4

    def test_char_width_of_wide_glyph(self) -> None:
        assert char_width("中") == 2

    def test_combining_sequence_is_one_cell(self) -> None:
        assert visible_width("e\u0301") == 1


class TestTruncation:
    """Cutting text to a number of cells."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_to_width("abc", 10) == "abc"

    def test_ellipsis_counts_towards_width(self) -> None:
        assert truncate_to_width("hello world", 8) == "hello w…"

    def test_pad(self) -> None:
        assert truncate_to_width("ab", 4, pad=True) == "ab  "

    def test_zero_width(self) -> None:
        assert truncate_to_width("abc", 0) == ""

    def test_wide_char_straddling_limit_is_dropped(self) -> None:
        assert take_columns("中文x", 3) == "中"


class TestAlignOffset:
    def test_left(self) -> None:
        assert align_offset(3, 10, Align.LEFT) == 0

    def test_center(self) -> None:
        assert align_offset(4, 10, Align.CENTER) == 3

    def test_right(self) -> None:
        assert align_offset(4, 10, Align.RIGHT) == 6

    def test_content_wider_than_space(self) -> None:
        assert align_offset(12, 10, Align.RIGHT) == 0


class TestWrapping:
    """Breaking styled runes into lines."""

    def test_split_lines_on_newline(self) -> None:
        assert _texts(split_lines(_runes("ab\ncd"))) == ["ab", "cd"]

    def test_split_lines_always_returns_a_line(self) -> None:
        assert split_lines([]) == [[]]

    def test_hard_wrap(self) -> None:
        lines = wrap_runes(_runes("abcdefg"), 3, word_wrap=False)
        assert _texts(lines) == ["abc", "def", "g"]

    def test_word_wrap_breaks_after_space(self) -> None:
        lines = wrap_runes(_runes("hello big world"), 10)
        assert _texts(lines) == ["hello big ", "world"]

    def test_long_word_is_broken(self) -> None:
        lines = wrap_runes(_runes("abcdefghij"), 4)
        assert _texts(lines) == ["abcd", "efgh", "ij"]

    def test_every_line_fits(self) -> None:
        text = "the quick brown fox jumps over the lazy dog"
        for line in wrap_runes(_runes(text), 7):
            assert sum(char_width(r.char) for r in line) <= 7 or line[-1].char == " "
