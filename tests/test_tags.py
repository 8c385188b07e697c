"""Tests for cellview.tags -- inline style and region markup."""

from __future__ import annotations

from rich.color import Color

from cellview.style import Attr, Style
from cellview.tags import escape, parse_style_tag, parse_tags, strip_tags, tagged_width


def _text(runes) -> str:
    return "".join(r.char for r in runes)


# ---------------------------------------------------------------------------
# Style tags
# ---------------------------------------------------------------------------


class TestStyleTags:
    """Color and attribute switching."""

    def test_color_changes_apply_to_following_text(self) -> None:
        runes = parse_tags("[red]A[white]B").runes
        assert _text(runes) == "AB"
        assert runes[0].style.fg == Color.parse("red")
        assert runes[1].style.fg == Color.parse("white")

    def test_background_field(self) -> None:
        runes = parse_tags("[red:blue]x").runes
        assert runes[0].style.fg == Color.parse("red")
        assert runes[0].style.bg == Color.parse("blue")

    def test_empty_field_keeps_current_value(self) -> None:
        runes = parse_tags("[red]a[:blue]b").runes
        assert runes[1].style.fg == Color.parse("red")
        assert runes[1].style.bg == Color.parse("blue")

    def test_dash_resets_color(self) -> None:
        runes = parse_tags("[red]a[-]b").runes
        assert runes[1].style.fg is None

    def test_lowercase_attribute_turns_on(self) -> None:
        runes = parse_tags("[::bu]x").runes
        assert runes[0].style.attrs == Attr.BOLD | Attr.UNDERLINE

    def test_uppercase_attribute_turns_off(self) -> None:
        runes = parse_tags("[::bu]a[::B]b").runes
        assert runes[1].style.attrs == Attr.UNDERLINE

    def test_dash_clears_attributes(self) -> None:
        runes = parse_tags("[::bi]a[::-]b").runes
        assert runes[1].style.attrs == Attr.NONE

    def test_base_style_is_the_starting_state(self) -> None:
        base = Style(fg="green")
        runes = parse_tags("x", base).runes
        assert runes[0].style == base

    def test_final_style_is_returned(self) -> None:
        parsed = parse_tags("[red]abc")
        assert parsed.style.fg == Color.parse("red")

    def test_parse_style_tag_rejects_unknown_letters(self) -> None:
        assert parse_style_tag("::z", Style()) is None

    def test_parse_style_tag_rejects_too_many_fields(self) -> None:
        assert parse_style_tag("red:blue:b:x", Style()) is None


# ---------------------------------------------------------------------------
# Literal brackets
# ---------------------------------------------------------------------------


class TestLiteralBrackets:
    """Anything that is not a valid tag prints as-is."""

    def test_double_bracket_is_escape(self) -> None:
        assert strip_tags("a[[b]") == "a[b]"

    def test_invalid_tag_stays_literal(self) -> None:
        runes = parse_tags("[notacolor]x").runes
        assert _text(runes) == "[notacolor]x"

    def test_empty_brackets_stay_literal(self) -> None:
        assert strip_tags("a[]b") == "a[]b"

    def test_unclosed_bracket_stays_literal(self) -> None:
        assert strip_tags("[red") == "[red"

    def test_escape_round_trips(self) -> None:
        text = "[red] is not a tag"
        assert strip_tags(escape(text)) == text

    def test_colors_disabled_prints_tags(self) -> None:
        runes = parse_tags("[red]x", colors=False).runes
        assert _text(runes) == "[red]x"


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


class TestRegionTags:
    """Region start and end markers."""

    def test_region_is_attached_to_runes(self) -> None:
        runes = parse_tags('a["r1"]bc[""]d').runes
        assert [r.region for r in runes] == ["", "r1", "r1", ""]

    def test_open_region_is_returned(self) -> None:
        parsed = parse_tags('["x"]abc')
        assert parsed.region == "x"

    def test_region_carries_over(self) -> None:
        runes = parse_tags("more", region="x").runes
        assert all(r.region == "x" for r in runes)

    def test_regions_disabled_prints_tags(self) -> None:
        runes = parse_tags('["x"]a', regions=False).runes
        assert _text(runes) == '["x"]a'


class TestTaggedWidth:
    def test_tags_do_not_count(self) -> None:
        assert tagged_width("[red]abc[-]") == 3

    def test_wide_characters(self) -> None:
        assert tagged_width("[red]中文") == 4
