"""Inline style and region tags.

Text handed to widgets may carry markup:

* ``[<fg>:<bg>:<attrs>]`` switches the style of the following text.  Fields
  may be omitted from the right (``[red]``, ``[red:blue]``); an empty field
  keeps the current value and ``-`` resets it to the default.  Attribute
  letters are ``b d i u l r s`` (bold, dim, italic, underline, blink,
  reverse, strikethrough); lowercase switches an attribute on, uppercase
  switches it off.
* ``["id"]`` starts a region, ``[""]`` ends it.
* ``[[`` produces a literal ``[``.

Anything in brackets that is not a valid tag is printed as-is.  Parsing
never raises.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import grapheme

from cellview.style import (
    ATTR_LETTERS,
    DEFAULT_STYLE,
    Attr,
    ColorParseError,
    Style,
    parse_color,
)
from cellview.utils import char_width

__all__ = [
    "StyledRune",
    "ParsedText",
    "parse_tags",
    "parse_style_tag",
    "strip_tags",
    "escape",
    "tagged_width",
]

_REGION_RE = re.compile(r'^"([a-zA-Z0-9_,;: \-.]*)"$')


class StyledRune(NamedTuple):
    char: str
    style: Style
    region: str = ""


class ParsedText(NamedTuple):
    runes: list[StyledRune]
    style: Style
    region: str


def parse_style_tag(body: str, style: Style) -> Style | None:
    """Apply the tag body (the text between the brackets) to *style*.

    Returns ``None`` when *body* is not a valid style directive.
    """
    if not body:
        return None
    fields = body.split(":")
    if len(fields) > 3:
        return None

    fg = style.fg
    bg = style.bg
    attrs = style.attrs
    try:
        if fields[0]:
            fg = parse_color(fields[0])
        if len(fields) > 1 and fields[1]:
            bg = parse_color(fields[1])
    except ColorParseError:
        return None

    if len(fields) > 2 and fields[2]:
        if fields[2] == "-":
            attrs = Attr.NONE
        else:
            for letter in fields[2]:
                attr = ATTR_LETTERS.get(letter.lower())
                if attr is None:
                    return None
                if letter.islower():
                    attrs |= attr
                else:
                    attrs &= ~attr

    return Style(fg=fg, bg=bg, attrs=attrs)


def parse_tags(
    text: str,
    style: Style = DEFAULT_STYLE,
    region: str = "",
    *,
    colors: bool = True,
    regions: bool = True,
) -> ParsedText:
    """Split tagged *text* into styled grapheme clusters.

    *style* and *region* are the state at the start of *text*; the state at
    the end is returned with the runes so that consecutive lines can be
    parsed with carried-over state.
    """
    runes: list[StyledRune] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            for cluster in grapheme.graphemes("".join(pending)):
                runes.append(StyledRune(cluster, style, region))
            pending.clear()

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch != "[" or not (colors or regions):
            pending.append(ch)
            i += 1
            continue

        if colors and text.startswith("[[", i):
            pending.append("[")
            i += 2
            continue

        close = text.find("]", i + 1)
        if close == -1:
            pending.append(ch)
            i += 1
            continue

        body = text[i + 1 : close]
        if regions:
            m = _REGION_RE.match(body)
            if m is not None:
                flush()
                region = m.group(1)
                i = close + 1
                continue
        if colors:
            new_style = parse_style_tag(body, style)
            if new_style is not None:
                flush()
                style = new_style
                i = close + 1
                continue

        pending.append(ch)
        i += 1

    flush()
    return ParsedText(runes, style, region)


def strip_tags(text: str) -> str:
    """Return *text* with all valid tags removed and ``[[`` unescaped."""
    return "".join(rune.char for rune in parse_tags(text).runes)


def escape(text: str) -> str:
    """Escape *text* so that it is printed literally."""
    return text.replace("[", "[[")


def tagged_width(text: str) -> int:
    """Display width of *text* once its tags are removed."""
    return sum(char_width(rune.char) for rune in parse_tags(text).runes)
