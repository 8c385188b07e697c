"""Text measurement utilities: cell widths, truncation, wrapping, alignment.

Widths are measured per grapheme cluster so that combining marks, ZWJ emoji
sequences and East Asian wide characters occupy the number of cells a
terminal actually gives them.
"""

from __future__ import annotations

import enum
import unicodedata
from typing import Protocol, Sequence, TypeVar

import grapheme
import wcwidth as _wcwidth

__all__ = [
    "Align",
    "align_offset",
    "char_width",
    "visible_width",
    "truncate_to_width",
    "take_columns",
    "wrap_runes",
    "split_lines",
    "is_whitespace_char",
]


class Align(enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


def align_offset(content_width: int, width: int, align: Align) -> int:
    """Column offset of content *content_width* wide inside *width* cells."""
    if align is Align.LEFT or content_width >= width:
        return 0
    if align is Align.RIGHT:
        return width - content_width
    return (width - content_width) // 2


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def char_width(g: str) -> int:
    """Return the number of cells a single grapheme cluster occupies.

    Rules:
    1. Control characters and lone combining marks -> 0
    2. Emoji sequences (VS16, ZWJ, skin tones, flags) -> 2
    3. Otherwise wcwidth of the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        if cp < 0x7F:
            return 1
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Return the number of cells *text* occupies on one line.

    * Uses a fast ASCII path when possible.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    if text.isascii() and text.isprintable():
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(text):
        total += char_width(g)
    return _cache_width(text, total)


# ---------------------------------------------------------------------------
# Truncation
# ---------------------------------------------------------------------------


def take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* that fits within *max_cols* cells.

    The text is cut at grapheme boundaries; a wide character that would
    straddle the limit is dropped.
    """
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = char_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "…",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* cells.

    If the text is wider than *max_width*, it is truncated and *ellipsis* is
    appended (the ellipsis counts towards the width).  If *pad* is ``True``,
    the result is right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    target_width = max_width - visible_width(ellipsis)
    if target_width <= 0:
        return take_columns(ellipsis, max_width)

    result = take_columns(text, target_width) + ellipsis
    if pad:
        result += " " * (max_width - visible_width(result))
    return result


# ---------------------------------------------------------------------------
# Wrapping of styled runes
# ---------------------------------------------------------------------------


class _HasChar(Protocol):
    @property
    def char(self) -> str: ...


R = TypeVar("R", bound=_HasChar)


def split_lines(runes: Sequence[R]) -> list[list[R]]:
    """Split *runes* at newline runes.  Always returns at least one line."""
    lines: list[list[R]] = [[]]
    for rune in runes:
        if rune.char in ("\n", "\r\n"):
            lines.append([])
        else:
            lines[-1].append(rune)
    return lines


def wrap_runes(
    runes: Sequence[R],
    width: int,
    word_wrap: bool = True,
) -> list[list[R]]:
    """Break one line of *runes* into pieces at most *width* cells wide.

    With *word_wrap* the break happens after the last space that fits;
    trailing spaces at a break stay on the upper line.  A word longer than
    *width* is broken mid-word.  Returns ``[[]]`` for an empty line.
    """
    if width <= 0 or not runes:
        return [list(runes)]

    lines: list[list[R]] = []
    current: list[R] = []
    current_width = 0
    last_space = -1

    for rune in runes:
        w = char_width(rune.char)
        if current_width + w > width and current:
            if rune.char == " " and word_wrap:
                # Spaces at the break are swallowed by the upper line.
                current.append(rune)
                current_width += w
                last_space = len(current) - 1
                continue
            if word_wrap and last_space >= 0:
                lines.append(current[: last_space + 1])
                current = current[last_space + 1 :]
            else:
                lines.append(current)
                current = []
            current_width = sum(char_width(r.char) for r in current)
            last_space = -1
        current.append(rune)
        current_width += w
        if rune.char == " ":
            last_space = len(current) - 1

    lines.append(current)
    return lines


def is_whitespace_char(char: str) -> bool:
    """Return ``True`` if *char* is a whitespace character."""
    return char in (" ", "\t", "\n", "\r", "\f", "\v")
