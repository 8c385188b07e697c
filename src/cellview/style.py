"""Cell styles: colors, text attributes, SGR rendering, and the default theme.

Colors are :class:`rich.color.Color` values.  ``None`` always means "the
terminal's default color" so that an unstyled cell renders as ``ESC[0m``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Union

from rich.color import Color, ColorParseError, ColorSystem

__all__ = [
    "Attr",
    "ATTR_LETTERS",
    "Color",
    "ColorParseError",
    "ColorLike",
    "parse_color",
    "Style",
    "DEFAULT_STYLE",
    "Theme",
    "DEFAULT_THEME",
]


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


class Attr(enum.IntFlag):
    """Text attribute bitset."""

    NONE = 0
    BOLD = 1
    DIM = 2
    ITALIC = 4
    UNDERLINE = 8
    BLINK = 16
    REVERSE = 32
    STRIKETHROUGH = 64


# Letters accepted in the attribute field of a style tag.
ATTR_LETTERS: dict[str, Attr] = {
    "b": Attr.BOLD,
    "d": Attr.DIM,
    "i": Attr.ITALIC,
    "u": Attr.UNDERLINE,
    "l": Attr.BLINK,
    "r": Attr.REVERSE,
    "s": Attr.STRIKETHROUGH,
}

_SGR_ATTRS: tuple[tuple[Attr, str], ...] = (
    (Attr.BOLD, "1"),
    (Attr.DIM, "2"),
    (Attr.ITALIC, "3"),
    (Attr.UNDERLINE, "4"),
    (Attr.BLINK, "5"),
    (Attr.REVERSE, "7"),
    (Attr.STRIKETHROUGH, "9"),
)


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

# W3C names that rich does not know (rich covers the ANSI and xterm names).
_W3C_COLORS: dict[str, str] = {
    "aqua": "#00ffff",
    "brown": "#a52a2a",
    "crimson": "#dc143c",
    "darkblue": "#00008b",
    "darkcyan": "#008b8b",
    "darkgray": "#a9a9a9",
    "darkgreen": "#006400",
    "darkgrey": "#a9a9a9",
    "darkmagenta": "#8b008b",
    "darkorange": "#ff8c00",
    "darkred": "#8b0000",
    "fuchsia": "#ff00ff",
    "gold": "#ffd700",
    "gray": "#808080",
    "grey": "#808080",
    "indigo": "#4b0082",
    "lightblue": "#add8e6",
    "lightgray": "#d3d3d3",
    "lightgreen": "#90ee90",
    "lightgrey": "#d3d3d3",
    "lightyellow": "#ffffe0",
    "lime": "#00ff00",
    "maroon": "#800000",
    "navy": "#000080",
    "olive": "#808000",
    "orange": "#ffa500",
    "pink": "#ffc0cb",
    "purple": "#800080",
    "silver": "#c0c0c0",
    "skyblue": "#87ceeb",
    "teal": "#008080",
    "violet": "#ee82ee",
}

ColorLike = Union[Color, str, None]


def parse_color(value: ColorLike) -> Color | None:
    """Resolve *value* to a color, or ``None`` for the terminal default.

    Accepts a :class:`Color`, a W3C color name, anything
    :meth:`rich.color.Color.parse` accepts (ANSI names, ``#rrggbb``,
    ``color(N)``, ``rgb(r,g,b)``), or ``""``/``"default"``/``"-"`` for the
    default color.  Raises :class:`ColorParseError` for anything else.
    """
    if value is None or isinstance(value, Color):
        if value is not None and value.is_default:
            return None
        return value
    name = value.strip().lower()
    if name in ("", "-", "default"):
        return None
    alias = _W3C_COLORS.get(name)
    color = Color.parse(alias if alias is not None else name)
    if color.is_default:
        return None
    return color


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Style:
    """Foreground color, background color and attributes of a cell.

    Colors may be given as names; they are normalised on construction so
    that ``Style(fg="red") == Style(fg=Color.parse("red"))``.
    """

    fg: Color | None = None
    bg: Color | None = None
    attrs: Attr = Attr.NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "fg", parse_color(self.fg))
        object.__setattr__(self, "bg", parse_color(self.bg))
        object.__setattr__(self, "attrs", Attr(self.attrs))

    def foreground(self, color: ColorLike) -> Style:
        return replace(self, fg=color)

    def background(self, color: ColorLike) -> Style:
        return replace(self, bg=color)

    def add(self, attrs: Attr) -> Style:
        return replace(self, attrs=self.attrs | attrs)

    def remove(self, attrs: Attr) -> Style:
        return replace(self, attrs=self.attrs & ~attrs)

    def has(self, attr: Attr) -> bool:
        return bool(self.attrs & attr)

    def sgr(self, color_system: ColorSystem = ColorSystem.TRUECOLOR) -> str:
        """Return the escape sequence that switches the terminal to this style.

        The sequence always starts with a reset so it does not depend on
        the previously active style.
        """
        params = ["0"]
        for attr, code in _SGR_ATTRS:
            if self.attrs & attr:
                params.append(code)
        if self.fg is not None:
            params.extend(_downgrade(self.fg, color_system).get_ansi_codes(foreground=True))
        if self.bg is not None:
            params.extend(_downgrade(self.bg, color_system).get_ansi_codes(foreground=False))
        return "\x1b[" + ";".join(params) + "m"


def _downgrade(color: Color, color_system: ColorSystem) -> Color:
    if color_system == ColorSystem.TRUECOLOR:
        return color
    return color.downgrade(color_system)


DEFAULT_STYLE = Style()


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Theme:
    """Default colors and glyphs shared by all widgets.

    Color fields hold color names so a theme can be written literally;
    ``None`` keeps the terminal default.
    """

    background: str | None = None
    contrast_background: str = "blue"
    more_contrast_background: str = "green"
    border: str = "white"
    focused_border: str = "yellow"
    title: str = "white"
    graphics: str = "white"
    primary_text: str = "white"
    secondary_text: str = "yellow"
    tertiary_text: str = "green"
    inverse_text: str = "blue"
    contrast_secondary_text: str = "darkcyan"

    horizontal: str = "─"
    vertical: str = "│"
    top_left: str = "┌"
    top_right: str = "┐"
    bottom_left: str = "└"
    bottom_right: str = "┘"
    t_down: str = "┬"
    t_up: str = "┴"
    t_right: str = "├"
    t_left: str = "┤"
    cross: str = "┼"
    ellipsis: str = "…"
    checked: str = "X"
    unchecked: str = " "

    def text_style(self) -> Style:
        return Style(fg=self.primary_text, bg=self.background)

    def border_style(self, focused: bool = False) -> Style:
        return Style(
            fg=self.focused_border if focused else self.border,
            bg=self.background,
        )


DEFAULT_THEME = Theme()
