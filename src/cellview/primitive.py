"""The drawable-node protocol and the pieces every widget shares.

``Primitive`` is the protocol the focus router and the draw loop program
against.  ``Box`` is the decoration (background, border, title, padding,
focus flag, capture hooks) each widget embeds as ``widget.box``; it is
also a usable primitive on its own.  ``Widget`` and ``Container`` are
base classes that delegate the protocol to the embedded box.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, runtime_checkable

from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.screen import ScreenBuffer
from cellview.style import DEFAULT_THEME, ColorLike, Style, Theme
from cellview.tags import StyledRune, parse_tags
from cellview.utils import Align, char_width

__all__ = [
    "Primitive",
    "SetFocus",
    "InputCapture",
    "MouseCapture",
    "Box",
    "Widget",
    "Container",
    "print_tagged",
]


@runtime_checkable
class Primitive(Protocol):
    """A node of the widget tree."""

    def draw(self, screen: ScreenBuffer) -> None: ...

    def get_rect(self) -> Rect: ...

    def set_rect(self, rect: Rect) -> None: ...

    def handle_key(self, event: KeyEvent, set_focus: SetFocus) -> bool: ...

    def handle_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Optional[Primitive]]: ...

    def is_focusable(self) -> bool: ...

    def focus(self, delegate: SetFocus) -> None: ...

    def blur(self) -> None: ...

    def has_focus(self) -> bool: ...


SetFocus = Callable[[Primitive], None]
# Return a (possibly different) event to continue, or None to consume it.
InputCapture = Callable[[KeyEvent], Optional[KeyEvent]]
MouseCapture = Callable[[MouseEvent], Optional[MouseEvent]]


def print_tagged(
    screen: ScreenBuffer,
    x: int,
    y: int,
    text: str,
    width: int,
    style: Style,
    align: Align = Align.LEFT,
    ellipsis: str = "…",
) -> int:
    """Print tagged *text* on one row, truncating with *ellipsis* if needed."""
    runes = parse_tags(text, style).runes
    total = sum(char_width(r.char) for r in runes)
    if total > width > 0:
        kept: list[StyledRune] = []
        used = 0
        limit = width - char_width(ellipsis)
        for rune in runes:
            w = char_width(rune.char)
            if used + w > limit:
                break
            kept.append(rune)
            used += w
        last_style = kept[-1].style if kept else style
        runes = kept + [StyledRune(ellipsis, last_style)]
    return screen.print_runes(x, y, runes, width, align)


# ---------------------------------------------------------------------------
# Box
# ---------------------------------------------------------------------------


class Box:
    """Background, optional border with title, and padding.

    The rectangle handed to :meth:`set_rect` is the outer rectangle; widget
    content goes into :meth:`inner_rect`.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        self.theme = theme or DEFAULT_THEME
        self.rect = Rect(0, 0, 15, 10)
        self.border = False
        self.title = ""
        self.title_align = Align.CENTER
        self.padding: tuple[int, int, int, int] = (0, 0, 0, 0)
        self.style = self.theme.text_style()
        self.border_style = self.theme.border_style()
        self.focused_border_style = self.theme.border_style(focused=True)
        self.title_style = Style(fg=self.theme.title, bg=self.theme.background)
        self.fill_background = True
        self.focused = False
        self.input_capture: InputCapture | None = None
        self.mouse_capture: MouseCapture | None = None
        self.on_focus: Callable[[], None] | None = None
        self.on_blur: Callable[[], None] | None = None

    # -- configuration ------------------------------------------------------

    def set_border(self, border: bool) -> None:
        self.border = border

    def set_title(self, title: str) -> None:
        self.title = title

    def set_title_align(self, align: Align) -> None:
        self.title_align = align

    def set_padding(self, top: int, bottom: int, left: int, right: int) -> None:
        self.padding = (top, bottom, left, right)

    def set_background(self, color: ColorLike) -> None:
        self.style = self.style.background(color)
        self.border_style = self.border_style.background(color)
        self.focused_border_style = self.focused_border_style.background(color)
        self.title_style = self.title_style.background(color)

    def set_border_color(self, color: ColorLike) -> None:
        self.border_style = self.border_style.foreground(color)

    def set_title_color(self, color: ColorLike) -> None:
        self.title_style = self.title_style.foreground(color)

    # -- geometry -----------------------------------------------------------

    def get_rect(self) -> Rect:
        return self.rect

    def set_rect(self, rect: Rect) -> None:
        self.rect = rect

    def inner_rect(self) -> Rect:
        """Content area: the rectangle minus border and padding."""
        top, bottom, left, right = self.padding
        if self.border:
            top, bottom, left, right = top + 1, bottom + 1, left + 1, right + 1
        return self.rect.inset(top, bottom, left, right)

    # -- drawing ------------------------------------------------------------

    def draw(self, screen: ScreenBuffer) -> None:
        rect = self.rect
        if rect.is_empty():
            return
        if self.fill_background:
            screen.fill(rect, " ", self.style)
        if not self.border or rect.width < 2 or rect.height < 2:
            return

        t = self.theme
        style = self.focused_border_style if self.focused else self.border_style
        for x in range(rect.x + 1, rect.right - 1):
            screen.set_content(x, rect.y, t.horizontal, style)
            screen.set_content(x, rect.bottom - 1, t.horizontal, style)
        for y in range(rect.y + 1, rect.bottom - 1):
            screen.set_content(rect.x, y, t.vertical, style)
            screen.set_content(rect.right - 1, y, t.vertical, style)
        screen.set_content(rect.x, rect.y, t.top_left, style)
        screen.set_content(rect.right - 1, rect.y, t.top_right, style)
        screen.set_content(rect.x, rect.bottom - 1, t.bottom_left, style)
        screen.set_content(rect.right - 1, rect.bottom - 1, t.bottom_right, style)

        if self.title and rect.width >= 4:
            print_tagged(
                screen,
                rect.x + 1,
                rect.y,
                self.title,
                rect.width - 2,
                self.title_style,
                self.title_align,
                t.ellipsis,
            )

    # -- input --------------------------------------------------------------

    def capture_key(self, event: KeyEvent) -> KeyEvent | None:
        if self.input_capture is None:
            return event
        return self.input_capture(event)

    def capture_mouse(self, event: MouseEvent) -> MouseEvent | None:
        if self.mouse_capture is None:
            return event
        return self.mouse_capture(event)

    def handle_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        return self.capture_key(event) is None

    def handle_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        captured = self.capture_mouse(event)
        if captured is None:
            return True, None
        if not self.rect.contains(captured.x, captured.y):
            return False, None
        if captured.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            return True, None
        return False, None

    # -- focus --------------------------------------------------------------

    def is_focusable(self) -> bool:
        return True

    def focus(self, delegate: SetFocus) -> None:
        self.focused = True
        if self.on_focus is not None:
            self.on_focus()

    def blur(self) -> None:
        self.focused = False
        if self.on_blur is not None:
            self.on_blur()

    def has_focus(self) -> bool:
        return self.focused


# ---------------------------------------------------------------------------
# Widget base classes
# ---------------------------------------------------------------------------


class Widget:
    """Base class for widgets built around an embedded :class:`Box`.

    Subclasses override :meth:`draw` (calling ``super().draw``),
    :meth:`on_key` and :meth:`on_mouse`.  The box's capture hooks run
    before the ``on_*`` methods.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        self.box = Box(theme)
        self.theme = self.box.theme

    def get_rect(self) -> Rect:
        return self.box.rect

    def set_rect(self, rect: Rect) -> None:
        self.box.rect = rect

    def draw(self, screen: ScreenBuffer) -> None:
        self.box.draw(screen)

    def handle_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        captured = self.box.capture_key(event)
        if captured is None:
            return True
        return self.on_key(captured, set_focus)

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        return False

    def handle_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        captured = self.box.capture_mouse(event)
        if captured is None:
            return True, None
        return self.on_mouse(captured, set_focus)

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        if event.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            return True, None
        return False, None

    def in_rect(self, event: MouseEvent) -> bool:
        return self.box.rect.contains(event.x, event.y)

    def is_focusable(self) -> bool:
        return True

    def focus(self, delegate: SetFocus) -> None:
        self.box.focus(delegate)

    def blur(self) -> None:
        self.box.blur()

    def has_focus(self) -> bool:
        return self.box.focused


class Container(Widget):
    """A widget with children.

    Keys go to the child on the focus path first; if it does not consume
    them, :meth:`default_key` gets a chance.  Mouse events go to the
    topmost child under the pointer.
    """

    def children(self) -> Sequence[Primitive]:
        return []

    def has_focus(self) -> bool:
        if self.box.focused:
            return True
        return any(child.has_focus() for child in self.children())

    def focused_child(self) -> Primitive | None:
        for child in self.children():
            if child.has_focus():
                return child
        return None

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        child = self.focused_child()
        if child is not None and child.handle_key(event, set_focus):
            return True
        return self.default_key(event, set_focus)

    def default_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        return False

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        for child in reversed(list(self.children())):
            if not child.get_rect().contains(event.x, event.y):
                continue
            consumed, capture = child.handle_mouse(event, set_focus)
            if consumed:
                return True, capture
        return super().on_mouse(event, set_focus)

    def cycle_focus(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        """Move focus to the next/previous focusable child on Tab/Shift+Tab."""
        if not event.matches("tab", "shift+tab"):
            return False
        candidates = [c for c in self.children() if c.is_focusable()]
        if not candidates:
            return False
        current = self.focused_child()
        step = -1 if event.key == "shift+tab" else 1
        if current is None or current not in candidates:
            index = 0 if step > 0 else len(candidates) - 1
        else:
            index = (candidates.index(current) + step) % len(candidates)
        set_focus(candidates[index])
        return True
