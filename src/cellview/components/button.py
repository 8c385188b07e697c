"""Button: a labelled, selectable button."""

from __future__ import annotations

from typing import Callable

from cellview.keys import KeyEvent
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import Style, Theme
from cellview.utils import Align

__all__ = ["Button"]


class Button(Widget):
    def __init__(self, label: str = "", theme: Theme | None = None) -> None:
        super().__init__(theme)
        t = self.theme
        self.label = label
        self.style = Style(fg=t.primary_text, bg=t.contrast_background)
        self.activated_style = Style(fg=t.inverse_text, bg=t.primary_text)
        self.box.set_background(t.contrast_background)
        self.selected_func: Callable[[], None] | None = None
        self.exit_func: Callable[[str], None] | None = None

    def set_label(self, label: str) -> None:
        self.label = label

    def get_label(self) -> str:
        return self.label

    def set_selected_func(self, fn: Callable[[], None] | None) -> None:
        self.selected_func = fn

    def set_exit_func(self, fn: Callable[[str], None] | None) -> None:
        """*fn* receives the navigation key (tab, shift+tab, escape, ...) that left the button."""
        self.exit_func = fn

    def draw(self, screen: ScreenBuffer) -> None:
        style = self.activated_style if self.has_focus() else self.style
        self.box.style = style
        super().draw(screen)
        inner = self.box.inner_rect()
        if inner.is_empty():
            return
        y = inner.y + inner.height // 2
        print_tagged(screen, inner.x, y, self.label, inner.width, style, Align.CENTER)

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("enter", "space"):
            if self.selected_func is not None:
                self.selected_func()
            return True
        if event.matches("tab", "shift+tab", "escape", "up", "down", "left", "right"):
            if self.exit_func is not None:
                self.exit_func(event.key)
                return True
        return False

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        if event.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            return True, None
        if event.action is MouseAction.LEFT_CLICK:
            if self.selected_func is not None:
                self.selected_func()
            return True, None
        return False, None
