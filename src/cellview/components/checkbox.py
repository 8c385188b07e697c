"""Checkbox: a labelled boolean toggle."""

from __future__ import annotations

from typing import Callable

from cellview.keys import KeyEvent
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import Style, Theme
from cellview.tags import tagged_width

__all__ = ["Checkbox"]


class Checkbox(Widget):
    """Label followed by a one-cell box showing the checked state.

    Enter, Space or a click toggle it; ``changed_func(checked)`` follows.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        t = self.theme
        self.label = ""
        self.label_width = 0
        self.checked = False
        self.label_style = Style(fg=t.secondary_text, bg=t.background)
        self.field_style = Style(fg=t.primary_text, bg=t.contrast_background)
        self.changed_func: Callable[[bool], None] | None = None
        self.done_func: Callable[[str], None] | None = None

    def set_label(self, label: str) -> None:
        self.label = label

    def get_label(self) -> str:
        return self.label

    def set_label_width(self, width: int) -> None:
        self.label_width = max(0, width)

    def set_checked(self, checked: bool) -> None:
        self.checked = checked

    def is_checked(self) -> bool:
        return self.checked

    def set_changed_func(self, fn: Callable[[bool], None] | None) -> None:
        self.changed_func = fn

    def set_done_func(self, fn: Callable[[str], None] | None) -> None:
        self.done_func = fn

    def toggle(self) -> None:
        self.checked = not self.checked
        if self.changed_func is not None:
            self.changed_func(self.checked)

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        if inner.is_empty():
            return
        label_width = self.label_width or tagged_width(self.label)
        print_tagged(screen, inner.x, inner.y, self.label, min(label_width, inner.width), self.label_style)
        x = inner.x + label_width
        if x < inner.right:
            glyph = self.theme.checked if self.checked else self.theme.unchecked
            screen.set_content(x, inner.y, glyph, self.field_style)
            if self.has_focus():
                screen.cursor = (x, inner.y)

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("enter", "space"):
            self.toggle()
            return True
        if event.matches("tab", "shift+tab", "escape") and self.done_func is not None:
            self.done_func(event.key)
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
            self.toggle()
            return True, None
        return False, None
