"""DropDown: a labelled field that picks one of several options."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from cellview.components.context_menu import ContextMenu, ModalHost
from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import Style, Theme
from cellview.tags import tagged_width

__all__ = ["DropDown", "DropDownOption"]

logger = logging.getLogger(__name__)


@dataclass
class DropDownOption:
    text: str
    selected: Callable[[], None] | None = None


class DropDown(Widget):
    """Label followed by a field showing the current option.

    Enter, Space, Down or a click open the option list as a modal layer
    through *host*, directly below the field.  Choosing an option closes
    the list, returns focus to the drop-down, and calls the option's own
    callback followed by ``selected_func(text, index)``.  Escape or a
    click outside the list closes it without changing anything.

    Without a host the list cannot be opened.
    """

    def __init__(self, host: ModalHost | None = None, theme: Theme | None = None) -> None:
        super().__init__(theme)
        t = self.theme
        self.label = ""
        self.label_width = 0
        self.field_width = 0
        self.options: list[DropDownOption] = []
        self.current_option = -1

        self.label_style = Style(fg=t.secondary_text, bg=t.background)
        self.field_style = Style(fg=t.primary_text, bg=t.contrast_background)
        self.focused_field_style = Style(fg=t.contrast_background, bg=t.primary_text)

        self.selected_func: Callable[[str, int], None] | None = None
        self.done_func: Callable[[str], None] | None = None

        self.host: ModalHost | None = None
        self.menu: ContextMenu | None = None
        self.set_host(host)

    # -- configuration ------------------------------------------------------

    def set_host(self, host: ModalHost | None) -> None:
        """Set where the option list is shown."""
        if self.menu is not None:
            self.menu.hide()
        self.host = host
        self.menu = ContextMenu(host, self.theme) if host is not None else None

    def set_label(self, label: str) -> None:
        self.label = label

    def get_label(self) -> str:
        return self.label

    def set_label_width(self, width: int) -> None:
        self.label_width = max(0, width)

    def set_field_width(self, width: int) -> None:
        """0 sizes the field to the longest option."""
        self.field_width = max(0, width)

    def get_field_width(self) -> int:
        if self.field_width:
            return self.field_width
        return max((tagged_width(o.text) for o in self.options), default=0)

    def set_selected_func(self, fn: Callable[[str, int], None] | None) -> None:
        self.selected_func = fn

    def set_done_func(self, fn: Callable[[str], None] | None) -> None:
        """*fn* receives the key (escape, tab, shift+tab) that left the field."""
        self.done_func = fn

    # -- options ------------------------------------------------------------

    def add_option(self, text: str, selected: Callable[[], None] | None = None) -> None:
        self.options.append(DropDownOption(text, selected))

    def set_options(
        self,
        texts: Sequence[str],
        selected: Callable[[str, int], None] | None = None,
    ) -> None:
        """Replace all options.  The current option is reset."""
        self.close()
        self.options = [DropDownOption(text) for text in texts]
        self.current_option = -1
        self.selected_func = selected

    def get_option_count(self) -> int:
        return len(self.options)

    def set_current_option(self, index: int) -> None:
        """Make *index* (clamped) the current option without firing callbacks."""
        if not self.options:
            self.current_option = -1
            return
        self.current_option = max(0, min(index, len(self.options) - 1))

    def get_current_option(self) -> tuple[int, str]:
        """``(index, text)`` of the current option, ``(-1, "")`` if there is none."""
        if not 0 <= self.current_option < len(self.options):
            return -1, ""
        return self.current_option, self.options[self.current_option].text

    # -- opening and closing ------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.menu is not None and self.menu.visible

    def open(self) -> None:
        if self.menu is None or not self.options:
            logger.debug("drop-down %r has nothing to open", self.label)
            return
        menu = self.menu
        menu.clear()
        for index, option in enumerate(self.options):
            menu.add_item(option.text, handler=lambda opener, index=index: self._choose(index))
        field = self._field_rect()
        # Line the option text up with the field text.
        menu.show(self.current_option, field.x - 2, field.y + 1)
        if self.current_option >= 0:
            menu.list.set_current_item(self.current_option)

    def close(self) -> None:
        if self.menu is not None:
            self.menu.hide()

    def _choose(self, index: int) -> None:
        self.current_option = index
        option = self.options[index]
        if option.selected is not None:
            option.selected()
        if self.selected_func is not None:
            self.selected_func(option.text, index)

    # -- drawing ------------------------------------------------------------

    def _field_rect(self) -> Rect:
        inner = self.box.inner_rect()
        label_width = self.label_width or tagged_width(self.label)
        x = min(inner.x + label_width, inner.right)
        width = min(self.get_field_width(), inner.right - x)
        return Rect(x, inner.y, max(0, width), min(1, inner.height))

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        if inner.is_empty():
            return
        label_width = self.label_width or tagged_width(self.label)
        print_tagged(screen, inner.x, inner.y, self.label, min(label_width, inner.width), self.label_style)

        field = self._field_rect()
        if field.is_empty():
            return
        style = self.field_style
        if self.has_focus() and not self.is_open:
            style = self.focused_field_style
        screen.fill(field, " ", style)
        _, text = self.get_current_option()
        if text:
            print_tagged(screen, field.x, field.y, text, field.width, style)

    # -- input --------------------------------------------------------------

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("enter", "space", "down"):
            self.open()
            return True
        if event.matches("escape", "tab", "shift+tab") and self.done_func is not None:
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
            self.open()
            return True, None
        return False, None
