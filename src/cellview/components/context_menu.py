"""ContextMenu: a transient menu shown at a screen position."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Protocol

from cellview.components.list import List
from cellview.keys import KeyEvent
from cellview.layout import OverlayOptions, Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Container, Primitive, SetFocus
from cellview.screen import ScreenBuffer
from cellview.style import Theme
from cellview.tags import tagged_width

__all__ = ["ContextMenu", "ModalHost"]

logger = logging.getLogger(__name__)


class ModalHost(Protocol):
    def show_modal(self, node: Primitive, options: OverlayOptions | None = None) -> None: ...

    def hide_modal(self, node: Primitive | None = None) -> None: ...


@dataclass
class MenuItem:
    text: str
    shortcut: str = ""
    handler: Callable[[int], None] | None = None
    enabled: bool = True


class ContextMenu(Container):
    """A bordered list of actions opened over the current screen.

    Items are added with :meth:`add_item`; one with neither text nor
    shortcut is a divider.  :meth:`show` opens the menu at a screen
    position on behalf of some row, cell or item (the *opener index*).
    Selecting an item closes the menu, returns focus to where it was, and
    calls the item's handler with the opener index.  Escape or a click
    outside the menu closes it without selecting anything.

    The item list must not be changed while the menu is open.
    """

    def __init__(self, host: ModalHost, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.host = host
        self.items: list[MenuItem] = []
        self.opener_index = -1
        self.visible = False
        self._x = 0
        self._y = 0
        self._area = Rect(0, 0, 0, 0)

        self.box.fill_background = False
        self.list = List(theme)
        self.list.box.set_border(True)
        self.list.box.set_padding(0, 0, 1, 1)
        self.list.set_show_secondary_text(False)
        self.list.set_wrap_around(True)
        self.list.set_highlight_full_line(True)
        self.list.set_selected_func(self._on_selected)
        self.list.set_done_func(self.hide)

    # -- items --------------------------------------------------------------

    def add_item(
        self,
        text: str,
        shortcut: str = "",
        handler: Callable[[int], None] | None = None,
    ) -> None:
        self.items.append(MenuItem(text, shortcut, handler, bool(text or shortcut)))

    def clear(self) -> None:
        self.items = []

    def set_enabled(self, index: int, enabled: bool) -> None:
        if not self.items:
            return
        item = self.items[max(0, min(index, len(self.items) - 1))]
        item.enabled = enabled and bool(item.text or item.shortcut)

    def get_item_count(self) -> int:
        return len(self.items)

    # -- showing ------------------------------------------------------------

    def show(self, index: int, x: int, y: int) -> None:
        """Open the menu with its top-left corner at (*x*, *y*)."""
        if not self.items:
            logger.debug("not showing an empty context menu")
            return
        self.opener_index = index
        self._x, self._y = x, y

        self.list.clear()
        for i, item in enumerate(self.items):
            self.list.add_item(item.text, shortcut=item.shortcut)
            self.list.set_item_enabled(i, item.enabled)
        first = next((i for i, item in enumerate(self.items) if item.enabled), 0)
        self.list.set_current_item(first)

        self.visible = True
        self.host.show_modal(self)

    def hide(self) -> None:
        if not self.visible:
            return
        self.visible = False
        self.host.hide_modal(self)

    def _on_selected(self, index: int, main_text: str, secondary_text: str, shortcut: str) -> None:
        item = self.items[index]
        self.hide()
        if item.handler is not None:
            item.handler(self.opener_index)

    # -- layout and drawing -------------------------------------------------

    def menu_rect(self) -> Rect:
        """Rectangle of the menu frame, kept inside the screen area."""
        text_width = max((tagged_width(item.text) for item in self.items), default=0)
        shortcut_width = 4 if any(item.shortcut for item in self.items) else 0
        width = text_width + shortcut_width + 4
        height = len(self.items) + 2
        area = self._area
        width = min(width, area.width)
        height = min(height, area.height)
        x = max(area.x, min(self._x, area.right - width))
        y = max(area.y, min(self._y, area.bottom - height))
        return Rect(x, y, width, height)

    def set_rect(self, rect: Rect) -> None:
        self._area = rect
        self.box.rect = rect

    def draw(self, screen: ScreenBuffer) -> None:
        self.list.set_rect(self.menu_rect())
        self.list.draw(screen)

    # -- protocol -----------------------------------------------------------

    def children(self) -> list[Primitive]:
        return [self.list]

    def focus(self, delegate: SetFocus) -> None:
        delegate(self.list)

    def default_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("escape"):
            self.hide()
            return True
        return False

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if self.list.get_rect().contains(event.x, event.y):
            return self.list.handle_mouse(event, set_focus)
        if event.action in (
            MouseAction.LEFT_DOWN,
            MouseAction.MIDDLE_DOWN,
            MouseAction.RIGHT_DOWN,
        ):
            self.hide()
            return True, None
        return True, None
