"""Pages: a stack of named pages, any number of which may be visible."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from cellview.primitive import Container, Primitive, SetFocus
from cellview.screen import ScreenBuffer
from cellview.style import Theme

__all__ = ["Pages"]

logger = logging.getLogger(__name__)


@dataclass
class Page:
    name: str
    item: Primitive
    resize: bool
    visible: bool


class Pages(Container):
    """Named pages drawn back to front.

    The last visible page is the front page and receives focus.  With
    ``resize`` a page fills the container; otherwise it keeps its own
    rectangle (useful for dialogs over another page).
    ``changed_func`` runs after every change to the set of pages.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.pages: list[Page] = []
        self.changed_func: Callable[[], None] | None = None
        self._set_focus: SetFocus | None = None

    def set_changed_func(self, fn: Callable[[], None] | None) -> None:
        self.changed_func = fn

    # -- page management ----------------------------------------------------

    def add_page(self, name: str, item: Primitive, resize: bool = True, visible: bool = True) -> None:
        """Add a page on top.  A page with the same name is replaced."""
        had_focus = self.has_focus()
        self.pages = [page for page in self.pages if page.name != name]
        self.pages.append(Page(name, item, resize, visible))
        self._changed(had_focus)

    def add_and_switch_to_page(self, name: str, item: Primitive, resize: bool = True) -> None:
        self.add_page(name, item, resize, True)
        self.switch_to_page(name)

    def remove_page(self, name: str) -> None:
        had_focus = self.has_focus()
        before = len(self.pages)
        self.pages = [page for page in self.pages if page.name != name]
        if len(self.pages) == before:
            logger.debug("remove_page: no page named %r", name)
            return
        self._changed(had_focus)

    def has_page(self, name: str) -> bool:
        return any(page.name == name for page in self.pages)

    def get_page_count(self) -> int:
        return len(self.pages)

    def get_page_names(self, visible_only: bool = False) -> list[str]:
        return [page.name for page in self.pages if page.visible or not visible_only]

    def show_page(self, name: str) -> None:
        """Make the page visible without hiding the others."""
        self._update(name, lambda page: setattr(page, "visible", True))

    def hide_page(self, name: str) -> None:
        self._update(name, lambda page: setattr(page, "visible", False))

    def switch_to_page(self, name: str) -> None:
        """Show only the page called *name*."""
        if not self.has_page(name):
            return
        had_focus = self.has_focus()
        for page in self.pages:
            page.visible = page.name == name
        self._changed(had_focus)

    def send_to_front(self, name: str) -> None:
        self._move(name, front=True)

    def send_to_back(self, name: str) -> None:
        self._move(name, front=False)

    def get_front_page(self) -> tuple[str, Primitive] | None:
        front = self._front()
        if front is None:
            return None
        return front.name, front.item

    def _front(self) -> Page | None:
        for page in reversed(self.pages):
            if page.visible:
                return page
        return None

    def _update(self, name: str, change: Callable[[Page], None]) -> None:
        for page in self.pages:
            if page.name == name:
                had_focus = self.has_focus()
                change(page)
                self._changed(had_focus)
                return

    def _move(self, name: str, front: bool) -> None:
        for index, page in enumerate(self.pages):
            if page.name == name:
                had_focus = self.has_focus()
                del self.pages[index]
                if front:
                    self.pages.append(page)
                else:
                    self.pages.insert(0, page)
                self._changed(had_focus)
                return

    def _changed(self, had_focus: bool) -> None:
        if had_focus:
            self._refocus()
        if self.changed_func is not None:
            self.changed_func()

    def _refocus(self) -> None:
        if self._set_focus is None:
            return
        front = self._front()
        if front is not None:
            self._set_focus(front.item)
        else:
            self._set_focus(self)

    # -- protocol -----------------------------------------------------------

    def children(self) -> list[Primitive]:
        return [page.item for page in self.pages if page.visible]

    def has_focus(self) -> bool:
        if self.box.focused:
            return True
        return any(page.item.has_focus() for page in self.pages)

    def focus(self, delegate: SetFocus) -> None:
        self._set_focus = delegate
        front = self._front()
        if front is not None:
            delegate(front.item)
            return
        super().focus(delegate)

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        for page in self.pages:
            if not page.visible:
                continue
            if page.resize:
                page.item.set_rect(inner)
            page.item.draw(screen)
