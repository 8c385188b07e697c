"""List: a navigable list of items with optional secondary text and shortcuts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import Attr, Style, Theme

__all__ = ["List", "ListItem"]

_PAGE_STEP = 5

ItemCallback = Callable[[int, str, str, str], None]


@dataclass
class ListItem:
    main_text: str
    secondary_text: str = ""
    shortcut: str = ""
    selected: Callable[[], None] | None = None
    enabled: bool = True

    @property
    def is_divider(self) -> bool:
        return not self.main_text and not self.shortcut


class List(Widget):
    """A list of items, one of which is current.

    An item with neither text nor shortcut is a divider: it is drawn as a
    horizontal line and can never become the current item.  Disabled items
    are skipped by navigation as well.

    Callbacks receive ``(index, main_text, secondary_text, shortcut)``:
    ``changed_func`` when the current item changes, ``selected_func`` when
    an item is selected with Enter, its shortcut, or a click.
    ``done_func`` runs on Escape.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.items: list[ListItem] = []
        self.current = 0
        self.item_offset = 0
        self.show_secondary_text = True
        self.wrap_around = False
        self.highlight_full_line = False
        self.selected_focus_only = False

        t = self.theme
        self.main_style = Style(fg=t.primary_text, bg=t.background)
        self.secondary_style = Style(fg=t.tertiary_text, bg=t.background)
        self.shortcut_style = Style(fg=t.secondary_text, bg=t.background)
        self.selected_style = Style(fg=t.inverse_text, bg=t.primary_text)
        self.divider_style = Style(fg=t.graphics, bg=t.background)

        self.changed_func: ItemCallback | None = None
        self.selected_func: ItemCallback | None = None
        self.done_func: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(
        self,
        main_text: str,
        secondary_text: str = "",
        shortcut: str = "",
        selected: Callable[[], None] | None = None,
    ) -> ListItem:
        return self.insert_item(len(self.items), main_text, secondary_text, shortcut, selected)

    def insert_item(
        self,
        index: int,
        main_text: str,
        secondary_text: str = "",
        shortcut: str = "",
        selected: Callable[[], None] | None = None,
    ) -> ListItem:
        """Insert an item before *index* (negative counts from the end)."""
        item = ListItem(main_text, secondary_text, shortcut, selected)
        item.enabled = not item.is_divider
        count = len(self.items)
        if index < 0:
            index += count + 1
        index = max(0, min(index, count))
        self.items.insert(index, item)
        if count > 0 and index <= self.current:
            self.current += 1
        if not self._selectable(self.current):
            self._settle()
        return item

    def remove_item(self, index: int) -> None:
        if not self.items:
            return
        index = self._clamp(index)
        del self.items[index]
        if not self.items:
            self.current = 0
            return
        previous = self.current
        if index < self.current or self.current >= len(self.items):
            self.current = max(0, self.current - 1)
        self._settle()
        if index == previous:
            self._fire_changed()

    def clear(self) -> None:
        self.items = []
        self.current = 0
        self.item_offset = 0

    def get_item_count(self) -> int:
        return len(self.items)

    def get_item_text(self, index: int) -> tuple[str, str]:
        if not self.items:
            return "", ""
        item = self.items[self._clamp(index)]
        return item.main_text, item.secondary_text

    def set_item_text(self, index: int, main_text: str, secondary_text: str) -> None:
        if not self.items:
            return
        item = self.items[self._clamp(index)]
        item.main_text = main_text
        item.secondary_text = secondary_text

    def set_item_enabled(self, index: int, enabled: bool) -> None:
        if not self.items:
            return
        item = self.items[self._clamp(index)]
        item.enabled = enabled and not item.is_divider
        if not self._selectable(self.current):
            self._settle()

    def find_items(self, main_search: str, secondary_search: str = "") -> list[int]:
        """Indices of items whose texts contain the search strings (case-insensitive)."""
        main_search = main_search.lower()
        secondary_search = secondary_search.lower()
        return [
            i
            for i, item in enumerate(self.items)
            if main_search in item.main_text.lower()
            and secondary_search in item.secondary_text.lower()
        ]

    # ------------------------------------------------------------------
    # Current item
    # ------------------------------------------------------------------

    def set_current_item(self, index: int) -> None:
        """Make *index* current.  Negative values count from the end; the
        index is clamped to the list."""
        if not self.items:
            return
        if index < 0:
            index += len(self.items)
        index = self._clamp(index)
        if not self._selectable(index):
            found = self._find(index, 1, wrap=False)
            if found is None:
                found = self._find(index, -1, wrap=False)
            if found is not None:
                index = found
        if index != self.current:
            self.current = index
            self._fire_changed()

    def get_current_item(self) -> int:
        return self.current

    def set_show_secondary_text(self, show: bool) -> None:
        self.show_secondary_text = show

    def set_wrap_around(self, wrap: bool) -> None:
        self.wrap_around = wrap

    def set_highlight_full_line(self, full: bool) -> None:
        self.highlight_full_line = full

    def set_selected_focus_only(self, focus_only: bool) -> None:
        self.selected_focus_only = focus_only

    def set_changed_func(self, fn: ItemCallback | None) -> None:
        self.changed_func = fn

    def set_selected_func(self, fn: ItemCallback | None) -> None:
        self.selected_func = fn

    def set_done_func(self, fn: Callable[[], None] | None) -> None:
        self.done_func = fn

    def _clamp(self, index: int) -> int:
        return max(0, min(index, len(self.items) - 1))

    def _selectable(self, index: int) -> bool:
        return 0 <= index < len(self.items) and self.items[index].enabled

    def _find(self, start: int, step: int, wrap: bool) -> int | None:
        """First selectable index from *start* (inclusive) moving by *step*."""
        count = len(self.items)
        index = start
        for _ in range(count):
            if wrap:
                index %= count
            elif not 0 <= index < count:
                return None
            if self._selectable(index):
                return index
            index += step
        return None

    def _settle(self) -> None:
        """Move the current item off a divider or disabled item."""
        if not self.items:
            return
        self.current = self._clamp(self.current)
        if self._selectable(self.current):
            return
        found = self._find(self.current, 1, wrap=False)
        if found is None:
            found = self._find(self.current, -1, wrap=False)
        if found is not None:
            self.current = found

    def _move(self, step: int) -> None:
        if not self.items:
            return
        target = self.current + step
        if self.wrap_around and abs(step) == 1:
            found = self._find(target, step, wrap=True)
        else:
            target = self._clamp(target)
            direction = 1 if step > 0 else -1
            found = self._find(target, direction, wrap=False)
            if found is None:
                found = self._find(target, -direction, wrap=False)
        if found is not None and found != self.current:
            self.current = found
            self._fire_changed()

    def _fire_changed(self) -> None:
        if self.changed_func is not None and self.items:
            item = self.items[self.current]
            self.changed_func(self.current, item.main_text, item.secondary_text, item.shortcut)

    def select(self, index: int) -> None:
        """Select *index* as if the user pressed Enter on it."""
        if not self._selectable(index):
            return
        if index != self.current:
            self.current = index
            self._fire_changed()
        item = self.items[index]
        if item.selected is not None:
            item.selected()
        if self.selected_func is not None:
            self.selected_func(index, item.main_text, item.secondary_text, item.shortcut)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _item_height(self) -> int:
        return 2 if self.show_secondary_text else 1

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        if inner.is_empty() or not self.items:
            return

        item_height = self._item_height()
        visible = max(1, inner.height // item_height)
        if self.current < self.item_offset:
            self.item_offset = self.current
        elif self.current >= self.item_offset + visible:
            self.item_offset = self.current - visible + 1
        self.item_offset = max(0, min(self.item_offset, len(self.items) - 1))

        shortcut_width = 4 if any(item.shortcut for item in self.items) else 0
        text_x = inner.x + shortcut_width
        text_width = inner.width - shortcut_width
        show_selection = self.has_focus() or not self.selected_focus_only

        y = inner.y
        for index in range(self.item_offset, len(self.items)):
            if y >= inner.bottom:
                break
            item = self.items[index]

            if item.is_divider:
                for x in range(inner.x, inner.right):
                    screen.set_content(x, y, self.theme.horizontal, self.divider_style)
                y += item_height
                continue

            if item.shortcut:
                screen.print_text(inner.x, y, f"({item.shortcut[0]})", shortcut_width, self.shortcut_style)

            main_style = self.main_style
            if not item.enabled:
                main_style = main_style.add(Attr.DIM)
            if index == self.current and show_selection:
                main_style = self.selected_style
                if self.highlight_full_line:
                    screen.fill(Rect(text_x, y, text_width, 1), " ", main_style)
            print_tagged(screen, text_x, y, item.main_text, text_width, main_style)

            if self.show_secondary_text and y + 1 < inner.bottom:
                print_tagged(screen, text_x, y + 1, item.secondary_text, text_width, self.secondary_style)
            y += item_height

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if not self.items:
            if event.matches("escape") and self.done_func is not None:
                self.done_func()
                return True
            return False

        if event.matches("down", "tab"):
            self._move(1)
        elif event.matches("up", "shift+tab"):
            self._move(-1)
        elif event.matches("home"):
            self._move(-self.current)
        elif event.matches("end"):
            self._move(len(self.items) - 1 - self.current)
        elif event.matches("pageDown"):
            self._move(_PAGE_STEP)
        elif event.matches("pageUp"):
            self._move(-_PAGE_STEP)
        elif event.matches("enter", "space"):
            self.select(self.current)
        elif event.matches("escape"):
            if self.done_func is not None:
                self.done_func()
        elif event.is_rune:
            for index, item in enumerate(self.items):
                if item.shortcut and item.shortcut == event.char:
                    self.select(index)
                    return True
            return False
        else:
            return False
        return True

    def index_at(self, x: int, y: int) -> int | None:
        """Index of the item drawn at screen position (*x*, *y*)."""
        inner = self.box.inner_rect()
        if not inner.contains(x, y):
            return None
        index = self.item_offset + (y - inner.y) // self._item_height()
        if index >= len(self.items):
            return None
        return index

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        if event.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            return True, None
        if event.action is MouseAction.LEFT_CLICK:
            index = self.index_at(event.x, event.y)
            if index is not None:
                self.select(index)
            return True, None
        if event.action is MouseAction.WHEEL_UP:
            self._move(-1)
            return True, None
        if event.action is MouseAction.WHEEL_DOWN:
            self._move(1)
            return True, None
        return False, None
