"""Flex: lays out children in a single row or column."""

from __future__ import annotations

from dataclasses import dataclass

from cellview.keys import KeyEvent
from cellview.layout import Direction, FlexSize, flex_layout
from cellview.primitive import Container, Primitive, SetFocus
from cellview.screen import ScreenBuffer
from cellview.style import Theme

__all__ = ["Flex"]


@dataclass
class FlexItem:
    item: Primitive | None
    fixed_size: int = 0
    proportion: int = 1
    focus: bool = False


class Flex(Container):
    """Children side by side (``Direction.COLUMN``) or stacked (``Direction.ROW``).

    An item with a positive fixed size gets exactly that many cells (as
    long as there is room); the others share the rest by proportion.  An
    item of ``None`` is empty space.

    With ``tab_navigation`` enabled, Tab and Shift+Tab that no child
    consumes move the focus between the focusable children.
    """

    def __init__(self, direction: Direction = Direction.COLUMN, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.direction = direction
        self.items: list[FlexItem] = []
        self.tab_navigation = False

    def set_direction(self, direction: Direction) -> None:
        self.direction = direction

    def set_tab_navigation(self, enabled: bool) -> None:
        self.tab_navigation = enabled

    def add_item(
        self,
        item: Primitive | None,
        fixed_size: int = 0,
        proportion: int = 1,
        focus: bool = False,
    ) -> None:
        """Append *item*.  ``focus`` marks it as the child that receives
        focus when the flex itself is focused."""
        self.items.append(FlexItem(item, fixed_size, proportion, focus))

    def remove_item(self, item: Primitive) -> None:
        self.items = [i for i in self.items if i.item is not item]

    def resize_item(self, item: Primitive, fixed_size: int, proportion: int) -> None:
        for entry in self.items:
            if entry.item is item:
                entry.fixed_size = fixed_size
                entry.proportion = proportion

    def clear(self) -> None:
        self.items = []

    def get_item_count(self) -> int:
        return len(self.items)

    def get_item(self, index: int) -> Primitive | None:
        """The item at *index*, clamped to the item list.  ``None`` if empty."""
        if not self.items:
            return None
        index = max(0, min(index, len(self.items) - 1))
        return self.items[index].item

    def children(self) -> list[Primitive]:
        return [entry.item for entry in self.items if entry.item is not None]

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()
        rects = flex_layout(
            inner,
            self.direction,
            [FlexSize(entry.fixed_size, entry.proportion) for entry in self.items],
        )
        focused: Primitive | None = None
        with screen.clip(inner):
            for entry, rect in zip(self.items, rects):
                if entry.item is None:
                    continue
                entry.item.set_rect(rect)
                if entry.item.has_focus():
                    focused = entry.item
                    continue
                entry.item.draw(screen)
            # The focused child is drawn last so its border wins where rects touch.
            if focused is not None:
                focused.draw(screen)

    def focus(self, delegate: SetFocus) -> None:
        for entry in self.items:
            if entry.item is not None and entry.focus:
                delegate(entry.item)
                return
        super().focus(delegate)

    def default_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if self.tab_navigation:
            return self.cycle_focus(event, set_focus)
        return False
