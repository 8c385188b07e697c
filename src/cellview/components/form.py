"""Form: input fields, checkboxes and drop-downs stacked above a row of buttons."""

from __future__ import annotations

from typing import Callable, Sequence, Union

from cellview.components.button import Button
from cellview.components.checkbox import Checkbox
from cellview.components.context_menu import ModalHost
from cellview.components.drop_down import DropDown
from cellview.components.input_field import InputField
from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.primitive import Container, Primitive, SetFocus
from cellview.screen import ScreenBuffer
from cellview.style import Theme
from cellview.tags import tagged_width
from cellview.utils import Align, align_offset

__all__ = ["Form", "FormItem"]

FormItem = Union[InputField, Checkbox, DropDown]

_BUTTON_GAP = 2


class Form(Container):
    """A vertical form.

    Tab, Down and Enter move to the next item or button, Shift+Tab and Up
    to the previous one (wrapping around).  Left and Right move between
    buttons.  Escape calls the cancel function.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.items: list[FormItem] = []
        self.buttons: list[Button] = []
        self.item_padding = 1
        self.button_align = Align.LEFT
        self.focus_index = 0
        self.cancel_func: Callable[[], None] | None = None
        self.box.set_padding(1, 1, 1, 1)

    # -- items --------------------------------------------------------------

    def add_input_field(
        self,
        label: str,
        value: str = "",
        field_width: int = 0,
        changed: Callable[[str], None] | None = None,
    ) -> InputField:
        field = InputField(self.theme)
        field.set_label(label)
        field.set_text(value)
        field.set_field_width(field_width)
        field.set_changed_func(changed)
        self.items.append(field)
        return field

    def add_checkbox(
        self,
        label: str,
        checked: bool = False,
        changed: Callable[[bool], None] | None = None,
    ) -> Checkbox:
        checkbox = Checkbox(self.theme)
        checkbox.set_label(label)
        checkbox.set_checked(checked)
        checkbox.set_changed_func(changed)
        self.items.append(checkbox)
        return checkbox

    def add_drop_down(
        self,
        label: str,
        options: Sequence[str],
        initial: int = -1,
        selected: Callable[[str, int], None] | None = None,
        host: ModalHost | None = None,
    ) -> DropDown:
        """Add a drop-down whose list opens through *host*."""
        drop_down = DropDown(host, self.theme)
        drop_down.set_label(label)
        drop_down.set_options(options, selected)
        drop_down.set_current_option(initial)
        self.items.append(drop_down)
        return drop_down

    def add_form_item(self, item: FormItem) -> None:
        self.items.append(item)

    def add_button(self, label: str, selected: Callable[[], None] | None = None) -> Button:
        button = Button(label, self.theme)
        button.set_selected_func(selected)
        self.buttons.append(button)
        return button

    def get_form_item(self, index: int) -> FormItem | None:
        """The item at *index*, clamped to the item list.  ``None`` if empty."""
        if not self.items:
            return None
        return self.items[max(0, min(index, len(self.items) - 1))]

    def get_form_item_count(self) -> int:
        return len(self.items)

    def get_form_item_by_label(self, label: str) -> FormItem | None:
        for item in self.items:
            if item.get_label() == label:
                return item
        return None

    def remove_form_item(self, index: int) -> None:
        if 0 <= index < len(self.items):
            del self.items[index]

    def get_button(self, index: int) -> Button | None:
        if not self.buttons:
            return None
        return self.buttons[max(0, min(index, len(self.buttons) - 1))]

    def get_button_count(self) -> int:
        return len(self.buttons)

    def get_button_index(self, label: str) -> int:
        for index, button in enumerate(self.buttons):
            if button.get_label() == label:
                return index
        return -1

    def remove_button(self, index: int) -> None:
        if 0 <= index < len(self.buttons):
            del self.buttons[index]

    def clear(self, include_buttons: bool = False) -> None:
        self.items = []
        if include_buttons:
            self.buttons = []
        self.focus_index = 0

    def children(self) -> list[Primitive]:
        return [*self.items, *self.buttons]

    # -- configuration ------------------------------------------------------

    def set_item_padding(self, padding: int) -> None:
        self.item_padding = max(0, padding)

    def set_buttons_align(self, align: Align) -> None:
        self.button_align = align

    def set_cancel_func(self, fn: Callable[[], None] | None) -> None:
        self.cancel_func = fn

    def set_focus_index(self, index: int) -> None:
        """Index into items followed by buttons; clamped."""
        count = len(self.items) + len(self.buttons)
        self.focus_index = max(0, min(index, count - 1))

    # -- drawing ------------------------------------------------------------

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect()

        label_width = max((tagged_width(item.get_label()) for item in self.items), default=0)
        if label_width:
            label_width += 1

        y = inner.y
        with screen.clip(inner):
            for item in self.items:
                item.set_label_width(label_width)
                if y >= inner.bottom:
                    item.set_rect(Rect(inner.x, y, 0, 0))
                    continue
                item.set_rect(Rect(inner.x, y, inner.width, 1))
                item.draw(screen)
                y += 1 + self.item_padding

            if not self.buttons:
                return
            widths = [tagged_width(b.get_label()) + 4 for b in self.buttons]
            total = sum(widths) + _BUTTON_GAP * (len(widths) - 1)
            x = inner.x + align_offset(total, inner.width, self.button_align)
            for button, width in zip(self.buttons, widths):
                if y >= inner.bottom:
                    button.set_rect(Rect(x, y, 0, 0))
                    continue
                button.set_rect(Rect(x, y, width, 1))
                button.draw(screen)
                x += width + _BUTTON_GAP

    # -- focus and keys -----------------------------------------------------

    def focus(self, delegate: SetFocus) -> None:
        targets = self.children()
        if not targets:
            super().focus(delegate)
            return
        self.focus_index = max(0, min(self.focus_index, len(targets) - 1))
        delegate(targets[self.focus_index])

    def default_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("escape"):
            if self.cancel_func is not None:
                self.cancel_func()
                return True
            return False

        targets = self.children()
        if not targets:
            return False
        current = self.focused_child()
        index = targets.index(current) if current in targets else self.focus_index
        on_button = index >= len(self.items)

        if event.matches("tab", "down", "enter"):
            index = (index + 1) % len(targets)
        elif event.matches("shift+tab", "up"):
            index = (index - 1) % len(targets)
        elif event.matches("right") and on_button:
            index = min(index + 1, len(targets) - 1)
        elif event.matches("left") and on_button:
            index = max(index - 1, len(self.items))
        else:
            return False
        self.focus_index = index
        set_focus(targets[index])
        return True
