"""Modal: a centered message with a row of buttons."""

from __future__ import annotations

from typing import Callable

from cellview.components.form import Form
from cellview.layout import Rect
from cellview.primitive import Container, Primitive, SetFocus
from cellview.screen import ScreenBuffer
from cellview.style import Style, Theme
from cellview.tags import parse_tags, tagged_width
from cellview.utils import Align, split_lines, wrap_runes

__all__ = ["Modal"]


class Modal(Container):
    """Message box meant to be shown with ``Application.show_modal``.

    The modal is given the whole screen and centers its frame inside it.
    ``done_func(index, label)`` is called with the selected button, or with
    ``(-1, "")`` when the modal is cancelled with Escape.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        t = self.theme
        self.text = ""
        self.text_style = Style(fg=t.primary_text, bg=t.contrast_background)
        self.done_func: Callable[[int, str], None] | None = None
        self._area = Rect(0, 0, 0, 0)

        self.box.set_border(True)
        self.box.set_background(t.contrast_background)

        self.form = Form(theme)
        self.form.box.set_padding(0, 0, 0, 0)
        self.form.box.set_background(t.contrast_background)
        self.form.set_buttons_align(Align.CENTER)
        self.form.set_cancel_func(lambda: self._done(-1, ""))

    def set_text(self, text: str) -> None:
        self.text = text

    def set_text_color(self, color: str) -> None:
        self.text_style = self.text_style.foreground(color)

    def add_buttons(self, labels: list[str]) -> None:
        for label in labels:
            index = self.form.get_button_count()
            self.form.add_button(label, lambda i=index, lbl=label: self._done(i, lbl))

    def clear_buttons(self) -> None:
        self.form.clear(include_buttons=True)

    def set_focus(self, index: int) -> None:
        """Make button *index* the one focused when the modal opens."""
        self.form.set_focus_index(index)

    def set_done_func(self, fn: Callable[[int, str], None] | None) -> None:
        self.done_func = fn

    def _done(self, index: int, label: str) -> None:
        if self.done_func is not None:
            self.done_func(index, label)

    def children(self) -> list[Primitive]:
        return [self.form]

    def focus(self, delegate: SetFocus) -> None:
        delegate(self.form)

    def set_rect(self, rect: Rect) -> None:
        self._area = rect
        self.box.rect = rect

    def draw(self, screen: ScreenBuffer) -> None:
        area = self._area
        buttons_width = sum(tagged_width(b.get_label()) + 4 for b in self.form.buttons)
        buttons_width += 2 * max(0, len(self.form.buttons) - 1)
        width = min(area.width, max(area.width // 3, buttons_width + 4))

        runes = parse_tags(self.text, self.text_style).runes
        lines = []
        for line in split_lines(runes):
            lines.extend(wrap_runes(line, max(1, width - 4)))
        height = min(area.height, len(lines) + 5)

        frame = Rect(
            area.x + (area.width - width) // 2,
            area.y + (area.height - height) // 2,
            width,
            height,
        )
        self.box.rect = frame
        super().draw(screen)

        inner = frame.inset(2, 1, 2, 2)
        with screen.clip(frame.inset(1, 1, 1, 1)):
            for offset, line in enumerate(lines):
                if inner.y + offset >= frame.bottom - 3:
                    break
                screen.print_runes(inner.x, inner.y + offset, line, inner.width, Align.CENTER)
            self.form.set_rect(Rect(frame.x + 1, frame.bottom - 2, frame.width - 2, 1))
            self.form.draw(screen)
