"""InputField: a single-line text editor with a label."""

from __future__ import annotations

from typing import Callable

import grapheme

from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import Style, Theme
from cellview.tags import tagged_width
from cellview.utils import char_width, is_whitespace_char

__all__ = ["InputField"]


class InputField(Widget):
    """Label followed by an editable field.

    The text is edited as a sequence of grapheme clusters, so the cursor
    never lands inside a combined character.  ``field_width`` of 0 makes
    the field take all remaining width.  With a ``mask_char`` every
    character is displayed as that character.
    """

    def __init__(self, theme: Theme | None = None) -> None:
        super().__init__(theme)
        t = self.theme
        self.label = ""
        self.label_width = 0
        self.placeholder = ""
        self.field_width = 0
        self.mask_char = ""
        self._chars: list[str] = []
        self.cursor = 0
        self._scroll = 0

        self.label_style = Style(fg=t.secondary_text, bg=t.background)
        self.field_style = Style(fg=t.primary_text, bg=t.contrast_background)
        self.placeholder_style = Style(fg=t.contrast_secondary_text, bg=t.contrast_background)

        self.changed_func: Callable[[str], None] | None = None
        self.done_func: Callable[[str], None] | None = None

    # -- configuration ------------------------------------------------------

    def set_label(self, label: str) -> None:
        self.label = label

    def get_label(self) -> str:
        return self.label

    def set_label_width(self, width: int) -> None:
        self.label_width = max(0, width)

    def set_placeholder(self, placeholder: str) -> None:
        self.placeholder = placeholder

    def set_field_width(self, width: int) -> None:
        self.field_width = max(0, width)

    def get_field_width(self) -> int:
        return self.field_width

    def set_mask_character(self, mask: str) -> None:
        self.mask_char = mask[:1]

    def set_changed_func(self, fn: Callable[[str], None] | None) -> None:
        self.changed_func = fn

    def set_done_func(self, fn: Callable[[str], None] | None) -> None:
        """*fn* receives the key (enter, escape, tab, shift+tab) that ended editing."""
        self.done_func = fn

    # -- text ---------------------------------------------------------------

    def set_text(self, text: str) -> None:
        self._chars = list(grapheme.graphemes(text))
        self.cursor = len(self._chars)
        self._changed()

    def get_text(self) -> str:
        return "".join(self._chars)

    def _changed(self) -> None:
        if self.changed_func is not None:
            self.changed_func(self.get_text())

    def _insert(self, text: str) -> None:
        chars = [c for c in grapheme.graphemes(text) if c not in ("\n", "\r", "\r\n")]
        if not chars:
            return
        self._chars[self.cursor : self.cursor] = chars
        self.cursor += len(chars)
        self._changed()

    def _delete(self, start: int, end: int) -> None:
        start, end = max(0, start), min(len(self._chars), end)
        if start >= end:
            return
        del self._chars[start:end]
        self.cursor = start
        self._changed()

    def _word_start(self) -> int:
        pos = self.cursor
        while pos > 0 and is_whitespace_char(self._chars[pos - 1]):
            pos -= 1
        while pos > 0 and not is_whitespace_char(self._chars[pos - 1]):
            pos -= 1
        return pos

    def _word_end(self) -> int:
        pos = self.cursor
        n = len(self._chars)
        while pos < n and is_whitespace_char(self._chars[pos]):
            pos += 1
        while pos < n and not is_whitespace_char(self._chars[pos]):
            pos += 1
        return pos

    # -- drawing ------------------------------------------------------------

    def _field_rect(self) -> Rect:
        inner = self.box.inner_rect()
        label_width = self.label_width or tagged_width(self.label)
        x = inner.x + label_width
        width = inner.right - x
        if self.field_width > 0:
            width = min(width, self.field_width)
        return Rect(x, inner.y, width, 1 if inner.height > 0 else 0)

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
        screen.fill(field, " ", self.field_style)

        if not self._chars and self.placeholder:
            print_tagged(screen, field.x, field.y, self.placeholder, field.width, self.placeholder_style)
        else:
            shown = [self.mask_char or c for c in self._chars]
            widths = [char_width(c) for c in shown]
            # Keep the cursor inside the field.
            self._scroll = min(self._scroll, self.cursor)
            while sum(widths[self._scroll : self.cursor]) >= field.width and self._scroll < self.cursor:
                self._scroll += 1
            x = field.x
            for c, w in zip(shown[self._scroll :], widths[self._scroll :]):
                if x + w > field.right:
                    break
                screen.set_content(x, field.y, c, self.field_style)
                x += w

        if self.has_focus():
            offset = sum(char_width(self.mask_char or c) for c in self._chars[self._scroll : self.cursor])
            screen.cursor = (min(field.x + offset, field.right - 1), field.y)

    # -- input --------------------------------------------------------------

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        if event.matches("enter", "escape", "tab", "shift+tab"):
            if self.done_func is not None:
                self.done_func(event.key)
                return True
            return False

        if event.matches("paste") or event.is_rune:
            self._insert(event.char)
        elif event.matches("backspace"):
            self._delete(self.cursor - 1, self.cursor)
        elif event.matches("delete", "ctrl+d"):
            self._delete(self.cursor, self.cursor + 1)
        elif event.matches("left", "ctrl+b"):
            self.cursor = max(0, self.cursor - 1)
        elif event.matches("right", "ctrl+f"):
            self.cursor = min(len(self._chars), self.cursor + 1)
        elif event.matches("home", "ctrl+a"):
            self.cursor = 0
        elif event.matches("end", "ctrl+e"):
            self.cursor = len(self._chars)
        elif event.matches("alt+left", "ctrl+left", "alt+b"):
            self.cursor = self._word_start()
        elif event.matches("alt+right", "ctrl+right", "alt+f"):
            self.cursor = self._word_end()
        elif event.matches("ctrl+k"):
            self._delete(self.cursor, len(self._chars))
        elif event.matches("ctrl+u"):
            self._delete(0, self.cursor)
        elif event.matches("ctrl+w", "alt+backspace"):
            self._delete(self._word_start(), self.cursor)
        else:
            return False
        return True

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        if not self.in_rect(event):
            return False, None
        if event.action is MouseAction.LEFT_DOWN:
            set_focus(self)
            field = self._field_rect()
            if field.contains(event.x, event.y):
                col = field.x
                pos = self._scroll
                while pos < len(self._chars) and col + char_width(self.mask_char or self._chars[pos]) <= event.x:
                    col += char_width(self.mask_char or self._chars[pos])
                    pos += 1
                self.cursor = pos
            return True, None
        return False, None
