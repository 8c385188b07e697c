"""Frame: a primitive surrounded by header and footer text lines."""

from __future__ import annotations

from dataclasses import dataclass

from cellview.layout import Rect
from cellview.primitive import Container, Primitive, SetFocus, print_tagged
from cellview.screen import ScreenBuffer
from cellview.style import ColorLike, Style, Theme
from cellview.utils import Align

__all__ = ["Frame"]


@dataclass
class _FrameText:
    text: str
    header: bool
    align: Align
    style: Style


class Frame(Container):
    """Wraps *primitive* with lines of text above and below it.

    Header lines are stacked from the top, footer lines from the bottom;
    each alignment has its own stack, so a left and a right header can
    share a row.  The spacing around the text is set with
    :meth:`set_borders`.
    """

    def __init__(self, primitive: Primitive | None, theme: Theme | None = None) -> None:
        super().__init__(theme)
        self.primitive = primitive
        self.texts: list[_FrameText] = []
        self.top = 1
        self.bottom = 1
        self.header = 1
        self.footer = 1
        self.left = 1
        self.right = 1

    def set_primitive(self, primitive: Primitive | None) -> None:
        self.primitive = primitive

    def get_primitive(self) -> Primitive | None:
        return self.primitive

    def add_text(self, text: str, header: bool, align: Align, color: ColorLike = None) -> None:
        style = self.box.style
        if color is not None:
            style = style.foreground(color)
        self.texts.append(_FrameText(text, header, align, style))

    def clear_text(self) -> None:
        self.texts = []

    def set_borders(self, top: int, bottom: int, header: int, footer: int, left: int, right: int) -> None:
        """Spacing: *top*/*bottom* outside the text, *header*/*footer* between
        the text and the primitive, *left*/*right* on the sides."""
        self.top, self.bottom = max(0, top), max(0, bottom)
        self.header, self.footer = max(0, header), max(0, footer)
        self.left, self.right = max(0, left), max(0, right)

    def children(self) -> list[Primitive]:
        return [self.primitive] if self.primitive is not None else []

    def focus(self, delegate: SetFocus) -> None:
        if self.primitive is not None:
            delegate(self.primitive)
            return
        super().focus(delegate)

    def draw(self, screen: ScreenBuffer) -> None:
        super().draw(screen)
        inner = self.box.inner_rect().inset(self.top, self.bottom, self.left, self.right)
        if inner.is_empty():
            return

        top = {align: inner.y for align in Align}
        bottom = {align: inner.bottom - 1 for align in Align}
        header_used = footer_used = False
        with screen.clip(inner):
            for entry in self.texts:
                if entry.header:
                    y = top[entry.align]
                    if y > bottom[entry.align]:
                        continue
                    top[entry.align] += 1
                    header_used = True
                else:
                    y = bottom[entry.align]
                    if y < top[entry.align]:
                        continue
                    bottom[entry.align] -= 1
                    footer_used = True
                print_tagged(screen, inner.x, y, entry.text, inner.width, entry.style, entry.align, self.theme.ellipsis)

        if self.primitive is None:
            return
        content_top = max(top.values())
        content_bottom = min(bottom.values()) + 1
        if header_used:
            content_top += self.header
        if footer_used:
            content_bottom -= self.footer
        self.primitive.set_rect(Rect(inner.x, content_top, inner.width, content_bottom - content_top))
        self.primitive.draw(screen)
