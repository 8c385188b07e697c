"""Tests for cellview.components.frame."""

from __future__ import annotations

from cellview.components import Frame
from cellview.layout import Rect
from cellview.primitive import Widget
from cellview.router import FocusRouter
from cellview.screen import ScreenBuffer
from cellview.utils import Align


class Fill(Widget):
    def __init__(self, char: str) -> None:
        super().__init__()
        self.char = char

    def draw(self, screen: ScreenBuffer) -> None:
        screen.fill(self.get_rect(), self.char)


def _draw(frame: Frame, width: int, height: int) -> list[str]:
    screen = ScreenBuffer(width, height)
    frame.set_rect(Rect(0, 0, width, height))
    frame.draw(screen)
    return screen.lines()


class TestFrame:
    """Header and footer text around a primitive."""

    def test_header_and_footer(self) -> None:
        frame = Frame(Fill("x"))
        frame.add_text("Title", header=True, align=Align.LEFT)
        frame.add_text("foot", header=False, align=Align.RIGHT)
        assert _draw(frame, 10, 8) == [
            "          ",
            " Title    ",
            "          ",
            " xxxxxxxx ",
            " xxxxxxxx ",
            "          ",
            "     foot ",
            "          ",
        ]

    def test_no_borders_no_text(self) -> None:
        frame = Frame(Fill("x"))
        frame.set_borders(0, 0, 0, 0, 0, 0)
        assert _draw(frame, 3, 2) == ["xxx", "xxx"]

    def test_headers_with_different_alignment_share_a_row(self) -> None:
        frame = Frame(None)
        frame.set_borders(0, 0, 0, 0, 0, 0)
        frame.add_text("L", header=True, align=Align.LEFT)
        frame.add_text("R", header=True, align=Align.RIGHT)
        assert _draw(frame, 5, 2)[0] == "L   R"

    def test_clear_text(self) -> None:
        frame = Frame(Fill("x"))
        frame.set_borders(0, 0, 1, 1, 0, 0)
        frame.add_text("T", header=True, align=Align.LEFT)
        frame.clear_text()
        assert _draw(frame, 2, 2) == ["xx", "xx"]

    def test_focus_delegates_to_primitive(self) -> None:
        inner = Fill("x")
        frame = Frame(inner)
        router = FocusRouter()
        router.set_root(frame)
        assert router.get_focus() is inner
        assert frame.has_focus()
        frame.set_primitive(None)
        assert frame.get_primitive() is None
