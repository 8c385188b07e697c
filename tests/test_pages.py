"""Tests for cellview.components.pages -- named, stacked pages."""

from __future__ import annotations

import logging

import pytest

from cellview.components import Pages
from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.primitive import SetFocus, Widget
from cellview.router import FocusRouter
from cellview.screen import ScreenBuffer


class Fill(Widget):
    """Fills its rect with one character and records keys."""

    def __init__(self, char: str) -> None:
        super().__init__()
        self.char = char
        self.keys: list[str] = []

    def draw(self, screen: ScreenBuffer) -> None:
        screen.fill(self.get_rect(), self.char)

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        self.keys.append(event.key)
        return True


@pytest.fixture
def pages() -> tuple[Pages, Fill, Fill]:
    pages = Pages()
    a, b = Fill("a"), Fill("b")
    pages.add_page("a", a)
    pages.add_page("b", b, visible=False)
    return pages, a, b


class TestPageManagement:
    """Adding, removing and reordering pages."""

    def test_names(self, pages) -> None:
        widget, _, _ = pages
        assert widget.get_page_count() == 2
        assert widget.get_page_names() == ["a", "b"]
        assert widget.get_page_names(visible_only=True) == ["a"]
        assert widget.has_page("b")
        assert not widget.has_page("c")

    def test_same_name_replaces(self, pages) -> None:
        widget, _, _ = pages
        c = Fill("c")
        widget.add_page("a", c)
        assert widget.get_page_names() == ["b", "a"]
        assert widget.get_front_page() == ("a", c)

    def test_switch_to_page(self, pages) -> None:
        widget, _, b = pages
        widget.switch_to_page("b")
        assert widget.get_page_names(visible_only=True) == ["b"]
        assert widget.get_front_page() == ("b", b)

    def test_switch_to_unknown_page_is_ignored(self, pages) -> None:
        widget, a, _ = pages
        widget.switch_to_page("zzz")
        assert widget.get_front_page() == ("a", a)

    def test_show_and_hide(self, pages) -> None:
        widget, a, b = pages
        widget.show_page("b")
        assert widget.get_page_names(visible_only=True) == ["a", "b"]
        widget.hide_page("b")
        assert widget.get_front_page() == ("a", a)
        widget.hide_page("a")
        assert widget.get_front_page() is None

    def test_send_to_front_and_back(self, pages) -> None:
        widget, _, _ = pages
        widget.send_to_front("a")
        assert widget.get_page_names() == ["b", "a"]
        widget.send_to_back("a")
        assert widget.get_page_names() == ["a", "b"]

    def test_add_and_switch(self, pages) -> None:
        widget, _, _ = pages
        c = Fill("c")
        widget.add_and_switch_to_page("c", c)
        assert widget.get_page_names(visible_only=True) == ["c"]

    def test_changed_func(self, pages) -> None:
        widget, _, _ = pages
        calls: list[bool] = []
        widget.set_changed_func(lambda: calls.append(True))
        widget.show_page("b")
        widget.remove_page("b")
        assert len(calls) == 2

    def test_remove_unknown_page(self, pages, caplog) -> None:
        widget, _, _ = pages
        calls: list[bool] = []
        widget.set_changed_func(lambda: calls.append(True))
        with caplog.at_level(logging.DEBUG, logger="cellview.components.pages"):
            widget.remove_page("zzz")
        assert calls == []
        assert "zzz" in caplog.text


class TestPagesFocus:
    """The front page receives focus and keys."""

    def test_focus_goes_to_front_page(self, pages) -> None:
        widget, a, _ = pages
        router = FocusRouter()
        router.set_root(widget)
        assert router.get_focus() is a

    def test_switch_moves_focus(self, pages) -> None:
        widget, _, b = pages
        router = FocusRouter()
        router.set_root(widget)
        widget.switch_to_page("b")
        assert router.get_focus() is b
        router.dispatch_key(KeyEvent("enter"))
        assert b.keys == ["enter"]

    def test_hiding_front_page_refocuses(self, pages) -> None:
        widget, a, b = pages
        router = FocusRouter()
        router.set_root(widget)
        widget.show_page("b")
        widget.send_to_front("b")
        assert router.get_focus() is b
        widget.hide_page("b")
        assert router.get_focus() is a

    def test_unfocused_pages_leave_focus_alone(self, pages) -> None:
        widget, _, b = pages
        other = Fill("x")
        router = FocusRouter()
        router.set_root(widget)
        router.set_focus(other)
        widget.switch_to_page("b")
        assert router.get_focus() is other


class TestPagesDrawing:
    """Visible pages are drawn back to front."""

    def test_front_page_drawn_last(self, pages) -> None:
        widget, _, _ = pages
        widget.show_page("b")
        screen = ScreenBuffer(3, 2)
        widget.set_rect(Rect(0, 0, 3, 2))
        widget.draw(screen)
        assert screen.lines() == ["bbb", "bbb"]

    def test_page_without_resize_keeps_rect(self) -> None:
        widget = Pages()
        back, dialog = Fill("."), Fill("#")
        dialog.set_rect(Rect(1, 1, 2, 1))
        widget.add_page("back", back)
        widget.add_page("dialog", dialog, resize=False)
        screen = ScreenBuffer(4, 3)
        widget.set_rect(Rect(0, 0, 4, 3))
        widget.draw(screen)
        assert screen.lines() == ["....", ".##.", "...."]

    def test_hidden_page_not_drawn(self, pages) -> None:
        widget, _, _ = pages
        screen = ScreenBuffer(2, 1)
        widget.set_rect(Rect(0, 0, 2, 1))
        widget.draw(screen)
        assert screen.lines() == ["aa"]
