"""Tests for cellview.router -- focus, modal layers and event dispatch."""

from __future__ import annotations

from cellview.components import Flex
from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Box, SetFocus, Widget
from cellview.router import FocusRouter


class KeyLog(Widget):
    """A leaf widget that records and consumes every key."""

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self.name = name
        self.keys: list[str] = []

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        self.keys.append(event.key)
        return True


class Unfocusable(Box):
    def is_focusable(self) -> bool:
        return False


# ---------------------------------------------------------------------------
# Focus
# ---------------------------------------------------------------------------


class TestFocus:
    """set_focus and delegation."""

    def test_set_root_focuses_root(self) -> None:
        router = FocusRouter()
        leaf = KeyLog()
        router.set_root(leaf)
        assert router.get_focus() is leaf
        assert leaf.has_focus()

    def test_container_delegates_focus(self) -> None:
        router = FocusRouter()
        flex = Flex()
        a, b = KeyLog("a"), KeyLog("b")
        flex.add_item(a)
        flex.add_item(b, focus=True)
        router.set_root(flex)
        assert router.get_focus() is b
        assert flex.has_focus()
        assert not flex.box.focused

    def test_previous_focus_is_blurred(self) -> None:
        router = FocusRouter()
        a, b = KeyLog("a"), KeyLog("b")
        router.set_focus(a)
        router.set_focus(b)
        assert not a.has_focus()
        assert b.has_focus()

    def test_unfocusable_node_is_ignored(self) -> None:
        router = FocusRouter()
        a = KeyLog()
        router.set_focus(a)
        router.set_focus(Unfocusable())
        router.set_focus(None)
        assert router.get_focus() is a

    def test_focus_callbacks(self) -> None:
        router = FocusRouter()
        events: list[str] = []
        box = Box()
        box.on_focus = lambda: events.append("focus")
        box.on_blur = lambda: events.append("blur")
        router.set_focus(box)
        router.set_focus(KeyLog())
        assert events == ["focus", "blur"]


# ---------------------------------------------------------------------------
# Modal layers
# ---------------------------------------------------------------------------


class TestModalLayers:
    """Pushing and popping layers restores focus."""

    def test_push_focuses_modal_and_pop_restores(self) -> None:
        router = FocusRouter()
        flex = Flex()
        a, b = KeyLog("a"), KeyLog("b")
        flex.add_item(a)
        flex.add_item(b, focus=True)
        router.set_root(flex)

        dialog = KeyLog("dialog")
        router.push_modal(dialog)
        assert router.get_focus() is dialog
        assert router.top() is dialog
        assert not b.has_focus()

        router.pop_modal()
        assert router.get_focus() is b
        assert router.top() is flex

    def test_focus_moves_inside_modal_then_returns(self) -> None:
        router = FocusRouter()
        root = Flex()
        a, b = KeyLog("a"), KeyLog("b")
        root.add_item(a)
        root.add_item(b, focus=True)
        router.set_root(root)

        dialog = Flex()
        first, second = KeyLog("first"), KeyLog("second")
        dialog.add_item(first, focus=True)
        dialog.add_item(second)
        router.push_modal(dialog)
        assert router.get_focus() is first
        router.set_focus(second)
        router.set_focus(first)
        router.set_focus(second)
        assert dialog.has_focus()

        router.pop_modal()
        assert router.get_focus() is b
        assert b.has_focus()
        assert not second.has_focus()
        assert not dialog.has_focus()

    def test_popping_lower_layer_hands_focus_upwards(self) -> None:
        router = FocusRouter()
        root = KeyLog("root")
        router.set_root(root)
        first, second = KeyLog("first"), KeyLog("second")
        router.push_modal(first)
        router.push_modal(second)

        router.pop_modal(first)
        assert router.get_focus() is second
        assert [layer.node for layer in router.layers] == [second]

        router.pop_modal(second)
        assert router.get_focus() is root

    def test_pushing_twice_moves_to_top(self) -> None:
        router = FocusRouter()
        router.set_root(KeyLog())
        a, b = KeyLog("a"), KeyLog("b")
        router.push_modal(a)
        router.push_modal(b)
        router.push_modal(a)
        assert [layer.node for layer in router.layers] == [b, a]
        assert router.get_focus() is a

    def test_pop_unknown_node_is_ignored(self) -> None:
        router = FocusRouter()
        router.set_root(KeyLog())
        modal = KeyLog()
        router.push_modal(modal)
        router.pop_modal(KeyLog())
        assert router.is_modal(modal)

    def test_pop_without_layers(self) -> None:
        router = FocusRouter()
        root = KeyLog()
        router.set_root(root)
        router.pop_modal()
        assert router.get_focus() is root

    def test_set_root_drops_layers(self) -> None:
        router = FocusRouter()
        router.set_root(KeyLog())
        router.push_modal(KeyLog())
        new_root = KeyLog()
        router.set_root(new_root)
        assert router.layers == []
        assert router.get_focus() is new_root


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestKeyDispatch:
    """The key routing chain."""

    def test_key_reaches_focused_leaf(self) -> None:
        router = FocusRouter()
        flex = Flex()
        a, b = KeyLog("a"), KeyLog("b")
        flex.add_item(a, focus=True)
        flex.add_item(b)
        router.set_root(flex)
        assert router.dispatch_key(KeyEvent.rune("x"))
        assert a.keys == ["x"]
        assert b.keys == []

    def test_global_capture_can_consume(self) -> None:
        router = FocusRouter()
        leaf = KeyLog()
        router.set_root(leaf)
        router.input_capture = lambda event: None
        assert router.dispatch_key(KeyEvent.rune("x"))
        assert leaf.keys == []

    def test_global_capture_can_replace(self) -> None:
        router = FocusRouter()
        leaf = KeyLog()
        router.set_root(leaf)
        router.input_capture = lambda event: KeyEvent("enter")
        router.dispatch_key(KeyEvent.rune("x"))
        assert leaf.keys == ["enter"]

    def test_node_capture_runs_before_widget(self) -> None:
        router = FocusRouter()
        leaf = KeyLog()
        leaf.box.input_capture = lambda event: None if event.key == "q" else event
        router.set_root(leaf)
        router.dispatch_key(KeyEvent.rune("q"))
        router.dispatch_key(KeyEvent.rune("w"))
        assert leaf.keys == ["w"]

    def test_modal_blocks_root(self) -> None:
        router = FocusRouter()
        root = KeyLog("root")
        router.set_root(root)
        dialog = KeyLog("dialog")
        router.push_modal(dialog)
        router.dispatch_key(KeyEvent("enter"))
        assert root.keys == []
        assert dialog.keys == ["enter"]

    def test_tab_cycles_through_container(self) -> None:
        router = FocusRouter()
        flex = Flex()
        flex.set_tab_navigation(True)
        a, b = Box(), Box()
        flex.add_item(a, focus=True)
        flex.add_item(b)
        router.set_root(flex)

        assert router.dispatch_key(KeyEvent("tab"))
        assert router.get_focus() is b
        assert router.dispatch_key(KeyEvent("tab"))
        assert router.get_focus() is a
        assert router.dispatch_key(KeyEvent("shift+tab"))
        assert router.get_focus() is b

    def test_unconsumed_key(self) -> None:
        router = FocusRouter()
        router.set_root(Box())
        assert not router.dispatch_key(KeyEvent("f5"))


# ---------------------------------------------------------------------------
# Mouse
# ---------------------------------------------------------------------------


class TestMouseDispatch:
    """Mouse routing and click-to-focus."""

    def _flex(self) -> tuple[FocusRouter, Box, Box]:
        router = FocusRouter()
        flex = Flex()
        a, b = Box(), Box()
        flex.add_item(a, focus=True)
        flex.add_item(b)
        flex.set_rect(Rect(0, 0, 20, 5))
        a.set_rect(Rect(0, 0, 10, 5))
        b.set_rect(Rect(10, 0, 10, 5))
        router.set_root(flex)
        return router, a, b

    def test_click_focuses_child(self) -> None:
        router, a, b = self._flex()
        assert router.dispatch_mouse(MouseEvent(12, 2, MouseAction.LEFT_DOWN))
        assert router.get_focus() is b
        assert not a.has_focus()

    def test_mouse_capture_can_consume(self) -> None:
        router, a, b = self._flex()
        router.mouse_capture = lambda event: None
        router.dispatch_mouse(MouseEvent(12, 2, MouseAction.LEFT_DOWN))
        assert router.get_focus() is a

    def test_event_outside_everything(self) -> None:
        router, a, _ = self._flex()
        assert not router.dispatch_mouse(MouseEvent(50, 50, MouseAction.LEFT_DOWN))
        assert router.get_focus() is a
