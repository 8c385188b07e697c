"""Focus tracking, modal layers, and key/mouse dispatch.

The router owns a stack of layers: the root layer at the bottom and any
number of modal layers on top.  Only the topmost layer receives input.
Each modal layer remembers which node had focus when it was pushed and
hands focus back to it when it is popped.

Keys travel through this chain, stopping at the first consumer:

1. the global input capture (may replace or swallow the event)
2. the topmost layer's node, which forwards the event down its focus path
   and falls back to container defaults (e.g. Tab cycling) on the way up
3. if the focus is not inside the topmost layer, the focused node itself

Mouse events go to the global mouse capture, then to the node that
captured the mouse on a previous event (drag), then to the topmost layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cellview.keys import KeyEvent
from cellview.layout import OverlayOptions
from cellview.mouse import MouseEvent
from cellview.primitive import InputCapture, MouseCapture, Primitive

__all__ = ["Layer", "FocusRouter"]

logger = logging.getLogger(__name__)


@dataclass
class Layer:
    node: Primitive
    options: OverlayOptions | None = None
    return_focus: Primitive | None = None


class FocusRouter:
    """Keeps the focus and routes input events."""

    def __init__(self) -> None:
        self._root: Primitive | None = None
        self._layers: list[Layer] = []
        self._focus: Primitive | None = None
        self._mouse_target: Primitive | None = None
        self.input_capture: InputCapture | None = None
        self.mouse_capture: MouseCapture | None = None

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    @property
    def root(self) -> Primitive | None:
        return self._root

    @property
    def layers(self) -> list[Layer]:
        """Modal layers, bottom to top (the root is not included)."""
        return list(self._layers)

    def top(self) -> Primitive | None:
        """The node of the topmost layer (the root if there are no modals)."""
        if self._layers:
            return self._layers[-1].node
        return self._root

    def set_root(self, node: Primitive | None) -> None:
        """Replace the base layer, drop all modal layers, focus *node*."""
        self._root = node
        self._layers.clear()
        self._mouse_target = None
        if node is not None:
            self.set_focus(node)

    def push_modal(self, node: Primitive, options: OverlayOptions | None = None) -> None:
        """Show *node* above everything else and give it focus."""
        if self.is_modal(node):
            self.pop_modal(node)
        self._layers.append(Layer(node, options, self._focus))
        self._mouse_target = None
        logger.debug("pushed modal %s (depth %d)", type(node).__name__, len(self._layers))
        self.set_focus(node)

    def pop_modal(self, node: Primitive | None = None) -> None:
        """Remove *node* (default: the topmost modal) from the layer stack.

        Removing the topmost layer returns focus to the node that had it
        when that layer was pushed.  Removing a lower layer passes its
        saved focus to the layer directly above it.
        """
        if not self._layers:
            return
        if node is None:
            index = len(self._layers) - 1
        else:
            index = next((i for i, layer in enumerate(self._layers) if layer.node is node), -1)
            if index < 0:
                return

        layer = self._layers.pop(index)
        self._mouse_target = None
        logger.debug("popped modal %s (depth %d)", type(layer.node).__name__, len(self._layers))
        if index < len(self._layers):
            self._layers[index].return_focus = layer.return_focus
            return

        target = layer.return_focus
        if target is None or not target.is_focusable():
            target = self.top()
        if target is not None:
            self.set_focus(target)

    def is_modal(self, node: Primitive) -> bool:
        return any(layer.node is node for layer in self._layers)

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def get_focus(self) -> Primitive | None:
        return self._focus

    def set_focus(self, node: Primitive | None) -> None:
        """Focus *node*; ignored if it is ``None`` or not focusable.

        The node may delegate focus to a descendant by calling the
        delegate it is given.  Callers must only focus nodes inside the
        topmost layer.
        """
        if node is None or not node.is_focusable():
            return
        previous = self._focus
        self._focus = node
        if previous is not None and previous is not node:
            previous.blur()
        node.focus(self.set_focus)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def capture_key(self, event: KeyEvent) -> KeyEvent | None:
        """Run the global input capture.  ``None`` means consumed."""
        if self.input_capture is None:
            return event
        return self.input_capture(event)

    def deliver_key(self, event: KeyEvent) -> bool:
        """Deliver *event* to the topmost layer (skipping global capture)."""
        top = self.top()
        if top is not None and top.has_focus():
            return top.handle_key(event, self.set_focus)
        if self._focus is not None:
            return self._focus.handle_key(event, self.set_focus)
        return False

    def dispatch_key(self, event: KeyEvent) -> bool:
        """Route *event* through the full chain.  Returns ``True`` if consumed."""
        captured = self.capture_key(event)
        if captured is None:
            return True
        return self.deliver_key(captured)

    # ------------------------------------------------------------------
    # Mouse
    # ------------------------------------------------------------------

    @property
    def mouse_target(self) -> Primitive | None:
        return self._mouse_target

    def dispatch_mouse(self, event: MouseEvent) -> bool:
        """Route a mouse event.  Returns ``True`` if consumed."""
        if self.mouse_capture is not None:
            captured = self.mouse_capture(event)
            if captured is None:
                return True
            event = captured

        target = self._mouse_target if self._mouse_target is not None else self.top()
        if target is None:
            return False
        consumed, capture = target.handle_mouse(event, self.set_focus)
        self._mouse_target = capture
        return consumed
