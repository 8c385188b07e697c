"""Mouse input: SGR report decoding and click / double-click detection.

Terminals report raw button state (``ESC[<b;x;yM`` on press and motion,
``ESC[<b;x;ym`` on release).  :class:`MouseTracker` turns those reports
into :class:`MouseEvent` values with high-level :class:`MouseAction` kinds.
"""

from __future__ import annotations

import enum
import re
import time
from dataclasses import dataclass
from typing import Callable

__all__ = [
    "MouseAction",
    "MouseButton",
    "MouseEvent",
    "RawMouse",
    "parse_sgr_mouse",
    "is_mouse_sequence",
    "MouseTracker",
    "MOUSE_ENABLE",
    "MOUSE_DISABLE",
]

# Button-event tracking (1002) with all-motion (1003) in SGR encoding (1006).
MOUSE_ENABLE = "\x1b[?1000h\x1b[?1002h\x1b[?1003h\x1b[?1006h"
MOUSE_DISABLE = "\x1b[?1006l\x1b[?1003l\x1b[?1002l\x1b[?1000l"

_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")


class MouseAction(enum.Enum):
    MOVE = "move"
    LEFT_DOWN = "left-down"
    LEFT_UP = "left-up"
    LEFT_CLICK = "left-click"
    LEFT_DOUBLE_CLICK = "left-double-click"
    MIDDLE_DOWN = "middle-down"
    MIDDLE_UP = "middle-up"
    MIDDLE_CLICK = "middle-click"
    MIDDLE_DOUBLE_CLICK = "middle-double-click"
    RIGHT_DOWN = "right-down"
    RIGHT_UP = "right-up"
    RIGHT_CLICK = "right-click"
    RIGHT_DOUBLE_CLICK = "right-double-click"
    WHEEL_UP = "wheel-up"
    WHEEL_DOWN = "wheel-down"
    WHEEL_LEFT = "wheel-left"
    WHEEL_RIGHT = "wheel-right"


class MouseButton(enum.Enum):
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2


# button -> (down, up, click, double click)
_BUTTON_ACTIONS: dict[MouseButton, tuple[MouseAction, MouseAction, MouseAction, MouseAction]] = {
    MouseButton.LEFT: (
        MouseAction.LEFT_DOWN,
        MouseAction.LEFT_UP,
        MouseAction.LEFT_CLICK,
        MouseAction.LEFT_DOUBLE_CLICK,
    ),
    MouseButton.MIDDLE: (
        MouseAction.MIDDLE_DOWN,
        MouseAction.MIDDLE_UP,
        MouseAction.MIDDLE_CLICK,
        MouseAction.MIDDLE_DOUBLE_CLICK,
    ),
    MouseButton.RIGHT: (
        MouseAction.RIGHT_DOWN,
        MouseAction.RIGHT_UP,
        MouseAction.RIGHT_CLICK,
        MouseAction.RIGHT_DOUBLE_CLICK,
    ),
}

_WHEEL_ACTIONS = {
    64: MouseAction.WHEEL_UP,
    65: MouseAction.WHEEL_DOWN,
    66: MouseAction.WHEEL_LEFT,
    67: MouseAction.WHEEL_RIGHT,
}


@dataclass(frozen=True)
class MouseEvent:
    """A mouse action at a zero-based screen position."""

    x: int
    y: int
    action: MouseAction
    shift: bool = False
    alt: bool = False
    ctrl: bool = False


@dataclass(frozen=True)
class RawMouse:
    """One decoded SGR mouse report."""

    x: int
    y: int
    button: MouseButton | None
    pressed: bool
    motion: bool = False
    wheel: MouseAction | None = None
    shift: bool = False
    alt: bool = False
    ctrl: bool = False


def is_mouse_sequence(data: str) -> bool:
    return data.startswith("\x1b[<") and data[-1:] in ("M", "m")


def parse_sgr_mouse(data: str) -> RawMouse | None:
    """Decode an SGR (1006) mouse report, or return ``None``."""
    m = _SGR_MOUSE_RE.match(data)
    if m is None:
        return None
    code = int(m.group(1))
    x = int(m.group(2)) - 1
    y = int(m.group(3)) - 1
    pressed = m.group(4) == "M"
    shift = bool(code & 4)
    alt = bool(code & 8)
    ctrl = bool(code & 16)
    motion = bool(code & 32)
    base = code & ~(4 | 8 | 16 | 32)

    wheel = _WHEEL_ACTIONS.get(base)
    if wheel is not None:
        return RawMouse(x, y, None, pressed, motion, wheel, shift, alt, ctrl)
    button = MouseButton(base) if base in (0, 1, 2) else None
    return RawMouse(x, y, button, pressed, motion, None, shift, alt, ctrl)


class MouseTracker:
    """Derive down/up/click/double-click actions from raw reports.

    A click is a press followed by a release of the same button without
    the pointer moving in between.  A second click within
    *double_click_interval* seconds becomes a double click.
    """

    def __init__(
        self,
        double_click_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.double_click_interval = double_click_interval
        self._clock = clock
        self._down: dict[MouseButton, tuple[int, int]] = {}
        self._moved = False
        self._last_click: dict[MouseButton, float] = {}
        self._last_pos: tuple[int, int] | None = None

    def feed(self, raw: RawMouse) -> list[MouseEvent]:
        def event(action: MouseAction) -> MouseEvent:
            return MouseEvent(raw.x, raw.y, action, raw.shift, raw.alt, raw.ctrl)

        pos = (raw.x, raw.y)
        if raw.wheel is not None:
            return [event(raw.wheel)]

        events: list[MouseEvent] = []
        if pos != self._last_pos and self._down:
            self._moved = True
        self._last_pos = pos

        button = raw.button
        if button is None or (raw.motion and raw.pressed and button in self._down):
            events.append(event(MouseAction.MOVE))
            return events

        down, up, click, double = _BUTTON_ACTIONS[button]
        if raw.pressed:
            if button not in self._down:
                self._down[button] = pos
                self._moved = False
                events.append(event(down))
            return events

        start = self._down.pop(button, None)
        events.append(event(up))
        if start is not None and start == pos and not self._moved:
            now = self._clock()
            last = self._last_click.get(button)
            if last is not None and now - last <= self.double_click_interval:
                events.append(event(double))
                self._last_click.pop(button, None)
            else:
                events.append(event(click))
                self._last_click[button] = now
        return events
