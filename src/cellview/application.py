"""The application: draw loop, update queue, and input dispatch.

One asyncio event loop owns the screen.  Terminal input, resize
notifications, queued updates and redraw requests are all handled on that
loop, one at a time, so widget state is never touched by two parties at
once.  Other threads talk to the application only through
:meth:`Application.queue_update`, :meth:`Application.queue_update_draw`,
:meth:`Application.request_draw` and :meth:`Application.stop`.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from cellview.config import AppConfig, configure_logging
from cellview.errors import CellviewError
from cellview.keys import KeyEvent
from cellview.layout import OverlayOptions, resolve_overlay_rect
from cellview.mouse import MouseTracker, is_mouse_sequence, parse_sgr_mouse
from cellview.primitive import InputCapture, MouseCapture, Primitive
from cellview.router import FocusRouter
from cellview.screen import Screen, ScreenBuffer
from cellview.terminal import PASTE_PREFIX, ProcessTerminal, Terminal
from cellview.updates import UpdateQueue

__all__ = ["Application"]

logger = logging.getLogger(__name__)


class Application:
    """Owns the terminal, the widget tree, and the draw loop.

    Typical use::

        app = Application()
        app.set_root(flex)
        app.run()          # blocks until app.stop()
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        terminal: Terminal | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.config = config if config is not None else AppConfig.from_env()
        self.terminal: Terminal = (
            terminal
            if terminal is not None
            else ProcessTerminal(
                write_log=self.config.write_log,
                escape_timeout=self.config.escape_timeout_ms / 1000,
            )
        )
        self.router = FocusRouter()
        self.screen: Screen | None = None

        self._updates = UpdateQueue()
        self._lock = threading.Lock()
        self._draw_requested = False
        self._wakeup_pending = False
        self._fullscreen = True

        # Lifecycle
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: int | None = None
        self._stop_event: asyncio.Event | None = None
        self._stop_requested = threading.Event()
        self._error: BaseException | None = None

        self._mouse_enabled = self.config.mouse
        self._mouse_tracker = MouseTracker(self.config.double_click_ms / 1000)
        self._log_handler: logging.Handler | None = None

        # Hooks. before_draw may return True to skip drawing the widgets.
        self.before_draw: Callable[[ScreenBuffer], bool] | None = None
        self.after_draw: Callable[[ScreenBuffer], None] | None = None

        # Metrics
        self.draw_count = 0

    # ------------------------------------------------------------------
    # Widget tree and focus
    # ------------------------------------------------------------------

    def set_root(self, node: Primitive | None, fullscreen: bool = True) -> None:
        """Make *node* the root of the widget tree and focus it.

        With *fullscreen* the root is resized to the screen on every draw;
        otherwise its own rectangle is kept.  Removes all modal layers.
        """
        self.router.set_root(node)
        self._fullscreen = fullscreen
        self.request_draw()

    def get_root(self) -> Primitive | None:
        return self.router.root

    def set_focus(self, node: Primitive | None) -> None:
        self.router.set_focus(node)
        self.request_draw()

    def get_focus(self) -> Primitive | None:
        return self.router.get_focus()

    def show_modal(self, node: Primitive, options: OverlayOptions | None = None) -> None:
        """Show *node* above the root and give it focus.

        Without *options* the layer covers the whole screen and the node
        positions its own content.
        """
        self.router.push_modal(node, options)
        self.request_draw()

    def hide_modal(self, node: Primitive | None = None) -> None:
        self.router.pop_modal(node)
        self.request_draw()

    def set_input_capture(self, capture: InputCapture | None) -> None:
        """Install a function that sees every key before any widget."""
        self.router.input_capture = capture

    def set_mouse_capture(self, capture: MouseCapture | None) -> None:
        self.router.mouse_capture = capture

    def set_before_draw(self, hook: Callable[[ScreenBuffer], bool] | None) -> None:
        self.before_draw = hook

    def set_after_draw(self, hook: Callable[[ScreenBuffer], None] | None) -> None:
        self.after_draw = hook

    def enable_mouse(self, enabled: bool) -> None:
        self._mouse_enabled = enabled
        if self._loop is not None:
            self.terminal.enable_mouse(enabled)

    @property
    def running(self) -> bool:
        return self._loop is not None

    # ------------------------------------------------------------------
    # Thread-safe entry points
    # ------------------------------------------------------------------

    def queue_update(self, fn: Callable[[], Any]) -> None:
        """Run *fn* on the draw loop.  Safe to call from any thread.

        Closures run in the order they were queued, each exactly once,
        never while the screen is being drawn.
        """
        self._updates.put(fn)
        self._wake()

    def queue_update_draw(self, fn: Callable[[], Any]) -> None:
        """Like :meth:`queue_update`, then redraw."""

        def update() -> None:
            fn()
            with self._lock:
                self._draw_requested = True

        self.queue_update(update)

    def request_draw(self) -> None:
        """Ask for a redraw on the next loop iteration.  Thread-safe."""
        with self._lock:
            self._draw_requested = True
        self._wake()

    def stop(self) -> None:
        """Stop the loop after the update or event in flight.  Thread-safe."""
        self._stop_requested.set()
        loop = self._loop
        stop_event = self._stop_event
        if loop is None or stop_event is None:
            return
        if self._in_loop_thread():
            stop_event.set()
            return
        try:
            loop.call_soon_threadsafe(stop_event.set)
        except RuntimeError:
            logger.debug("stop() after the event loop closed")

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Start the application and block until :meth:`stop` is called.

        Re-raises any exception that stopped the loop, after the terminal
        has been restored.
        """
        if self._log_handler is None:
            self._log_handler = configure_logging(self.config)
        asyncio.run(self.run_async())

    async def run_async(self) -> None:
        """Coroutine form of :meth:`run` for callers that own the loop."""
        if self._loop is not None:
            raise CellviewError("application is already running")

        loop = asyncio.get_running_loop()
        self._error = None
        self._stop_requested.clear()
        self._stop_event = asyncio.Event()

        self.screen = Screen(self.terminal, truecolor=self.config.truecolor)

        self._loop = loop
        self._loop_thread = threading.get_ident()
        previous_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._on_loop_exception)
        try:
            self.terminal.start(self._on_input, self._on_resize)
            logger.info("application started")
            if self._mouse_enabled:
                self.terminal.enable_mouse(True)
            self.screen.resize()
            with self._lock:
                self._draw_requested = True
                self._wakeup_pending = True
            loop.call_soon(self._tick)
            await self._stop_event.wait()
        finally:
            self._loop = None
            self._loop_thread = None
            with self._lock:
                self._wakeup_pending = False
            loop.set_exception_handler(previous_handler)
            self.terminal.stop()
            logger.info("application stopped")

        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def draw(self) -> None:
        """Lay out and draw the whole tree now.  Call only on the loop thread."""
        if self.screen is None:
            self.screen = Screen(self.terminal, truecolor=self.config.truecolor)
            self.screen.resize()
        screen = self.screen
        buffer = screen.buffer
        buffer.clear()

        if self.before_draw is not None and self.before_draw(buffer):
            screen.flush()
            return

        root = self.router.root
        if root is not None:
            if self._fullscreen:
                root.set_rect(buffer.rect)
            root.draw(buffer)
        for layer in self.router.layers:
            if layer.options is not None:
                layer.node.set_rect(resolve_overlay_rect(layer.options, buffer.rect))
            else:
                layer.node.set_rect(buffer.rect)
            layer.node.draw(buffer)

        if self.after_draw is not None:
            self.after_draw(buffer)
        screen.flush()
        self.draw_count += 1

    # ------------------------------------------------------------------
    # Loop internals
    # ------------------------------------------------------------------

    def _in_loop_thread(self) -> bool:
        return self._loop_thread == threading.get_ident()

    def _wake(self) -> None:
        """Schedule one :meth:`_tick` on the loop (coalesced)."""
        with self._lock:
            loop = self._loop
            if loop is None or self._wakeup_pending:
                return
            self._wakeup_pending = True
        try:
            loop.call_soon_threadsafe(self._tick)
        except RuntimeError:
            logger.debug("wakeup after the event loop closed")

    def _tick(self) -> None:
        with self._lock:
            self._wakeup_pending = False
        if self._stop_requested.is_set():
            return
        try:
            self._updates.drain(stop=self._stop_requested.is_set)
            if self._stop_requested.is_set():
                return
            with self._lock:
                draw, self._draw_requested = self._draw_requested, False
            if draw:
                self.draw()
        except Exception as exc:
            self._fail(exc)

    def _fail(self, exc: BaseException) -> None:
        logger.error("stopping on unhandled error: %s", exc, exc_info=exc)
        if self._error is None:
            self._error = exc
        self.stop()

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        if exc is None:
            logger.error("event loop error: %s", context.get("message"))
            return
        self._fail(exc)

    # ------------------------------------------------------------------
    # Terminal callbacks
    # ------------------------------------------------------------------

    def _on_input(self, data: str) -> None:
        loop = self._loop
        if loop is None:
            return
        if self._in_loop_thread():
            self._handle_input(data)
        else:
            loop.call_soon_threadsafe(self._handle_input, data)

    def _on_resize(self) -> None:
        loop = self._loop
        if loop is not None:
            loop.call_soon_threadsafe(self._handle_resize)

    def _handle_resize(self) -> None:
        if self.screen is None or self._stop_requested.is_set():
            return
        try:
            self.screen.resize()
            self.draw()
        except Exception as exc:
            self._fail(exc)

    def _handle_input(self, data: str) -> None:
        if self._stop_requested.is_set():
            return
        try:
            if data.startswith(PASTE_PREFIX):
                self._handle_key(KeyEvent.paste(data[len(PASTE_PREFIX):]))
            elif is_mouse_sequence(data):
                self._handle_mouse(data)
            else:
                event = KeyEvent.from_sequence(data)
                if event is None:
                    logger.debug("ignoring unrecognised input %r", data)
                    return
                self._handle_key(event)
        except Exception as exc:
            self._fail(exc)

    def _handle_key(self, event: KeyEvent) -> None:
        captured = self.router.capture_key(event)
        if captured is not None:
            if captured.matches("ctrl+c"):
                self.stop()
                return
            self.router.deliver_key(captured)
        self.request_draw()

    def _handle_mouse(self, data: str) -> None:
        if not self._mouse_enabled:
            return
        raw = parse_sgr_mouse(data)
        if raw is None:
            return
        for event in self._mouse_tracker.feed(raw):
            self.router.dispatch_mouse(event)
        self.request_draw()
