"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that manages raw mode, the alternate screen, bracketed
paste, mouse reporting, and SIGWINCH-based resize detection.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from cellview.errors import ScreenError
from cellview.input_buffer import InputBuffer
from cellview.mouse import MOUSE_DISABLE, MOUSE_ENABLE

__all__ = ["Terminal", "ProcessTerminal", "PASTE_PREFIX"]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"
_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_RESET = "\x1b[0m"

# Prefix of the single input callback that carries a bracketed paste.
PASTE_PREFIX = "\x1b[200~"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations.

    ``on_input`` receives one complete sequence per call; a bracketed paste
    arrives as a single call whose data starts with :data:`PASTE_PREFIX`.
    ``on_resize`` may be called from a signal handler.
    """

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def enable_mouse(self, enabled: bool) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by ``sys.stdin``/``sys.stdout``.

    Must be started from inside a running asyncio event loop; stdin is read
    with :meth:`asyncio.AbstractEventLoop.add_reader`.
    """

    def __init__(self, write_log: str = "", escape_timeout: float = 0.01) -> None:
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._input_buffer: InputBuffer | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._mouse_enabled = False
        self._write_log_path = write_log
        self._escape_timeout = escape_timeout

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Enter raw mode and the alternate screen and begin reading stdin.

        Raises :class:`ScreenError` if stdin is not a terminal.
        """
        self._input_handler = on_input
        self._resize_handler = on_resize

        try:
            fd = sys.stdin.fileno()
            self._original_termios = termios.tcgetattr(fd)
            tty.setraw(fd)
        except (termios.error, OSError, ValueError) as exc:
            raise ScreenError(f"cannot initialise terminal: {exc}") from exc

        try:
            self.write(_ALT_SCREEN_ENABLE + _BRACKETED_PASTE_ENABLE + _HIDE_CURSOR)

            self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
            signal.signal(signal.SIGWINCH, self._on_sigwinch)

            self._input_buffer = InputBuffer(
                self._emit_input,
                lambda text: self._emit_input(PASTE_PREFIX + text),
                timeout=self._escape_timeout,
            )
            self._loop = asyncio.get_running_loop()
            self._loop.add_reader(fd, self._on_stdin_readable)
        except BaseException:
            logger.debug("terminal start failed, restoring tty state")
            try:
                self.stop()
            except ScreenError as exc:
                logger.debug("terminal reset failed: %s", exc)
            raise
        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Restore terminal state and clean up all handlers."""
        if self._loop is not None:
            try:
                self._loop.remove_reader(sys.stdin.fileno())
            except (ValueError, OSError):
                logger.debug("stdin reader already removed")
            self._loop = None

        if self._input_buffer is not None:
            self._input_buffer.clear()
            self._input_buffer = None

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        try:
            if self._mouse_enabled:
                self.enable_mouse(False)
            self.write(_RESET + _SHOW_CURSOR + _BRACKETED_PASTE_DISABLE + _ALT_SCREEN_DISABLE)
        finally:
            if self._original_termios is not None:
                termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
                self._original_termios = None

        self._input_handler = None
        self._resize_handler = None

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as exc:
            raise ScreenError(f"failed to write to terminal: {exc}") from exc

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                logger.warning("cannot append to write log %s", self._write_log_path)
                self._write_log_path = ""

    def enable_mouse(self, enabled: bool) -> None:
        if enabled != self._mouse_enabled:
            self._mouse_enabled = enabled
            self.write(MOUSE_ENABLE if enabled else MOUSE_DISABLE)

    # -- private ------------------------------------------------------------

    def _emit_input(self, data: str) -> None:
        if self._input_handler is not None:
            self._input_handler(data)

    def _on_stdin_readable(self) -> None:
        """Callback invoked by the event loop when stdin has data.

        End of file unregisters the reader and raises :class:`ScreenError`,
        which stops a running application.
        """
        fd = sys.stdin.fileno()
        try:
            raw = os.read(fd, 4096)
        except OSError as exc:
            raise ScreenError(f"failed to read from terminal: {exc}") from exc
        if not raw:
            if self._loop is not None:
                self._loop.remove_reader(fd)
            logger.info("terminal input closed")
            raise ScreenError("terminal input closed")
        if self._input_buffer is None:
            return
        self._input_buffer.process(raw.decode("utf-8", errors="replace"))

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        if self._resize_handler is not None:
            self._resize_handler()
