"""Split raw terminal input into complete sequences.

Input arrives from the device in arbitrary chunks; an escape sequence such
as a mouse report may be cut in half.  :class:`InputBuffer` holds partial
sequences until the rest arrives (or a short timeout expires, in which case
the bytes are emitted as-is so a lone Escape still works), and collects
bracketed paste into a single payload.
"""

from __future__ import annotations

import asyncio
import enum
import re
from typing import Callable

__all__ = [
    "ESC",
    "BRACKETED_PASTE_START",
    "BRACKETED_PASTE_END",
    "InputBuffer",
    "split_sequences",
]

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


class _Status(enum.Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    NOT_ESCAPE = "not-escape"


def _sequence_status(data: str) -> _Status:
    """Decide whether *data* is a complete escape sequence."""
    if not data.startswith(ESC):
        return _Status.NOT_ESCAPE
    if len(data) == 1:
        return _Status.INCOMPLETE

    introducer = data[1]
    if introducer == "[":
        if data.startswith(ESC + "[M"):
            # X10 mouse: ESC [ M followed by three bytes
            return _Status.COMPLETE if len(data) >= 6 else _Status.INCOMPLETE
        return _csi_status(data)
    if introducer == "]":
        return _terminated_status(data, bel=True)
    if introducer in ("P", "_"):
        return _terminated_status(data, bel=False)
    if introducer == "O":
        # SS3, optionally with a modifier digit: ESC O 5 P
        if len(data) < 3:
            return _Status.INCOMPLETE
        if data[2].isdigit():
            return _Status.COMPLETE if len(data) >= 4 else _Status.INCOMPLETE
        return _Status.COMPLETE
    # ESC followed by one character: alt+key
    return _Status.COMPLETE


def _csi_status(data: str) -> _Status:
    if len(data) < 3:
        return _Status.INCOMPLETE
    payload = data[2:]
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return _Status.INCOMPLETE
    if payload.startswith("<"):
        # SGR mouse reports contain no other final bytes than M/m.
        return _Status.COMPLETE if _SGR_MOUSE_RE.match(payload) else _Status.INCOMPLETE
    return _Status.COMPLETE


def _terminated_status(data: str, bel: bool) -> _Status:
    if data.endswith(ESC + "\\") or (bel and data.endswith("\x07")):
        return _Status.COMPLETE
    return _Status.INCOMPLETE


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is a trailing
    incomplete escape sequence.
    """
    sequences: list[str] = []
    pos = 0
    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue
        end = pos + 1
        while True:
            if end > len(buffer):
                return sequences, buffer[pos:]
            status = _sequence_status(buffer[pos:end])
            if status is _Status.INCOMPLETE:
                end += 1
                continue
            sequences.append(buffer[pos:end])
            pos = end
            break
    return sequences, ""


class InputBuffer:
    """Buffer device input and emit complete sequences and pastes."""

    def __init__(
        self,
        on_data: Callable[[str], None],
        on_paste: Callable[[str], None],
        *,
        timeout: float = 0.01,
    ) -> None:
        self._on_data = on_data
        self._on_paste = on_paste
        self.timeout = timeout
        self._buffer = ""
        self._paste: str | None = None
        self._timer: asyncio.TimerHandle | None = None

    def process(self, data: str) -> None:
        """Feed one chunk of device input."""
        self._cancel_timer()
        self._buffer += data

        while self._buffer:
            if self._paste is not None:
                self._paste += self._buffer
                self._buffer = ""
                end = self._paste.find(BRACKETED_PASTE_END)
                if end == -1:
                    return
                content = self._paste[:end]
                self._buffer = self._paste[end + len(BRACKETED_PASTE_END) :]
                self._paste = None
                self._on_paste(content)
                continue

            start = self._buffer.find(BRACKETED_PASTE_START)
            if start != -1:
                before = self._buffer[:start]
                sequences, _ = split_sequences(before)
                for seq in sequences:
                    self._on_data(seq)
                self._paste = ""
                self._buffer = self._buffer[start + len(BRACKETED_PASTE_START) :]
                continue

            sequences, self._buffer = split_sequences(self._buffer)
            for seq in sequences:
                self._on_data(seq)
            break

        if self._buffer:
            self._schedule_flush()

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: nothing will complete the sequence later.
            self._emit_flushed()
            return
        self._timer = loop.call_later(self.timeout, self._emit_flushed)

    def _emit_flushed(self) -> None:
        self._timer = None
        for seq in self.flush():
            self._on_data(seq)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self) -> list[str]:
        """Return and discard whatever partial input is buffered."""
        self._cancel_timer()
        if not self._buffer:
            return []
        pending, self._buffer = self._buffer, ""
        return [pending]

    def clear(self) -> None:
        self._cancel_timer()
        self._buffer = ""
        self._paste = None

    @property
    def pending(self) -> str:
        return self._buffer
