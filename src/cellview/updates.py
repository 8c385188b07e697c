"""Thread-safe FIFO of closures to run on the draw-loop thread."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Optional

__all__ = ["UpdateQueue"]


class UpdateQueue:
    """Closures submitted from any thread, executed in submission order.

    :meth:`drain` runs every closure that was queued before it started.
    Closures queued while a drain is running are left for the next drain.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: deque[Callable[[], None]] = deque()

    def put(self, fn: Callable[[], None]) -> None:
        with self._lock:
            self._items.append(fn)

    def drain(self, stop: Optional[Callable[[], bool]] = None) -> int:
        """Run pending closures; return how many ran.

        *stop* is checked before each closure; once it returns ``True`` the
        remaining closures stay queued.  If a closure raises, the ones after
        it stay queued and the exception propagates.
        """
        with self._lock:
            pending = len(self._items)
        ran = 0
        while ran < pending:
            if stop is not None and stop():
                break
            with self._lock:
                fn = self._items.popleft()
            ran += 1
            fn()
        return ran

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
