from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class SingleFlight:
    """At most one holder at a time, process-wide; contenders are turned away, not queued.

    Usage::

        with guard.attempt() as acquired:
            if not acquired:
                return None
            ...

    The lock is released when the ``with`` block exits, including on exceptions.
    """

    def __init__(self, name: str = "task") -> None:
        self.name = name
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def attempt(self) -> Iterator[bool]:
        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()
