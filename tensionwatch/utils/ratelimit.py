from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class FixedIntervalLimiter:
    """Space successive calls at least ``interval`` seconds apart.

    ``wait()`` blocks until the next slot is free and then claims it. The first
    call never waits. ``clock`` and ``sleep`` are injectable for tests.
    """

    def __init__(
        self,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last: Optional[float] = None

    def wait(self) -> float:
        """Block until the next slot; return the seconds actually slept."""
        with self._lock:
            slept = 0.0
            now = self._clock()
            if self._last is not None:
                remaining = self._last + self.interval - now
                if remaining > 0:
                    self._sleep(remaining)
                    slept = remaining
                    now = self._clock()
            self._last = now
            return slept

    def reset(self) -> None:
        with self._lock:
            self._last = None
