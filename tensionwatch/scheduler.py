from __future__ import annotations

import signal
import threading
import time
from typing import Callable, Optional

from .utils.logging import get_logger

logger = get_logger("tw.scheduler")


class IntervalScheduler:
    """Run ``job`` immediately and then on a fixed grid every ``interval`` seconds.

    Each tick starts the job on its own daemon thread, so a job that overruns
    its slot does not delay the grid; overlap is left to the job's own guard.
    Ticks are never queued or retried.
    """

    def __init__(
        self,
        job: Callable[[], object],
        interval: float,
        *,
        name: str = "news-cycle",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.job = job
        self.interval = interval
        self.name = name
        self._clock = clock
        self._stop = threading.Event()
        self._workers: list[threading.Thread] = []
        self.ticks = 0

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def install_signal_handlers(self) -> None:
        """Stop on SIGINT/SIGTERM. Only valid from the main thread."""

        def _handle(signum: int, frame: object) -> None:
            logger.info("Received signal %d; stopping scheduler", signum)
            self.stop()

        signal.signal(signal.SIGINT, _handle)
        signal.signal(signal.SIGTERM, _handle)

    def _run_job(self) -> None:
        try:
            self.job()
        except Exception as exc:  # noqa: BLE001 - a failed tick never stops the schedule
            logger.exception("Scheduled job %s failed: %s", self.name, exc)

    def tick(self) -> threading.Thread:
        self.ticks += 1
        worker = threading.Thread(target=self._run_job, name=f"{self.name}-{self.ticks}", daemon=True)
        worker.start()
        self._workers = [w for w in self._workers if w.is_alive()] + [worker]
        return worker

    def run_forever(self, *, max_ticks: Optional[int] = None) -> None:
        logger.info("Scheduler started: %s every %.0fs", self.name, self.interval)
        next_at = self._clock()
        while not self._stop.is_set():
            self.tick()
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            next_at += self.interval
            # Skip grid slots already missed; the guard would drop them anyway
            now = self._clock()
            while next_at <= now:
                next_at += self.interval
            if self._stop.wait(next_at - now):
                break
        logger.info("Scheduler stopped after %d tick(s)", self.ticks)

    def join(self, timeout: Optional[float] = None) -> None:
        for worker in list(self._workers):
            worker.join(timeout)
