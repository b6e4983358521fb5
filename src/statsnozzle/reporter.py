"""Periodic reporter: snapshot the aggregator, then render outside the lock."""
from __future__ import annotations

import logging
import threading
from typing import Callable

from .aggregators.aggregator import Aggregator, Snapshot

logger = logging.getLogger(__name__)

Renderer = Callable[[Snapshot], None]


class Reporter:
    """Render a fresh snapshot every ``interval`` seconds.

    Runs until ``stop_event`` is set or, when ``iterations`` is non-zero,
    after that many reports. With neither configured it runs for the life of
    the process.

    Usage::

        reporter = Reporter(aggregator, render_report, interval=5)
        reporter.start()
    """

    def __init__(
        self,
        aggregator: Aggregator,
        render: Renderer,
        interval: float = 5.0,
        iterations: int = 0,
        stop_event: threading.Event | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._aggregator = aggregator
        self._render = render
        self._interval = interval
        self._iterations = iterations
        self._stop = stop_event or threading.Event()
        self._thread: threading.Thread | None = None
        self.reports = 0

    def report_once(self) -> Snapshot:
        snapshot = self._aggregator.snapshot()
        self._render(snapshot)
        self.reports += 1
        return snapshot

    def run(self) -> None:
        while not self._stop.is_set():
            try:
                self.report_once()
            except Exception:
                logger.exception("failed to render report")
            if self._iterations and self.reports >= self._iterations:
                return
            if self._stop.wait(self._interval):
                return

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="reporter", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
