"""Exception types, process exit codes and the transport error sink.

Transport errors arrive out of band on a :class:`queue.Queue`. The sink drains
that queue on its own thread and logs each error; it never blocks the
producer and never stops the process.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Any

logger = logging.getLogger(__name__)

EXIT_MISSING_CONFIG = 8
EXIT_CLIENT_FAILURE = 9


class NozzleError(Exception):
    """Base class for statsnozzle errors."""


class ClientError(NozzleError):
    """A call to the platform API failed."""


class ResolutionFailed(NozzleError):
    """An application identifier could not be resolved to app/space/org."""

    def __init__(self, app_id: str, reason: object = None) -> None:
        self.app_id = app_id
        self.reason = reason
        detail = f": {reason}" if reason is not None else ""
        super().__init__(f"could not resolve app {app_id!r}{detail}")


class ErrorSink:
    """Drain a transport error queue and log every item.

    Usage::

        sink = ErrorSink(stream.errors)
        sink.start()
        ...
        sink.stop()   # optional, the thread is a daemon
    """

    _SENTINEL = object()

    def __init__(self, errors: "queue.Queue[Any]", name: str = "error-sink") -> None:
        self._errors = errors
        self._thread = threading.Thread(target=self.run, name=name, daemon=True)
        self.handled = 0

    def start(self) -> None:
        self._thread.start()

    def run(self) -> None:
        while True:
            err = self._errors.get()
            if err is self._SENTINEL:
                return
            self.handled += 1
            logger.warning("stream error: %s", err)

    def stop(self, timeout: float | None = 1.0) -> None:
        """Ask the drain loop to exit once everything queued so far is logged."""
        self._errors.put(self._SENTINEL)
        if self._thread.is_alive():
            self._thread.join(timeout)
