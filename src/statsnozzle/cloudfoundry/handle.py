"""Swappable client handle and the background token refresher.

The refresher never mutates the live client. It logs in a brand new one and
publishes it with :meth:`ClientHandle.swap`, only after the login succeeded.
A failed refresh leaves the previous client in place.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable

from ..errors import ClientError
from ..resolver.cache import ResolvedIdentity
from .client import CFClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], CFClient]


class ClientHandle:
    """Holds the current client; readers always see a fully built one."""

    def __init__(self, client: CFClient) -> None:
        self._lock = threading.Lock()
        self._client = client
        self.generation = 0

    def current(self) -> CFClient:
        with self._lock:
            return self._client

    def swap(self, client: CFClient) -> None:
        with self._lock:
            self._client = client
            self.generation += 1

    def get_app(self, app_id: str) -> ResolvedIdentity:
        """Identity lookup against whichever client is current."""
        return self.current().get_app(app_id)


class TokenRefresher:
    """Every ``interval_minutes``, log in a new client and swap it in."""

    def __init__(
        self,
        handle: ClientHandle,
        factory: ClientFactory,
        interval_minutes: float = 90,
        stop_event: threading.Event | None = None,
    ) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self._handle = handle
        self._factory = factory
        self._interval = interval_minutes * 60
        self._stop = stop_event or threading.Event()
        self._thread: threading.Thread | None = None

    def refresh_once(self) -> bool:
        """Try one refresh. Returns True when a new client was swapped in."""
        try:
            client = self._factory()
        except ClientError as exc:
            logger.error("failed to refresh platform client, keeping the current one: %s", exc)
            return False
        except Exception:
            logger.exception("unexpected error refreshing platform client, keeping the current one")
            return False
        self._handle.swap(client)
        logger.info("refreshed platform client, got new token")
        return True

    def run(self) -> None:
        while not self._stop.wait(self._interval):
            self.refresh_once()

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="token-refresher", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
