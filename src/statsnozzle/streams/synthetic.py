"""Synthetic envelope generator for demos and load tests."""
from __future__ import annotations

import queue
import random
import threading
import time
from typing import Any, Iterator, Sequence

from ..events import Envelope, EventType
from ..resolver.cache import ResolvedIdentity

ORIGINS = ("rep", "gorouter", "cloud_controller", "DopplerServer", "MetronAgent", "bosh-system-metrics-forwarder")
JOBS = ("diego_cell", "router", "api", "doppler", "uaa", "")
DEPLOYMENTS = ("cf", "cf-redis", "p-mysql")


class SyntheticStream:
    """Yield random but reproducible envelopes.

    Args:
        count:       Number of envelopes to emit (0 = never stop).
        app_ids:     Application GUIDs attached to log messages.
        seed:        Seed for the random generator.
        rate:        Envelopes per second (0 = as fast as possible).
        error_every: Push a fake transport error every N envelopes (0 = never).
    """

    def __init__(
        self,
        count: int = 0,
        app_ids: Sequence[str] = (),
        seed: int | None = None,
        rate: float = 0.0,
        error_every: int = 0,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._count = count
        self._app_ids = list(app_ids)
        self._rng = random.Random(seed)
        self._delay = 1.0 / rate if rate > 0 else 0.0
        self._error_every = error_every
        self._stop = stop_event or threading.Event()
        self.errors: "queue.Queue[Any]" = queue.Queue()

    @property
    def name(self) -> str:
        return "synthetic"

    def make_envelope(self) -> Envelope:
        event_type = self._rng.choice(list(EventType))
        app_id = None
        if event_type is EventType.LOG_MESSAGE and self._app_ids:
            app_id = self._rng.choice(self._app_ids)
        return Envelope(
            event_type=event_type,
            origin=self._rng.choice(ORIGINS),
            job=self._rng.choice(JOBS),
            deployment=self._rng.choice(DEPLOYMENTS),
            index=str(self._rng.randint(0, 3)),
            ip=f"10.0.{self._rng.randint(0, 3)}.{self._rng.randint(1, 20)}",
            app_id=app_id,
        )

    def __iter__(self) -> Iterator[Envelope]:
        emitted = 0
        while not self._stop.is_set():
            if self._count and emitted >= self._count:
                return
            yield self.make_envelope()
            emitted += 1
            if self._error_every and emitted % self._error_every == 0:
                self.errors.put_nowait(f"synthetic transport error after {emitted} envelopes")
            if self._delay:
                time.sleep(self._delay)


class FakeDirectory:
    """In-memory stand-in for the platform's app lookup, used by ``demo``.

    Builds ``size`` apps spread over a few orgs and spaces. Unknown GUIDs
    raise ``KeyError`` like a 404 would.
    """

    def __init__(self, size: int = 5, seed: int | None = None) -> None:
        rng = random.Random(seed)
        self.apps: dict[str, ResolvedIdentity] = {}
        for n in range(size):
            org = f"org-{n % 2}"
            space = rng.choice(("dev", "staging", "prod"))
            app_id = f"00000000-0000-4000-8000-{n:012d}"
            self.apps[app_id] = ResolvedIdentity(
                app_name=f"app-{n}",
                app_id=app_id,
                space_name=space,
                space_id=f"space-{org}-{space}",
                org_name=org,
                org_id=f"guid-{org}",
            )
        self.calls = 0

    @property
    def app_ids(self) -> list[str]:
        return list(self.apps)

    def get_app(self, app_id: str) -> ResolvedIdentity:
        self.calls += 1
        return self.apps[app_id]
