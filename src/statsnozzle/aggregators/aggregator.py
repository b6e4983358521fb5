"""Aggregation context: every tally plus the identity cache behind one lock.

The ingest loop is the only writer; the reporter only reads. Both go through
:class:`Aggregator`, so the locking strategy stays internal to the
implementation.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..errors import ResolutionFailed
from ..events import Envelope
from ..resolver.cache import IdentityCache
from .counter import Tally

logger = logging.getLogger(__name__)

# Report section titles, in display order.
DIMENSIONS = ("EventTypes", "Origins", "Jobs", "Deployments", "IPs", "Apps")


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of every tally, each sorted for display."""

    sections: dict[str, list[tuple[str, int]]]
    records: int
    taken_at: float = field(default_factory=time.time)

    def section(self, name: str) -> list[tuple[str, int]]:
        return self.sections.get(name, [])

    def as_dict(self, name: str) -> dict[str, int]:
        return dict(self.section(name))


@runtime_checkable
class Aggregator(Protocol):
    """What the ingest loop and reporter need from the aggregation state."""

    def ingest(self, record: Envelope) -> None:
        ...

    def snapshot(self) -> Snapshot:
        ...


class LockedAggregator:
    """One mutual-exclusion lock around all tallies and the identity cache.

    Identity cache misses are resolved while the lock is held, so a slow
    lookup stalls every dimension until it returns. Lookups are rare once the
    cache is warm.
    """

    def __init__(self, resolver: IdentityCache | None = None) -> None:
        self._lock = threading.Lock()
        self._resolver = resolver
        self._tallies = {name: Tally(name) for name in DIMENSIONS}
        self._records = 0
        self.resolution_failures = 0

    @property
    def resolver(self) -> IdentityCache | None:
        return self._resolver

    def ingest(self, record: Envelope) -> None:
        with self._lock:
            if record.app_id and self._resolver is not None:
                try:
                    identity = self._resolver.resolve(record.app_id)
                except ResolutionFailed as exc:
                    self.resolution_failures += 1
                    logger.warning("%s", exc)
                else:
                    self._tallies["Apps"].increment(identity.key)

            self._tallies["EventTypes"].increment(record.event_type.value)
            self._tallies["Origins"].increment(record.origin)
            self._tallies["Jobs"].increment(record.job)
            self._tallies["Deployments"].increment(record.deployment)
            self._tallies["IPs"].increment(record.ip)
            self._records += 1

    def snapshot(self) -> Snapshot:
        with self._lock:
            sections = {name: tally.snapshot_sorted() for name, tally in self._tallies.items()}
            records = self._records
        return Snapshot(sections=sections, records=records)

    @property
    def records(self) -> int:
        with self._lock:
            return self._records
