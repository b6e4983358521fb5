"""Event stream protocol; duck-typed, no inheritance required."""
from __future__ import annotations

import queue
from typing import Any, Iterator, Protocol, runtime_checkable

from ..events import Envelope


@runtime_checkable
class EventStream(Protocol):
    """An ordered source of envelopes plus an out-of-band error queue."""

    errors: "queue.Queue[Any]"

    def __iter__(self) -> Iterator[Envelope]:
        """Yield envelopes in arrival order; stop when the source closes."""
        ...

    @property
    def name(self) -> str:
        """Human-readable source name (e.g. 'jsonl:/tmp/firehose.ndjson')."""
        ...
