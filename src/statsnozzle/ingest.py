"""Ingest loop: feed every stream record into the aggregator, in order."""
from __future__ import annotations

import logging
import threading
from typing import Iterable

from .aggregators.aggregator import Aggregator
from .events import Envelope

logger = logging.getLogger(__name__)


def run_ingest(
    stream: Iterable[Envelope],
    aggregator: Aggregator,
    stop_event: threading.Event | None = None,
) -> int:
    """Consume stream until it is exhausted and return the number of records.

    End of stream is not an error; the loop just returns. When stop_event is
    given it is checked between records.
    """
    count = 0
    for record in stream:
        if stop_event is not None and stop_event.is_set():
            break
        aggregator.ingest(record)
        count += 1
    logger.debug("ingest loop finished after %d records", count)
    return count
