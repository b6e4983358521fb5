"""Newline-delimited JSON envelope source.

Reads one envelope per line from a file or stdin, e.g. a firehose dump::

    {"eventType": "LogMessage", "origin": "rep", "job": "diego_cell",
     "deployment": "cf", "ip": "10.0.16.4", "appId": "6f1b2c9e-..."}

Lines that are not valid envelopes are reported on ``errors`` and skipped;
they never stop the stream. With ``follow=True`` the file is tailed like
``tail -f`` until ``stop_event`` is set.
"""
from __future__ import annotations

import json
import logging
import queue
import sys
import threading
import time
from pathlib import Path
from typing import IO, Any, Iterator

from ..events import Envelope

logger = logging.getLogger(__name__)


class JsonLinesStream:
    """Stream envelopes out of an NDJSON file ("-" means stdin)."""

    def __init__(
        self,
        path: str | Path = "-",
        follow: bool = False,
        poll_interval: float = 0.25,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._path = str(path)
        self._follow = follow
        self._poll_interval = poll_interval
        self._stop = stop_event or threading.Event()
        self.errors: "queue.Queue[Any]" = queue.Queue()
        self.skipped = 0

    @property
    def name(self) -> str:
        return "jsonl:stdin" if self._path == "-" else f"jsonl:{self._path}"

    def parse_line(self, line: str, lineno: int = 0) -> Envelope | None:
        """Parse one line. Blank lines are ignored; bad ones go to ``errors``."""
        line = line.strip()
        if not line:
            return None
        try:
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError("not a JSON object")
            return Envelope.from_dict(data)
        except ValueError as exc:
            self.skipped += 1
            self.errors.put_nowait(f"{self.name} line {lineno}: {exc}")
            return None

    def __iter__(self) -> Iterator[Envelope]:
        if self._path == "-":
            yield from self._read(sys.stdin)
            return
        with open(self._path, encoding="utf-8", errors="replace") as fh:
            yield from self._read(fh)

    def _read(self, fh: IO[str]) -> Iterator[Envelope]:
        lineno = 0
        pending = ""
        while not self._stop.is_set():
            chunk = fh.readline()
            if not chunk:
                if not self._follow:
                    break
                time.sleep(self._poll_interval)
                continue
            pending += chunk
            if not pending.endswith("\n") and self._follow:
                # Partial line: wait for the writer to finish it.
                continue
            lineno += 1
            envelope = self.parse_line(pending, lineno)
            pending = ""
            if envelope is not None:
                yield envelope
        if pending:
            envelope = self.parse_line(pending, lineno + 1)
            if envelope is not None:
                yield envelope
