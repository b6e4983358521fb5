"""Shared pytest fixtures for statsnozzle tests."""
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from statsnozzle.events import Envelope, EventType
from statsnozzle.resolver.cache import ResolvedIdentity


def identity_for(app_id: str, org: str = "org", space: str = "dev", app: str | None = None) -> ResolvedIdentity:
    return ResolvedIdentity(
        app_name=app or f"app-{app_id}",
        app_id=app_id,
        space_name=space,
        space_id=f"{space}-guid",
        org_name=org,
        org_id=f"{org}-guid",
    )


class RecordingLookup:
    """Identity lookup that counts calls and can be told to fail."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.failing = set(failing or ())

    def __call__(self, app_id: str) -> ResolvedIdentity:
        self.calls.append(app_id)
        if app_id in self.failing:
            raise ConnectionError(f"lookup for {app_id} failed")
        return identity_for(app_id)


@pytest.fixture()
def lookup() -> RecordingLookup:
    return RecordingLookup()


@pytest.fixture()
def make_envelope():
    """Return a factory for envelopes with sensible defaults."""

    def _make(
        event_type: EventType = EventType.VALUE_METRIC,
        origin: str = "rep",
        job: str = "diego_cell",
        deployment: str = "cf",
        ip: str = "10.0.0.1",
        app_id: str | None = None,
    ) -> Envelope:
        return Envelope(
            event_type=event_type,
            origin=origin,
            job=job,
            deployment=deployment,
            ip=ip,
            app_id=app_id,
        )

    return _make


@pytest.fixture()
def capture_console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, width=120, color_system=None), buf


@pytest.fixture()
def ndjson_file(tmp_path: Path):
    """Return a factory that writes envelope lines to a temporary file."""

    def _make(lines: list[object], name: str = "firehose.ndjson") -> Path:
        p = tmp_path / name
        rendered = [line if isinstance(line, str) else json.dumps(line) for line in lines]
        p.write_text("\n".join(rendered) + "\n", encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def lookup_factory():
    """Return the RecordingLookup class, for tests needing failing ids."""
    return RecordingLookup


@pytest.fixture()
def identity():
    """Return the identity_for helper."""
    return identity_for
