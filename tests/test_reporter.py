"""Tests for the periodic reporter and report rendering."""
from __future__ import annotations

import threading
from functools import partial

import pytest

from statsnozzle.aggregators.aggregator import LockedAggregator, Snapshot
from statsnozzle.events import EventType
from statsnozzle.reporter import Reporter
from statsnozzle.visualization.report import EMPTY_LABEL, display_key, render_report


def _loaded_aggregator(make_envelope) -> LockedAggregator:
    agg = LockedAggregator()
    agg.ingest(make_envelope(event_type=EventType.LOG_MESSAGE, origin="gorouter"))
    agg.ingest(make_envelope(event_type=EventType.LOG_MESSAGE, origin="rep", job=""))
    agg.ingest(make_envelope(event_type=EventType.HTTP_START_STOP, origin="gorouter"))
    return agg


class TestReporter:
    def test_report_once_renders_snapshot(self, make_envelope) -> None:
        seen: list[Snapshot] = []
        reporter = Reporter(_loaded_aggregator(make_envelope), seen.append, interval=1)
        snap = reporter.report_once()
        assert seen == [snap]
        assert snap.records == 3
        assert reporter.reports == 1

    def test_iterations_cap(self, make_envelope) -> None:
        seen: list[Snapshot] = []
        reporter = Reporter(_loaded_aggregator(make_envelope), seen.append, interval=0.01, iterations=3)
        reporter.run()
        assert len(seen) == 3

    def test_stop_event_ends_run(self, make_envelope) -> None:
        stop = threading.Event()
        seen: list[Snapshot] = []
        reporter = Reporter(_loaded_aggregator(make_envelope), seen.append, interval=60, stop_event=stop)
        reporter.start()
        reporter.stop(timeout=2)
        assert stop.is_set()
        assert not reporter._thread.is_alive()
        assert len(seen) <= 1

    def test_render_failure_does_not_stop_reporter(self, make_envelope) -> None:
        calls: list[int] = []

        def flaky(snapshot: Snapshot) -> None:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("terminal gone")

        reporter = Reporter(_loaded_aggregator(make_envelope), flaky, interval=0.01, iterations=2)
        reporter.run()
        assert len(calls) == 3
        assert reporter.reports == 2

    def test_invalid_interval_rejected(self) -> None:
        with pytest.raises(ValueError):
            Reporter(LockedAggregator(), lambda s: None, interval=0)


class TestRenderReport:
    def test_sections_in_order_and_sorted(self, make_envelope, capture_console) -> None:
        console, buf = capture_console
        render_report(_loaded_aggregator(make_envelope).snapshot(), console=console)
        out = buf.getvalue()
        positions = [out.index(name) for name in ("EventTypes", "Origins", "Jobs", "Deployments", "IPs", "Apps")]
        assert positions == sorted(positions)
        assert out.index("gorouter") < out.index("rep")
        assert "3 records" in out

    def test_empty_key_label(self, make_envelope, capture_console) -> None:
        console, buf = capture_console
        render_report(_loaded_aggregator(make_envelope).snapshot(), console=console)
        assert EMPTY_LABEL in buf.getvalue()

    def test_top_truncates(self, make_envelope, capture_console) -> None:
        console, buf = capture_console
        agg = LockedAggregator()
        for n in range(5):
            agg.ingest(make_envelope(ip=f"10.0.0.{n}"))
        render_report(agg.snapshot(), console=console, top=2)
        assert "3 more" in buf.getvalue()

    def test_display_key(self) -> None:
        assert display_key("") == EMPTY_LABEL
        assert display_key("rep") == "rep"

    def test_partial_renderer_with_reporter(self, make_envelope, capture_console) -> None:
        console, buf = capture_console
        reporter = Reporter(_loaded_aggregator(make_envelope), partial(render_report, console=console), interval=1)
        reporter.report_once()
        assert "LogMessage" in buf.getvalue()
