"""Textual dashboard showing live tallies.

Launch with:
    statsnozzle run --tui
    statsnozzle demo --tui

Requires: textual>=0.47
"""
from __future__ import annotations

from typing import ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Grid
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Static

from ..aggregators.aggregator import DIMENSIONS, Aggregator, Snapshot
from .report import display_key


class StatsBar(Static):
    """Status bar with record count and resolver activity."""

    records: reactive[int] = reactive(0)
    keys: reactive[int] = reactive(0)
    paused: reactive[bool] = reactive(False)

    def render(self) -> str:
        state = "[yellow]PAUSED[/yellow]" if self.paused else "[green]LIVE[/green]"
        return (
            f"{state}  "
            f"[bold cyan]Records:[/bold cyan] {self.records}  "
            f"[bold cyan]Distinct keys:[/bold cyan] {self.keys}"
        )


class DimensionTable(DataTable):
    """Sorted counts for one dimension."""

    def __init__(self, dimension: str, top: int = 15, **kwargs) -> None:
        super().__init__(cursor_type="none", **kwargs)
        self.dimension = dimension
        self._top = top
        self.add_columns("Value", "Count")

    def on_mount(self) -> None:
        self.border_title = self.dimension

    def update_counts(self, counts: list[tuple[str, int]]) -> None:
        self.clear()
        for value, count in counts[: self._top]:
            self.add_row(display_key(value)[:48], str(count))


class NozzleDashboard(App[None]):
    """Full-screen view of every tally, refreshed on a timer.

    Keybindings:
        q / ctrl+c  quit
        p           pause / resume refresh
    """

    CSS = """
    Grid {
        grid-size: 3 2;
        grid-gutter: 1;
    }
    DimensionTable {
        border: round $primary;
        height: 1fr;
    }
    StatsBar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text;
        padding: 0 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("q", "quit", "Quit"),
        Binding("p", "toggle_pause", "Pause/Resume"),
    ]

    def __init__(self, aggregator: Aggregator, interval: float = 5.0, top: int = 15) -> None:
        super().__init__()
        self._aggregator = aggregator
        self._interval = interval
        self._top = top
        self._paused = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Grid():
            for name in DIMENSIONS:
                yield DimensionTable(name, top=self._top, id=f"dim_{name.lower()}")
        yield StatsBar(id="stats_bar")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_tables()
        self.set_interval(self._interval, self.refresh_tables)

    def refresh_tables(self) -> None:
        if self._paused:
            return
        self.show_snapshot(self._aggregator.snapshot())

    def show_snapshot(self, snapshot: Snapshot) -> None:
        for name in DIMENSIONS:
            table = self.query_one(f"#dim_{name.lower()}", DimensionTable)
            table.update_counts(snapshot.section(name))
        stats = self.query_one("#stats_bar", StatsBar)
        stats.records = snapshot.records
        stats.keys = sum(len(snapshot.section(name)) for name in DIMENSIONS)

    def action_toggle_pause(self) -> None:
        self._paused = not self._paused
        self.query_one("#stats_bar", StatsBar).paused = self._paused


def run_dashboard(aggregator: Aggregator, interval: float = 5.0, top: int = 15) -> None:
    """Entry point for the TUI dashboard."""
    app = NozzleDashboard(aggregator, interval=interval, top=top)
    app.run()
