"""Rich rendering of aggregator snapshots."""
from __future__ import annotations

import time

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from ..aggregators.aggregator import DIMENSIONS, Snapshot

_console = Console()

EMPTY_LABEL = "(empty)"


def display_key(key: str) -> str:
    """Printable label for a tally key; the empty string is a real category."""
    return key if key else EMPTY_LABEL


def section_table(name: str, counts: list[tuple[str, int]], top: int = 0) -> Table:
    """Build one labelled section: a two-column table of key and count."""
    table = Table(title=name, title_justify="left", box=box.SIMPLE, show_header=False)
    table.add_column("Value", overflow="fold")
    table.add_column("Count", justify="right", style="cyan")

    rows = counts[:top] if top else counts
    for key, count in rows:
        table.add_row(display_key(key), str(count))
    if top and len(counts) > top:
        table.add_row(f"[dim]... {len(counts) - top} more[/dim]", "")
    return table


def render_report(
    snapshot: Snapshot,
    console: Console | None = None,
    top: int = 0,
) -> None:
    """Print every dimension of snapshot as its own section.

    Args:
        snapshot: Sorted counts taken by the aggregator.
        console:  Where to print. Defaults to stdout.
        top:      Show at most this many rows per section (0 = all).
    """
    out = console or _console
    stamp = time.strftime("%H:%M:%S", time.localtime(snapshot.taken_at))
    out.print(Rule(f"{snapshot.records} records @ {stamp}"))
    for name in DIMENSIONS:
        counts = snapshot.section(name)
        if not counts:
            out.print(f"[bold]{name}[/bold]\n  [dim]none[/dim]")
            continue
        out.print(section_table(name, counts, top=top))
