"""statsnozzle CLI entry point.

Commands:
    statsnozzle run    [--source FILE]   Tally a firehose feed, resolving app ids
    statsnozzle demo                     Tally a synthetic feed (no platform needed)
"""
from __future__ import annotations

import logging
import sys
import threading
from functools import partial
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from .aggregators.aggregator import LockedAggregator
from .cloudfoundry.client import CFClient
from .cloudfoundry.handle import ClientHandle, TokenRefresher
from .config import Settings
from .errors import EXIT_CLIENT_FAILURE, EXIT_MISSING_CONFIG, ClientError, ErrorSink
from .ingest import run_ingest
from .reporter import Reporter
from .resolver.cache import IdentityCache
from .streams.base import EventStream
from .streams.jsonl import JsonLinesStream
from .streams.synthetic import FakeDirectory, SyntheticStream
from .visualization.report import render_report

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────────────


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_settings() -> Settings:
    """Read settings from the environment, exiting on anything missing."""
    try:
        settings = Settings()
    except ValidationError as exc:
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"]).upper()
            err_console.print(f"[red]invalid envvar : {name} ({error['msg']})[/red]")
        sys.exit(EXIT_MISSING_CONFIG)

    missing = settings.missing()
    for name in missing:
        err_console.print(f"[red]missing envvar : {name}[/red]")
    if missing:
        sys.exit(EXIT_MISSING_CONFIG)
    return settings


def _serve(
    stream: EventStream,
    aggregator: LockedAggregator,
    interval: float,
    iterations: int,
    top: int,
    tui: bool,
    stop_event: threading.Event,
) -> None:
    """Run the error sink, the reporter (or dashboard) and the ingest loop."""
    sink = ErrorSink(stream.errors)
    sink.start()

    if tui:
        try:
            from .visualization.tui import run_dashboard
        except ImportError:
            err_console.print(
                "[red]Textual is not installed.[/red] Install it with:\n"
                "  pip install 'statsnozzle[tui]'"
            )
            sys.exit(1)
        ingest = threading.Thread(
            target=run_ingest,
            args=(stream, aggregator, stop_event),
            name="ingest",
            daemon=True,
        )
        ingest.start()
        run_dashboard(aggregator, interval=interval, top=top or 15)
        stop_event.set()
        sink.stop()
        return

    render = partial(render_report, console=console, top=top)
    reporter = Reporter(
        aggregator,
        render,
        interval=interval,
        iterations=iterations,
        stop_event=stop_event,
    )
    reporter.start()
    try:
        count = run_ingest(stream, aggregator, stop_event)
    except KeyboardInterrupt:
        stop_event.set()
        console.print("\n[dim]Stopped.[/dim]")
        return
    finally:
        sink.stop()

    # Source closed: stop the timer and print the final totals once.
    reporter.stop()
    logger.info("stream %s closed after %d records", stream.name, count)
    reporter.report_once()


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="0.1.0", prog_name="statsnozzle")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
def main(verbose: bool) -> None:
    """statsnozzle: live event-type, origin, job and app counts from the firehose."""
    _configure_logging(verbose)


# ── run ──────────────────────────────────────────────────────────────────────


@main.command()
@click.option(
    "--source", "-s", default="-", show_default=True,
    help="NDJSON envelope feed to read ('-' for stdin).",
)
@click.option("--follow", "-F", is_flag=True, help="Keep reading as the source file grows.")
@click.option("--interval", "-i", default=None, type=float, help="Seconds between reports (default: REPORT_INTERVAL).")
@click.option("--iterations", default=0, type=int, help="Stop reporting after N reports (0 = forever).")
@click.option("--top", "-t", default=0, type=int, help="Rows per section (0 = all).")
@click.option("--tui", is_flag=True, help="Show the Textual dashboard instead of printing reports.")
def run(
    source: str,
    follow: bool,
    interval: float | None,
    iterations: int,
    top: int,
    tui: bool,
) -> None:
    """Tally a firehose feed and print counts periodically.

    Reads API_ADDR, CF_USERNAME, CF_PASSWORD and TOKEN_REFRESH_INTERVAL from
    the environment. App GUIDs in log messages are resolved to org/space/app
    through the platform API.

    \b
    Examples:
      cf-firehose-dump | statsnozzle run
      statsnozzle run --source /var/log/firehose.ndjson --follow
      statsnozzle run --interval 10 --top 20
    """
    settings = _load_settings()
    if source != "-" and not Path(source).exists():
        err_console.print(f"[red]source not found: {source}[/red]")
        sys.exit(1)

    logger.info("getting platform client...")
    factory = partial(CFClient.from_settings, settings)
    try:
        client = factory()
        client.get_token()
        logger.info("firehose endpoint: %s", client.doppler_endpoint or "(not advertised)")
    except ClientError as exc:
        err_console.print(f"[red]could not log in to {settings.api_addr}: {exc}[/red]")
        sys.exit(EXIT_CLIENT_FAILURE)

    stop_event = threading.Event()
    handle = ClientHandle(client)
    refresher = TokenRefresher(
        handle,
        factory,
        interval_minutes=settings.token_refresh_interval,
        stop_event=stop_event,
    )
    refresher.start()

    stream = JsonLinesStream(source, follow=follow, stop_event=stop_event)
    aggregator = LockedAggregator(resolver=IdentityCache(handle.get_app))

    _serve(
        stream,
        aggregator,
        interval=interval or settings.report_interval,
        iterations=iterations,
        top=top,
        tui=tui,
        stop_event=stop_event,
    )
    refresher.stop()


# ── demo ─────────────────────────────────────────────────────────────────────


@main.command()
@click.option("--count", "-n", default=0, type=int, help="Envelopes to generate (0 = forever).")
@click.option("--rate", "-r", default=200.0, type=float, show_default=True, help="Envelopes per second (0 = unthrottled).")
@click.option("--apps", default=5, type=int, show_default=True, help="Distinct fake applications.")
@click.option("--seed", default=None, type=int, help="Random seed for a reproducible feed.")
@click.option("--interval", "-i", default=5.0, type=float, show_default=True, help="Seconds between reports.")
@click.option("--iterations", default=0, type=int, help="Stop reporting after N reports (0 = forever).")
@click.option("--top", "-t", default=0, type=int, help="Rows per section (0 = all).")
@click.option("--tui", is_flag=True, help="Show the Textual dashboard instead of printing reports.")
def demo(
    count: int,
    rate: float,
    apps: int,
    seed: int | None,
    interval: float,
    iterations: int,
    top: int,
    tui: bool,
) -> None:
    """Tally a synthetic feed against a fake app directory.

    \b
    Examples:
      statsnozzle demo --count 10000 --rate 0
      statsnozzle demo --tui
    """
    stop_event = threading.Event()
    directory = FakeDirectory(size=apps, seed=seed)
    stream = SyntheticStream(
        count=count,
        app_ids=directory.app_ids,
        seed=seed,
        rate=rate,
        stop_event=stop_event,
    )
    aggregator = LockedAggregator(resolver=IdentityCache(directory.get_app))
    _serve(
        stream,
        aggregator,
        interval=interval,
        iterations=iterations,
        top=top,
        tui=tui,
        stop_event=stop_event,
    )


if __name__ == "__main__":
    main()
