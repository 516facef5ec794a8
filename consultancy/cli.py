"""
Consultancy Auto-Save Command Line Interface

Provides CLI commands for inspecting configuration, preparing the draft
store, and replaying edit timelines against the auto-save scheduler.
"""

import asyncio
import time
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="consultancy-autosave",
    help="Debounced auto-save tooling for consultancy record editing",
    add_completion=False,
)
console = Console()


def parse_timeline(spec: str) -> list[tuple[int, str]]:
    """
    Parse an edit timeline such as ``"0:A,50:AB,400:ABC"``.

    Returns:
        (offset_ms, value) pairs sorted by offset
    """
    events: list[tuple[int, str]] = []
    for chunk in filter(None, (part.strip() for part in spec.split(","))):
        offset, sep, value = chunk.partition(":")
        if not sep or not offset.strip().isdigit():
            raise typer.BadParameter(f"Expected <ms>:<value>, got '{chunk}'")
        events.append((int(offset), value))
    return sorted(events, key=lambda event: event[0])


async def _replay(
    edits: list[tuple[int, str]],
    flushes: list[tuple[int, str]],
    initial: str,
    window_ms: int,
    latency_ms: int,
    fail_values: set[str],
):
    from consultancy.core.autosave import AutoSaveScheduler, InMemoryBackend
    from consultancy.utils.config import AutoSaveSettings

    config = AutoSaveSettings(debounce_window_ms=window_ms)
    backend = InMemoryBackend(
        latency_ms=latency_ms,
        fail_when=(lambda snapshot: snapshot in fail_values) if fail_values else None,
    )
    scheduler = AutoSaveScheduler(
        backend,
        config=config,
        session_id="simulation",
        initial=initial,
    )

    start = time.monotonic()
    manual_outcomes = []
    flush_tasks = []

    timeline = [(t, "edit", v) for t, v in edits] + [(t, "flush", v) for t, v in flushes]
    for offset, kind, value in sorted(timeline, key=lambda event: event[0]):
        delay = offset / 1000.0 - (time.monotonic() - start)
        if delay > 0:
            await asyncio.sleep(delay)
        if kind == "edit":
            scheduler.on_observed_change(value)
        else:
            flush_tasks.append((offset, value, asyncio.create_task(scheduler.flush_now(value))))

    # Let the final debounce window elapse and its write finish
    await asyncio.sleep(config.debounce_window_seconds + 0.05)
    await scheduler.wait_idle()
    for offset, value, task in flush_tasks:
        manual_outcomes.append((offset, value, await task))
    await scheduler.aclose()

    return backend, manual_outcomes


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    """Configure logging before any command runs."""
    from consultancy.utils.config import get_settings
    from consultancy.utils.logger import setup_logging

    settings = get_settings()
    if verbose:
        settings.logging.level = "DEBUG"
    setup_logging(settings)


@app.command()
def version():
    """Show application version."""
    from consultancy import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from consultancy.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Auto-Save Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Auto-Save Enabled", str(settings.autosave.enabled))
    table.add_row("Debounce Window", f"{settings.autosave.debounce_window_ms} ms")
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Drafts Collection", settings.database.drafts_collection)
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Create indexes on the drafts collection."""
    from consultancy.data.database import get_database_manager

    console.print("[yellow]Initializing draft store...[/yellow]")
    db_manager = get_database_manager()

    async def _init() -> bool:
        if not await db_manager.check_async_connection():
            return False
        await db_manager.ensure_indexes()
        return True

    try:
        ok = asyncio.run(_init())
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)
    finally:
        db_manager.close()

    if not ok:
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)

    console.print("[green]Draft store initialized successfully![/green]")


@app.command()
def simulate(
    edits: str = typer.Argument("0:A,50:AB,400:ABC", help="Edit timeline as <ms>:<value>,..."),
    initial: str = typer.Option("", "--initial", "-i", help="Value loaded at mount"),
    window_ms: int = typer.Option(300, "--window", "-w", min=1, help="Debounce window in ms"),
    latency_ms: int = typer.Option(0, "--latency", "-l", min=0, help="Simulated backend latency in ms"),
    flush: Optional[str] = typer.Option(None, "--flush", "-f", help="Manual saves as <ms>:<value>,..."),
    fail: Optional[list[str]] = typer.Option(None, "--fail", help="Values the backend rejects"),
):
    """Replay an edit timeline against an in-memory backend and show the writes."""
    timeline = parse_timeline(edits)
    flushes = parse_timeline(flush) if flush else []

    backend, manual_outcomes = asyncio.run(
        _replay(timeline, flushes, initial, window_ms, latency_ms, set(fail or []))
    )

    table = Table(title=f"Writes (window {window_ms} ms, latency {latency_ms} ms)")
    table.add_column("#", style="dim")
    table.add_column("Snapshot", style="cyan")
    table.add_column("Result")

    for index, record in enumerate(backend.writes, start=1):
        result = "[green]ok[/green]" if record.succeeded else f"[red]{record.error}[/red]"
        table.add_row(str(index), repr(record.snapshot), result)

    console.print(table)
    for offset, value, outcome in manual_outcomes:
        status = "[green]saved[/green]" if outcome.success else f"[red]failed: {outcome.error}[/red]"
        console.print(f"Manual save at {offset} ms of {value!r}: {status}")
    console.print(f"Stored value: [bold]{backend.stored!r}[/bold]")


if __name__ == "__main__":
    app()
