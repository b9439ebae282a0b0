"""CLI interface for leftovers."""

import logging
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from leftovers import __version__
from leftovers.analyzer import analyze_disk, filter_by_category
from leftovers.config import load_settings
from leftovers.display import (
    console,
    show_index,
    show_locations,
    show_match_results,
    show_report,
    show_scanning_progress,
    show_status,
)
from leftovers.index import build_installed_index
from leftovers.locations import get_all_locations
from leftovers.matcher import NameMatcher
from leftovers.models import ItemCategory, Report
from leftovers.scanner import get_disk_usage

# Create Typer app
app = typer.Typer(
    name="leftovers",
    help="Find data left behind by uninstalled Mac apps - read-only, nothing is deleted",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"leftovers version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging."),
) -> None:
    """leftovers - find data left behind by uninstalled Mac apps."""
    setup_logging(verbose)


def _run_in_background(run) -> Report:
    """Run a scan in a worker thread so Ctrl-C cancels it cooperatively."""
    cancel = threading.Event()
    outcome: dict = {}

    def _target():
        try:
            outcome["report"] = run(cancel)
        except Exception as e:  # re-raised in the calling thread
            outcome["error"] = e

    worker = threading.Thread(target=_target, daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.2)
    except KeyboardInterrupt:
        console.print("[yellow]Cancelling, keeping results found so far...[/yellow]")
        cancel.set()
        worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["report"]


@app.command()
def scan(
    json_output: bool = typer.Option(False, "--json", help="Print the report payload as JSON."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Also write the JSON payload to this file."
    ),
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Only show one category (leftover, cache, stale, large)."
    ),
    no_brew: bool = typer.Option(False, "--no-brew", help="Skip the Homebrew cleanup estimate."),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Parallel scan workers."),
    stale_days: Optional[int] = typer.Option(
        None, "--stale-days", min=1, help="Age in days after which data counts as stale."
    ),
) -> None:
    """Scan for leftover, cache, stale and large data."""
    selected: ItemCategory | None = None
    if category:
        try:
            selected = ItemCategory(category.lower())
        except ValueError:
            console.print(f"[red]Unknown category: {category}[/red]")
            console.print("\nAvailable categories:")
            for cat in ItemCategory:
                console.print(f"  • {cat.value}")
            raise typer.Exit(1)

    settings = load_settings()
    overrides = {}
    if workers is not None:
        overrides["max_workers"] = workers
    if stale_days is not None:
        overrides["stale_days"] = stale_days
    if no_brew:
        overrides["include_brew_estimate"] = False
    settings = settings.model_copy(update=overrides)

    if json_output:
        report = _run_in_background(lambda cancel: analyze_disk(settings=settings, cancel=cancel))
    else:
        console.print("[bold blue]Scanning for leftovers...[/bold blue]\n")
        total = len(get_all_locations())
        with show_scanning_progress() as progress:
            task = progress.add_task("Indexing installed apps...", total=total)

            def update_progress(name: str, current: int, total: int):
                progress.update(task, completed=current, description=f"Scanned {name}")

            report = _run_in_background(
                lambda cancel: analyze_disk(
                    settings=settings, cancel=cancel, progress_callback=update_progress
                )
            )

    if selected is not None:
        report = filter_by_category(report, selected)

    if output is not None:
        output.write_text(report.to_json())

    if json_output:
        typer.echo(report.to_json())
        return

    console.print()
    show_report(report)
    if output is not None:
        console.print(f"\n[dim]Report payload written to {output}[/dim]")


@app.command()
def index(
    show: bool = typer.Option(False, "--show", help="List every indexed token."),
) -> None:
    """Build the installed-software index and show its size."""
    installed = build_installed_index()
    show_index(installed, show_entries=show)


@app.command()
def check(
    names: list[str] = typer.Argument(..., help="Directory or file names to check"),
) -> None:
    """Check whether names match installed software, and how."""
    matcher = NameMatcher(build_installed_index())
    show_match_results([(name, matcher.explain(name)) for name in names])


@app.command(name="locations")
def list_locations() -> None:
    """List the probe locations that get scanned."""
    show_locations(get_all_locations())


@app.command()
def status() -> None:
    """Show current disk usage summary."""
    show_status(get_disk_usage())


if __name__ == "__main__":
    app()
