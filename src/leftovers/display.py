"""Rich terminal display for leftovers."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from leftovers.index import InstalledIndex
from leftovers.locations import ProbeLocation
from leftovers.models import DiskUsage, ItemCategory, Report, format_size_mb

console = Console()

CATEGORY_TITLES = {
    ItemCategory.LEFTOVER: "Leftover App Data",
    ItemCategory.CACHE: "Caches & Build Artifacts",
    ItemCategory.LARGE: "Large Files & Directories",
    ItemCategory.STALE: "Stale Files (1+ year untouched)",
}

CATEGORY_COLORS = {
    ItemCategory.LEFTOVER: "red",
    ItemCategory.STALE: "yellow",
    ItemCategory.CACHE: "magenta",
    ItemCategory.LARGE: "blue",
}


def size_style(size_mb: float) -> str:
    """Color for a size figure."""
    if size_mb >= 500:
        return "red"
    elif size_mb >= 50:
        return "yellow"
    return "dim"


# Used-percent floor, colour, wording; first match wins
DISK_PRESSURE = [
    (90, "red", "nearly full"),
    (75, "yellow", "filling up"),
    (0, "green", "plenty of room"),
]


def disk_pressure(used_percent: float) -> tuple[str, str]:
    """Colour and wording for how full the startup disk is."""
    for floor, color, label in DISK_PRESSURE:
        if used_percent >= floor:
            return color, label
    return DISK_PRESSURE[-1][1:]


def show_disk_summary(disk_usage: DiskUsage) -> None:
    """One-line startup disk figure shown above the report."""
    color, label = disk_pressure(disk_usage.used_percent)
    console.print(
        f"Startup disk: {disk_usage.total_gb:.0f} GB, "
        f"{disk_usage.used_gb:.0f} GB used, "
        f"[bold]{disk_usage.free_gb:.0f} GB free[/bold] "
        f"[{color}]({disk_usage.used_percent:.0f}%, {label})[/{color}]\n"
    )


def show_report(report: Report) -> None:
    """Display scan results grouped by category."""
    summary = report.summary
    console.print(
        f"[dim]Scanned {summary.scanned_at:%b %d, %Y at %H:%M} — "
        f"{summary.installed_count} installed apps indexed[/dim]\n"
    )
    show_disk_summary(summary.disk_usage)

    for category, title in CATEGORY_TITLES.items():
        items = report.by_category(category)
        if not items:
            continue

        color = CATEGORY_COLORS[category]
        total = report.category_total_mb(category)
        console.print(
            f"[bold {color}]{title}[/bold {color}] [dim]({len(items)} items — {format_size_mb(total)})[/dim]"
        )
        table = Table(show_header=True, header_style=f"bold {color}")
        table.add_column("Name")
        table.add_column("Size", justify="right")
        table.add_column("Modified", justify="right")
        table.add_column("Path", style="dim")

        for item in items:
            style = size_style(item.size_mb)
            table.add_row(
                item.display_name,
                f"[{style}]{item.size_human}[/{style}]",
                item.modified_date,
                item.path,
            )

        console.print(table)
        console.print()

    for warning in summary.warnings:
        console.print(f"[yellow]Skipped {warning.path}: {warning.message}[/yellow]")

    if summary.cancelled:
        console.print("[yellow]Scan cancelled — results are partial[/yellow]")

    console.print(
        Panel(
            f"[bold]Total reclaimable:[/bold] {format_size_mb(report.total_mb)}\n"
            f"  Items found: {len(report.items)}\n"
            f"  Leftover apps: {report.leftover_app_count}",
            title="Summary",
            border_style="blue",
        )
    )


def show_index(index: InstalledIndex, show_entries: bool = False) -> None:
    """Display the installed-software index."""
    console.print(f"[bold]{len(index)}[/bold] installed-app tokens indexed")
    if show_entries:
        for entry in index:
            console.print(f"  • {entry}")


def show_match_results(results: list[tuple[str, str | None]]) -> None:
    """Display which strategy matched each name."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Installed")
    table.add_column("Strategy")

    for name, strategy in results:
        if strategy:
            table.add_row(name, "[green]yes[/green]", strategy)
        else:
            table.add_row(name, "[red]no[/red]", "[dim]-[/dim]")

    console.print(table)


def show_locations(locations: list[ProbeLocation]) -> None:
    """Display the probe locations."""
    table = Table(title="Probe Locations", show_header=True, header_style="bold")
    table.add_column("ID", style="bold")
    table.add_column("Path")
    table.add_column("Floor", justify="right")
    table.add_column("Description", style="dim")

    for location in locations:
        floor = f"{location.min_size_mb:g} MB" if location.min_size_mb else "-"
        table.add_row(location.id, location.path, floor, location.description)

    console.print(table)


def show_status(disk_usage: DiskUsage) -> None:
    """Startup disk figures without running a scan."""
    color, label = disk_pressure(disk_usage.used_percent)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column(justify="right")
    table.add_row("Capacity", f"{disk_usage.total_gb:.0f} GB")
    table.add_row("Used", f"{disk_usage.used_gb:.0f} GB ({disk_usage.used_percent:.0f}%)")
    table.add_row("Free", f"[bold]{disk_usage.free_gb:.0f} GB[/bold]")

    console.print(f"Startup disk {disk_usage.mount_point}: [{color}]{label}[/{color}]")
    console.print(table)
    if color != "green":
        console.print("[dim]Run 'leftovers scan' to find data left behind by removed apps.[/dim]")


def show_scanning_progress() -> Progress:
    """Progress bar ticking once per finished location."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("locations"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
