"""Top-level scan orchestration for leftovers."""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable

from leftovers.classifier import ReportCollector
from leftovers.config import Settings, load_settings
from leftovers.estimate import brew_cleanup_estimate
from leftovers.index import InstalledIndex, build_installed_index
from leftovers.locations import ProbeLocation, get_all_locations
from leftovers.matcher import NameMatcher
from leftovers.models import ItemCategory, Report, ReportItem, RunSummary
from leftovers.scanner import get_disk_usage, scan_all_locations

logger = logging.getLogger(__name__)


def analyze_disk(
    settings: Settings | None = None,
    index: InstalledIndex | None = None,
    locations: list[ProbeLocation] | None = None,
    home: Path | None = None,
    cancel: threading.Event | None = None,
    progress_callback: Callable[[str, int, int], None] | None = None,
    estimate: Callable[[], ReportItem | None] | None = brew_cleanup_estimate,
) -> Report:
    """
    Run the full engine: index, scan, classify, estimate.

    Args:
        settings: Scan settings (default: loaded from config file)
        index: Prebuilt installed index (default: built from the system)
        locations: Probe locations to scan (default: all)
        home: Home directory (default: Path.home())
        cancel: Event for cooperative cancellation
        progress_callback: Optional callback(location_name, current, total)
        estimate: Source of the package-manager item, or None to skip

    Returns:
        Report with items and run summary
    """
    settings = settings or load_settings()
    started = datetime.now()
    disk_usage = get_disk_usage()

    if index is None:
        index = build_installed_index()
    matcher = NameMatcher(index)

    collector, warnings = scan_all_locations(
        locations if locations is not None else get_all_locations(),
        matcher,
        settings,
        home=home,
        collector=ReportCollector(),
        cancel=cancel,
        progress_callback=progress_callback,
    )

    cancelled = cancel is not None and cancel.is_set()
    if estimate is not None and settings.include_brew_estimate and not cancelled:
        item = estimate()
        if item is not None:
            collector.add(item)

    logger.debug("Scan finished with %d items", len(collector))
    return Report(
        items=collector.items,
        summary=RunSummary(
            scanned_at=started,
            disk_usage=disk_usage,
            installed_count=len(index),
            warnings=warnings,
            cancelled=cancelled,
        ),
    )


def filter_by_category(report: Report, category: ItemCategory) -> Report:
    """Copy of a report keeping one category of items."""
    return Report(
        items=[i for i in report.items if i.category == category],
        summary=report.summary,
    )


def get_largest_items(report: Report, top_n: int = 10) -> list[ReportItem]:
    """Top N items by size."""
    return sorted(report.items, key=lambda i: i.size_mb, reverse=True)[:top_n]
