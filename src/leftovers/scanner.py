"""Filesystem scanning for leftovers."""

import logging
import os
import re
import shutil
import stat
import subprocess
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from functools import cached_property
from pathlib import Path
from typing import Callable, Iterator

from leftovers.classifier import RULES, ReportCollector, make_item
from leftovers.config import Settings
from leftovers.locations import EntryKind, ProbeLocation
from leftovers.matcher import NameMatcher
from leftovers.models import DiskUsage, LocationWarning, ReportItem
from leftovers.shell import run_command

logger = logging.getLogger(__name__)

# Age reported for paths that vanished or cannot be stat'ed
AGE_UNKNOWN = 9999
SECONDS_PER_DAY = 86400


class LocationUnreadable(OSError):
    """A probe location exists but cannot be listed."""


def get_directory_size(
    path: Path,
    max_depth: int = 64,
    deadline: float | None = None,
) -> tuple[int, bool]:
    """
    Recursive directory size using os.scandir.

    Symlinks are not followed. Unreadable children are skipped.

    Args:
        path: Directory to measure
        max_depth: Maximum recursion depth
        deadline: time.monotonic() value after which measuring stops

    Returns:
        Tuple of (total_bytes, complete); complete is False when the
        deadline cut the walk short
    """
    total_size = 0
    complete = True

    def _scan(p: str, depth: int):
        nonlocal total_size, complete
        if depth > max_depth or not complete:
            return
        try:
            with os.scandir(p) as entries:
                for entry in entries:
                    if deadline is not None and time.monotonic() > deadline:
                        complete = False
                        return
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            _scan(entry.path, depth + 1)
                    except OSError:
                        continue
        except OSError:
            pass

    _scan(str(path), 0)
    return total_size, complete


def get_size_kb(path: Path, deadline: float | None = None) -> int:
    """Size of a file or directory tree in KB; 0 when the path is gone."""
    try:
        st = path.lstat()
    except OSError:
        return 0

    if stat.S_ISDIR(st.st_mode):
        size, complete = get_directory_size(path, deadline=deadline)
        if not complete:
            logger.debug("Size of %s timed out, using partial %d bytes", path, size)
        return size // 1024
    return st.st_size // 1024


def get_mtime(path: Path) -> float | None:
    """Last modification time, or None when the path is gone."""
    try:
        return path.lstat().st_mtime
    except OSError:
        return None


def age_days(mtime: float | None, now: float) -> int:
    """Whole days since mtime; AGE_UNKNOWN when mtime is unknown."""
    if mtime is None:
        return AGE_UNKNOWN
    return int((now - mtime) // SECONDS_PER_DAY)


def format_date(mtime: float | None) -> str:
    """Local YYYY-MM-DD date, or N/A."""
    if mtime is None:
        return "N/A"
    return datetime.fromtimestamp(mtime).strftime("%Y-%m-%d")


def size_kb_to_mb(size_kb: int) -> float:
    """Convert KB to MB, truncated to two decimals."""
    return (size_kb * 100 // 1024) / 100


class ScanEntry:
    """
    One child of a probe location.

    Size and age are measured on first access, so entries a rule rejects
    on the match result alone are never walked.
    """

    def __init__(
        self,
        path: Path,
        *,
        matched: bool | None = None,
        now: float | None = None,
        timeout: float | None = None,
    ):
        self.path = path
        self.name = path.name
        self.matched = matched
        self._now = time.time() if now is None else now
        self._timeout = timeout

    @cached_property
    def size_kb(self) -> int:
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        return get_size_kb(self.path, deadline=deadline)

    @property
    def size_mb(self) -> float:
        return size_kb_to_mb(self.size_kb)

    @cached_property
    def mtime(self) -> float | None:
        return get_mtime(self.path)

    @property
    def age_days(self) -> int:
        return age_days(self.mtime, self._now)

    @property
    def modified_date(self) -> str:
        return format_date(self.mtime)

    @cached_property
    def child_count(self) -> int:
        """Number of entries inside, hidden ones included."""
        try:
            return len(os.listdir(self.path))
        except OSError:
            return 0

    def __repr__(self) -> str:
        return f"ScanEntry({str(self.path)!r}, matched={self.matched})"


def _iter_files(root: Path, max_depth: int) -> Iterator[Path]:
    """Regular files under root, at most max_depth levels down, sorted per level."""
    try:
        with os.scandir(root) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError:
        return

    for child in children:
        try:
            if child.is_file(follow_symlinks=False):
                yield Path(child.path)
            elif child.is_dir(follow_symlinks=False) and max_depth > 1:
                yield from _iter_files(Path(child.path), max_depth - 1)
        except OSError:
            continue


def enumerate_entries(location: ProbeLocation, root: Path) -> list[Path]:
    """
    List the entries of one location, sorted by name.

    Raises:
        LocationUnreadable: If root exists but cannot be listed.
    """
    if location.entries == EntryKind.SELF:
        return [root] if root.is_dir() else []

    try:
        with os.scandir(root) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise LocationUnreadable(str(e)) from e

    if location.entries == EntryKind.FILES:
        return list(_iter_files(root, location.max_depth))

    paths = []
    for child in children:
        hidden = child.name.startswith(".")
        if location.entries == EntryKind.DOT_ENTRIES:
            # Skip ".." style names, like the .[^.]* glob
            if hidden and not child.name.startswith(".."):
                paths.append(Path(child.path))
            continue
        try:
            if not hidden and child.is_dir(follow_symlinks=False):
                paths.append(Path(child.path))
        except OSError:
            continue
    return paths


def scan_location(
    location: ProbeLocation,
    matcher: NameMatcher,
    settings: Settings,
    home: Path,
    now: float | None = None,
    cancel: threading.Event | None = None,
) -> list[tuple[Path, ReportItem]]:
    """
    Scan one probe location and classify its entries.

    Args:
        location: Location to scan
        matcher: Matcher over the installed index
        settings: Scan settings
        home: Home directory the location resolves against
        now: Reference time for ages (default: current time)
        cancel: Event that stops the scan between entries

    Returns:
        List of (absolute path, ReportItem) in entry order

    Raises:
        LocationUnreadable: If the location exists but cannot be reached or listed.
    """
    root = location.resolve(home)
    try:
        root.stat()
    except (FileNotFoundError, NotADirectoryError):
        logger.debug("Skipping missing location %s", root)
        return []
    except OSError as e:
        raise LocationUnreadable(str(e)) from e

    rule = RULES[location.policy]
    now = time.time() if now is None else now
    extra_excluded = settings.exclusions_for(location.id)
    results: list[tuple[Path, ReportItem]] = []

    for path in enumerate_entries(location, root):
        if cancel is not None and cancel.is_set():
            logger.debug("Scan of %s cancelled", location.id)
            break

        name = path.name
        if location.entries != EntryKind.SELF and (
            location.is_excluded(name) or name in extra_excluded
        ):
            continue
        if settings.is_protected(path):
            continue

        matched = matcher.is_installed(location.match_name(name)) if location.uses_matcher else None
        entry = ScanEntry(path, matched=matched, now=now, timeout=settings.entry_timeout)

        disposition = rule(location, entry, settings)
        if disposition is None:
            continue

        results.append((path, make_item(location, entry, disposition, home)))

    return results


def scan_all_locations(
    locations: list[ProbeLocation],
    matcher: NameMatcher,
    settings: Settings,
    home: Path | None = None,
    collector: ReportCollector | None = None,
    cancel: threading.Event | None = None,
    progress_callback: Callable[[str, int, int], None] | None = None,
) -> tuple[ReportCollector, list[LocationWarning]]:
    """
    Scan all locations in parallel.

    Items are merged in location order, so the result does not depend on
    which worker finishes first.

    Args:
        locations: Probe locations to scan
        matcher: Matcher over the installed index
        settings: Scan settings
        home: Home directory (default: Path.home())
        collector: Collector to append to (default: a new one)
        cancel: Event for cooperative cancellation
        progress_callback: Optional callback(location_name, current, total)

    Returns:
        Tuple of (collector, warnings for unreadable locations)
    """
    home = home or Path.home()
    collector = collector or ReportCollector()
    now = time.time()
    total = len(locations)

    per_location: dict[str, list[tuple[Path, ReportItem]]] = {}
    warnings: dict[str, LocationWarning] = {}

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        future_to_location = {
            executor.submit(scan_location, loc, matcher, settings, home, now, cancel): loc
            for loc in locations
        }

        for i, future in enumerate(as_completed(future_to_location)):
            location = future_to_location[future]

            if progress_callback:
                progress_callback(location.name, i + 1, total)

            try:
                per_location[location.id] = future.result()
            except OSError as e:
                root = location.resolve(home)
                logger.warning("Cannot read %s: %s", root, e)
                warnings[location.id] = LocationWarning(
                    location_id=location.id, path=str(root), message=str(e)
                )

    for location in locations:
        for path, item in per_location.get(location.id, []):
            collector.add(item, key=str(path), floor_mb=location.min_size_mb)

    ordered_warnings = [warnings[loc.id] for loc in locations if loc.id in warnings]
    return collector, ordered_warnings


# "Container Free Space:      45.1 GB (45107195904 Bytes)"
CONTAINER_SPACE_RE = re.compile(r"Container (Total|Free) Space:.*\((\d+) Bytes\)")


def parse_container_space(diskutil_output: str) -> tuple[int, int] | None:
    """Total and free bytes of the APFS container in `diskutil info` output."""
    found = {kind: int(count) for kind, count in CONTAINER_SPACE_RE.findall(diskutil_output)}
    if found.get("Total") and found.get("Free"):
        return found["Total"], found["Free"]
    return None


def get_disk_usage(mount_point: str = "/") -> DiskUsage:
    """
    Usage of the volume holding `mount_point`.

    Prefers the APFS container figures from diskutil and falls back
    to statvfs where diskutil is missing or says nothing useful.
    """
    space = None
    try:
        result = run_command(["diskutil", "info", mount_point], timeout=10)
        if result.success:
            space = parse_container_space(result.stdout)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("diskutil unavailable: %s", e)

    if space is None:
        usage = shutil.disk_usage(mount_point)
        return DiskUsage(
            total_bytes=usage.total,
            used_bytes=usage.used,
            free_bytes=usage.free,
            mount_point=mount_point,
        )

    total_bytes, free_bytes = space
    return DiskUsage(
        total_bytes=total_bytes,
        used_bytes=total_bytes - free_bytes,
        free_bytes=free_bytes,
        mount_point=mount_point,
    )
