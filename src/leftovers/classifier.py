"""Disposition rules and result aggregation for leftovers.

Each probe-location policy maps a scanned entry (plus its match result)
to a Disposition or to None when the entry is not worth reporting. The
collector turns dispositions into ReportItems and applies the size floors.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from leftovers.config import Settings
from leftovers.locations import Policy, ProbeLocation
from leftovers.matcher import readable_name
from leftovers.models import ItemCategory, ReportItem

if TYPE_CHECKING:
    from leftovers.scanner import ScanEntry

logger = logging.getLogger(__name__)

# Final backstop after location floors: nothing that rounds to zero
GLOBAL_FLOOR_MB = 0.005

# Dotfile thresholds (MB)
ORPHANED_DOTFILE_MB = 10
STALE_DOTFILE_MB = 5

# Downloads bands (KB)
LARGE_DOWNLOAD_KB = 50 * 1024
OLD_DOWNLOAD_MIN_KB = 1024

# Home-level folder tiers
NEAR_EMPTY_MAX_ENTRIES = 1
NEAR_EMPTY_SIZE_MB = 0.01
LARGE_FOLDER_KB = 100 * 1024
STALE_FOLDER_MIN_KB = 1024

EXTENSION_LABELS: dict[str, str] = {
    **dict.fromkeys(["mkv", "mp4", "avi", "mov", "wmv", "m4v", "webm"], "Video file"),
    **dict.fromkeys(["dmg", "iso", "img"], "Disk image"),
    **dict.fromkeys(["zip", "tar", "gz", "bz2", "xz", "rar", "7z", "tgz"], "Archive"),
    **dict.fromkeys(["pkg", "mpkg"], "Installer"),
    "pdf": "PDF",
    "app": "Application",
}


@dataclass(frozen=True, slots=True)
class Disposition:
    """How an entry is reported."""

    category: ItemCategory
    display_name: str
    owner_label: str
    size_mb: float | None = None  # Overrides the measured size


Rule = Callable[[ProbeLocation, "ScanEntry", Settings], Disposition | None]


def extension_label(filename: str) -> str:
    """Owner label for a large download, by extension family."""
    _, dot, ext = filename.rpartition(".")
    if not dot:
        return "Large file"
    return EXTENSION_LABELS.get(ext.lower(), "Large file")


def _is_stale(entry: "ScanEntry", settings: Settings) -> bool:
    return entry.age_days > settings.stale_days


def classify_app_support(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    if entry.matched:
        return None
    rn = readable_name(entry.name)
    suffix = f"{location.name} — stale" if _is_stale(entry, settings) else location.name
    return Disposition(ItemCategory.LEFTOVER, f"{rn} ({suffix})", rn)


def classify_cache(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    rn = readable_name(entry.name)
    if entry.matched:
        return Disposition(ItemCategory.CACHE, f"{rn} (Cache)", rn)
    return Disposition(ItemCategory.LEFTOVER, f"{rn} (Leftover Cache)", rn)


def classify_leftover_or_stale(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    """Saved state, logs: leftovers, or stale data of installed apps."""
    rn = readable_name(location.match_name(entry.name))
    if not entry.matched:
        return Disposition(ItemCategory.LEFTOVER, f"{rn} ({location.name} — leftover)", rn)
    if _is_stale(entry, settings):
        return Disposition(ItemCategory.STALE, f"{rn} ({location.name} — stale)", rn)
    return None


def classify_leftover_only(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    """Preferences, containers: only uninstalled apps are reported."""
    if entry.matched:
        return None
    rn = readable_name(entry.name)
    return Disposition(ItemCategory.LEFTOVER, f"{rn} ({location.name} — leftover)", rn)


def classify_dotfile(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    name = entry.name
    bare = location.match_name(name)
    stale = _is_stale(entry, settings)

    if not entry.matched:
        if stale:
            return Disposition(ItemCategory.LEFTOVER, f"{name} (dotfile — leftover/stale)", bare)
        # Recently touched but no app found: flag only if large
        if entry.size_mb > ORPHANED_DOTFILE_MB:
            return Disposition(ItemCategory.LEFTOVER, f"{name} (dotfile — orphaned)", bare)
        return None

    # App is installed but the dotfile is old and big
    if stale and entry.size_mb > STALE_DOTFILE_MB:
        return Disposition(ItemCategory.STALE, f"{name} (dotfile — stale)", bare)
    return None


def classify_dev_cache(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    return Disposition(ItemCategory.CACHE, location.name, location.owner_label or location.name)


def classify_large_download(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    if entry.size_kb <= LARGE_DOWNLOAD_KB:
        return None
    return Disposition(ItemCategory.LARGE, entry.name, extension_label(entry.name))


def classify_old_download(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    # Band is disjoint from large downloads
    if not (OLD_DOWNLOAD_MIN_KB < entry.size_kb <= LARGE_DOWNLOAD_KB):
        return None
    if not _is_stale(entry, settings):
        return None
    return Disposition(ItemCategory.STALE, f"{entry.name} (old download)", "Old download")


def classify_system_prefix(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    if entry.matched:
        return None
    return Disposition(
        ItemCategory.LEFTOVER, f"{entry.name} ({location.path} — leftover)", entry.name
    )


def classify_home_dir(
    location: ProbeLocation, entry: "ScanEntry", settings: Settings
) -> Disposition | None:
    name = entry.name
    if entry.child_count <= NEAR_EMPTY_MAX_ENTRIES:
        return Disposition(
            ItemCategory.STALE,
            f"{name} (empty/near-empty folder)",
            name,
            size_mb=NEAR_EMPTY_SIZE_MB,
        )

    stale = _is_stale(entry, settings)
    if entry.size_kb > LARGE_FOLDER_KB:
        if stale:
            return Disposition(ItemCategory.STALE, f"{name} (large & stale)", name)
        return Disposition(ItemCategory.LARGE, f"{name} (large folder)", name)

    if stale and entry.size_kb > STALE_FOLDER_MIN_KB:
        return Disposition(ItemCategory.STALE, f"{name} (stale folder)", name)
    return None


RULES: dict[Policy, Rule] = {
    Policy.APP_SUPPORT: classify_app_support,
    Policy.CACHE: classify_cache,
    Policy.SAVED_STATE: classify_leftover_or_stale,
    Policy.LOGS: classify_leftover_or_stale,
    Policy.PREFERENCES: classify_leftover_only,
    Policy.CONTAINER: classify_leftover_only,
    Policy.DOTFILES: classify_dotfile,
    Policy.DEV_CACHE: classify_dev_cache,
    Policy.DOWNLOADS_LARGE: classify_large_download,
    Policy.DOWNLOADS_OLD: classify_old_download,
    Policy.SYSTEM_PREFIX: classify_system_prefix,
    Policy.HOME_DIRS: classify_home_dir,
}


def display_path(path: Path, home: Path) -> str:
    """Render a path as ~/... when it is under home."""
    try:
        relative = path.relative_to(home)
    except ValueError:
        return str(path)
    return "~" if relative == Path(".") else f"~/{relative}"


def make_item(
    location: ProbeLocation,
    entry: "ScanEntry",
    disposition: Disposition,
    home: Path,
) -> ReportItem:
    """Build the ReportItem for a classified entry."""
    size_mb = disposition.size_mb if disposition.size_mb is not None else entry.size_mb
    return ReportItem(
        display_name=disposition.display_name,
        path=display_path(entry.path, home),
        size_mb=size_mb,
        modified_date=entry.modified_date,
        category=disposition.category,
        owner_label=disposition.owner_label,
    )


class ReportCollector:
    """
    Thread-safe accumulator of report items.

    Applies the location floor and the global floor, and reports each
    absolute path at most once.
    """

    def __init__(self, global_floor_mb: float = GLOBAL_FLOOR_MB):
        self.global_floor_mb = global_floor_mb
        self._items: list[ReportItem] = []
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def add(self, item: ReportItem, key: str | None = None, floor_mb: float = 0) -> bool:
        """
        Append an item unless it is too small or already reported.

        Args:
            item: Item to add
            key: Dedup key, normally the absolute path (default: item.path)
            floor_mb: Location-specific minimum size

        Returns:
            True if the item was added
        """
        if item.size_mb < floor_mb or item.size_mb < self.global_floor_mb:
            return False

        key = key or item.path
        with self._lock:
            if key in self._seen:
                logger.debug("Skipping duplicate %s", key)
                return False
            self._seen.add(key)
            self._items.append(item)
        return True

    @property
    def items(self) -> list[ReportItem]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
