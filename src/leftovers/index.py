"""Index of the software currently installed on this Mac.

The index is a flat set of lowercase tokens: application display names
("firefox"), bundle identifiers ("org.mozilla.firefox") and the basenames of
running executables. It is rebuilt from scratch on every run.
"""

import logging
import os
import plistlib
from pathlib import Path
from typing import Callable, Iterable, Iterator
from xml.parsers.expat import ExpatError

from leftovers.shell import run_command

logger = logging.getLogger(__name__)

APP_BUNDLE_QUERY = "kMDItemContentType == 'com.apple.application-bundle'"

# Fallback when Spotlight is disabled or its index is incomplete
APPLICATION_DIRS = ("/Applications", "~/Applications")

IndexSource = Callable[[], Iterable[str]]


def normalize(name: str) -> str:
    """Normalize a token for the index."""
    return name.strip().lower()


class InstalledIndex:
    """Immutable set of normalized installed-software tokens."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[str] = ()):
        normalized = (normalize(e) for e in entries)
        self._entries: frozenset[str] = frozenset(e for e in normalized if e)

    @classmethod
    def from_names(cls, *names: str) -> "InstalledIndex":
        return cls(names)

    @property
    def entries(self) -> frozenset[str]:
        return self._entries

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __repr__(self) -> str:
        return f"InstalledIndex({len(self._entries)} entries)"

    def contains_substring(self, fragment: str) -> bool:
        """Whether any entry contains fragment. An empty fragment never matches."""
        if not fragment:
            return False
        return any(fragment in entry for entry in self._entries)


def read_bundle_identifier(app: Path) -> str | None:
    """Read CFBundleIdentifier from an app bundle's Info.plist."""
    plist_path = app / "Contents" / "Info.plist"
    try:
        with open(plist_path, "rb") as f:
            plist = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError, ExpatError):
        return None

    if not isinstance(plist, dict):
        return None
    identifier = plist.get("CFBundleIdentifier")
    return identifier if isinstance(identifier, str) else None


def bundle_tokens(app: Path) -> list[str]:
    """Display name and, when present, bundle identifier of an app bundle."""
    tokens = [app.name.removesuffix(".app")]
    identifier = read_bundle_identifier(app)
    if identifier:
        tokens.append(identifier)
    return tokens


def spotlight_applications() -> list[str]:
    """Names and identifiers of every app bundle Spotlight knows about."""
    result = run_command(["mdfind", APP_BUNDLE_QUERY], timeout=60.0)
    if not result.success:
        logger.debug("mdfind failed: %s", result.stderr.strip())
        return []

    tokens: list[str] = []
    for line in result.stdout.splitlines():
        line = line.strip()
        if line:
            tokens.extend(bundle_tokens(Path(line)))
    return tokens


def application_folders(dirs: Iterable[str] = APPLICATION_DIRS) -> list[str]:
    """Names and identifiers of the bundles in the standard Applications folders."""
    tokens: list[str] = []
    for app_dir in dirs:
        path = Path(app_dir).expanduser()
        if not path.is_dir():
            continue
        for app in sorted(path.glob("*.app")):
            tokens.extend(bundle_tokens(app))
    return tokens


def running_processes() -> list[str]:
    """Executable basenames of running processes (menu-bar agents have no bundle name)."""
    result = run_command(["ps", "-eo", "comm="], timeout=15.0)
    if not result.success:
        logger.debug("ps failed: %s", result.stderr.strip())
        return []
    return [os.path.basename(line.strip()) for line in result.stdout.splitlines() if line.strip()]


DEFAULT_SOURCES: tuple[IndexSource, ...] = (
    spotlight_applications,
    application_folders,
    running_processes,
)


def build_installed_index(sources: Iterable[IndexSource] | None = None) -> InstalledIndex:
    """
    Build the installed-software index from all sources.

    A source that fails or returns nothing is skipped; the worst case is a
    sparse index, never an error.

    Args:
        sources: Callables returning tokens (default: DEFAULT_SOURCES)

    Returns:
        InstalledIndex with the union of all tokens
    """
    tokens: list[str] = []
    for source in DEFAULT_SOURCES if sources is None else sources:
        source_name = getattr(source, "__name__", repr(source))
        try:
            contributed = list(source())
        except Exception as e:
            logger.debug("Index source %s unavailable: %s", source_name, e)
            continue

        if not contributed:
            logger.debug("Index source %s returned nothing", source_name)
        tokens.extend(contributed)

    index = InstalledIndex(tokens)
    logger.debug("Indexed %d installed-app tokens", len(index))
    return index
