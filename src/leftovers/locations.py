"""Probe location definitions for leftovers."""

from enum import Enum
from fnmatch import fnmatchcase
from pathlib import Path

from pydantic import BaseModel, Field


class Policy(str, Enum):
    """Disposition rule applied to a location's entries."""

    APP_SUPPORT = "app_support"
    CACHE = "cache"
    SAVED_STATE = "saved_state"
    LOGS = "logs"
    PREFERENCES = "preferences"
    CONTAINER = "container"
    DOTFILES = "dotfiles"
    DEV_CACHE = "dev_cache"
    DOWNLOADS_LARGE = "downloads_large"
    DOWNLOADS_OLD = "downloads_old"
    SYSTEM_PREFIX = "system_prefix"
    HOME_DIRS = "home_dirs"


class EntryKind(str, Enum):
    """Which entries of a location get enumerated."""

    DIRECTORIES = "directories"  # Visible subdirectories, symlinks not followed
    DOT_ENTRIES = "dot_entries"  # Hidden files and directories
    FILES = "files"  # Regular files down to max_depth
    SELF = "self"  # The location path itself


class ProbeLocation(BaseModel):
    """A filesystem root scanned under a dedicated policy."""

    id: str = Field(..., description="Unique identifier for the location")
    name: str = Field(..., description="Label used in item names")
    path: str = Field(..., description="Path to scan (supports ~ expansion)")
    policy: Policy = Field(..., description="Disposition rule for entries")
    entries: EntryKind = Field(EntryKind.DIRECTORIES, description="Entries to enumerate")
    max_depth: int = Field(1, ge=1, description="Depth for FILES enumeration")

    exclude_names: list[str] = Field(default_factory=list, description="Names always skipped")
    exclude_patterns: list[str] = Field(
        default_factory=list, description="Case-sensitive glob patterns always skipped"
    )
    exclude_prefixes: list[str] = Field(
        default_factory=list, description="Name prefixes always skipped"
    )
    min_size_mb: float = Field(0, ge=0, description="Items smaller than this are never reported")

    strip_suffix: str | None = Field(None, description="Suffix removed before name matching")
    strip_prefix: str | None = Field(None, description="Prefix removed before name matching")
    owner_label: str | None = Field(None, description="Fixed owner label (developer caches)")
    uses_matcher: bool = Field(True, description="Whether entries are matched against the index")

    description: str = Field("", description="What lives here")

    def is_excluded(self, name: str) -> bool:
        """Whether an entry name is skipped regardless of matching."""
        if name in self.exclude_names:
            return True
        if any(fnmatchcase(name, pattern) for pattern in self.exclude_patterns):
            return True
        return any(name.startswith(prefix) for prefix in self.exclude_prefixes)

    def match_name(self, name: str) -> str:
        """Entry name as handed to the matcher."""
        if self.strip_prefix and name.startswith(self.strip_prefix):
            name = name[len(self.strip_prefix) :]
        if self.strip_suffix and name.endswith(self.strip_suffix):
            name = name[: -len(self.strip_suffix)]
        return name

    def resolve(self, home: Path) -> Path:
        """Absolute path of this location for a given home directory."""
        if self.path == "~":
            return home
        if self.path.startswith("~/"):
            return home / self.path[2:]
        return Path(self.path)


# Shell and tooling dotfiles that are never flagged (prefix match)
SKIP_DOTFILES = [
    ".DS_Store",
    ".Trash",
    ".claude",
    ".claude.json",
    ".cursor",
    ".zsh_history",
    ".zsh_sessions",
    ".zshrc",
    ".zprofile",
    ".zshenv",
    ".bash_profile",
    ".bashrc",
    ".profile",
    ".gitconfig",
    ".ssh",
    ".config",
    ".docker",
    ".local",
    ".cache",
    ".npm",
    ".cargo",
    ".bun",
    ".expo",
    ".gemini",
    ".colima",
    ".ollama",
    ".oh-my-zsh",
    ".lesshst",
    ".CFUserTextEncoding",
]

# Standard macOS home folders, never reported
STANDARD_HOME_FOLDERS = [
    "Library",
    "Desktop",
    "Documents",
    "Downloads",
    "Music",
    "Movies",
    "Pictures",
    "Public",
    "Applications",
]

# Standard /usr/local subsystems
STANDARD_PREFIX_DIRS = [
    "bin",
    "lib",
    "share",
    "include",
    "Homebrew",
    "cli-plugins",
    "etc",
    "var",
    "opt",
    "sbin",
    "man",
    "libexec",
]

# All probe locations, in scan order
LOCATIONS: dict[str, ProbeLocation] = {
    "app_support": ProbeLocation(
        id="app_support",
        name="App Support",
        path="~/Library/Application Support",
        policy=Policy.APP_SUPPORT,
        exclude_names=["Apple", "CloudKit", "AddressBook", "CrashReporter", "Animoji", "AudioUnitCache"],
        exclude_patterns=["com.apple.*"],
        description="Per-app data folders; leftovers when the app is gone",
    ),
    "caches": ProbeLocation(
        id="caches",
        name="Cache",
        path="~/Library/Caches",
        policy=Policy.CACHE,
        exclude_names=["Metadata"],
        exclude_patterns=["com.apple.*"],
        min_size_mb=1,
        description="App caches; clearable when installed, leftovers otherwise",
    ),
    "saved_state": ProbeLocation(
        id="saved_state",
        name="Saved State",
        path="~/Library/Saved Application State",
        policy=Policy.SAVED_STATE,
        strip_suffix=".savedState",
        description="Window restoration state",
    ),
    "logs": ProbeLocation(
        id="logs",
        name="Logs",
        path="~/Library/Logs",
        policy=Policy.LOGS,
        exclude_names=["DiagnosticReports"],
        exclude_patterns=["com.apple.*"],
        description="Per-app log folders",
    ),
    "preferences": ProbeLocation(
        id="preferences",
        name="Preferences",
        path="~/Library/Preferences",
        policy=Policy.PREFERENCES,
        description="Preference folders (plist files are ignored)",
    ),
    "containers": ProbeLocation(
        id="containers",
        name="Container",
        path="~/Library/Containers",
        policy=Policy.CONTAINER,
        exclude_patterns=["com.apple.*"],
        min_size_mb=5,
        description="Sandboxed app containers",
    ),
    "group_containers": ProbeLocation(
        id="group_containers",
        name="Group Container",
        path="~/Library/Group Containers",
        policy=Policy.CONTAINER,
        exclude_patterns=["*.apple.*", "*.Apple.*"],
        min_size_mb=5,
        description="Containers shared between apps of one vendor",
    ),
    "dotfiles": ProbeLocation(
        id="dotfiles",
        name="dotfile",
        path="~",
        policy=Policy.DOTFILES,
        entries=EntryKind.DOT_ENTRIES,
        exclude_prefixes=SKIP_DOTFILES,
        strip_prefix=".",
        description="Hidden files and folders in the home directory",
    ),
    "npm_cache": ProbeLocation(
        id="npm_cache",
        name="npm cache",
        path="~/.npm",
        policy=Policy.DEV_CACHE,
        entries=EntryKind.SELF,
        owner_label="npm",
        uses_matcher=False,
        description="npm package cache and logs",
    ),
    "user_cache": ProbeLocation(
        id="user_cache",
        name="User cache (~/.cache)",
        path="~/.cache",
        policy=Policy.DEV_CACHE,
        entries=EntryKind.SELF,
        owner_label="Various dev tools",
        uses_matcher=False,
        description="XDG cache shared by command-line tools",
    ),
    "cargo_cache": ProbeLocation(
        id="cargo_cache",
        name="Cargo registry cache",
        path="~/.cargo/registry",
        policy=Policy.DEV_CACHE,
        entries=EntryKind.SELF,
        owner_label="Cargo",
        uses_matcher=False,
        description="Downloaded crate sources",
    ),
    "bun_cache": ProbeLocation(
        id="bun_cache",
        name="Bun install cache",
        path="~/.bun/install/cache",
        policy=Policy.DEV_CACHE,
        entries=EntryKind.SELF,
        owner_label="Bun",
        uses_matcher=False,
        description="Bun package cache",
    ),
    "downloads_large": ProbeLocation(
        id="downloads_large",
        name="Large download",
        path="~/Downloads",
        policy=Policy.DOWNLOADS_LARGE,
        entries=EntryKind.FILES,
        max_depth=2,
        uses_matcher=False,
        description="Files over 50 MB in Downloads and its subfolders",
    ),
    "downloads_old": ProbeLocation(
        id="downloads_old",
        name="Old download",
        path="~/Downloads",
        policy=Policy.DOWNLOADS_OLD,
        entries=EntryKind.FILES,
        min_size_mb=1,
        uses_matcher=False,
        description="Downloads between 1 and 50 MB untouched for a year",
    ),
    "usr_local": ProbeLocation(
        id="usr_local",
        name="/usr/local",
        path="/usr/local",
        policy=Policy.SYSTEM_PREFIX,
        exclude_names=STANDARD_PREFIX_DIRS,
        description="Non-standard folders under /usr/local",
    ),
    "home_dirs": ProbeLocation(
        id="home_dirs",
        name="Home folder",
        path="~",
        policy=Policy.HOME_DIRS,
        exclude_names=STANDARD_HOME_FOLDERS,
        uses_matcher=False,
        description="Empty, large or stale folders directly in the home directory",
    ),
}


def get_location(location_id: str) -> ProbeLocation | None:
    """Get a probe location by ID."""
    return LOCATIONS.get(location_id)


def get_all_locations() -> list[ProbeLocation]:
    """Get all probe locations in scan order."""
    return list(LOCATIONS.values())
