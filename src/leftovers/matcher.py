"""Fuzzy matching of directory names against the installed index.

Strategies run in a fixed order and the first success wins. Each one is
looser than the one before it, so later strategies only add matches.
"""

from typing import Callable

from leftovers.index import InstalledIndex

# Strategies receive the already-lowercased name
MatchStrategy = Callable[[str, InstalledIndex], bool]

MIN_SEGMENT_LENGTH = 3
MIN_WORD_LENGTH = 4

# Final bundle-id segments too generic to name an app
GENERIC_SEGMENTS = frozenset({"app", "macos"})


def exact_match(name: str, index: InstalledIndex) -> bool:
    """Name equals an index entry."""
    return name in index


def dotted_identifier_match(name: str, index: InstalledIndex) -> bool:
    """Reverse-domain names: full id, final segment, or id prefix."""
    if "." not in name:
        return False

    if index.contains_substring(name):
        return True

    # "com.foo.bar" -> prefix "com.foo", last "bar"
    prefix, _, last = name.rpartition(".")
    if len(last) >= MIN_SEGMENT_LENGTH and last in index:
        return True

    return index.contains_substring(prefix)


def token_substring_match(name: str, index: InstalledIndex) -> bool:
    """Any space-separated word of 4+ characters appears inside an entry."""
    # "google chrome helper" -> "google", "chrome", "helper"
    return any(
        len(word) >= MIN_WORD_LENGTH and index.contains_substring(word)
        for word in name.split(" ")
    )


def hyphen_prefix_match(name: str, index: InstalledIndex) -> bool:
    """Part before the first hyphen appears inside an entry."""
    # "waveterm-updater" -> "waveterm"
    base = name.split("-", 1)[0]
    return base != name and len(base) >= MIN_SEGMENT_LENGTH and index.contains_substring(base)


STRATEGIES: tuple[tuple[str, MatchStrategy], ...] = (
    ("exact", exact_match),
    ("dotted-identifier", dotted_identifier_match),
    ("token-substring", token_substring_match),
    ("hyphen-prefix", hyphen_prefix_match),
)


class NameMatcher:
    """Decides whether names correlate with installed software."""

    def __init__(
        self,
        index: InstalledIndex,
        strategies: tuple[tuple[str, MatchStrategy], ...] = STRATEGIES,
    ):
        self.index = index
        self.strategies = strategies

    def explain(self, name: str) -> str | None:
        """Name of the first strategy that matches, or None."""
        lowered = name.lower()
        for strategy_name, strategy in self.strategies:
            if strategy(lowered, self.index):
                return strategy_name
        return None

    def is_installed(self, name: str) -> bool:
        """Whether name correlates with anything in the index."""
        return self.explain(name) is not None


def is_installed(name: str, index: InstalledIndex) -> bool:
    """Shortcut for NameMatcher(index).is_installed(name)."""
    return NameMatcher(index).is_installed(name)


def readable_name(raw: str) -> str:
    """
    Derive a human-readable app name from a directory name.

    Bundle ids yield their last meaningful segment ("com.docker.docker" ->
    "docker"); other names are returned unchanged.
    """
    if "." not in raw:
        return raw

    stripped, _, last = raw.rpartition(".")
    if len(last) < MIN_SEGMENT_LENGTH or last.lower() in GENERIC_SEGMENTS:
        last = stripped.rpartition(".")[2]
    return last
