"""Package-manager cleanup estimates folded into the report."""

import logging
import re
import subprocess

from leftovers.models import ItemCategory, ReportItem
from leftovers.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# Path value of the synthetic Homebrew item. It cannot be removed by path;
# command generators emit `brew cleanup` for it instead.
BREW_CLEANUP_SENTINEL = "brew cleanup"

_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGT]?B)\b", re.IGNORECASE)

_UNIT_TO_MB = {
    "B": 1 / 1024**2,
    "KB": 1 / 1024,
    "MB": 1.0,
    "GB": 1024.0,
    "TB": 1024.0**2,
}


class SizeParseError(ValueError):
    """Text did not contain a number followed by a size unit."""


def parse_size_mb(text: str) -> float:
    """
    Parse a human-readable size like "2.3GB" or "512 MB" into megabytes.

    Args:
        text: Text containing the size

    Returns:
        Size in MB, rounded to two decimals

    Raises:
        SizeParseError: If no size is found.
    """
    match = _SIZE_PATTERN.search(text)
    if not match:
        raise SizeParseError(f"No size found in {text!r}")

    value, unit = match.groups()
    return round(float(value) * _UNIT_TO_MB[unit.upper()], 2)


def brew_cleanup_estimate(timeout: float = 120.0) -> ReportItem | None:
    """
    Ask Homebrew how much `brew cleanup` would free.

    Returns:
        A synthetic cache item, or None when brew is missing, fails, or
        prints nothing parseable
    """
    if not command_exists("brew"):
        return None

    try:
        result = run_command(["brew", "cleanup", "--dry-run"], timeout=timeout)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("brew cleanup --dry-run failed: %s", e)
        return None

    return parse_brew_output(result.stdout)


def parse_brew_output(output: str) -> ReportItem | None:
    """Build the Homebrew item from `brew cleanup --dry-run` output."""
    line = next((ln for ln in output.splitlines() if "free approximately" in ln), None)
    if line is None:
        return None

    try:
        size_mb = parse_size_mb(line)
    except SizeParseError as e:
        logger.debug("Unparseable brew estimate: %s", e)
        return None

    return ReportItem(
        display_name="Homebrew old versions (run: brew cleanup)",
        path=BREW_CLEANUP_SENTINEL,
        size_mb=size_mb,
        modified_date="N/A",
        category=ItemCategory.CACHE,
        owner_label="Homebrew",
    )
