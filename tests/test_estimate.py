"""Tests for the Homebrew cleanup estimate."""

import subprocess
from unittest.mock import patch

import pytest

from leftovers.estimate import (
    BREW_CLEANUP_SENTINEL,
    SizeParseError,
    brew_cleanup_estimate,
    parse_brew_output,
    parse_size_mb,
)
from leftovers.models import ItemCategory
from leftovers.shell import CommandResult

BREW_OUTPUT = """\
Would remove: /Users/me/Library/Caches/Homebrew/node--20.1.0.bottle.tar.gz (12.1MB)
Would remove: /opt/homebrew/Cellar/python@3.11/3.11.4 (3,112 files, 64.2MB)
==> This operation would free approximately 2.3GB of disk space.
"""


class TestParseSizeMb:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2.3GB", 2355.2),
            ("512 MB", 512.0),
            ("1.5TB", 1572864.0),
            ("2048KB", 2.0),
            ("free approximately 10.5MB of disk", 10.5),
            ("1gb", 1024.0),
        ],
    )
    def test_units(self, text, expected):
        assert parse_size_mb(text) == expected

    def test_no_size(self):
        with pytest.raises(SizeParseError):
            parse_size_mb("nothing to see")

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_size_mb("GB")


class TestParseBrewOutput:
    def test_builds_cache_item(self):
        item = parse_brew_output(BREW_OUTPUT)
        assert item.display_name == "Homebrew old versions (run: brew cleanup)"
        assert item.path == BREW_CLEANUP_SENTINEL
        assert item.size_mb == 2355.2
        assert item.category == ItemCategory.CACHE
        assert item.owner_label == "Homebrew"
        assert item.modified_date == "N/A"

    def test_nothing_to_clean(self):
        assert parse_brew_output("") is None

    def test_unparseable_line(self):
        assert parse_brew_output("This operation would free approximately lots of space") is None


class TestBrewCleanupEstimate:
    @patch("leftovers.estimate.command_exists", return_value=False)
    def test_brew_missing(self, mock_exists):
        assert brew_cleanup_estimate() is None

    @patch("leftovers.estimate.run_command")
    @patch("leftovers.estimate.command_exists", return_value=True)
    def test_success(self, mock_exists, mock_run):
        mock_run.return_value = CommandResult(stdout=BREW_OUTPUT, stderr="", returncode=0)
        item = brew_cleanup_estimate()
        assert item.size_mb == 2355.2
        assert mock_run.call_args[0][0] == ["brew", "cleanup", "--dry-run"]

    @patch("leftovers.estimate.run_command")
    @patch("leftovers.estimate.command_exists", return_value=True)
    def test_timeout(self, mock_exists, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired("brew", 120)
        assert brew_cleanup_estimate() is None

    @patch("leftovers.estimate.run_command")
    @patch("leftovers.estimate.command_exists", return_value=True)
    def test_exec_failure(self, mock_exists, mock_run):
        mock_run.side_effect = PermissionError("brew")
        assert brew_cleanup_estimate() is None
