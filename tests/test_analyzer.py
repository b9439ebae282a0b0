"""Tests for scan orchestration."""

import threading
from unittest.mock import patch

import pytest

from leftovers.analyzer import analyze_disk, filter_by_category, get_largest_items
from leftovers.config import Settings
from leftovers.estimate import BREW_CLEANUP_SENTINEL, parse_brew_output
from leftovers.index import InstalledIndex
from leftovers.locations import get_all_locations, get_location
from leftovers.models import DiskUsage, ItemCategory, Report, ReportItem, RunSummary

DISK = DiskUsage(total_bytes=1000, used_bytes=600, free_bytes=400)

# Everything except /usr/local, which lives outside the fake home
HOME_LOCATIONS = [loc for loc in get_all_locations() if loc.id != "usr_local"]


def brew_item():
    return parse_brew_output("This operation would free approximately 2.3GB of disk space.")


@pytest.fixture(autouse=True)
def fixed_disk():
    with patch("leftovers.analyzer.get_disk_usage", return_value=DISK):
        yield


class TestAnalyzeDisk:
    def test_full_scan_of_fake_home(self, home, make_dir, make_file):
        make_dir(
            home / "Library" / "Application Support" / "com.acme.widget",
            size_mb=12.3,
            age_days=400,
        )
        make_dir(home / "Library" / "Application Support" / "Firefox", size_mb=3)
        make_dir(home / "Library" / "Caches" / "Spotify", size_mb=0.5)
        make_dir(home / ".npm", size_mb=40)
        make_file(home / "Downloads" / "movie.mkv", size_mb=1200)

        report = analyze_disk(
            settings=Settings(),
            index=InstalledIndex.from_names("Firefox", "Spotify"),
            locations=HOME_LOCATIONS,
            home=home,
            estimate=None,
        )

        names = [i.display_name for i in report.items]
        assert names == [
            "widget (App Support — stale)",
            "npm cache",
            "movie.mkv",
        ]
        assert report.summary.disk_usage == DISK
        assert report.summary.installed_count == 2
        assert report.summary.warnings == []
        assert not report.summary.cancelled

    def test_empty_index_still_reports(self, home, make_dir):
        make_dir(home / "Library" / "Application Support" / "Firefox", size_mb=1)
        report = analyze_disk(
            settings=Settings(),
            index=InstalledIndex(),
            locations=HOME_LOCATIONS,
            home=home,
            estimate=None,
        )
        assert [i.owner_label for i in report.items] == ["Firefox"]
        assert report.summary.installed_count == 0

    def test_estimate_appended(self, home):
        report = analyze_disk(
            settings=Settings(),
            index=InstalledIndex(),
            locations=HOME_LOCATIONS,
            home=home,
            estimate=brew_item,
        )
        assert report.items[-1].path == BREW_CLEANUP_SENTINEL
        assert report.items[-1].size_mb == 2355.2

    def test_estimate_disabled_by_settings(self, home):
        report = analyze_disk(
            settings=Settings(include_brew_estimate=False),
            index=InstalledIndex(),
            locations=HOME_LOCATIONS,
            home=home,
            estimate=brew_item,
        )
        assert report.items == []

    def test_estimate_returning_none(self, home):
        report = analyze_disk(
            settings=Settings(),
            index=InstalledIndex(),
            locations=HOME_LOCATIONS,
            home=home,
            estimate=lambda: None,
        )
        assert report.items == []

    def test_cancelled_before_start(self, home, make_dir):
        make_dir(home / "Library" / "Application Support" / "com.acme.widget", size_mb=5)
        cancel = threading.Event()
        cancel.set()
        report = analyze_disk(
            settings=Settings(),
            index=InstalledIndex(),
            locations=HOME_LOCATIONS,
            home=home,
            cancel=cancel,
            estimate=brew_item,
        )
        assert report.items == []
        assert report.summary.cancelled

    @patch("leftovers.analyzer.build_installed_index")
    def test_builds_index_when_missing(self, mock_build, home):
        mock_build.return_value = InstalledIndex.from_names("zsh")
        report = analyze_disk(
            settings=Settings(), locations=HOME_LOCATIONS, home=home, estimate=None
        )
        mock_build.assert_called_once()
        assert report.summary.installed_count == 1

    def test_custom_locations(self, home, make_dir):
        make_dir(home / ".npm", size_mb=2)
        make_dir(home / "Library" / "Application Support" / "com.acme.widget", size_mb=2)
        report = analyze_disk(
            settings=Settings(),
            index=InstalledIndex(),
            locations=[get_location("npm_cache")],
            home=home,
            estimate=None,
        )
        assert [i.owner_label for i in report.items] == ["npm"]


def _report():
    def item(name, size, category):
        return ReportItem(
            display_name=name, path=name, size_mb=size, category=category, owner_label=name
        )

    return Report(
        items=[
            item("a", 5, ItemCategory.LEFTOVER),
            item("b", 50, ItemCategory.CACHE),
            item("c", 20, ItemCategory.LEFTOVER),
        ],
        summary=RunSummary(disk_usage=DISK),
    )


class TestFilterByCategory:
    def test_keeps_one_category(self):
        filtered = filter_by_category(_report(), ItemCategory.LEFTOVER)
        assert [i.path for i in filtered.items] == ["a", "c"]

    def test_keeps_summary(self):
        report = _report()
        assert filter_by_category(report, ItemCategory.STALE).summary == report.summary


class TestGetLargestItems:
    def test_returns_top_n(self):
        assert [i.path for i in get_largest_items(_report(), top_n=2)] == ["b", "c"]
