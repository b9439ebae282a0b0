"""Tests for display module."""

from datetime import datetime
from unittest.mock import patch

from leftovers.display import (
    disk_pressure,
    show_disk_summary,
    show_index,
    show_locations,
    show_match_results,
    show_report,
    show_scanning_progress,
    show_status,
    size_style,
)
from leftovers.index import InstalledIndex
from leftovers.locations import get_all_locations
from leftovers.models import (
    DiskUsage,
    ItemCategory,
    LocationWarning,
    Report,
    ReportItem,
    RunSummary,
)


def disk(used_pct):
    return DiskUsage(
        total_bytes=100 * 1000**3,
        used_bytes=used_pct * 1000**3,
        free_bytes=(100 - used_pct) * 1000**3,
    )


def printed_text(mock_console):
    return " ".join(str(c.args[0]) for c in mock_console.print.call_args_list if c.args)


class TestSizeStyle:
    def test_thresholds(self):
        assert size_style(600) == "red"
        assert size_style(60) == "yellow"
        assert size_style(1) == "dim"


class TestDiskPressure:
    def test_bands(self):
        assert disk_pressure(30) == ("green", "plenty of room")
        assert disk_pressure(75) == ("yellow", "filling up")
        assert disk_pressure(89.9) == ("yellow", "filling up")
        assert disk_pressure(90) == ("red", "nearly full")


class TestShowDiskSummary:
    @patch("leftovers.display.console")
    def test_low_usage(self, mock_console):
        show_disk_summary(disk(30))
        text = printed_text(mock_console)
        assert "70 GB free" in text
        assert "plenty of room" in text

    @patch("leftovers.display.console")
    def test_high_usage(self, mock_console):
        show_disk_summary(disk(92))
        assert "[red](92%, nearly full)[/red]" in printed_text(mock_console)


class TestShowStatus:
    @patch("leftovers.display.console")
    def test_roomy_disk(self, mock_console):
        show_status(disk(50))
        text = printed_text(mock_console)
        assert "Startup disk /" in text
        assert "plenty of room" in text
        assert "leftovers scan" not in text

    @patch("leftovers.display.console")
    def test_filling_disk_suggests_scan(self, mock_console):
        show_status(disk(80))
        text = printed_text(mock_console)
        assert "filling up" in text
        assert "leftovers scan" in text

    @patch("leftovers.display.console")
    def test_full_disk(self, mock_console):
        show_status(disk(95))
        assert "nearly full" in printed_text(mock_console)


class TestShowReport:
    def _report(self, **summary):
        items = [
            ReportItem(
                display_name="widget (App Support — stale)",
                path="~/Library/Application Support/com.acme.widget",
                size_mb=12.3,
                modified_date="2023-01-01",
                category=ItemCategory.LEFTOVER,
                owner_label="widget",
            ),
            ReportItem(
                display_name="npm cache",
                path="~/.npm",
                size_mb=300,
                category=ItemCategory.CACHE,
                owner_label="npm",
            ),
        ]
        return Report(
            items=items,
            summary=RunSummary(scanned_at=datetime(2024, 6, 1), disk_usage=disk(70), **summary),
        )

    @patch("leftovers.display.console")
    def test_shows_categories(self, mock_console):
        show_report(self._report(installed_count=120))
        text = printed_text(mock_console)
        assert "Leftover App Data" in text
        assert "Caches & Build Artifacts" in text
        assert "Large Files" not in text
        assert "120 installed apps indexed" in text

    @patch("leftovers.display.console")
    def test_shows_warnings_and_cancel(self, mock_console):
        warning = LocationWarning(location_id="logs", path="/x/Logs", message="Permission denied")
        show_report(self._report(warnings=[warning], cancelled=True))
        text = printed_text(mock_console)
        assert "Skipped /x/Logs" in text
        assert "partial" in text

    @patch("leftovers.display.console")
    def test_empty_report(self, mock_console):
        report = Report(summary=RunSummary(disk_usage=disk(10)))
        show_report(report)
        mock_console.print.assert_called()


class TestShowIndex:
    @patch("leftovers.display.console")
    def test_count_only(self, mock_console):
        show_index(InstalledIndex.from_names("a", "b"))
        assert mock_console.print.call_count == 1
        assert "2" in printed_text(mock_console)

    @patch("leftovers.display.console")
    def test_with_entries(self, mock_console):
        show_index(InstalledIndex.from_names("zoom", "arc"), show_entries=True)
        text = printed_text(mock_console)
        assert text.index("arc") < text.index("zoom")


class TestOtherViews:
    @patch("leftovers.display.console")
    def test_match_results(self, mock_console):
        show_match_results([("Firefox", "exact"), ("com.acme.widget", None)])
        mock_console.print.assert_called_once()

    @patch("leftovers.display.console")
    def test_locations(self, mock_console):
        show_locations(get_all_locations())
        mock_console.print.assert_called_once()

    def test_scanning_progress(self):
        progress = show_scanning_progress()
        assert progress is not None
