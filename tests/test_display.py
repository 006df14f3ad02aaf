"""Tests for display module."""

from datetime import datetime
from unittest.mock import patch

from modkill.display import (
    format_elapsed,
    format_size,
    render_progress,
    shorten_path,
    show_delete_all_result,
    show_deletion_report,
    show_dry_run,
    show_entries,
    show_scan_complete,
    show_update_available,
)
from modkill.models import DeletionErrorKind, DeletionFailure, DeletionReport, Entry, ScanSummary
from modkill.scanner import ScanProgress


def make_entry(path="/p/node_modules", size=1000, active=False):
    return Entry(
        path=path,
        size=size,
        last_modified=datetime(2024, 5, 1),
        is_active=active,
        package_name="p",
    )


def printed(mock_console) -> str:
    return "\n".join(str(c.args[0]) for c in mock_console.print.call_args_list if c.args)


class TestFormatSize:
    def test_bytes(self):
        assert format_size(500) == "500 B"

    def test_kilobytes(self):
        assert format_size(1500) == "1.5 KB"

    def test_megabytes(self):
        assert format_size(2_500_000) == "2.5 MB"

    def test_gigabytes(self):
        assert format_size(3_000_000_000) == "3.0 GB"


class TestFormatElapsed:
    def test_milliseconds(self):
        assert format_elapsed(0.25) == "250ms"

    def test_seconds(self):
        assert format_elapsed(2.5) == "2.50s"

    def test_minutes(self):
        assert format_elapsed(125.0) == "2m 5.0s"


class TestShortenPath:
    def test_short_path_unchanged(self):
        assert shorten_path("/a/b", width=10) == "/a/b"

    def test_long_path_keeps_tail(self):
        short = shorten_path("/very/long/path/to/project", width=12)
        assert short.startswith("...")
        assert short.endswith("project")
        assert len(short) == 12


class TestRenderProgress:
    def test_shows_path_and_count(self):
        progress = ScanProgress()
        progress.visiting("/r/app")
        progress.found = 3

        text = render_progress(progress, "node_modules").plain

        assert "/r/app" in text
        assert "3 node_modules found" in text

    def test_before_first_directory(self):
        assert "scanning..." in render_progress(ScanProgress(), "node_modules").plain


class TestShowScanComplete:
    @patch("modkill.display.console")
    def test_shows_count(self, mock_console):
        summary = ScanSummary(entries=[make_entry()], elapsed_seconds=0.5)
        show_scan_complete(summary, "node_modules")
        assert "Found 1 node_modules directories" in printed(mock_console)


class TestShowDryRun:
    @patch("modkill.display.console")
    def test_lists_entries_and_total(self, mock_console):
        show_dry_run([make_entry("/a/node_modules", 1000), make_entry("/b/node_modules", 2000)])

        output = printed(mock_console)
        assert "DRY RUN" in output
        assert "1. /a/node_modules (1.0 KB)" in output
        assert "2. /b/node_modules (2.0 KB)" in output
        assert "Total: 3.0 KB" in output


class TestShowEntries:
    @patch("modkill.display.console")
    def test_prints_table_and_total(self, mock_console):
        show_entries([make_entry(active=True)])
        assert mock_console.print.call_count == 2
        assert "Total space: 1.0 KB" in printed(mock_console)


class TestShowDeletionReport:
    @patch("modkill.display.console")
    def test_reports_failures(self, mock_console):
        entry = make_entry()
        report = DeletionReport(
            deleted_count=1,
            freed_bytes=1000,
            failures=[
                DeletionFailure(entry=entry, kind=DeletionErrorKind.PERMISSION, message="denied")
            ],
        )

        show_deletion_report(report, remaining=[entry])

        output = printed(mock_console)
        assert "Cleanup complete!" in output
        assert "permission" in output
        assert "denied" in output

    @patch("modkill.display.console")
    def test_delete_all_result(self, mock_console):
        show_delete_all_result(DeletionReport(deleted_count=4, elapsed_seconds=1.5), "node_modules")
        output = printed(mock_console)
        assert "Deleted 4 node_modules" in output
        assert "1.50s" in output


class TestShowUpdateAvailable:
    @patch("modkill.display.console")
    def test_prints_panel(self, mock_console):
        show_update_available("9.9.9", current="0.1.0")
        mock_console.print.assert_called_once()
