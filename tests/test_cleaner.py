"""Tests for deletion of target directories."""

import errno
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from modkill.cleaner import (
    classify_error,
    delete_all,
    delete_entries,
    delete_path,
    expand_path,
    is_path_safe,
)
from modkill.models import DeletionErrorKind, Entry


def make_target(root: Path, name: str, size: int = 10) -> Entry:
    target = root / name / "node_modules"
    target.mkdir(parents=True)
    (target / "index.js").write_bytes(b"x" * size)
    return Entry(
        path=str(target),
        size=size,
        last_modified=datetime.now(),
        package_name=name,
    )


class TestIsPathSafe:
    def test_blocks_home_directory(self):
        assert not is_path_safe(Path.home())

    def test_blocks_system_paths(self):
        assert not is_path_safe(Path("/"))
        assert not is_path_safe(Path("/usr"))
        assert not is_path_safe(Path("/System"))

    def test_allows_project_directories(self, tmp_path):
        assert is_path_safe(tmp_path / "app" / "node_modules")

    def test_expand_path(self):
        assert expand_path("~/x") == Path.home() / "x"

    def test_expand_path_variables(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MODKILL_TEST_DIR", str(tmp_path))
        assert expand_path("$MODKILL_TEST_DIR/x") == tmp_path / "x"


class TestClassifyError:
    def test_permission(self):
        assert classify_error(PermissionError("denied")) == DeletionErrorKind.PERMISSION

    def test_busy(self):
        assert classify_error(OSError(errno.EBUSY, "busy")) == DeletionErrorKind.IN_USE

    def test_other(self):
        assert classify_error(OSError(errno.EIO, "io")) == DeletionErrorKind.OS_ERROR


class TestDeletePath:
    def test_removes_tree(self, tmp_path):
        entry = make_target(tmp_path, "app")
        delete_path(Path(entry.path))
        assert not Path(entry.path).exists()

    def test_missing_path_is_not_an_error(self, tmp_path):
        delete_path(tmp_path / "missing")

    def test_refuses_protected_path(self):
        with pytest.raises(PermissionError):
            delete_path(Path.home())


class TestDeleteEntries:
    def test_deletes_all(self, tmp_path):
        entries = [make_target(tmp_path, "a", 10), make_target(tmp_path, "b", 20)]

        report = delete_entries(entries)

        assert report.deleted_count == 2
        assert report.freed_bytes == 30
        assert report.success
        assert report.attempted == entries
        assert all(not Path(e.path).exists() for e in entries)

    def test_failure_does_not_stop_batch(self, tmp_path):
        entries = [
            make_target(tmp_path, "a", 10),
            make_target(tmp_path, "b", 20),
            make_target(tmp_path, "c", 30),
        ]
        real_delete = delete_path

        def flaky(path):
            if path.parent.name == "b":
                raise PermissionError(errno.EACCES, "Permission denied", str(path))
            real_delete(path)

        with patch("modkill.cleaner.delete_path", side_effect=flaky):
            report = delete_entries(entries)

        assert report.deleted_count == 2
        assert report.freed_bytes == 40
        assert report.failure_count == 1
        assert report.failures[0].entry == entries[1]
        assert report.failures[0].kind == DeletionErrorKind.PERMISSION
        assert len(report.attempted) == 3
        assert Path(entries[1].path).exists()

    def test_progress_callback(self, tmp_path):
        entries = [make_target(tmp_path, "a"), make_target(tmp_path, "b")]
        seen = []

        delete_entries(entries, progress_callback=lambda e, failure: seen.append((e, failure)))

        assert seen == [(entries[0], None), (entries[1], None)]

    def test_empty(self):
        report = delete_entries([])
        assert report.deleted_count == 0
        assert report.attempted == []


class TestDeleteAll:
    def test_deletes_everything(self, tmp_path):
        entries = [make_target(tmp_path, f"app{i}", 5) for i in range(5)]

        report = delete_all(entries)

        assert report.deleted_count == 5
        assert report.freed_bytes == 25
        assert report.elapsed_seconds >= 0
        assert all(not Path(e.path).exists() for e in entries)

    def test_failures_are_collected(self, tmp_path):
        entries = [make_target(tmp_path, "a"), make_target(tmp_path, "b")]

        with patch("modkill.cleaner.shutil.rmtree", side_effect=OSError(errno.EBUSY, "busy")):
            report = delete_all(entries)

        assert report.deleted_count == 0
        assert report.failure_count == 2
        assert {f.kind for f in report.failures} == {DeletionErrorKind.IN_USE}
        assert len(report.attempted) == 2

    def test_empty(self):
        report = delete_all([])
        assert report.deleted_count == 0
        assert report.success
