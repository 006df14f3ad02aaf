"""Tests for directory size estimation."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from modkill.sizes import (
    FIND_ARGS,
    SizeEstimationError,
    directory_size,
    native_size,
    parse_size_output,
    walk_size,
)


def find_supports_printf() -> bool:
    try:
        native_size(Path(__file__).parent)
    except SizeEstimationError:
        return False
    return True


@pytest.fixture
def tree(tmp_path):
    """A 150 byte tree with a nested directory and a symlink."""
    root = tmp_path / "node_modules"
    nested = root / "pkg" / "lib"
    nested.mkdir(parents=True)
    (root / "index.js").write_bytes(b"x" * 100)
    (nested / "util.js").write_bytes(b"x" * 50)

    outside = tmp_path / "big.bin"
    outside.write_bytes(b"x" * 10_000)
    (root / "link.bin").symlink_to(outside)
    return root


class TestParseSizeOutput:
    def test_sums_lines(self):
        assert parse_size_output("100\n50\n0\n") == 150

    def test_blank_lines_ignored(self):
        assert parse_size_output("  8 \n\n2\n") == 10

    def test_empty_output(self):
        assert parse_size_output("") == 0

    def test_garbage_raises(self):
        with pytest.raises(SizeEstimationError):
            parse_size_output("find: unknown predicate `-printf'")


class TestNativeSize:
    @patch("modkill.sizes.subprocess.run")
    @patch("modkill.sizes.shutil.which", return_value="/usr/bin/find")
    def test_success(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout="100\n50\n", stderr="")

        assert native_size(tmp_path) == 150
        args = mock_run.call_args[0][0]
        assert args == ["/usr/bin/find", str(tmp_path), *FIND_ARGS]

    @patch("modkill.sizes.shutil.which", return_value=None)
    def test_missing_tool(self, mock_which, tmp_path):
        with pytest.raises(SizeEstimationError):
            native_size(tmp_path)

    @patch("modkill.sizes.subprocess.run")
    @patch("modkill.sizes.shutil.which", return_value="/usr/bin/find")
    def test_nonzero_exit(self, mock_which, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="Permission denied")

        with pytest.raises(SizeEstimationError, match="Permission denied"):
            native_size(tmp_path)

    @patch("modkill.sizes.subprocess.run")
    @patch("modkill.sizes.shutil.which", return_value="/usr/bin/find")
    def test_timeout(self, mock_which, mock_run, tmp_path):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="find", timeout=1)

        with pytest.raises(SizeEstimationError):
            native_size(tmp_path)


class TestWalkSize:
    def test_sums_regular_files(self, tree):
        assert walk_size(tree) == 150

    def test_empty_directory(self, tmp_path):
        assert walk_size(tmp_path) == 0

    def test_unreadable_tree_counts_as_zero(self, tree):
        with patch("modkill.sizes.os.scandir", side_effect=PermissionError("denied")):
            assert walk_size(tree) == 0

    def test_missing_directory_counts_as_zero(self, tmp_path):
        assert walk_size(tmp_path / "missing") == 0


class TestDirectorySize:
    @patch("modkill.sizes.native_size", return_value=4096)
    def test_prefers_native_tool(self, mock_native, tree):
        assert directory_size(tree) == 4096

    @patch("modkill.sizes.shutil.which", return_value=None)
    def test_falls_back_to_walk(self, mock_which, tree):
        assert directory_size(tree) == walk_size(tree) == 150

    @patch("modkill.sizes.native_size", side_effect=SizeEstimationError("boom"))
    def test_total_failure_is_zero(self, mock_native, tmp_path):
        assert directory_size(tmp_path / "missing") == 0

    def test_default_path_counts_bytes(self, tree):
        assert directory_size(tree) == 150

    @pytest.mark.skipif(not find_supports_printf(), reason="find without -printf")
    def test_native_tool_agrees_with_walk(self, tree):
        assert native_size(tree) == walk_size(tree)
