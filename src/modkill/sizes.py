"""Directory size estimation for modkill."""

import logging
import os
import shutil
import subprocess
from pathlib import Path

log = logging.getLogger(__name__)

NATIVE_TIMEOUT = 120  # seconds

# Apparent size of every regular file, one byte count per line. Symlinks are
# not followed, so the total matches walk_size.
FIND_ARGS = ["-type", "f", "-printf", "%s\\n"]


class SizeEstimationError(Exception):
    """The native tool could not produce a size."""


def parse_size_output(output: str) -> int:
    """
    Sum per-file byte counts printed one per line.

    Raises:
        SizeEstimationError: If a non-empty line is not a number
    """
    total = 0
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        if not line.isdigit():
            raise SizeEstimationError(f"Unparseable size output: {line!r}")
        total += int(line)
    return total


def native_size(path: Path) -> int:
    """
    Size of a directory according to ``find -type f -printf '%s'``.

    Raises:
        SizeEstimationError: If find is missing, fails, times out or prints garbage
    """
    find = shutil.which("find")
    if find is None:
        raise SizeEstimationError("find not found on PATH")

    try:
        result = subprocess.run(
            [find, str(path), *FIND_ARGS],
            capture_output=True,
            text=True,
            timeout=NATIVE_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        raise SizeEstimationError(str(e)) from e

    # BSD find has no -printf and exits non-zero here
    if result.returncode != 0:
        raise SizeEstimationError(result.stderr.strip() or f"find exited with {result.returncode}")

    return parse_size_output(result.stdout)


def walk_size(path: Path) -> int:
    """
    Sum the sizes of all regular files below ``path``.

    Symlinks are not followed. A single unreadable file aborts the walk and
    returns 0 rather than an undercount.
    """
    total_size = 0
    pending = [str(path)]

    try:
        while pending:
            current = pending.pop()
            with os.scandir(current) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(entry.path)
                    elif entry.is_file(follow_symlinks=False):
                        total_size += entry.stat(follow_symlinks=False).st_size
    except OSError as e:
        log.debug("Size walk of %s aborted: %s", path, e)
        return 0

    return total_size


def directory_size(path: Path) -> int:
    """
    Best-effort size of a directory in bytes.

    Uses the native tool when it works and falls back to walking the tree.

    Returns:
        Size in bytes, 0 when unknown
    """
    try:
        return native_size(path)
    except SizeEstimationError as e:
        log.debug("Native size failed for %s (%s), walking instead", path, e)
        return walk_size(path)
