"""Deletion of discovered target directories."""

import errno
import logging
import os
import shutil
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable

from modkill.models import DeletionErrorKind, DeletionFailure, DeletionReport, Entry

log = logging.getLogger(__name__)

DELETE_ALL_WORKERS = 8

# Paths that should NEVER be deleted, whatever the scan found
BLOCKED_PATHS = [
    "/",
    "~",
    "/System",
    "/Library",
    "/Applications",
    "/usr",
    "/bin",
    "/sbin",
    "/var",
    "/private",
    "/Users",
    "/home",
]


def expand_path(path: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(path)))


def is_path_safe(path: Path) -> bool:
    """
    Check if a path is safe to delete.

    Args:
        path: Path to check

    Returns:
        False for the home directory and well-known system roots
    """
    path_str = str(path)
    for blocked in BLOCKED_PATHS:
        if path_str == str(expand_path(blocked)):
            return False
    return True


def classify_error(error: OSError) -> DeletionErrorKind:
    """Map an OSError to a deletion error kind."""
    if isinstance(error, PermissionError):
        return DeletionErrorKind.PERMISSION
    if error.errno in (errno.EBUSY, errno.ETXTBSY):
        return DeletionErrorKind.IN_USE
    return DeletionErrorKind.OS_ERROR


def delete_path(path: Path) -> None:
    """
    Recursively delete a directory.

    A path that no longer exists is not an error.

    Raises:
        OSError: If the directory or part of it cannot be removed
    """
    if not is_path_safe(path):
        raise PermissionError(errno.EPERM, "Refusing to delete protected path", str(path))
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return


def delete_entries(
    entries: list[Entry],
    progress_callback: Callable[[Entry, DeletionFailure | None], None] | None = None,
) -> DeletionReport:
    """
    Delete entries one after another.

    Every entry is attempted; a failure is recorded and the batch continues.

    Args:
        entries: Snapshot of entries to delete
        progress_callback: Optional callback(entry, failure) after each attempt

    Returns:
        DeletionReport covering every attempted entry
    """
    report = DeletionReport()
    start = time.perf_counter()

    for entry in entries:
        failure = None
        try:
            delete_path(Path(entry.path))
            report.deleted_count += 1
            report.freed_bytes += entry.size
        except OSError as e:
            log.debug("Failed to delete %s: %s", entry.path, e)
            failure = DeletionFailure(entry=entry, kind=classify_error(e), message=str(e))
            report.failures.append(failure)

        report.attempted.append(entry)
        if progress_callback:
            progress_callback(entry, failure)

    report.elapsed_seconds = time.perf_counter() - start
    return report


def delete_all(entries: list[Entry], max_workers: int = DELETE_ALL_WORKERS) -> DeletionReport:
    """
    Delete every entry concurrently without confirmation.

    All deletions run to completion whatever happens to the others.

    Returns:
        DeletionReport with aggregate count and elapsed time
    """
    report = DeletionReport()
    start = time.perf_counter()

    if entries:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_entry = {
                executor.submit(delete_path, Path(entry.path)): entry for entry in entries
            }

            for future in as_completed(future_to_entry):
                entry = future_to_entry[future]
                report.attempted.append(entry)
                try:
                    future.result()
                    report.deleted_count += 1
                    report.freed_bytes += entry.size
                except OSError as e:
                    log.debug("Failed to delete %s: %s", entry.path, e)
                    report.failures.append(
                        DeletionFailure(entry=entry, kind=classify_error(e), message=str(e))
                    )

    report.elapsed_seconds = time.perf_counter() - start
    return report
