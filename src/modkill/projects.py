"""Project metadata for discovered target directories."""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from modkill.models import DEFAULT_MANIFEST, Entry
from modkill.sizes import directory_size

log = logging.getLogger(__name__)

ACTIVE_WINDOW = timedelta(days=30)
UNKNOWN_VERSION = "unknown"


def read_manifest(manifest_path: Path) -> tuple[str | None, str | None, datetime | None]:
    """
    Read name, version and modification time from a manifest.

    Returns:
        Tuple of (name, version, mtime). ``mtime`` is None when the manifest
        cannot be read or parsed; name and version are None when absent.
    """
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
        mtime = datetime.fromtimestamp(manifest_path.stat().st_mtime)
    except (OSError, ValueError):
        return None, None, None

    if not isinstance(data, dict):
        return None, None, mtime

    name = data.get("name")
    version = data.get("version")
    return (
        name if isinstance(name, str) and name else None,
        version if isinstance(version, str) and version else None,
        mtime,
    )


def build_entry(
    target_path: Path,
    project_path: Path,
    manifest: str = DEFAULT_MANIFEST,
    now: datetime | None = None,
    sizer: Callable[[Path], int] = directory_size,
) -> Entry | None:
    """
    Build an Entry for a discovered target directory.

    Args:
        target_path: The target directory (e.g. ``app/node_modules``)
        project_path: Directory holding the target and its manifest
        manifest: Manifest file name inside ``project_path``
        now: Reference time for the activity window
        sizer: Size estimator

    Returns:
        Entry, or None if the target directory's metadata cannot be read
    """
    now = now or datetime.now()

    name, version, manifest_mtime = read_manifest(project_path / manifest)
    is_active = manifest_mtime is not None and (now - manifest_mtime) < ACTIVE_WINDOW

    try:
        size = sizer(target_path)
        stat = target_path.stat()
    except OSError as e:
        log.debug("Dropping %s: %s", target_path, e)
        return None

    return Entry(
        path=str(target_path),
        size=max(size, 0),
        last_modified=datetime.fromtimestamp(stat.st_mtime),
        is_active=is_active,
        package_name=name or project_path.name,
        package_version=version or UNKNOWN_VERSION,
    )
