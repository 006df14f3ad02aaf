"""Release checks against the package index."""

import logging
import time
from pathlib import Path

import httpx

from modkill import PACKAGE_NAME, __version__

log = logging.getLogger(__name__)

INDEX_URL = f"https://pypi.org/pypi/{PACKAGE_NAME}/json"
CHECK_INTERVAL = 24 * 60 * 60  # one day
MARKER_FILE = Path.home() / f".{PACKAGE_NAME}-last-update-check"


def fetch_latest_version(timeout: float = 3.0) -> str:
    """
    Ask the package index for the latest released version.

    Raises:
        httpx.HTTPError: On network failures and error responses
        ValueError: If the response has no version
    """
    response = httpx.get(INDEX_URL, timeout=timeout)
    response.raise_for_status()
    version = response.json().get("info", {}).get("version")
    if not version:
        raise ValueError("No version in package index response")
    return version


def last_check_time(marker: Path) -> float:
    """Modification time of the marker, 0 if it is missing or unreadable."""
    try:
        return marker.stat().st_mtime
    except OSError:
        return 0.0


def is_check_due(marker: Path = MARKER_FILE, now: float | None = None) -> bool:
    """True if the last check is older than a day."""
    now = time.time() if now is None else now
    return now - last_check_time(marker) > CHECK_INTERVAL


def check_daily_update(marker: Path = MARKER_FILE, current: str = __version__) -> str | None:
    """
    Check for a newer release at most once a day.

    Returns:
        The latest version if it differs from ``current``, else None
    """
    if not is_check_due(marker):
        return None

    try:
        marker.touch()
    except OSError as e:
        log.debug("Could not touch %s: %s", marker, e)

    try:
        latest = fetch_latest_version()
    except (httpx.HTTPError, ValueError) as e:
        log.debug("Update check failed: %s", e)
        return None

    return latest if latest != current else None
