"""Path pruning rules for directory discovery.

The tables below are plain data. ``PathFilter`` only reads them, so one filter
can be shared by every traversal thread.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class FilterTables:
    """Pattern tables consulted by ``PathFilter``."""

    anchored: tuple[str, ...] = ()  # Prefixes of the absolute path
    skip: tuple[str, ...] = ()  # Segment patterns matched anywhere
    allow: tuple[str, ...] = ()
    deny: tuple[str, ...] = ()


# System trees, virtual filesystems and OS temp/log locations
ANCHORED_PATTERNS = (
    "/System",
    "/private",
    "/dev",
    "/proc",
    "/sys",
    "/tmp",
    "/var/tmp",
    "/var/log",
    "/usr/bin",
    "/usr/sbin",
    "/usr/lib",
    "/usr/share",
    "/bin",
    "/sbin",
    "/lib",
    "/lib64",
    "/opt/homebrew",
    "/usr/local/bin",
    "/usr/local/sbin",
)

# Application bundles, photo libraries and version control metadata
SKIP_PATTERNS = (
    "/Library/Application Support",
    "/Library/Frameworks",
    "/Applications",
    ".photolibrary",
    ".photoslibrary",
    ".photoboothlibrary",
    "Photo Booth Library",
    ".app",
    ".framework",
    "/.git",
    "/.svn",
    "/.hg",
)

# Developer tool caches that may hold real projects
ALLOW_PATTERNS = (
    ".bun",
    ".npm",
    ".npm/_npx",
    ".vscode",
    ".vscode-insiders",
    ".cache",
    ".config",
    ".yarn",
)

# Vendor analytics and sync caches, pruned even when allowed above
DENY_PATTERNS = (
    "/Library/Caches/com.apple",
    "/Library/Caches/CloudKit",
    "/Library/Caches/Google",
    "/Library/Caches/Microsoft",
)

DEFAULT_TABLES = FilterTables(
    anchored=ANCHORED_PATTERNS,
    skip=SKIP_PATTERNS,
    allow=ALLOW_PATTERNS,
    deny=DENY_PATTERNS,
)


def _normalize(path: str) -> str:
    """Lowercase, forward slashes, wrapped in separators."""
    path = path.replace(os.sep, "/").strip("/")
    return f"/{path}/".lower() if path else "/"


def _segment(pattern: str) -> str:
    """Pattern that must end on a path segment boundary."""
    return pattern.lower().rstrip("/") + "/"


def scoped_path(path: str, root: str) -> str:
    """Part of ``path`` below ``root``, with a leading separator."""
    try:
        relative = os.path.relpath(path, root)
    except ValueError:
        return path
    if relative == os.curdir:
        return "/"
    if relative.startswith(os.pardir):
        return path
    return "/" + relative


class PathFilter:
    """Decides whether a path is pruned from traversal and results."""

    def __init__(self, tables: FilterTables = DEFAULT_TABLES):
        self.tables = tables
        self._anchored = tuple(_segment(p) for p in tables.anchored)
        self._skip = tuple(_segment(p) for p in tables.skip)
        self._allow = tuple("/" + _segment(p).lstrip("/") for p in tables.allow)
        self._deny = tuple(p.lower() for p in tables.deny)

    def is_denied_cache(self, path: str) -> bool:
        """True if a deny-subset pattern matches."""
        normalized = _normalize(path)
        return any(p in normalized for p in self._deny)

    def is_allowed_cache(self, path: str) -> bool:
        """True if an allow pattern matches and no deny pattern does."""
        normalized = _normalize(path)
        if not any(p in normalized for p in self._allow):
            return False
        return not self.is_denied_cache(path)

    def should_prune(self, path: str, root: str | None = None) -> bool:
        """
        Check if a path must be skipped.

        Anchored prefixes are ignored when ``root`` already lies inside them,
        and segment patterns only look at the part of ``path`` below ``root``:
        a root the operator asked for is never pruned by its own ancestors.

        Args:
            path: Absolute path to check
            root: Scan root the path was found under

        Returns:
            True for deny-subset caches, and for paths matching the skip
            tables that are not allowed caches
        """
        if self.is_denied_cache(path):
            return True
        if self.is_allowed_cache(path):
            return False

        normalized = _normalize(path)
        normalized_root = _normalize(root) if root else None

        for prefix in self._anchored:
            if normalized.startswith(prefix):
                if normalized_root is None or not normalized_root.startswith(prefix):
                    return True

        scoped = _normalize(scoped_path(path, root)) if root else normalized
        return any(p in scoped for p in self._skip)


def is_excluded(
    path: str,
    name: str,
    exclude: tuple[str, ...] = (),
    exclude_hidden: bool = False,
) -> bool:
    """Apply the caller's exclude substrings and the hidden-directory rule."""
    if any(pattern and pattern in path for pattern in exclude):
        return True
    return exclude_hidden and name.startswith(".")
