"""Data models for modkill."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TARGET = "node_modules"
DEFAULT_MANIFEST = "package.json"
DEFAULT_DEPTH = 10
DEFAULT_BATCH_SIZE = 50


class SortKey(str, Enum):
    """Ordering of the interactive list."""

    SIZE = "size"  # Largest first
    LAST_MODIFIED = "last_modified"  # Most recent first
    PATH = "path"  # Lexicographic


class DeletionErrorKind(str, Enum):
    """Why a single deletion failed."""

    PERMISSION = "permission"
    IN_USE = "in_use"
    OS_ERROR = "os_error"


class Entry(BaseModel):
    """One discovered target directory."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Absolute path of the target directory")
    size: int = Field(0, ge=0, description="Size in bytes (0 means unknown)")
    last_modified: datetime = Field(..., description="Modification time of the target directory")
    is_active: bool = Field(False, description="Manifest touched within the activity window")
    package_name: str = Field(..., description="Project name from the manifest or directory name")
    package_version: str = Field("unknown", description="Project version from the manifest")

    @property
    def project_path(self) -> str:
        """Directory that owns the target directory."""
        return str(Path(self.path).parent)


class ScanOptions(BaseModel):
    """Immutable configuration of one scan."""

    model_config = ConfigDict(frozen=True)

    roots: tuple[str, ...] = Field(default=(), description="Directories to scan")
    target: str = Field(DEFAULT_TARGET, description="Directory name to look for")
    manifest: str = Field(DEFAULT_MANIFEST, description="Manifest file next to the target")
    exclude: tuple[str, ...] = Field(default=(), description="Path substrings to skip")
    exclude_hidden: bool = Field(False, description="Skip directories starting with '.'")
    hide_errors: bool = Field(False, description="Do not report traversal errors")
    depth: int = Field(DEFAULT_DEPTH, ge=0, description="Maximum path segments from a root")
    full_scan: bool = Field(False, description="Scan the home directory instead of roots")
    batch_size: int = Field(DEFAULT_BATCH_SIZE, gt=0, description="Concurrent work items per batch")

    def effective_roots(self) -> list[str]:
        """Roots actually scanned."""
        if self.full_scan:
            return [str(Path.home())]
        return [str(Path(root).expanduser().resolve()) for root in self.roots]


class DeletionFailure(BaseModel):
    """A deletion that did not succeed."""

    entry: Entry
    kind: DeletionErrorKind
    message: str = ""


class DeletionReport(BaseModel):
    """Outcome of a deletion batch."""

    deleted_count: int = Field(0, description="Entries removed")
    freed_bytes: int = Field(0, description="Sum of removed entries' sizes")
    failures: list[DeletionFailure] = Field(default_factory=list)
    attempted: list[Entry] = Field(default_factory=list, description="Entries the batch tried")
    elapsed_seconds: float = Field(0.0, description="Wall time of the batch")

    @property
    def failure_count(self) -> int:
        """Number of failed deletions."""
        return len(self.failures)

    @property
    def success(self) -> bool:
        """True when nothing failed."""
        return not self.failures


class ScanSummary(BaseModel):
    """Result of a scan pass."""

    entries: list[Entry] = Field(default_factory=list)
    elapsed_seconds: float = 0.0
    errors: list[str] = Field(default_factory=list, description="Surfaced traversal errors")

    @property
    def total_bytes(self) -> int:
        """Total size of all entries."""
        return sum(e.size for e in self.entries)
