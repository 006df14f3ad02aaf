"""Discovery of target directories below one or more roots.

Two strategies find candidates under a root:

* ``PATTERN`` matches ``**/<target>`` with a single lazy ``os.walk`` and
  filters the matches afterwards.
* ``BREADTH_FIRST`` lists directories level by level in concurrent batches,
  filtering every directory before it is queued.

``scan_root`` prefers the pattern strategy and falls back to the breadth-first
one when the pattern strategy cannot run or raises.
"""

import logging
import os
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from pathlib import Path
from typing import Callable

from modkill.filters import PathFilter, is_excluded
from modkill.models import Entry, ScanOptions, ScanSummary
from modkill.projects import build_entry

log = logging.getLogger(__name__)

WALK_BATCH_SIZE = 100
MAX_WORKERS = 16

EntryBuilder = Callable[..., Entry | None]
ErrorCallback = Callable[[str, OSError], None]


class ScanStrategy(str, Enum):
    """How a root is traversed."""

    PATTERN = "pattern"
    BREADTH_FIRST = "breadth_first"


class ScanStrategyError(Exception):
    """The pattern strategy could not traverse a root."""


class ScanProgress:
    """Advisory progress shared with the display.

    Written from worker threads without locking; readers may see a slightly
    stale path or count.
    """

    def __init__(self) -> None:
        self.current_path = ""
        self.found = 0

    def visiting(self, path: str) -> None:
        self.current_path = path

    def found_entry(self, entry: Entry) -> None:
        self.found += 1


def is_nested_match(relative_path: str, target: str) -> bool:
    """True if the target name occurs more than once in a relative path."""
    parts = [p for p in relative_path.replace(os.sep, "/").split("/") if p]
    return parts.count(target) > 1


def has_hidden_segment(relative_path: str) -> bool:
    """True if any segment of a relative path starts with a dot."""
    parts = relative_path.replace(os.sep, "/").split("/")
    return any(p.startswith(".") for p in parts if p and p not in (".", ".."))


def select_strategy(root: str) -> ScanStrategy:
    """Pick the traversal strategy for a root."""
    if os.path.isdir(root) and os.access(root, os.R_OK | os.X_OK):
        return ScanStrategy.PATTERN
    return ScanStrategy.BREADTH_FIRST


class ScanEngine:
    """Finds target directories and turns them into entries."""

    def __init__(
        self,
        options: ScanOptions,
        path_filter: PathFilter | None = None,
        builder: EntryBuilder = build_entry,
        progress: ScanProgress | None = None,
        on_error: ErrorCallback | None = None,
        strategy: ScanStrategy | None = None,
    ):
        self.options = options
        self.path_filter = path_filter or PathFilter()
        self.builder = builder
        self.progress = progress or ScanProgress()
        self.on_error = on_error
        self.strategy = strategy
        self.errors: list[str] = []

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def scan(self) -> list[Entry]:
        """Scan every effective root concurrently and union the results."""
        roots = self.options.effective_roots()
        results: list[Entry] = []
        if not roots:
            return results

        with ThreadPoolExecutor(max_workers=len(roots)) as executor:
            future_to_root = {executor.submit(self.scan_root, root): root for root in roots}

            for future in as_completed(future_to_root):
                root = future_to_root[future]
                try:
                    results.extend(future.result())
                except Exception as e:
                    self._report_error(root, e)

        return results

    def scan_root(self, root: str) -> list[Entry]:
        """Scan one root, falling back to breadth-first traversal."""
        strategy = self.strategy or select_strategy(root)

        if strategy == ScanStrategy.PATTERN:
            try:
                return self.scan_with_pattern(root)
            except ScanStrategyError as e:
                log.debug("Pattern scan of %s unavailable (%s), walking instead", root, e)

        return self.scan_with_walk(root)

    # ------------------------------------------------------------------
    # Pattern strategy
    # ------------------------------------------------------------------

    def find_pattern_matches(self, root: str) -> list[str]:
        """
        Match ``**/<target>`` below a root.

        Listing errors below the root are reported, not raised.

        Raises:
            ScanStrategyError: If the root itself cannot be listed
        """
        target = self.options.target
        max_depth = self.options.depth
        matches: list[str] = []

        def _onerror(error: OSError) -> None:
            path = error.filename or ""
            if os.path.abspath(path) == os.path.abspath(root):
                raise ScanStrategyError(str(error)) from error
            if not isinstance(error, (PermissionError, FileNotFoundError, NotADirectoryError)):
                self._report_error(path, error)

        for dirpath, dirnames, _ in os.walk(root, onerror=_onerror, followlinks=False):
            self.progress.visiting(dirpath)
            relative = os.path.relpath(dirpath, root)
            depth = 0 if relative == os.curdir else len(relative.split(os.sep))

            if target in dirnames and depth + 1 <= max_depth:
                match = os.path.join(dirpath, target)
                if not os.path.islink(match):
                    matches.append(match)

            # Nothing deeper can satisfy the depth bound
            if depth + 1 >= max_depth:
                dirnames.clear()
            else:
                dirnames[:] = [
                    d
                    for d in dirnames
                    if d != target
                    and not self.path_filter.should_prune(os.path.join(dirpath, d), root)
                ]

        return matches

    def accept_match(self, match: str, root: str) -> bool:
        """Apply nesting, depth, prune, exclude and hidden rules to a match."""
        relative = os.path.relpath(match, root)
        if is_nested_match(relative, self.options.target):
            return False
        if len([p for p in relative.split(os.sep) if p]) > self.options.depth:
            return False
        if self.path_filter.should_prune(match, root):
            return False
        if is_excluded(match, os.path.basename(match), self.options.exclude):
            return False
        if self.options.exclude_hidden and has_hidden_segment(relative):
            return False
        return True

    def scan_with_pattern(self, root: str) -> list[Entry]:
        """Pattern strategy: match, filter, then build entries in batches."""
        matches = [m for m in self.find_pattern_matches(root) if self.accept_match(m, root)]
        candidates = [(Path(m), Path(m).parent) for m in matches]
        return self._build_in_batches(candidates)

    def _build_in_batches(self, candidates: list[tuple[Path, Path]]) -> list[Entry]:
        """Build entries batch by batch; one failure never stops the rest."""
        results: list[Entry] = []
        batch_size = self.options.batch_size

        with ThreadPoolExecutor(max_workers=min(batch_size, MAX_WORKERS)) as executor:
            for start in range(0, len(candidates), batch_size):
                batch = candidates[start : start + batch_size]
                futures = [executor.submit(self._build, target, project) for target, project in batch]
                for future in as_completed(futures):
                    entry = future.result()
                    if entry is not None:
                        results.append(entry)

        return results

    def _build(self, target_path: Path, project_path: Path) -> Entry | None:
        """Build one entry; a failing candidate is dropped."""
        try:
            entry = self.builder(target_path, project_path, manifest=self.options.manifest)
        except Exception as e:
            log.debug("Building entry for %s failed: %s", target_path, e)
            return None
        if entry is not None:
            self.progress.found_entry(entry)
        return entry

    # ------------------------------------------------------------------
    # Breadth-first strategy
    # ------------------------------------------------------------------

    def scan_with_walk(self, root: str) -> list[Entry]:
        """Breadth-first strategy: list directories in concurrent batches."""
        results: list[Entry] = []
        queue: deque[tuple[str, int]] = deque([(root, 0)])

        with ThreadPoolExecutor(max_workers=MAX_WORKERS) as executor:
            while queue:
                batch = [queue.popleft() for _ in range(min(len(queue), WALK_BATCH_SIZE))]
                futures = {
                    executor.submit(self._visit, path, depth, root): path for path, depth in batch
                }
                for future in as_completed(futures):
                    try:
                        entries, children = future.result()
                    except Exception as e:
                        self._report_error(futures[future], e)
                        continue
                    results.extend(entries)
                    queue.extend(children)

        return results

    def _visit(self, path: str, depth: int, root: str) -> tuple[list[Entry], list[tuple[str, int]]]:
        """List one directory; return found entries and children to queue."""
        self.progress.visiting(path)
        entries: list[Entry] = []
        children: list[tuple[str, int]] = []

        if path != root and self.path_filter.should_prune(path, root):
            return entries, children

        child_depth = depth + 1
        if child_depth > self.options.depth:
            return entries, children

        try:
            with os.scandir(path) as it:
                subdirs = [e for e in it if e.is_dir(follow_symlinks=False)]
        except (PermissionError, FileNotFoundError, NotADirectoryError):
            return entries, children
        except OSError as e:
            self._report_error(path, e)
            return entries, children

        for child in subdirs:
            if self.path_filter.should_prune(child.path, root):
                continue
            if is_excluded(
                child.path,
                child.name,
                self.options.exclude,
                self.options.exclude_hidden,
            ):
                continue

            if child.name == self.options.target:
                entry = self._build(Path(child.path), Path(path))
                if entry is not None:
                    entries.append(entry)
            else:
                children.append((child.path, child_depth))

        return entries, children

    def _report_error(self, path: str, error: Exception) -> None:
        if self.options.hide_errors:
            return
        log.debug("Error scanning %s: %s", path, error)
        self.errors.append(f"{path}: {error}")
        if self.on_error and isinstance(error, OSError):
            self.on_error(path, error)


def scan(
    options: ScanOptions,
    progress: ScanProgress | None = None,
    on_error: ErrorCallback | None = None,
    path_filter: PathFilter | None = None,
) -> ScanSummary:
    """
    Scan for target directories.

    Args:
        options: Scan configuration
        progress: Optional advisory progress tracker
        on_error: Optional callback(path, error) for surfaced traversal errors
        path_filter: Filter to use instead of the default tables

    Returns:
        ScanSummary with the entries found and the elapsed time
    """
    engine = ScanEngine(options, path_filter=path_filter, progress=progress, on_error=on_error)
    start = time.perf_counter()
    entries = engine.scan()
    return ScanSummary(
        entries=entries,
        elapsed_seconds=time.perf_counter() - start,
        errors=engine.errors,
    )
