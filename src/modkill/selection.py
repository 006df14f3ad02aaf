"""Sorted view, cursor and multi-select state for the interactive list.

Everything here is a pure function over immutable values. The terminal driver
in ``modkill.tui`` feeds key names to ``handle_key`` and carries out the
effects it returns.

Selection is stored by entry path, so changing the sort order keeps the same
directories selected. Index-based operations resolve positions against the
sorted view at the moment they are called.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, auto

from modkill.models import DeletionReport, Entry, SortKey

SORT_CYCLE = (SortKey.SIZE, SortKey.LAST_MODIFIED, SortKey.PATH)
VISIBLE_ROWS = 20


@dataclass(frozen=True)
class SelectionState:
    """Sort key, cursor position and selected entry paths."""

    sort_key: SortKey = SortKey.SIZE
    cursor: int = 0
    selected: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Session:
    """Dataset plus selection, threaded through every operation."""

    entries: tuple[Entry, ...] = ()
    selection: SelectionState = field(default_factory=SelectionState)

    def view(self) -> list[Entry]:
        """Entries in the current sort order."""
        return sorted_view(self.entries, self.selection.sort_key)


def sorted_view(entries: tuple[Entry, ...] | list[Entry], sort_key: SortKey) -> list[Entry]:
    """Order entries by size or date (newest/largest first) or by path."""
    if sort_key == SortKey.LAST_MODIFIED:
        return sorted(entries, key=lambda e: e.last_modified, reverse=True)
    if sort_key == SortKey.PATH:
        return sorted(entries, key=lambda e: e.path)
    return sorted(entries, key=lambda e: e.size, reverse=True)


def _clamp(cursor: int, length: int) -> int:
    if length == 0:
        return 0
    return max(0, min(cursor, length - 1))


def _with_selection(session: Session, **changes) -> Session:
    return replace(session, selection=replace(session.selection, **changes))


def load_entries(session: Session, entries: list[Entry]) -> Session:
    """Add scanned entries to the dataset."""
    return replace(session, entries=session.entries + tuple(entries))


def move_cursor(session: Session, delta: int) -> Session:
    """Move the cursor, clamped to the view."""
    if not session.entries:
        return session
    cursor = _clamp(session.selection.cursor + delta, len(session.entries))
    return _with_selection(session, cursor=cursor)


def toggle_selection(session: Session, index: int) -> Session:
    """Flip selection of the entry at ``index`` in the sorted view."""
    view = session.view()
    if not 0 <= index < len(view):
        return session

    path = view[index].path
    selected = set(session.selection.selected)
    if path in selected:
        selected.remove(path)
    else:
        selected.add(path)
    return _with_selection(session, selected=frozenset(selected))


def toggle_select_all(session: Session) -> Session:
    """Select every entry, or clear the selection if all are selected."""
    paths = frozenset(e.path for e in session.entries)
    if paths and paths <= session.selection.selected:
        return _with_selection(session, selected=frozenset())
    return _with_selection(session, selected=paths)


def cycle_sort(session: Session) -> Session:
    """Advance size -> last modified -> path -> size."""
    position = SORT_CYCLE.index(session.selection.sort_key)
    return _with_selection(session, sort_key=SORT_CYCLE[(position + 1) % len(SORT_CYCLE)])


def selected_indices(session: Session) -> set[int]:
    """Positions of selected entries in the current sorted view."""
    selected = session.selection.selected
    return {i for i, entry in enumerate(session.view()) if entry.path in selected}


def selected_entries(session: Session) -> list[Entry]:
    """Snapshot of the selected entries in view order."""
    selected = session.selection.selected
    return [e for e in session.view() if e.path in selected]


def total_selected_size(session: Session) -> int:
    """Sum of the selected entries' sizes."""
    return sum(e.size for e in selected_entries(session))


def visible_window(session: Session, rows: int = VISIBLE_ROWS) -> tuple[int, int]:
    """Start and end (exclusive) of the rows shown around the cursor."""
    length = len(session.entries)
    start = max(0, min(session.selection.cursor - rows // 2, length - rows))
    end = min(length, start + rows)
    return start, end


def remove_entries(session: Session, attempted: list[Entry]) -> Session:
    """Drop attempted entries from the dataset and clear the selection."""
    gone = {e.path for e in attempted}
    entries = tuple(e for e in session.entries if e.path not in gone)
    selection = replace(
        session.selection,
        selected=frozenset(),
        cursor=_clamp(session.selection.cursor, len(entries)),
    )
    return Session(entries=entries, selection=selection)


# =============================================================================
# Interactive state machine
# =============================================================================


class Mode(Enum):
    """States of the interactive list."""

    BROWSING = auto()
    CONFIRMING = auto()
    DONE = auto()


@dataclass(frozen=True)
class Render:
    """Redraw the screen."""


@dataclass(frozen=True)
class DeleteEntries:
    """Delete a confirmed snapshot of entries."""

    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class OpenDirectory:
    """Open a directory in the system file manager."""

    path: str


@dataclass(frozen=True)
class Exit:
    """Leave the interactive list."""


Effect = Render | DeleteEntries | OpenDirectory | Exit

QUIT_KEYS = frozenset({"q", "ctrl+c", "escape"})


@dataclass(frozen=True)
class Machine:
    """Interactive list state."""

    session: Session = field(default_factory=Session)
    mode: Mode = Mode.BROWSING
    show_details: bool = False
    pending: tuple[Entry, ...] = ()


def handle_key(machine: Machine, key: str) -> tuple[Machine, list[Effect]]:
    """
    Apply one key press.

    Args:
        machine: Current state
        key: Key name (``up``, ``down``, ``space``, ``enter``, letters, ``ctrl+c``)

    Returns:
        Tuple of (new state, effects for the driver to run in order)
    """
    if machine.mode == Mode.DONE:
        return machine, []

    if key == "ctrl+c":
        return replace(machine, mode=Mode.DONE, pending=()), [Exit()]

    if machine.mode == Mode.CONFIRMING:
        return _handle_confirmation(machine, key)

    return _handle_browsing(machine, key)


def _handle_confirmation(machine: Machine, key: str) -> tuple[Machine, list[Effect]]:
    """Only ``y`` confirms; every other key cancels."""
    pending = machine.pending
    machine = replace(machine, mode=Mode.BROWSING, pending=())

    if key.lower() == "y" and pending:
        return machine, [DeleteEntries(pending)]
    return machine, [Render()]


def _handle_browsing(machine: Machine, key: str) -> tuple[Machine, list[Effect]]:
    session = machine.session
    lowered = key.lower()

    if lowered in QUIT_KEYS:
        return replace(machine, mode=Mode.DONE), [Exit()]

    if key in ("up", "k"):
        session = move_cursor(session, -1)
    elif key in ("down", "j"):
        session = move_cursor(session, 1)
    elif key == "pageup":
        session = move_cursor(session, -VISIBLE_ROWS)
    elif key == "pagedown":
        session = move_cursor(session, VISIBLE_ROWS)
    elif key == "space":
        session = toggle_selection(session, session.selection.cursor)
    elif key == "enter":
        snapshot = tuple(selected_entries(session))
        if not snapshot:
            return machine, []
        return replace(machine, mode=Mode.CONFIRMING, pending=snapshot), [Render()]
    elif lowered == "a":
        session = toggle_select_all(session)
    elif lowered == "s":
        session = cycle_sort(session)
    elif lowered == "d":
        return replace(machine, show_details=not machine.show_details), [Render()]
    elif lowered == "o":
        view = session.view()
        if not view:
            return machine, []
        return machine, [OpenDirectory(view[session.selection.cursor].path), Render()]
    else:
        return machine, []

    return replace(machine, session=session), [Render()]


def apply_deletion(machine: Machine, report: DeletionReport) -> tuple[Machine, list[Effect]]:
    """Prune attempted entries after a batch; finish when nothing is left."""
    session = remove_entries(machine.session, report.attempted)
    if not session.entries:
        return replace(machine, session=session, mode=Mode.DONE, pending=()), [Exit()]
    return replace(machine, session=session, mode=Mode.BROWSING, pending=()), [Render()]
