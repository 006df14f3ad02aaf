"""Interactive list application for modkill."""

import logging

import typer
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from modkill.cleaner import delete_entries
from modkill.display import format_size
from modkill.models import DeletionReport, Entry
from modkill.selection import (
    DeleteEntries,
    Effect,
    Exit,
    Machine,
    OpenDirectory,
    Render,
    Session,
    apply_deletion,
    handle_key,
    load_entries,
)
from modkill.tui.widgets import EntryList

log = logging.getLogger(__name__)


class ModkillApp(App[list[DeletionReport]]):
    """Browse, select and delete discovered directories."""

    TITLE = "modkill"
    SUB_TITLE = "Interactive cleanup"

    CSS = """
    #entries-pane {
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit_list", "Quit", show=False, priority=True),
    ]

    def __init__(self, entries: list[Entry], target: str, scan_seconds: float = 0.0):
        super().__init__()
        self.machine = Machine(session=load_entries(Session(), entries))
        self.target = target
        self.scan_seconds = scan_seconds
        self.reports: list[DeletionReport] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="entries-pane"):
            yield EntryList(id="entries")
        yield Footer()

    def on_mount(self) -> None:
        """Draw the initial list."""
        self.redraw()

    def redraw(self) -> None:
        """Render the current state."""
        last_report = self.reports[-1] if self.reports else None
        self.query_one("#entries", EntryList).show(
            self.machine, self.target, self.scan_seconds, last_report
        )

    def on_key(self, event: events.Key) -> None:
        """Feed every key press to the state machine."""
        event.stop()
        event.prevent_default()
        self.dispatch_key_name(event.key)

    def action_quit_list(self) -> None:
        """Quit on ctrl+c."""
        self.dispatch_key_name("ctrl+c")

    def dispatch_key_name(self, key: str) -> None:
        """Apply a key to the state machine and run the resulting effects."""
        self.machine, effects = handle_key(self.machine, key)
        self.run_effects(effects)

    def run_effects(self, effects: list[Effect]) -> None:
        """Carry out state machine effects in order."""
        for effect in effects:
            if isinstance(effect, Render):
                self.redraw()
            elif isinstance(effect, DeleteEntries):
                self._delete(effect.entries)
            elif isinstance(effect, OpenDirectory):
                self._open(effect.path)
            elif isinstance(effect, Exit):
                self.exit(self.reports)

    def _delete(self, entries: tuple[Entry, ...]) -> None:
        report = delete_entries(list(entries))
        self.reports.append(report)

        if report.failures:
            self.notify(
                f"{report.failure_count} of {len(entries)} deletions failed",
                severity="error",
                timeout=5,
            )
        else:
            self.notify(f"Freed {format_size(report.freed_bytes)}", timeout=3)

        self.machine, effects = apply_deletion(self.machine, report)
        self.run_effects(effects)

    def _open(self, path: str) -> None:
        try:
            typer.launch(path)
        except OSError as e:
            log.debug("Could not open %s: %s", path, e)
            self.notify(f"Could not open {path}", severity="error")


def run_tui(
    entries: list[Entry],
    target: str,
    scan_seconds: float = 0.0,
) -> tuple[list[DeletionReport], list[Entry]]:
    """Run the interactive list.

    Returns:
        Tuple of (deletion reports, entries left in the dataset)
    """
    app = ModkillApp(entries, target, scan_seconds)
    reports = app.run() or []
    return reports, list(app.machine.session.entries)
