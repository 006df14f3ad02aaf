"""Custom widgets for the modkill TUI."""

from rich.text import Text
from textual.widgets import Static

from modkill.display import format_elapsed, format_size
from modkill.models import DeletionReport, Entry, SortKey
from modkill.selection import Machine, Mode, selected_entries, total_selected_size, visible_window

SORT_LABELS = {
    SortKey.SIZE: "size",
    SortKey.LAST_MODIFIED: "last modified",
    SortKey.PATH: "path",
}


def render_row(entry: Entry, is_cursor: bool, is_selected: bool, show_details: bool) -> Text:
    """Render one list row."""
    line = Text()
    line.append("> " if is_cursor else "  ", style="bold cyan")
    if is_selected:
        line.append("[✓] ", style="bold green")
    else:
        line.append("[ ] ")

    size = format_size(entry.size)
    if show_details:
        line.append(f"{entry.package_name}@{entry.package_version} ", style="bold")
        line.append(f"({size}, {entry.last_modified:%Y-%m-%d}) ", style="dim")
        line.append(entry.path, style="blue")
    else:
        line.append(f"{entry.package_name} ", style="bold")
        line.append(f"{size} ", style="dim")
        line.append(entry.project_path, style="blue")

    if entry.is_active:
        line.append(" [ACTIVE]", style="bold green")
    return line


def render_list(
    machine: Machine,
    target: str,
    scan_seconds: float,
    last_report: DeletionReport | None = None,
) -> Text:
    """Render the browsing screen: header, visible rows and selection total."""
    session = machine.session
    view = session.view()
    selected = session.selection.selected

    text = Text()
    text.append(f"Found {len(view)} {target} directories", style="bold blue")
    text.append(f" (search took {format_elapsed(scan_seconds)})\n", style="dim")
    text.append(
        "↑/↓ navigate, SPACE select, ENTER delete, a select all, "
        f"s sort ({SORT_LABELS[session.selection.sort_key]}), d details, o open, q quit\n\n",
        style="dim",
    )

    start, end = visible_window(session)
    for i in range(start, end):
        entry = view[i]
        text.append_text(
            render_row(
                entry,
                is_cursor=i == session.selection.cursor,
                is_selected=entry.path in selected,
                show_details=machine.show_details,
            )
        )
        text.append("\n")

    count = len(selected_entries(session))
    text.append(
        f"\nSelected: {count} folders, {format_size(total_selected_size(session))}",
        style="yellow",
    )

    if last_report is not None:
        text.append(
            f"\nLast cleanup: deleted {last_report.deleted_count}, "
            f"freed {format_size(last_report.freed_bytes)}",
            style="green",
        )
        if last_report.failures:
            text.append(f", {last_report.failure_count} failed", style="red")

    return text


def render_confirmation(entries: tuple[Entry, ...], target: str) -> Text:
    """Render the deletion confirmation prompt."""
    text = Text()
    text.append("DELETE CONFIRMATION\n\n", style="bold red")
    text.append(f"You are about to delete {len(entries)} {target} directories:\n")
    for i, entry in enumerate(entries, 1):
        text.append(f"  {i}. {entry.path} ({format_size(entry.size)})\n", style="red")

    total = sum(e.size for e in entries)
    text.append(f"\nTotal space to free: {format_size(total)}\n", style="yellow")
    text.append("\nPress y to confirm, any other key to cancel...", style="yellow")
    return text


class EntryList(Static):
    """The interactive list, or the confirmation prompt while confirming."""

    def show(
        self,
        machine: Machine,
        target: str,
        scan_seconds: float,
        last_report: DeletionReport | None = None,
    ) -> None:
        """Redraw from the current state."""
        if machine.mode == Mode.CONFIRMING:
            self.update(render_confirmation(machine.pending, target))
        else:
            self.update(render_list(machine, target, scan_seconds, last_report))
