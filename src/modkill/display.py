"""Rich terminal display for modkill."""

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modkill import PACKAGE_NAME, __version__
from modkill.models import DeletionFailure, DeletionReport, Entry, ScanSummary
from modkill.scanner import ScanProgress

console = Console()

PROGRESS_PATH_WIDTH = 50


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units)."""
    if size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_elapsed(seconds: float) -> str:
    """Format a duration as ms, seconds or minutes."""
    ms = seconds * 1000
    if ms < 1000:
        return f"{ms:.0f}ms"
    elif ms < 60000:
        return f"{seconds:.2f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - minutes * 60:.1f}s"


def shorten_path(path: str, width: int = PROGRESS_PATH_WIDTH) -> str:
    """Keep the tail of a long path."""
    if len(path) <= width:
        return path
    return "..." + path[-(width - 3) :]


def render_progress(progress: ScanProgress, target: str) -> Text:
    """One-line scan progress: current path and number found."""
    current = shorten_path(progress.current_path) if progress.current_path else "scanning..."
    line = Text()
    line.append("⏳ ", style="cyan")
    line.append(current, style="dim")
    line.append(f" | {progress.found} {target} found")
    return line


@contextmanager
def scan_progress(progress: ScanProgress, target: str) -> Iterator[None]:
    """Show a live, transient progress line while scanning."""
    with Live(
        get_renderable=lambda: render_progress(progress, target),
        console=console,
        transient=True,
        refresh_per_second=10,
    ):
        yield


def show_scan_header(target: str) -> None:
    """Announce a scan."""
    console.print(f"[bold blue]Scanning for {target} directories...[/bold blue]")
    console.print(f"[dim]{PACKAGE_NAME} v{__version__}[/dim]\n")


def show_scan_error(path: str, error: OSError) -> None:
    """Report a traversal error."""
    console.print(f"[red]Error scanning {path}:[/red] {error}")


def show_scan_complete(summary: ScanSummary, target: str) -> None:
    """Display scan timing and count."""
    console.print(f"[green]✓[/green] Scan completed in {format_elapsed(summary.elapsed_seconds)}")
    console.print(f"[blue]Found {len(summary.entries)} {target} directories[/blue]")


def show_entries(entries: list[Entry], title: str = "Scan Results") -> None:
    """Display entries as a table with a total."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Project", style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Modified", justify="right")
    table.add_column("Path", style="blue")
    table.add_column("", width=8)

    for i, entry in enumerate(entries, 1):
        table.add_row(
            str(i),
            entry.package_name,
            format_size(entry.size),
            entry.last_modified.strftime("%Y-%m-%d"),
            entry.path,
            "[green]ACTIVE[/green]" if entry.is_active else "",
        )

    console.print(table)
    console.print(f"\n[yellow]Total space: {format_size(sum(e.size for e in entries))}[/yellow]")


def show_dry_run(entries: list[Entry]) -> None:
    """List what would be deleted."""
    console.print("[bold blue]DRY RUN - No files will be deleted[/bold blue]")
    for i, entry in enumerate(entries, 1):
        console.print(f"{i}. {entry.path} ({format_size(entry.size)})")
    console.print(f"\n[yellow]Total: {format_size(sum(e.size for e in entries))}[/yellow]")


def show_deletion_failure(failure: DeletionFailure) -> None:
    """Display a single failed deletion."""
    console.print(
        f"  [red]✗[/red] Failed to delete {failure.entry.path} "
        f"([bold]{failure.kind.value}[/bold]): {failure.message}"
    )


def show_deletion_report(report: DeletionReport, remaining: list[Entry]) -> None:
    """Display the outcome of an interactive deletion batch."""
    console.print()
    console.print("[bold green]Cleanup complete![/bold green]")

    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Deleted", f"{report.deleted_count} directories")
    table.add_row("Freed", format_size(report.freed_bytes))
    if not report.success:
        table.add_row("[red]Failed[/red]", str(report.failure_count))
    table.add_row("Time taken", format_elapsed(report.elapsed_seconds))
    table.add_row(
        "Remaining",
        f"{len(remaining)} directories ({format_size(sum(e.size for e in remaining))})",
    )
    console.print(table)

    for failure in report.failures:
        show_deletion_failure(failure)


def show_delete_all_result(report: DeletionReport, target: str) -> None:
    """Display the outcome of an unconditional batch."""
    console.print(f"[bold green]✓ Deleted {report.deleted_count} {target}[/bold green]")
    console.print(f"[green]  Time taken: {format_elapsed(report.elapsed_seconds)}[/green]")
    for failure in report.failures:
        show_deletion_failure(failure)


def show_update_available(latest: str, current: str = __version__) -> None:
    """Display an update banner."""
    console.print(
        Panel(
            f"[bold]Update available:[/bold] {latest} (current: {current})\n"
            f"Run [cyan]pip install --upgrade {PACKAGE_NAME}[/cyan] to install it",
            border_style="yellow",
        )
    )
