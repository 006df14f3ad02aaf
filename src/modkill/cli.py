"""CLI interface for modkill."""

import logging
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.logging import RichHandler

from modkill import PACKAGE_NAME, __version__
from modkill.cleaner import delete_all
from modkill.config import build_scan_options, load_config
from modkill.display import (
    console,
    scan_progress,
    show_delete_all_result,
    show_deletion_report,
    show_dry_run,
    show_entries,
    show_scan_complete,
    show_scan_error,
    show_scan_header,
    show_update_available,
)
from modkill.models import ScanOptions, ScanSummary
from modkill.scanner import ScanProgress, scan
from modkill.updates import check_daily_update, fetch_latest_version

QUICK_SCAN_DEPTH = 5

# Create Typer app
app = typer.Typer(
    name=PACKAGE_NAME,
    help="Find and delete node_modules (or any named) directories",
    add_completion=False,
)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"{PACKAGE_NAME} version {__version__}")
        raise typer.Exit()


def run_scan(options: ScanOptions) -> ScanSummary:
    """Scan with a live progress line, then print the summary."""
    show_scan_header(options.target)
    progress = ScanProgress()
    on_error = None if options.hide_errors else show_scan_error

    with scan_progress(progress, options.target):
        summary = scan(options, progress=progress, on_error=on_error)

    show_scan_complete(summary, options.target)
    return summary


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    directory: Path = typer.Option(Path("."), "--dir", "-d", help="Directory to scan"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Target directory name"),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-e", help="Exclude paths containing this text (repeatable)"
    ),
    exclude_hidden: bool = typer.Option(False, "--exclude-hidden", help="Exclude hidden directories"),
    hide_errors: bool = typer.Option(False, "--hide-errors", help="Hide scan errors"),
    full_scan: bool = typer.Option(False, "--full-scan", help="Scan the whole home directory"),
    depth: Optional[int] = typer.Option(None, "--depth", min=0, help="Maximum scan depth"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be deleted without deleting"
    ),
    delete_everything: bool = typer.Option(
        False, "--delete-all", help="Delete everything found without confirmation"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity"),
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Scan for target directories and clean them up interactively.

    Use arrow keys to navigate, SPACE to select, ENTER to delete.
    Press 'q' to quit, 'd' to toggle details, 's' to change sort order.

    Deleting is irreversible: run with --dry-run first.
    """
    _setup_logging(verbose)

    if ctx.invoked_subcommand is not None:
        return

    latest = check_daily_update()
    if latest:
        show_update_available(latest)

    options = build_scan_options(
        load_config(),
        roots=[str(directory)],
        target=target,
        exclude=exclude,
        exclude_hidden=exclude_hidden,
        hide_errors=hide_errors,
        full_scan=full_scan,
        depth=depth,
    )

    try:
        summary = run_scan(options)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    entries = summary.entries

    if dry_run:
        show_dry_run(entries)
    elif delete_everything:
        console.print(f"[bold red]Deleting all {len(entries)} {options.target}...[/bold red]")
        report = delete_all(entries)
        show_delete_all_result(report, options.target)
    else:
        if not entries:
            console.print(f"[yellow]No {options.target} found to delete.[/yellow]")
            return

        from modkill.tui import run_tui

        reports, remaining = run_tui(entries, options.target, summary.elapsed_seconds)
        for report in reports:
            show_deletion_report(report, remaining)
        console.print("[green]Goodbye![/green]")


@app.command("scan")
def quick_scan(
    directory: Path = typer.Option(Path("."), "--dir", "-d", help="Directory to scan"),
) -> None:
    """Quick scan and display results."""
    config = load_config()
    options = build_scan_options(
        config,
        roots=[str(directory)],
        exclude_hidden=True,
        hide_errors=True,
        depth=QUICK_SCAN_DEPTH,
    )

    summary = run_scan(options)

    if not summary.entries:
        console.print(f"[green]No {options.target} found![/green]")
        return

    console.print()
    show_entries(summary.entries)


@app.command()
def update(
    check_only: bool = typer.Option(
        False, "--check-only", help="Only report whether an update exists"
    ),
) -> None:
    """Check the package index for a newer release."""
    console.print("[blue]Checking for updates...[/blue]")

    try:
        latest = fetch_latest_version()
    except (httpx.HTTPError, ValueError) as e:
        console.print(f"[red]Failed to check for updates: {e}[/red]")
        console.print("[dim]Please check your internet connection and try again later.[/dim]")
        raise typer.Exit(1)

    console.print(f"Current version: [bold]{__version__}[/bold]")
    console.print(f"Latest version:  [bold]{latest}[/bold]")

    if latest == __version__:
        console.print("[green]You're already running the latest version![/green]")
        return

    console.print(f"[yellow]New version available: {latest}[/yellow]")
    if check_only:
        return

    console.print("\nUpgrade with one of:")
    console.print(f"  [cyan]pip install --upgrade {PACKAGE_NAME}=={latest}[/cyan]")
    console.print(f"  [cyan]pipx upgrade {PACKAGE_NAME}[/cyan]")


@app.command(name="version")
def show_version() -> None:
    """Display current version."""
    console.print(f"{PACKAGE_NAME} version {__version__}")


if __name__ == "__main__":
    app()
