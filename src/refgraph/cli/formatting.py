"""Rich formatting helpers for the refgraph CLI.

Provides functions that format SDK data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Iterable

    from refgraph.models.refs import RefEntry
    from refgraph.models.report import CommitReport

# Branch lists longer than this are cut short with "and N more".
MAX_BRANCHES = 20


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def branch_summary(branches: list[str], limit: int = MAX_BRANCHES) -> str:
    """Comma-separated branch names, truncated after *limit* entries."""
    shown = ", ".join(branches[:limit])
    if len(branches) > limit:
        shown += f" and {len(branches) - limit} more"
    return shown


def format_branches(branches: Iterable[str], console: Console) -> None:
    """Display the branches containing a commit, one per line."""
    names = sorted(branches)
    if not names:
        console.print("[dim]No branches contain this commit.[/dim]")
        return
    for name in names:
        console.print(f"[green]{escape(name)}[/green]", highlight=False)


def format_report(report: CommitReport, console: Console) -> None:
    """Display a commit report in the style of a history view's details pane."""
    console.print(f"[yellow]commit {report.commit_id}[/yellow]")
    console.print(f"  Date:      {_format_time(report.timestamp)}")
    for parent in report.parents:
        console.print(f"  Parent:    {parent[:12]}")
    for child in report.children:
        console.print(f"  Child:     {child[:12]}")
    if report.branches:
        console.print(f"  Branches:  {escape(branch_summary(report.branches))}", highlight=False)
    if report.tags:
        console.print(f"  Tags:      {escape(', '.join(report.tags))}", highlight=False)
    if report.follows is not None:
        console.print(f"  Follows:   [cyan]{escape(report.follows)}[/cyan]", highlight=False)
    if report.precedes is not None:
        console.print(f"  Precedes:  [cyan]{escape(report.precedes)}[/cyan]", highlight=False)
    if report.message:
        console.print()
        console.print(f"    {escape(report.message)}", highlight=False)


def format_refs(refs: list[RefEntry], console: Console) -> None:
    """Display refs in compact table format."""
    if not refs:
        console.print("[dim]No refs.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Kind", style="cyan", width=6)
    table.add_column("Target", style="yellow", width=12)
    table.add_column("Name")

    for ref in refs:
        table.add_row(ref.kind.value, ref.target[:12], escape(ref.short_name))

    console.print(table)
