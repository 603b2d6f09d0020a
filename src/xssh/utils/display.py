"""
Display utilities for presenting sync results.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..sync import SyncResult

console = Console()


def display_sync_header(source: str) -> None:
    """Display the sync introduction."""
    console.print(f"[bold blue]🔄 Syncing hosts from {source}...[/bold blue]")


def display_sync_summary(result: SyncResult) -> None:
    """Display resolved hosts and what happened to each."""
    if not result.records:
        console.print("[dim]No hosts to sync[/dim]")
        return

    failed = {name: error for name, error in result.failed}
    skipped = set(result.skipped)

    table = Table(title=f"SSH Config Entries - {result.store.file_path}")
    table.add_column("Host", style="cyan")
    table.add_column("HostName", style="green")
    table.add_column("User", style="magenta")
    table.add_column("Status", style="yellow")

    for record in result.records:
        if record.name in failed:
            status = f"[red]write failed: {escape(str(failed[record.name]))}[/red]"
        elif record.name in skipped:
            status = "[dim]exists, skipped[/dim]"
        else:
            status = "[green]added[/green]"
        table.add_row(record.name, record.address, record.account, status)

    console.print(table)

    written = len(result.added) - len(result.failed)
    console.print(f"  • Written: {written}")
    console.print(f"  • Skipped: {len(result.skipped)}")
    if result.failed:
        console.print(f"  • [red]Failed: {len(result.failed)}[/red]")


def display_error(message: str) -> None:
    """Display error message."""
    console.print(f"[red]{escape(message)}[/red]")


def display_warning(message: str) -> None:
    """Display warning message."""
    console.print(f"[yellow]{escape(message)}[/yellow]")


def display_success(message: str) -> None:
    """Display success message."""
    console.print(f"[green]{escape(message)}[/green]")
