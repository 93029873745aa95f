"""Rich formatting helpers for the cv CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
Structured encodings are written with click.echo so markup is never
interpreted inside them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_table(columns: Sequence[str], rows: Sequence[Sequence[str]], console: Console) -> None:
    """Display rows under a header row of column names."""
    table = Table(show_header=True, header_style="bold")
    for column in columns:
        table.add_column(escape(column), overflow="fold")
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))
    console.print(table)


def format_info(message: str, console: Console) -> None:
    """Display an informational line."""
    console.print(f"[green]{escape(message)}[/green]", highlight=False, soft_wrap=True)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
