#!/usr/bin/env python
"""
Output formatting with Rich console.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.theme import Theme


custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "success": "green",
})


class ConsoleOutput:
    """Console output with Rich formatting."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(theme=custom_theme)

    def print(self, text: str = "", **kwargs):
        """Print text to console."""
        self.console.print(text, **kwargs)

    def print_error(self, text: str):
        self.console.print(f"[red]Error:[/red] {text}")

    def print_success(self, text: str):
        self.console.print(f"[green]Success:[/green] {text}")

    def print_warning(self, text: str):
        self.console.print(f"[yellow]Warning:[/yellow] {text}")

    def print_info(self, text: str):
        self.console.print(f"[cyan]Info:[/cyan] {text}")

    def print_dim(self, text: str):
        self.console.print(f"[dim]{text}[/dim]")

    def print_table(self, title: str, columns: list[str], rows: list[tuple]):
        """Print rows as a Rich table."""
        table = Table(title=title, title_justify="left")
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(str(cell) for cell in row))
        self.console.print(table)
