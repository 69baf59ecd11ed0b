#!/usr/bin/env python
"""
Progress bar for the documentation run.
"""
from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn


class ProgressBar:
    """Progress bar for long-running operations."""

    def __init__(self, console: Optional[Console] = None, transient: bool = True, enabled: bool = True):
        self.console = console or Console()
        self.transient = transient
        self.enabled = enabled
        self.progress: Optional[Progress] = None

    def __enter__(self):
        if not self.enabled:
            return self
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("[dim]{task.fields[current]}[/dim]"),
            console=self.console,
            transient=self.transient,
        )
        self.progress.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.progress:
            self.progress.__exit__(exc_type, exc_val, exc_tb)
        return False

    def add_task(self, description: str, total: Optional[float] = None, completed: float = 0):
        """Add a task to the progress bar."""
        if self.progress:
            return self.progress.add_task(description, total=total, completed=completed, current="")
        return None

    def update(self, task_id, advance: float = 1, **kwargs):
        """Update a task."""
        if self.progress and task_id is not None:
            self.progress.update(task_id, advance=advance, **kwargs)
