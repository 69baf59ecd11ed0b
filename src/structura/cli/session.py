#!/usr/bin/env python
"""
Terminal session driving a DocumentationPipeline.

The controller owns only presentation: it calls ``pipeline.step()`` until the
cursor is terminal, renders progress, and reports the collected errors.
Stopping early (Ctrl-C) leaves the output tree resumable.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from structura.cli.formatting.output import ConsoleOutput
from structura.cli.formatting.progress import ProgressBar
from structura.doc_generation.pipeline import DocumentationPipeline
from structura.progress import ProgressEvent, Status

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2
EXIT_INTERRUPTED = 130


@dataclass
class SessionSummary:
    """Counts and errors from one terminal session."""
    total: int
    completed: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    summary_paths: List[Path] = field(default_factory=list)
    interrupted: bool = False

    @property
    def processed(self) -> int:
        return self.completed + self.skipped + self.failed

    @property
    def exit_code(self) -> int:
        if self.interrupted:
            return EXIT_INTERRUPTED
        if self.errors:
            return EXIT_PARTIAL
        return EXIT_OK

    def record(self, event: ProgressEvent) -> None:
        if event.status is Status.COMPLETED:
            self.completed += 1
        elif event.status is Status.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


class SessionController:
    """Drives pipeline steps with a rich progress display."""

    def __init__(
        self,
        pipeline: DocumentationPipeline,
        output: Optional[ConsoleOutput] = None,
        *,
        show_progress: bool = True,
    ):
        self.pipeline = pipeline
        self.output = output or ConsoleOutput()
        self.show_progress = show_progress

    async def run(self) -> SessionSummary:
        cursor = self.pipeline.cursor
        summary = SessionSummary(total=cursor.total_count)

        try:
            with ProgressBar(console=self.output.console, enabled=self.show_progress) as bar:
                task_id = bar.add_task(
                    "Generating documentation",
                    total=cursor.total_count,
                    completed=cursor.processed_count,
                )
                while not self.pipeline.is_done:
                    record = self.pipeline.current_record
                    bar.update(task_id, advance=0, current=self._label(record.path))
                    event = await self.pipeline.step()
                    if event is None:
                        break
                    summary.record(event)
                    bar.update(task_id, advance=1)
                    self._report_event(event)
                # Zero-record runs finalize on the first step() call
                await self.pipeline.step()
        except (KeyboardInterrupt, asyncio.CancelledError):
            summary.interrupted = True
            logger.debug(f"Interrupted at {cursor.processed_count}/{cursor.total_count}")

        summary.errors = list(cursor.errors)
        summary.summary_paths = list(self.pipeline.summary_paths)
        self.report(summary)
        return summary

    def report(self, summary: SessionSummary) -> None:
        out = self.output
        if summary.interrupted:
            out.print_warning(
                f"Interrupted after {summary.processed}/{summary.total} files. "
                "Run the same command again to resume."
            )

        out.print(
            f"[bold]{summary.completed}[/bold] documented, "
            f"[bold]{summary.skipped}[/bold] skipped, "
            f"[bold]{summary.failed}[/bold] failed "
            f"(of {summary.total})"
        )
        for path in summary.summary_paths:
            out.print_dim(f"Wrote {path}")

        if summary.errors:
            out.print("")
            out.print(f"[red]{len(summary.errors)} error(s):[/red]")
            for message in summary.errors:
                out.print(f"  [red]-[/red] {escape(message)}", highlight=False)
        elif not summary.interrupted:
            out.print_success(f"Documentation written to {self.pipeline.output_root}")

    def _report_event(self, event: ProgressEvent) -> None:
        if event.status is Status.COMPLETED:
            out_path = event.destination
            self.output.print_dim(escape(f"{self._label(event.path)} -> {out_path}"))
        elif event.status is Status.FAILED:
            self.output.print(f"[red]x[/red] {escape(self._label(event.path))}", highlight=False)

    def _label(self, path: Path) -> str:
        try:
            return Path(path).resolve().relative_to(self.pipeline.input_root.resolve()).as_posix()
        except ValueError:
            return str(path)
