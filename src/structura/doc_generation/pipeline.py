"""Incremental documentation pipeline.

DocumentationPipeline owns the ordered file records and a PipelineCursor.
Each call to step() handles exactly one record:

1. Directory markers are skipped without network activity.
2. Records whose artifact would land on a summary file or a directory fail.
3. Records whose artifact already exists are skipped (resumability).
4. Everything else goes through ResilientExecutor; the text is written to
   ``<output_root>/<relative path><suffix>``.

The cursor advances by one per step regardless of outcome, so a run
terminates after exactly ``len(records)`` steps. Per-file failures are
recorded on the cursor and never abort the run.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import AsyncIterator, Optional, Sequence, Union

from structura.config.defaults import OUTPUT_SUFFIX, PROJECT_SETUP_FILENAME, PROJECT_STRUCTURE_FILENAME
from structura.filehandler import FileRecord, ProjectType
from structura.llm.retry import ResilientExecutor
from structura.persistence import atomic_write_with_fsync
from structura.progress import ProgressEvent

from .models import PipelineCursor
from . import summaries

logger = logging.getLogger(__name__)


class DocumentationPipeline:
    """Drives one file per step through the executor and persists the result."""

    def __init__(
        self,
        records: Sequence[FileRecord],
        *,
        input_root: Union[Path, str],
        output_root: Union[Path, str],
        executor: ResilientExecutor,
        project_type: Union[ProjectType, str] = ProjectType.GENERIC,
        suffix: str = OUTPUT_SUFFIX,
        write_summaries: bool = True,
    ):
        self._records = tuple(records)
        self.input_root = Path(os.path.abspath(input_root))
        self.output_root = Path(os.path.abspath(output_root))
        self.executor = executor
        self.project_type = ProjectType(project_type)
        self.suffix = suffix
        self.write_summaries = write_summaries
        self.cursor = PipelineCursor(total_count=len(self._records))
        self.summary_paths: list[Path] = []
        self._finalized = False

    @property
    def records(self) -> tuple[FileRecord, ...]:
        return self._records

    @property
    def is_done(self) -> bool:
        return self.cursor.is_terminal

    @property
    def current_record(self) -> Optional[FileRecord]:
        if self.cursor.is_terminal:
            return None
        return self._records[self.cursor.processed_count]

    @property
    def network_calls(self) -> int:
        return self.executor.dispatch_count

    @property
    def reserved_paths(self) -> frozenset[Path]:
        """Summary artifact paths that no per-file document may take."""
        return frozenset({
            self.output_root / PROJECT_STRUCTURE_FILENAME,
            self.output_root / PROJECT_SETUP_FILENAME,
        })

    def relative_path(self, record: FileRecord) -> Path:
        """Path of ``record`` relative to the input root.

        Raises:
            ValueError: If the record lies outside the input root
        """
        path = Path(os.path.abspath(record.path))
        try:
            return path.relative_to(self.input_root)
        except ValueError:
            raise ValueError(f"{record.path} is outside input root {self.input_root}") from None

    def destination_for(self, record: FileRecord) -> Path:
        """Mirror the source path under the output root and append the suffix."""
        rel = self.relative_path(record)
        return self.output_root / rel.parent / f"{rel.name}{self.suffix}"

    async def step(self) -> Optional[ProgressEvent]:
        """
        Process the record at the cursor and advance by one.

        Returns:
            The ProgressEvent for this step, or None once the run is terminal
        """
        if self.cursor.is_terminal:
            self._finalize()
            return None

        record = self._records[self.cursor.processed_count]
        try:
            event = await self._process(record)
        except Exception as e:
            logger.exception(f"Unexpected error documenting {record.path}")
            event = self._fail(record, f"unexpected error: {e}")

        self.cursor.advance()
        if self.cursor.is_terminal:
            self._finalize()
        return event

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """Yield one event per step until terminal. Stop iterating to cancel."""
        while True:
            event = await self.step()
            if event is None:
                return
            yield event

    async def run(self) -> PipelineCursor:
        """Drive every step to completion and return the final cursor."""
        async for _ in self.events():
            pass
        return self.cursor

    async def _process(self, record: FileRecord) -> ProgressEvent:
        if record.is_dir:
            return ProgressEvent.file_skipped(record.path, "directory")

        try:
            rel = self.relative_path(record)
        except ValueError as e:
            return self._fail(record, str(e))
        destination = self.destination_for(record)

        if self.write_summaries and destination in self.reserved_paths:
            return self._fail(record, f"Cannot document {rel.as_posix()}: {destination} is reserved for the project summary")
        if destination.is_dir():
            return self._fail(record, f"Cannot document {rel.as_posix()}: {destination} is a directory")
        if destination.is_file():
            logger.debug(f"Skipping {rel}: {destination} already exists")
            return ProgressEvent.file_skipped(record.path, "already documented", destination)

        result = await self.executor.document(record, self.project_type, display_path=rel.as_posix())
        if not result.ok:
            return self._fail(record, f"Failed to generate documentation for {rel.as_posix()}: {result.error.user_message}")

        try:
            atomic_write_with_fsync(destination, result.text)
        except OSError as e:
            return self._fail(record, f"Failed to write documentation to {destination}: {e}")

        logger.info(f"Documented {rel} -> {destination}")
        return ProgressEvent.file_completed(record.path, destination)

    def _fail(self, record: FileRecord, message: str) -> ProgressEvent:
        logger.warning(message)
        self.cursor.record_error(message)
        return ProgressEvent.file_failed(record.path, message)

    def _finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True
        if not self.write_summaries:
            return
        try:
            self.summary_paths = summaries.write_summaries(
                self._records,
                input_root=self.input_root,
                output_root=self.output_root,
                project_type=self.project_type,
            )
        except OSError as e:
            message = f"Failed to write project summaries: {e}"
            logger.warning(message)
            self.cursor.record_error(message)
