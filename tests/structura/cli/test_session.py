"""Tests for the terminal SessionController."""

import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from rich.console import Console

from structura.cli.formatting.output import ConsoleOutput
from structura.cli.formatting.progress import ProgressBar
from structura.cli.session import SessionController, SessionSummary
from structura.doc_generation import DocumentationPipeline
from structura.filehandler import traverse
from structura.llm.retry import ExecutionResult, ResilientExecutor
from structura.llm.types import ClassifiedError, ErrorKind
from structura.progress import ProgressEvent


def _output():
    buffer = io.StringIO()
    return ConsoleOutput(Console(file=buffer, width=200, force_terminal=False)), buffer


@pytest.fixture
def source_tree(tmp_path):
    root = tmp_path / "src"
    root.mkdir()
    (root / "a.go").write_text("package main\n")
    (root / "b.txt").write_text("hello\n")
    return root


def _pipeline(source_tree, tmp_path, document):
    executor = MagicMock(spec=ResilientExecutor)
    executor.document = document
    return DocumentationPipeline(
        traverse(source_tree),
        input_root=source_tree,
        output_root=tmp_path / "docs",
        executor=executor,
    )


class TestSessionSummary:
    """Tests for SessionSummary exit codes."""

    def test_exit_codes(self):
        assert SessionSummary(total=1).exit_code == 0
        assert SessionSummary(total=1, errors=["x"]).exit_code == 2
        assert SessionSummary(total=1, errors=["x"], interrupted=True).exit_code == 130

    def test_record_counts(self, tmp_path):
        summary = SessionSummary(total=3)
        summary.record(ProgressEvent.file_completed(tmp_path / "a", tmp_path / "a.md"))
        summary.record(ProgressEvent.file_skipped(tmp_path / "b", "directory"))
        summary.record(ProgressEvent.file_failed(tmp_path / "c", "boom"))
        assert (summary.completed, summary.skipped, summary.failed) == (1, 1, 1)
        assert summary.processed == 3


class TestSessionController:
    """Tests for SessionController.run()."""

    @pytest.mark.asyncio
    async def test_runs_to_completion(self, source_tree, tmp_path):
        pipeline = _pipeline(source_tree, tmp_path, AsyncMock(return_value=ExecutionResult(text="# Doc", attempts=1)))
        output, buffer = _output()

        summary = await SessionController(pipeline, output).run()

        assert summary.completed == 2
        assert summary.exit_code == 0
        assert pipeline.is_done
        assert len(summary.summary_paths) == 2
        assert "2 documented, 0 skipped, 0 failed" in buffer.getvalue()

    @pytest.mark.asyncio
    async def test_reports_errors(self, source_tree, tmp_path):
        error = ClassifiedError(ErrorKind.PROTOCOL_FAILURE, "API request failed with status: 500, body: [oops]")
        pipeline = _pipeline(source_tree, tmp_path, AsyncMock(return_value=ExecutionResult(error=error, attempts=1)))
        output, buffer = _output()

        summary = await SessionController(pipeline, output).run()

        assert summary.failed == 2
        assert summary.exit_code == 2
        text = buffer.getvalue()
        assert "2 error(s)" in text
        assert "body: [oops]" in text

    @pytest.mark.asyncio
    async def test_interrupt_leaves_cursor_in_place(self, source_tree, tmp_path):
        pipeline = _pipeline(source_tree, tmp_path, AsyncMock(side_effect=KeyboardInterrupt))
        output, buffer = _output()

        summary = await SessionController(pipeline, output).run()

        assert summary.interrupted
        assert summary.exit_code == 130
        assert pipeline.cursor.processed_count == 0
        assert "Run the same command again to resume" in buffer.getvalue()

    @pytest.mark.asyncio
    async def test_empty_pipeline(self, tmp_path):
        root = tmp_path / "empty"
        root.mkdir()
        pipeline = _pipeline(root, tmp_path, AsyncMock())
        output, _ = _output()

        summary = await SessionController(pipeline, output).run()

        assert summary.total == 0
        assert summary.exit_code == 0
        assert (tmp_path / "docs" / "PROJECT_STRUCTURE.md").exists()

    @pytest.mark.asyncio
    async def test_without_progress_display(self, source_tree, tmp_path):
        pipeline = _pipeline(source_tree, tmp_path, AsyncMock(return_value=ExecutionResult(text="# Doc", attempts=1)))
        output, buffer = _output()

        with patch("structura.cli.session.ProgressBar", wraps=ProgressBar) as bar:
            summary = await SessionController(pipeline, output, show_progress=False).run()

        assert bar.call_args.kwargs["enabled"] is False
        assert summary.completed == 2
        assert "2 documented" in buffer.getvalue()


class TestProgressBar:
    """Tests for ProgressBar."""

    def test_disabled_bar_is_inert(self):
        with ProgressBar(console=Console(file=io.StringIO()), enabled=False) as bar:
            task_id = bar.add_task("work", total=2)
            bar.update(task_id, advance=1, current="a.go")
        assert bar.progress is None
        assert task_id is None
