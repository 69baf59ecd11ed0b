"""Documentation generation package."""

from .models import PipelineCursor
from .pipeline import DocumentationPipeline
from .summaries import build_setup_markdown, build_structure_markdown, write_summaries

__all__ = [
    "DocumentationPipeline",
    "PipelineCursor",
    "build_setup_markdown",
    "build_structure_markdown",
    "write_summaries",
]
