"""Data classes for doc_generation package."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class PipelineCursor:
    """Position and error log of one pipeline run.

    Only DocumentationPipeline mutates a cursor, and only through advance(),
    so processed_count never decreases and never passes total_count.
    """

    total_count: int
    processed_count: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.processed_count >= self.total_count

    @property
    def fraction(self) -> float:
        if self.total_count == 0:
            return 1.0
        return self.processed_count / self.total_count

    def advance(self) -> None:
        if self.is_terminal:
            raise RuntimeError("cursor is already terminal")
        self.processed_count += 1

    def record_error(self, message: str) -> None:
        self.errors.append(message)
