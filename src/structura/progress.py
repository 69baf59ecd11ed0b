"""Progress events emitted by the documentation pipeline.

One ProgressEvent is produced per pipeline step and consumed by whoever
drives the pipeline (CLI session, tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class Status(Enum):
    """Outcome of one pipeline step."""
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressEvent:
    """Progress event for one file."""
    status: Status
    path: Path
    message: str = ""
    destination: Optional[Path] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def file_completed(cls, path: Path, destination: Path) -> "ProgressEvent":
        return cls(Status.COMPLETED, path, destination=destination)

    @classmethod
    def file_skipped(cls, path: Path, reason: str, destination: Optional[Path] = None) -> "ProgressEvent":
        return cls(Status.SKIPPED, path, message=reason, destination=destination)

    @classmethod
    def file_failed(cls, path: Path, message: str) -> "ProgressEvent":
        return cls(Status.FAILED, path, message=message)

    @property
    def failed(self) -> bool:
        return self.status is Status.FAILED
