"""
Atomic-write persistence for documentation artifacts.

A partially written artifact would be mistaken for a finished one by the
pipeline's skip check, so artifacts are written to a temp file in the same
directory and renamed into place.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write_with_fsync(path: Path, content: str) -> None:
    """
    Write content to a file atomically with fsync for durability.

    This function:
    1. Creates missing parent directories
    2. Writes content to a temporary file in the same directory
    3. Flushes and fsyncs the temp file
    4. Atomically renames the temp file to the target path

    Args:
        path: Target file path
        content: Content to write (encoded as UTF-8)

    Raises:
        OSError: If the write operation fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
