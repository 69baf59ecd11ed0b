"""File source: project-type aware ignore rules and directory traversal.

Provides:
- ProjectType: Supported project flavours (drives ignore rules and prompts)
- IgnorePolicy: Name/glob matching against ignore-dir and ignore-file sets
- FileRecord: Immutable snapshot of one file considered for documentation
- traverse(): Walk a root directory into an ordered list of FileRecords
- detect_project_type(): Infer the project type from marker files
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from structura.config.defaults import (
    FILE_MAX_BYTES,
    OUTPUT_SUFFIX,
    PROJECT_SETUP_FILENAME,
    PROJECT_STRUCTURE_FILENAME,
)

logger = logging.getLogger(__name__)

SUMMARY_FILENAMES = frozenset({PROJECT_STRUCTURE_FILENAME, PROJECT_SETUP_FILENAME})


class ProjectType(str, Enum):
    GENERIC = "generic"
    REACT = "react"
    NODE = "node"
    PYTHON = "python"
    DJANGO = "django"
    GO = "go"
    JAVA = "java"
    RUBY = "ruby"
    RAILS = "rails"
    FLUTTER = "flutter"


class PathNotFoundError(FileNotFoundError):
    """Raised when the traversal root does not exist."""


# =============================================================================
# Ignore Rules
# =============================================================================

BASE_IGNORE_DIRS = (
    ".git", "node_modules", "vendor", "dist", "build",
    ".idea", ".vscode", ".github", ".cache", ".svn",
    ".hg", ".bzr", "CVS", "__pycache__", ".sass-cache",
    ".next", ".nuxt", ".output", "out", ".parcel-cache",
)

BASE_IGNORE_FILES = (
    ".DS_Store", "*.lock", "*.log", "*.wasm", "*.min.js",
    "*.min.css", "*.map", "*.ico", "*.svg", "*.png", "*.jpg",
    "*.jpeg", "*.gif", "*.webp", "*.ttf", "*.woff", "*.woff2",
    ".env", "*.env", ".env.*", "*.yml", "*.yaml", "*.toml", "*.ini",
    "*.config", "*.conf", "Dockerfile", "docker-compose.yml",
    ".gitignore", ".gitattributes", ".gitmodules", ".gitkeep",
    ".npmrc", ".npmignore", ".eslintignore", ".prettierignore",
    ".dockerignore", ".editorconfig", "thumbs.db", ".htaccess",
    "*.swp", "*.swo", "*.bak", "*.tmp", "*.temp", "*.o", "*.obj",
    "*.suo", "*.user", "*.userosscache", "*.dbmdl",
    "*.sh", "*README*", "*readme*",
)

# project type -> (extra dirs, extra file globs)
PROJECT_IGNORE_RULES = {
    ProjectType.REACT: (("coverage", ".next"), ("package.json", "package-lock.json", "*.config.js", "*.test.*")),
    ProjectType.NODE: (("coverage", ".next"), ("package.json", "package-lock.json", "*.config.js", "*.test.*")),
    ProjectType.PYTHON: (("__pycache__", ".venv", "venv", "env", ".pytest_cache"), ("*.pyc", "requirements.txt", ".env")),
    ProjectType.DJANGO: (("__pycache__", ".venv", "venv", "env", ".pytest_cache"), ("*.pyc", "requirements.txt", ".env")),
    ProjectType.GO: (("bin",), ("go.sum",)),
    ProjectType.JAVA: (("target", "out", "bin"), ("*.class", "*.jar", "pom.xml", "build.gradle")),
    ProjectType.RUBY: (("tmp", "log"), ("Gemfile.lock", "*.gem")),
    ProjectType.RAILS: (("tmp", "log"), ("Gemfile.lock", "*.gem")),
    ProjectType.FLUTTER: ((".dart_tool", "build"), ("pubspec.lock", "*.g.dart")),
}


@dataclass(frozen=True)
class IgnorePolicy:
    """Basename matching against ignored directory names and file globs."""

    ignore_dirs: frozenset = field(default_factory=frozenset)
    ignore_files: tuple = ()

    @classmethod
    def for_project_type(cls, project_type: ProjectType = ProjectType.GENERIC) -> "IgnorePolicy":
        extra_dirs, extra_files = PROJECT_IGNORE_RULES.get(ProjectType(project_type), ((), ()))
        files = tuple(dict.fromkeys(BASE_IGNORE_FILES + tuple(extra_files)))
        return cls(ignore_dirs=frozenset(BASE_IGNORE_DIRS + tuple(extra_dirs)), ignore_files=files)

    @classmethod
    def empty(cls) -> "IgnorePolicy":
        return cls()

    def should_ignore(self, path: Path | str) -> bool:
        basename = os.path.basename(os.fspath(path))
        if basename in self.ignore_dirs:
            return True
        return any(fnmatch.fnmatchcase(basename, pattern) for pattern in self.ignore_files)


# =============================================================================
# Traversal
# =============================================================================

@dataclass(frozen=True)
class FileRecord:
    """One filesystem entry considered for documentation."""
    path: Path
    content: str = ""
    size: int = 0
    is_dir: bool = False


def traverse(
    root: Path | str,
    policy: Optional[IgnorePolicy] = None,
    *,
    max_file_size: int = FILE_MAX_BYTES,
    exclude: Iterable[Path | str] = (),
    artifact_suffix: str = OUTPUT_SUFFIX,
) -> list[FileRecord]:
    """
    Walk ``root`` and collect a FileRecord per non-ignored regular file.

    Ignored directories are pruned entirely. Files at or above
    ``max_file_size`` bytes are kept with empty content. Directories listed
    in ``exclude`` (e.g. an output directory nested in the input) are
    pruned. When the root itself is excluded, documentation artifacts are
    dropped instead: ``<name><artifact_suffix>`` files whose source
    ``<name>`` sits next to them, and the summary files at the root.
    Traversal order is sorted and therefore deterministic.

    Raises:
        PathNotFoundError: If root does not exist
        NotADirectoryError: If root is not a directory
        OSError: If the walk itself fails
    """
    root_path = Path(root)
    if not root_path.exists():
        raise PathNotFoundError(f"Error accessing directory: {root_path} does not exist")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {root_path}")

    policy = policy or IgnorePolicy.for_project_type(ProjectType.GENERIC)
    excluded = {Path(p).resolve() for p in exclude}
    resolved_root = root_path.resolve()
    # An output root equal to the walk root cannot be pruned; filter its artifacts
    overlapping = resolved_root in excluded
    records: list[FileRecord] = []

    def _on_error(error: OSError) -> None:
        raise error

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_error):
        current = Path(dirpath)
        dirnames[:] = sorted(
            d for d in dirnames
            if not policy.should_ignore(d) and (current / d).resolve() not in excluded
        )
        at_output_root = current.resolve() == resolved_root
        for name in sorted(filenames):
            if policy.should_ignore(name):
                continue
            path = current / name
            if not path.is_file():
                continue
            if overlapping and _is_artifact(path, artifact_suffix, at_output_root):
                logger.debug(f"Skipping generated artifact {path}")
                continue
            records.append(_read_record(path, max_file_size))

    logger.info(f"Collected {len(records)} files under {root_path}")
    return records


def _is_artifact(path: Path, suffix: str, at_output_root: bool) -> bool:
    if at_output_root and path.name in SUMMARY_FILENAMES:
        return True
    if not suffix or not path.name.endswith(suffix) or path.name == suffix:
        return False
    return path.with_name(path.name[: -len(suffix)]).is_file()


def _read_record(path: Path, max_file_size: int) -> FileRecord:
    size = path.stat().st_size
    content = ""
    if size < max_file_size:
        try:
            content = path.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
    else:
        logger.debug(f"Skipping body of {path} ({size} bytes >= {max_file_size})")
    return FileRecord(path=path, content=content, size=size, is_dir=False)


# =============================================================================
# Helpers
# =============================================================================

def get_file_extension(path: Path | str) -> str:
    """Return the file extension without the leading dot."""
    return os.path.splitext(os.fspath(path))[1].lstrip(".")


def detect_project_type(root: Path | str) -> ProjectType:
    """Infer the project type from well-known marker files in ``root``."""
    root_path = Path(root)

    if (root_path / "pubspec.yaml").exists():
        return ProjectType.FLUTTER
    if (root_path / "go.mod").exists():
        return ProjectType.GO
    if (root_path / "Gemfile").exists():
        if (root_path / "config" / "routes.rb").exists():
            return ProjectType.RAILS
        return ProjectType.RUBY
    if (root_path / "manage.py").exists():
        return ProjectType.DJANGO
    if any((root_path / m).exists() for m in ("pyproject.toml", "setup.py", "requirements.txt")):
        return ProjectType.PYTHON
    if any((root_path / m).exists() for m in ("pom.xml", "build.gradle", "build.gradle.kts")):
        return ProjectType.JAVA
    package_json = root_path / "package.json"
    if package_json.exists():
        try:
            text = package_json.read_text(encoding="utf-8", errors="replace")
        except OSError:
            text = ""
        if '"react"' in text:
            return ProjectType.REACT
        return ProjectType.NODE
    return ProjectType.GENERIC
