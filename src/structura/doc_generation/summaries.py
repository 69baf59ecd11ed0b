"""Project summary artifacts (PROJECT_STRUCTURE.md, PROJECT_SETUP.md).

Both are derived purely from the in-memory FileRecord set; no network calls.
"""

from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from structura.config.defaults import PROJECT_SETUP_FILENAME, PROJECT_STRUCTURE_FILENAME
from structura.filehandler import FileRecord, ProjectType, get_file_extension
from structura.llm.prompts import infer_language
from structura.persistence import atomic_write_with_fsync

# Files worth calling out in the setup summary
MANIFEST_FILES = {
    "go.mod": "Go module definition",
    "package.json": "npm package manifest",
    "pyproject.toml": "Python project metadata",
    "setup.py": "Python setuptools script",
    "requirements.txt": "Python requirements",
    "manage.py": "Django management entry point",
    "pom.xml": "Maven build",
    "build.gradle": "Gradle build",
    "Gemfile": "Bundler dependencies",
    "pubspec.yaml": "Flutter/Dart package manifest",
    "Cargo.toml": "Cargo manifest",
    "Makefile": "Make targets",
}

ENTRY_POINT_NAMES = {
    "main.go", "main.py", "__main__.py", "app.py", "manage.py", "wsgi.py",
    "index.js", "index.ts", "server.js", "main.dart", "Main.java", "config.ru",
}

SETUP_COMMANDS = {
    ProjectType.GO: ["go mod download", "go build ./...", "go test ./..."],
    ProjectType.PYTHON: ["python -m venv .venv", "pip install -e .", "pytest"],
    ProjectType.DJANGO: ["python -m venv .venv", "pip install -r requirements.txt", "python manage.py migrate", "python manage.py runserver"],
    ProjectType.NODE: ["npm install", "npm test"],
    ProjectType.REACT: ["npm install", "npm start"],
    ProjectType.JAVA: ["mvn install  # or: gradle build"],
    ProjectType.RUBY: ["bundle install"],
    ProjectType.RAILS: ["bundle install", "bin/rails db:setup", "bin/rails server"],
    ProjectType.FLUTTER: ["flutter pub get", "flutter run"],
}


def _relative_files(records: Iterable[FileRecord], input_root: Path) -> List[tuple[Path, FileRecord]]:
    root = Path(os.path.abspath(input_root))
    out = []
    for record in records:
        if record.is_dir:
            continue
        try:
            rel = Path(os.path.abspath(record.path)).relative_to(root)
        except ValueError:
            continue
        out.append((rel, record))
    return sorted(out, key=lambda item: item[0].parts)


def format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024 or unit == "MB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} MB"


def build_structure_markdown(records: Sequence[FileRecord], input_root: Union[Path, str]) -> str:
    """Render an indented file tree of the documented project."""
    files = _relative_files(records, Path(input_root))
    lines = [
        "# Project Structure",
        "",
        f"Root: `{Path(input_root).name or Path(input_root)}`",
        "",
        "```",
    ]
    seen_dirs: set[tuple[str, ...]] = set()
    for rel, record in files:
        for depth in range(len(rel.parts) - 1):
            key = rel.parts[: depth + 1]
            if key not in seen_dirs:
                seen_dirs.add(key)
                lines.append(f"{'  ' * depth}{key[-1]}/")
        lines.append(f"{'  ' * (len(rel.parts) - 1)}{rel.name} ({format_size(record.size)})")
    lines.append("```")
    lines.append("")
    lines.append(f"{len(files)} files in {len(seen_dirs)} directories.")
    return "\n".join(lines) + "\n"


def build_setup_markdown(
    records: Sequence[FileRecord],
    input_root: Union[Path, str],
    project_type: Union[ProjectType, str] = ProjectType.GENERIC,
) -> str:
    """Summarize project type, languages, manifests and entry points."""
    project_type = ProjectType(project_type)
    files = _relative_files(records, Path(input_root))
    total_size = sum(record.size for _, record in files)
    languages = Counter(infer_language(rel) for rel, _ in files)

    lines = [
        "# Project Setup",
        "",
        f"- Project type: **{project_type.value}**",
        f"- Files documented: {len(files)}",
        f"- Total size: {format_size(total_size)}",
        "",
        "## Languages",
        "",
        "| Language | Files |",
        "|----------|-------|",
    ]
    for language, count in sorted(languages.items(), key=lambda item: (-item[1], item[0])):
        lines.append(f"| {language} | {count} |")

    manifests = [(rel, MANIFEST_FILES[rel.name]) for rel, _ in files if rel.name in MANIFEST_FILES]
    if manifests:
        lines += ["", "## Manifests", ""]
        lines += [f"- `{rel.as_posix()}`: {description}" for rel, description in manifests]

    entry_points = [rel for rel, _ in files if rel.name in ENTRY_POINT_NAMES]
    if entry_points:
        lines += ["", "## Entry Points", ""]
        lines += [f"- `{rel.as_posix()}`" for rel in entry_points]

    commands = SETUP_COMMANDS.get(project_type)
    if commands:
        lines += ["", "## Getting Started", "", "```sh"] + commands + ["```"]

    extensions = Counter(get_file_extension(rel) or "(none)" for rel, _ in files)
    lines += ["", "## Extensions", ""]
    lines += [f"- `{ext}`: {count}" for ext, count in sorted(extensions.items())]
    return "\n".join(lines) + "\n"


def write_summaries(
    records: Sequence[FileRecord],
    *,
    input_root: Union[Path, str],
    output_root: Union[Path, str],
    project_type: Union[ProjectType, str] = ProjectType.GENERIC,
) -> list[Path]:
    """
    Write both summary artifacts at the output root.

    Returns:
        Paths written, structure first

    Raises:
        OSError: If either file cannot be written
    """
    out = Path(output_root)
    structure_path = out / PROJECT_STRUCTURE_FILENAME
    setup_path = out / PROJECT_SETUP_FILENAME
    atomic_write_with_fsync(structure_path, build_structure_markdown(records, input_root))
    atomic_write_with_fsync(setup_path, build_setup_markdown(records, input_root, project_type))
    return [structure_path, setup_path]
