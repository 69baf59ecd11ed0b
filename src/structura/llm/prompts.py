"""Documentation prompt construction.

The prompt is a pure function of (file extension, project type, file path,
file content) so identical inputs always produce identical requests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from structura.config.defaults import PROMPT_MAX_CHARS, PROMPT_TRUNCATION_MARKER
from structura.filehandler import ProjectType, get_file_extension

# Extension -> human-readable language used in the prompt header
LANGUAGE_BY_EXTENSION = {
    "py": "Python",
    "go": "Go",
    "js": "JavaScript",
    "jsx": "JavaScript (JSX)",
    "mjs": "JavaScript",
    "cjs": "JavaScript",
    "ts": "TypeScript",
    "tsx": "TypeScript (TSX)",
    "java": "Java",
    "kt": "Kotlin",
    "rb": "Ruby",
    "erb": "Ruby (ERB)",
    "dart": "Dart",
    "rs": "Rust",
    "c": "C",
    "h": "C",
    "cpp": "C++",
    "hpp": "C++",
    "cs": "C#",
    "php": "PHP",
    "swift": "Swift",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "sql": "SQL",
    "md": "Markdown",
    "json": "JSON",
    "txt": "plain text",
}

DOCUMENTATION_PROMPT_TEMPLATE = (
    "Analyze the following {ext_label} file in a {project_type} project and generate "
    "structured technical documentation that follows these guidelines:\n\n"
    "1. Begin with a concise summary of the file's purpose and role within the {project_type} project.\n"
    "2. Document all key structures, interfaces, and types with their fields and purpose.\n"
    "3. Document each function and method including:\n"
    "   - Parameters and their types\n"
    "   - Return values and their significance\n"
    "   - Error handling approach\n"
    "   - Any side effects or state changes\n"
    "4. Explain dependencies and interactions with other components.\n"
    "5. Include only essential code snippets to illustrate complex logic or patterns.\n"
    "6. Format as professional Markdown with appropriate headers, lists, and code blocks.\n\n"
    "Language: {language}\n"
    "File path: {path}\n\n"
    "```{fence}\n{content}\n```"
)


def infer_language(path: Union[Path, str]) -> str:
    """Best-effort language name from the file extension."""
    ext = get_file_extension(path).lower()
    if not ext:
        return "unknown"
    return LANGUAGE_BY_EXTENSION.get(ext, ext)


def truncate_content(content: str, max_chars: int = PROMPT_MAX_CHARS) -> str:
    """Clip ``content`` to ``max_chars`` characters, marking the cut."""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + PROMPT_TRUNCATION_MARKER


def build_documentation_prompt(
    path: Union[Path, str],
    content: str,
    project_type: Union[ProjectType, str] = ProjectType.GENERIC,
    *,
    max_chars: int = PROMPT_MAX_CHARS,
) -> str:
    """
    Build the documentation prompt for one file.

    Args:
        path: File path as it should appear in the prompt
        content: File body (truncated to max_chars)
        project_type: Project flavour named in the instructions
        max_chars: Truncation threshold for the embedded body

    Returns:
        The user prompt text
    """
    ext = get_file_extension(path)
    return DOCUMENTATION_PROMPT_TEMPLATE.format(
        ext_label=ext or "extensionless",
        project_type=ProjectType(project_type).value,
        language=infer_language(path),
        path=Path(path).as_posix(),
        fence=ext,
        content=truncate_content(content, max_chars),
    )
