"""Tests for documentation prompt construction."""

from pathlib import Path

from structura.config.defaults import PROMPT_TRUNCATION_MARKER
from structura.filehandler import ProjectType
from structura.llm.prompts import build_documentation_prompt, infer_language, truncate_content


def test_infer_language():
    assert infer_language("a.go") == "Go"
    assert infer_language("pkg/view.TSX") == "TypeScript (TSX)"
    assert infer_language("notes.xyz") == "xyz"
    assert infer_language("Makefile") == "unknown"


def test_truncate_content_under_limit():
    assert truncate_content("abc", max_chars=3) == "abc"


def test_truncate_content_over_limit():
    result = truncate_content("abcdef", max_chars=4)
    assert result == "abcd" + PROMPT_TRUNCATION_MARKER


def test_prompt_mentions_path_type_and_content():
    prompt = build_documentation_prompt(Path("pkg/a.go"), "package main", ProjectType.GO)
    assert "Analyze the following go file in a go project" in prompt
    assert "Language: Go" in prompt
    assert "File path: pkg/a.go" in prompt
    assert "```go\npackage main\n```" in prompt


def test_prompt_is_deterministic():
    first = build_documentation_prompt("b.txt", "hello", "generic")
    second = build_documentation_prompt("b.txt", "hello", ProjectType.GENERIC)
    assert first == second


def test_prompt_truncates_large_content():
    prompt = build_documentation_prompt("big.py", "x" * 500, max_chars=100)
    assert "x" * 100 + PROMPT_TRUNCATION_MARKER in prompt
    assert "x" * 101 not in prompt


def test_extensionless_file():
    prompt = build_documentation_prompt("Makefile", "all:\n\ttrue")
    assert "extensionless file" in prompt
    assert "Language: unknown" in prompt
