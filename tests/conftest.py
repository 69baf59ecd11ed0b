"""Pytest configuration for structura tests."""
import json
import sys
from pathlib import Path

import pytest

# Add src to path for the tests - conftest is in tests/, so parent.parent is project root
project_root = Path(__file__).resolve().parent.parent
src_path = project_root / "src"

# Insert at the very beginning to override any other paths
sys.path.insert(0, str(src_path))


class FakeClock:
    """Monotonic clock whose sleep() advances time instead of waiting."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(seconds, 0.0)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def chat_body():
    """Build an OpenAI-compatible chat-completions response body."""
    def _build(text: str) -> str:
        return json.dumps({
            "id": "chatcmpl-test",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}],
        })
    return _build


@pytest.fixture(autouse=True)
def _isolate_provider_env(monkeypatch):
    """Keep real keys and STRUCTURA_* settings out of the tests."""
    for name in (
        "DEEPSEEK_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY",
        "STRUCTURA_PROVIDER", "STRUCTURA_MODEL", "STRUCTURA_ENDPOINT",
        "STRUCTURA_MIN_INTERVAL", "STRUCTURA_MAX_RETRIES", "STRUCTURA_BACKOFF_UNIT",
        "STRUCTURA_CONNECT_TIMEOUT", "STRUCTURA_READ_TIMEOUT",
        "STRUCTURA_MAX_PROMPT_CHARS", "STRUCTURA_MAX_FILE_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)
