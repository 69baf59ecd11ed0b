"""One-shot CLI commands. Each module exposes ``run(...) -> int``."""
