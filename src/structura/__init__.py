"""Structura - mirrored per-file documentation from remote LLM providers."""

__version__ = "0.3.0"
