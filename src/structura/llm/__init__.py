"""Structura LLM package - provider clients and the resilient request layer."""

from structura.llm.types import (
    ChatMessage,
    ClassifiedError,
    ErrorKind,
    ProviderIdentity,
    RawResponse,
    RequestEnvelope,
)

__all__ = [
    "ChatMessage",
    "ClassifiedError",
    "ErrorKind",
    "ProviderIdentity",
    "RawResponse",
    "RequestEnvelope",
]
