"""Shared LLM types: provider identities, request envelopes, classified errors.

Provides:
- ProviderIdentity: Supported providers with their endpoints, key env vars and models
- ChatMessage / RequestEnvelope: Provider-neutral request shape
- RawResponse: Undecoded result of a single dispatch
- ErrorKind / ClassifiedError: Failure taxonomy threaded through retry logic
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProviderIdentity(str, Enum):
    """Supported documentation providers."""
    DEEPSEEK = "deepseek"
    CHATGPT = "chatgpt"
    GEMINI = "gemini"


PROVIDER_ENDPOINTS = {
    ProviderIdentity.DEEPSEEK: "https://api.deepseek.com/v1/chat/completions",
    ProviderIdentity.CHATGPT: "https://api.openai.com/v1/chat/completions",
    ProviderIdentity.GEMINI: "https://generativelanguage.googleapis.com/v1beta/models",
}

# Env var(s) holding the key, first match wins
PROVIDER_KEY_ENV = {
    ProviderIdentity.DEEPSEEK: ("DEEPSEEK_API_KEY",),
    ProviderIdentity.CHATGPT: ("OPENAI_API_KEY",),
    ProviderIdentity.GEMINI: ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}

PROVIDER_MODELS = {
    ProviderIdentity.DEEPSEEK: ("deepseek-chat", "deepseek-coder"),
    ProviderIdentity.CHATGPT: ("gpt-3.5-turbo", "gpt-4", "gpt-4-turbo", "gpt-4o"),
    ProviderIdentity.GEMINI: ("gemini-pro", "gemini-1.5-pro"),
}


def default_model(provider: ProviderIdentity) -> str:
    """First permitted model is the provider default."""
    return PROVIDER_MODELS[provider][0]


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True)
class RequestEnvelope:
    """One documentation request, built fresh per file."""
    model: str
    messages: tuple[ChatMessage, ...]

    def to_payload(self) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in self.messages],
        }


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    body: str


class ErrorKind(str, Enum):
    """Failure taxonomy for provider requests."""
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    NETWORK_FAILURE = "network_failure"
    PROTOCOL_FAILURE = "protocol_failure"
    EXHAUSTED = "exhausted"


RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMITED, ErrorKind.NETWORK_FAILURE})

_USER_MESSAGES = {
    ErrorKind.INVALID_CREDENTIAL: "Invalid API key or authentication error. Please check your API key",
    ErrorKind.RATE_LIMITED: "API rate limit exceeded. Please try again later",
    ErrorKind.NETWORK_FAILURE: "Network error while connecting to API. Please check your internet connection",
}


class ClassifiedError(Exception):
    """A provider failure tagged with its ErrorKind.

    Carries the originating status code and raw response body when one was
    received. EXHAUSTED errors also record the retryable kind they wrap in
    ``last_kind``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: Optional[int] = None,
        raw_body: Optional[str] = None,
        last_kind: Optional[ErrorKind] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.raw_body = raw_body
        self.last_kind = last_kind

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    @property
    def user_message(self) -> str:
        """Operator-facing wording for this failure."""
        kind = self.last_kind if self.kind is ErrorKind.EXHAUSTED and self.last_kind else self.kind
        return _USER_MESSAGES.get(kind, self.message)

    def exhausted(self, attempts: int) -> "ClassifiedError":
        """Wrap a retryable error that outlived the retry budget."""
        return ClassifiedError(
            ErrorKind.EXHAUSTED,
            f"{self.message} (gave up after {attempts} attempts)",
            status_code=self.status_code,
            raw_body=self.raw_body,
            last_kind=self.kind,
        )

    def __repr__(self) -> str:
        return f"ClassifiedError({self.kind.value}, {self.message!r}, status_code={self.status_code})"
