"""Shared wire format for OpenAI-compatible chat-completions providers.

Request:  {"model": ..., "messages": [{"role": ..., "content": ...}]}
Response: {"choices": [{"message": {"role": ..., "content": ...}}, ...]}
"""

from __future__ import annotations

from structura.llm.providers import ProviderClient
from structura.llm.types import RawResponse, RequestEnvelope


class ChatCompletionsClient(ProviderClient):
    """Bearer-token chat-completions client (DeepSeek, OpenAI)."""

    def endpoint_url(self, envelope: RequestEnvelope) -> str:
        return self.config.endpoint

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def payload(self, envelope: RequestEnvelope) -> dict:
        return envelope.to_payload()

    def extract_text(self, data: dict, raw: RawResponse) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self._protocol_error("API response contains no choices", raw)
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise self._protocol_error("API response choice has no message content", raw)
        return message["content"]
