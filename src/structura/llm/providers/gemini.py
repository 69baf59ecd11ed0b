"""
Google Gemini provider for ProviderRegistry.

Uses the Generative Language ``generateContent`` endpoint:

    POST {endpoint}/{model}:generateContent
    {"contents": [{"role": "user", "parts": [{"text": ...}]}]}

and reads ``candidates[0].content.parts[*].text`` from the response.
"""

from __future__ import annotations

from structura.llm.providers import ProviderClient, registry
from structura.llm.types import ProviderIdentity, RawResponse, RequestEnvelope

# Gemini has no "assistant"/"system" roles in contents
_ROLE_MAP = {"user": "user", "assistant": "model", "system": "user"}


@registry.register
class GeminiClient(ProviderClient):
    identity = ProviderIdentity.GEMINI

    def endpoint_url(self, envelope: RequestEnvelope) -> str:
        return f"{self.config.endpoint.rstrip('/')}/{envelope.model}:generateContent"

    def headers(self) -> dict[str, str]:
        return {
            "x-goog-api-key": self.config.api_key,
            "Content-Type": "application/json",
        }

    def payload(self, envelope: RequestEnvelope) -> dict:
        return {
            "contents": [
                {"role": _ROLE_MAP.get(m.role, "user"), "parts": [{"text": m.content}]}
                for m in envelope.messages
            ],
        }

    def extract_text(self, data: dict, raw: RawResponse) -> str:
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise self._protocol_error("API response contains no candidates", raw)
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise self._protocol_error("API response candidate has no content parts", raw)
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))
