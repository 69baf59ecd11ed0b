"""LLM Provider Registry - one client implementation per provider.

Provides:
- ProviderClient: Base class turning a FileRecord into one request, one dispatch, one decoded text
- ProviderRegistry: Maps ProviderIdentity to its client class
- create_client(): Build the client for a SessionConfig

Adding a provider means adding one module that subclasses ProviderClient and
registers itself on import; callers and the executor do not change.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Optional, Union

import httpx

from structura.config import SessionConfig
from structura.filehandler import FileRecord, ProjectType
from structura.llm.prompts import build_documentation_prompt
from structura.llm.types import (
    ChatMessage,
    ClassifiedError,
    ErrorKind,
    ProviderIdentity,
    RawResponse,
    RequestEnvelope,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Provider Client
# =============================================================================

class ProviderClient(ABC):
    """Produces documentation text for a file record against one provider.

    A client performs exactly one outbound call per ``dispatch``; retries,
    throttling and status classification belong to ResilientExecutor.
    """

    identity: ClassVar[ProviderIdentity]

    def __init__(
        self,
        config: SessionConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if config.provider is not self.identity:
            raise ValueError(
                f"{type(self).__name__} serves {self.identity.value}, got config for {config.provider.value}"
            )
        self.config = config
        self._http = http_client
        self._owns_http = http_client is None

    @property
    def name(self) -> str:
        return self.identity.value

    def ensure_credential(self) -> None:
        """Fail fast, before any network call, when no key is configured."""
        if not self.config.api_key:
            raise ClassifiedError(
                ErrorKind.INVALID_CREDENTIAL,
                f"{self.name} API key is not set",
            )

    def build_request(
        self,
        record: FileRecord,
        project_type: Union[ProjectType, str] = ProjectType.GENERIC,
        display_path: Optional[Union[Path, str]] = None,
    ) -> RequestEnvelope:
        """Build the request envelope for one file. Pure; no I/O."""
        prompt = build_documentation_prompt(
            display_path if display_path is not None else record.path,
            record.content,
            project_type,
            max_chars=self.config.max_prompt_chars,
        )
        return RequestEnvelope(
            model=self.config.model,
            messages=(ChatMessage(role="user", content=prompt),),
        )

    async def dispatch(self, envelope: RequestEnvelope) -> RawResponse:
        """
        Submit one request and return the undecoded response.

        Raises:
            ClassifiedError: NETWORK_FAILURE when no response was received
        """
        client = self._get_http()
        try:
            response = await client.post(
                self.endpoint_url(envelope),
                headers=self.headers(),
                json=self.payload(envelope),
            )
        except httpx.TransportError as e:
            raise ClassifiedError(
                ErrorKind.NETWORK_FAILURE,
                f"API request failed: {type(e).__name__}: {e}",
            ) from e
        return RawResponse(status_code=response.status_code, body=response.text)

    def decode(self, raw: RawResponse) -> str:
        """
        Decode a successful response body into documentation text.

        Raises:
            ClassifiedError: PROTOCOL_FAILURE on malformed JSON or empty content
        """
        try:
            data = json.loads(raw.body)
        except (json.JSONDecodeError, TypeError) as e:
            raise ClassifiedError(
                ErrorKind.PROTOCOL_FAILURE,
                f"failed to parse API response: {e}",
                status_code=raw.status_code,
                raw_body=raw.body,
            ) from e
        if not isinstance(data, dict):
            raise self._protocol_error("API response is not a JSON object", raw)

        text = self.extract_text(data, raw)
        if not text or not text.strip():
            raise self._protocol_error("no content produced", raw)
        return text

    @abstractmethod
    def endpoint_url(self, envelope: RequestEnvelope) -> str:
        ...

    @abstractmethod
    def headers(self) -> dict[str, str]:
        ...

    @abstractmethod
    def payload(self, envelope: RequestEnvelope) -> dict:
        ...

    @abstractmethod
    def extract_text(self, data: dict, raw: RawResponse) -> str:
        """Pull the generated text out of a decoded body."""

    def _protocol_error(self, message: str, raw: RawResponse) -> ClassifiedError:
        return ClassifiedError(
            ErrorKind.PROTOCOL_FAILURE,
            message,
            status_code=raw.status_code,
            raw_body=raw.body,
        )

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.read_timeout, connect=self.config.connect_timeout),
            )
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


# =============================================================================
# Provider Registry
# =============================================================================

class ProviderRegistry:
    def __init__(self):
        self._providers: dict[ProviderIdentity, type[ProviderClient]] = {}

    def register(self, client_cls: type[ProviderClient]) -> type[ProviderClient]:
        self._providers[client_cls.identity] = client_cls
        logger.debug(f"Registered provider: {client_cls.identity.value}")
        return client_cls

    def get(self, identity: Union[ProviderIdentity, str]) -> type[ProviderClient]:
        key = ProviderIdentity(identity)
        if key not in self._providers:
            raise KeyError(f"Provider '{key.value}' not registered")
        return self._providers[key]

    def available(self, identity: Union[ProviderIdentity, str]) -> bool:
        try:
            return ProviderIdentity(identity) in self._providers
        except ValueError:
            return False

    def list_providers(self) -> list[str]:
        return [p.value for p in self._providers]


# Global registry instance
registry = ProviderRegistry()


def create_client(
    config: SessionConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ProviderClient:
    """Instantiate the registered client for ``config.provider``."""
    client_cls = registry.get(config.provider)
    return client_cls(config, http_client=http_client)


# Import provider modules to register them with the registry
# Each module registers itself on import
from structura.llm.providers import deepseek  # noqa: E402,F401
from structura.llm.providers import chatgpt  # noqa: E402,F401
from structura.llm.providers import gemini  # noqa: E402,F401
