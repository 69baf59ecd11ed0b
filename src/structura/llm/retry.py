"""Resilient request execution for LLM providers.

Provides:
- RetryPolicy: Retry budget, minimum interval and backoff unit
- classify_response(): Map an HTTP status to success or a ClassifiedError
- ExecutionResult: Text or classified error, returned as a value
- ResilientExecutor: Throttle -> dispatch -> classify -> backoff loop

Every outbound request to a provider passes through ResilientExecutor.execute().
Only NETWORK_FAILURE and RATE_LIMITED are retried; INVALID_CREDENTIAL and
PROTOCOL_FAILURE return immediately.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Union

from structura.config.defaults import (
    RATELIMIT_MIN_INTERVAL_SECONDS,
    RETRY_BACKOFF_UNIT_SECONDS,
    RETRY_MAX_RETRIES,
)
from structura.filehandler import FileRecord, ProjectType
from structura.llm.ratelimit import MinIntervalThrottle
from structura.llm.types import ClassifiedError, ErrorKind, RawResponse, RequestEnvelope

if TYPE_CHECKING:
    from structura.config import SessionConfig
    from structura.llm.providers import ProviderClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior."""
    max_retries: int = RETRY_MAX_RETRIES
    min_interval: float = RATELIMIT_MIN_INTERVAL_SECONDS
    backoff_unit: float = RETRY_BACKOFF_UNIT_SECONDS

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    def backoff_delay(self, attempt: int) -> float:
        """Exponential backoff, attempt-indexed from zero: unit * 2**attempt."""
        return self.backoff_unit * (2 ** attempt)

    def rate_limit_delay(self, attempt: int) -> float:
        """Elevated wait after an explicit 429: (attempt + 1) * min_interval."""
        return (attempt + 1) * self.min_interval


def classify_response(raw: RawResponse) -> Optional[ClassifiedError]:
    """Return None for success, otherwise the ClassifiedError for this status."""
    status = raw.status_code
    if status == 200:
        return None
    if status == 401:
        return ClassifiedError(
            ErrorKind.INVALID_CREDENTIAL,
            "API authentication failed: Invalid API key",
            status_code=status,
            raw_body=raw.body,
        )
    if status == 403:
        return ClassifiedError(
            ErrorKind.INVALID_CREDENTIAL,
            "API access forbidden: API key may be invalid or lacks necessary permissions",
            status_code=status,
            raw_body=raw.body,
        )
    if status == 429:
        return ClassifiedError(
            ErrorKind.RATE_LIMITED,
            "API rate limit exceeded, will retry",
            status_code=status,
            raw_body=raw.body,
        )
    # Everything else, redirects included, is not worth retrying
    return ClassifiedError(
        ErrorKind.PROTOCOL_FAILURE,
        f"API request failed with status: {status}, body: {raw.body[:500]}",
        status_code=status,
        raw_body=raw.body,
    )


@dataclass
class ExecutionResult:
    """Outcome of one executor request."""
    text: Optional[str] = None
    error: Optional[ClassifiedError] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


class ResilientExecutor:
    """Single chokepoint for outbound provider requests.

    Holds the only mutable state shared across requests: the throttle's
    last-dispatch timestamp and the credential latch. Once a provider has
    rejected the credential, later requests fail without dispatching.
    """

    def __init__(
        self,
        client: "ProviderClient",
        policy: Optional[RetryPolicy] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._throttle = MinIntervalThrottle(self.policy.min_interval, clock=clock, sleep=sleep)
        self._dispatch_count = 0
        self._credential_error: Optional[ClassifiedError] = None

    @classmethod
    def from_config(
        cls,
        client: "ProviderClient",
        config: Optional["SessionConfig"] = None,
        **kwargs,
    ) -> "ResilientExecutor":
        config = config or client.config
        policy = RetryPolicy(
            max_retries=config.max_retries,
            min_interval=config.min_interval,
            backoff_unit=config.backoff_unit,
        )
        return cls(client, policy, **kwargs)

    @property
    def dispatch_count(self) -> int:
        """Total outbound requests issued by this executor."""
        return self._dispatch_count

    @property
    def credential_rejected(self) -> bool:
        return self._credential_error is not None

    async def document(
        self,
        record: FileRecord,
        project_type: Union[ProjectType, str] = ProjectType.GENERIC,
        display_path: Optional[Union[Path, str]] = None,
    ) -> ExecutionResult:
        """Build the request for ``record`` and execute it."""
        envelope = self.client.build_request(record, project_type, display_path)
        return await self.execute(envelope)

    async def execute(self, envelope: RequestEnvelope) -> ExecutionResult:
        """
        Run one request through throttle, dispatch, classification and backoff.

        Never raises for provider failures; they come back in
        ``ExecutionResult.error``. A retryable failure that outlives
        ``max_retries`` attempts is returned as EXHAUSTED.
        """
        if self._credential_error is not None:
            return ExecutionResult(error=self._credential_error, attempts=0)
        try:
            self.client.ensure_credential()
        except ClassifiedError as e:
            self._credential_error = e
            logger.error(f"{self.client.name}: {e.message}")
            return ExecutionResult(error=e, attempts=0)

        max_retries = self.policy.max_retries
        last_error: Optional[ClassifiedError] = None
        attempts = 0

        for attempt in range(max_retries):
            await self._throttle.acquire()
            attempts += 1
            self._dispatch_count += 1

            try:
                raw = await self.client.dispatch(envelope)
            except ClassifiedError as e:
                error = e
            else:
                error = classify_response(raw)
                if error is None:
                    try:
                        text = self.client.decode(raw)
                    except ClassifiedError as e:
                        logger.warning(f"{self.client.name}: {e.message}")
                        return ExecutionResult(error=e, attempts=attempts)
                    return ExecutionResult(text=text, attempts=attempts)

            if not error.retryable:
                if error.kind is ErrorKind.INVALID_CREDENTIAL:
                    self._credential_error = error
                    logger.error(f"{self.client.name}: {error.message}; no further requests will be sent")
                else:
                    logger.warning(f"{self.client.name}: {error.message}")
                return ExecutionResult(error=error, attempts=attempts)

            last_error = error
            if attempt < max_retries - 1:
                if error.kind is ErrorKind.RATE_LIMITED:
                    delay = self.policy.rate_limit_delay(attempt)
                else:
                    delay = self.policy.backoff_delay(attempt)
                logger.warning(
                    f"Retry {attempt + 1}/{max_retries} after {delay}s: {error.message}"
                )
                await self._sleep(delay)

        logger.warning(f"{self.client.name}: giving up after {attempts} attempts: {last_error.message}")
        return ExecutionResult(error=last_error.exhausted(attempts), attempts=attempts)
