"""HTTP transport with retry and exponential backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Protocol

import httpx

from freezer_tracker.domain.errors import TransientError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Interface for a single logical HTTP request."""

    async def send(  # noqa: PLR0913
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        content: str | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        """Perform the request and return the final response."""

    async def close(self) -> None:
        """Release network resources."""


def is_retryable_status(status_code: int) -> bool:
    """Return True for server errors and rate limiting."""
    return (
        status_code >= HTTPStatus.INTERNAL_SERVER_ERROR
        or status_code == HTTPStatus.TOO_MANY_REQUESTS
    )


@dataclass
class RetryingTransport(Transport):
    """httpx-backed transport retrying transient failures.

    Network errors, 5xx and 429 responses are retried up to
    ``retry_attempts`` additional times. The first retry waits
    ``backoff_seconds`` and each following one waits twice as long as the
    previous. Other responses are returned untouched.
    """

    http_client: httpx.AsyncClient
    retry_attempts: int = 3
    backoff_seconds: float = 0.3
    timeout_seconds: float = 15
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    @classmethod
    def create(
        cls,
        retry_attempts: int = 3,
        backoff_seconds: float = 0.3,
        timeout_seconds: float = 15,
    ) -> "RetryingTransport":
        """Create a transport with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            retry_attempts=retry_attempts,
            backoff_seconds=backoff_seconds,
            timeout_seconds=timeout_seconds,
        )

    async def send(  # noqa: PLR0913
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        content: str | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        """Send a request, retrying transient failures when ``retry`` is set."""
        budget = self.retry_attempts if retry else 0
        delay = self.backoff_seconds
        attempt = 0
        while True:
            try:
                response = await self.http_client.request(
                    method,
                    url,
                    params=params,
                    headers=headers,
                    content=content,
                    timeout=self.timeout_seconds,
                )
            except httpx.TransportError as exc:
                if attempt >= budget:
                    raise
                _logger.warning(
                    "%s %s failed (attempt %s/%s): %s",
                    method,
                    url,
                    attempt + 1,
                    budget + 1,
                    exc,
                )
            else:
                if not is_retryable_status(response.status_code):
                    return response
                if attempt >= budget:
                    raise TransientError(
                        f"{method} {url} failed with status {response.status_code}",
                        status_code=response.status_code,
                    )
                _logger.warning(
                    "%s %s failed (attempt %s/%s, status=%s)",
                    method,
                    url,
                    attempt + 1,
                    budget + 1,
                    response.status_code,
                )
            attempt += 1
            await self.sleep(delay)
            delay *= 2

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
