"""Remote document client for jsonstorage.net."""

from collections.abc import Sequence
from dataclasses import dataclass
from http import HTTPStatus
from typing import Protocol

import httpx

from freezer_tracker.adapters.document_codec import (
    decode_document,
    encode_document,
    parse_created_id,
)
from freezer_tracker.adapters.transport import RetryingTransport, Transport
from freezer_tracker.domain.errors import (
    AuthFailedError,
    ConnectionCheckFailedError,
    CreationFailedError,
    FetchFailedError,
    NotFoundError,
    ReplaceFailedError,
    SyncError,
    TransientError,
)
from freezer_tracker.domain.models import Document, Item, SessionConfig

_JSON_HEADERS = {"Content-Type": "application/json"}


class SyncClient(Protocol):
    """Interface for whole-document reads and writes against one remote store."""

    async def create_document(
        self, credential: str, initial_items: Sequence[Item]
    ) -> str:
        """Create a remote document and return its identifier."""

    async def check_connection(self, config: SessionConfig) -> None:
        """Probe the configured document, raising when it is unusable."""

    async def fetch_document(self, config: SessionConfig) -> Document:
        """Read and decode the configured document."""

    async def replace_document(self, config: SessionConfig, document: Document) -> None:
        """Overwrite the configured document with ``document``."""


@dataclass
class JsonStorageSyncClient(SyncClient):
    """Sync client for the jsonstorage.net JSON API."""

    transport: Transport
    base_url: str

    @classmethod
    def create(
        cls,
        base_url: str,
        retry_attempts: int = 3,
        backoff_seconds: float = 0.3,
        timeout_seconds: float = 15,
    ) -> "JsonStorageSyncClient":
        """Create a client with a managed retrying transport."""
        transport = RetryingTransport.create(
            retry_attempts=retry_attempts,
            backoff_seconds=backoff_seconds,
            timeout_seconds=timeout_seconds,
        )
        return cls(transport=transport, base_url=base_url.rstrip("/"))

    async def create_document(
        self, credential: str, initial_items: Sequence[Item]
    ) -> str:
        """Create a document holding ``initial_items`` and an empty log."""
        body = encode_document(Document(items=tuple(initial_items)))
        try:
            response = await self.transport.send(
                "POST",
                self.base_url,
                params={"apiKey": credential},
                headers=_JSON_HEADERS,
                content=body,
            )
        except (httpx.HTTPError, SyncError) as exc:
            raise CreationFailedError(f"Creation request failed: {exc}") from exc
        if not response.is_success:
            raise CreationFailedError(
                "Document creation rejected, check the API key",
                status_code=response.status_code,
            )
        return parse_created_id(response.text)

    async def check_connection(self, config: SessionConfig) -> None:
        """Issue a single existence probe, without retries."""
        try:
            response = await self.transport.send(
                "GET", self._document_url(config), retry=False
            )
        except (httpx.HTTPError, TransientError) as exc:
            raise ConnectionCheckFailedError(f"Connection check failed: {exc}") from exc
        if response.status_code == HTTPStatus.NOT_FOUND:
            raise NotFoundError("Document not found, check the identifier", 404)
        if not response.is_success:
            raise ConnectionCheckFailedError(
                f"Connection check failed ({response.status_code})",
                status_code=response.status_code,
            )

    async def fetch_document(self, config: SessionConfig) -> Document:
        """GET the document and decode it, migrating legacy shapes."""
        try:
            response = await self.transport.send("GET", self._document_url(config))
        except TransientError as exc:
            raise FetchFailedError(
                f"Read failed after retries: {exc}", status_code=exc.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchFailedError(f"Network error: {exc}") from exc
        if response.status_code == HTTPStatus.NOT_FOUND:
            raise NotFoundError("Document not found", 404)
        if not response.is_success:
            raise FetchFailedError(
                f"Read failed: {response.status_code}",
                status_code=response.status_code,
            )
        return decode_document(response.content)

    async def replace_document(self, config: SessionConfig, document: Document) -> None:
        """PUT the whole encoded document over the remote copy."""
        try:
            response = await self.transport.send(
                "PUT",
                self._document_url(config),
                params={"apiKey": config.credential},
                headers=_JSON_HEADERS,
                content=encode_document(document),
            )
        except TransientError as exc:
            raise ReplaceFailedError(
                f"Save failed after retries: {exc}", status_code=exc.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise ReplaceFailedError(f"Network error: {exc}") from exc
        if response.status_code == HTTPStatus.NOT_FOUND:
            raise NotFoundError("Document not found", 404)
        if response.status_code in {HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN}:
            raise AuthFailedError(
                "Credential invalid for write", status_code=response.status_code
            )
        if not response.is_success:
            raise ReplaceFailedError(
                f"Save failed: {response.status_code}",
                status_code=response.status_code,
            )

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.transport.close()

    def _document_url(self, config: SessionConfig) -> str:
        return f"{self.base_url}/{config.document_id}"
