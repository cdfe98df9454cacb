"""Tests for the jsonstorage.net sync client."""

import asyncio
import json

import httpx
import pytest

from freezer_tracker.adapters.sync_client import JsonStorageSyncClient
from freezer_tracker.adapters.transport import RetryingTransport
from freezer_tracker.domain.errors import (
    AuthFailedError,
    ConnectionCheckFailedError,
    CreationFailedError,
    FetchFailedError,
    MalformedDocumentError,
    NotFoundError,
    ReplaceFailedError,
    TransientError,
)
from freezer_tracker.domain.models import Document, SessionConfig
from tests.conftest import RecordingSleep, make_item

BASE_URL = "https://storage.test/v1/json"
CONFIG = SessionConfig(credential="secret-key", document_id="doc-1")


def _client(handler) -> tuple[JsonStorageSyncClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    transport = RetryingTransport(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recording)),
        sleep=RecordingSleep(),
    )
    return JsonStorageSyncClient(transport=transport, base_url=BASE_URL), seen


def test_create_document_posts_object_shape_and_parses_locator() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"uri": f"{BASE_URL}/user-9/doc-77"})

    client, seen = _client(handler)

    document_id = asyncio.run(client.create_document("secret-key", [make_item()]))

    assert document_id == "doc-77"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.params["apiKey"] == "secret-key"
    body = json.loads(request.content)
    assert body["logs"] == []
    assert body["items"][0]["name"] == "Soup"


def test_create_document_accepts_bare_identifier() -> None:
    client, _ = _client(lambda request: httpx.Response(200, json="doc-5"))

    assert asyncio.run(client.create_document("secret-key", [])) == "doc-5"


@pytest.mark.parametrize("status_code", [400, 401, 403])
def test_create_document_rejected(status_code: int) -> None:
    client, _ = _client(lambda request: httpx.Response(status_code))

    with pytest.raises(CreationFailedError):
        asyncio.run(client.create_document("bad-key", []))


def test_create_document_after_exhausted_retries_fails() -> None:
    client, seen = _client(lambda request: httpx.Response(503))

    with pytest.raises(CreationFailedError):
        asyncio.run(client.create_document("secret-key", []))

    assert len(seen) == 4


def test_create_document_empty_response_fails() -> None:
    client, _ = _client(lambda request: httpx.Response(200, text=""))

    with pytest.raises(CreationFailedError):
        asyncio.run(client.create_document("secret-key", []))


def test_check_connection_success() -> None:
    client, seen = _client(lambda request: httpx.Response(200, text=""))

    asyncio.run(client.check_connection(CONFIG))

    assert seen[0].method == "GET"
    assert seen[0].url.path.endswith("/doc-1")


def test_check_connection_not_found() -> None:
    client, _ = _client(lambda request: httpx.Response(404))

    with pytest.raises(NotFoundError):
        asyncio.run(client.check_connection(CONFIG))


def test_check_connection_server_error_is_single_attempt() -> None:
    client, seen = _client(lambda request: httpx.Response(500))

    with pytest.raises(ConnectionCheckFailedError):
        asyncio.run(client.check_connection(CONFIG))

    assert len(seen) == 1


def test_check_connection_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client, _ = _client(handler)

    with pytest.raises(ConnectionCheckFailedError):
        asyncio.run(client.check_connection(CONFIG))


def test_fetch_document_decodes_legacy_array() -> None:
    payload = [
        {
            "id": "1",
            "name": "Soup",
            "category": "Plat",
            "location": "Freezer",
            "dateAdded": "2024-01-01T00:00:00Z",
        }
    ]
    client, seen = _client(lambda request: httpx.Response(200, json=payload))

    document = asyncio.run(client.fetch_document(CONFIG))

    assert document.items[0].name == "Soup"
    assert document.logs == ()
    assert "apiKey" not in seen[0].url.params


def test_fetch_document_empty_body_is_empty_document() -> None:
    client, _ = _client(lambda request: httpx.Response(200, text=""))

    assert asyncio.run(client.fetch_document(CONFIG)) == Document.empty()


def test_fetch_document_not_found() -> None:
    client, seen = _client(lambda request: httpx.Response(404))

    with pytest.raises(NotFoundError):
        asyncio.run(client.fetch_document(CONFIG))

    assert len(seen) == 1


def test_fetch_document_other_failure() -> None:
    client, _ = _client(lambda request: httpx.Response(400))

    with pytest.raises(FetchFailedError) as exc_info:
        asyncio.run(client.fetch_document(CONFIG))

    assert exc_info.value.status_code == 400


def test_fetch_document_retries_then_succeeds() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"items": [], "logs": []})

    client, _ = _client(handler)

    assert asyncio.run(client.fetch_document(CONFIG)) == Document.empty()
    assert len(attempts) == 3


def test_fetch_document_persistent_server_error_is_fetch_failure() -> None:
    client, seen = _client(lambda request: httpx.Response(502))

    with pytest.raises(FetchFailedError) as exc_info:
        asyncio.run(client.fetch_document(CONFIG))

    assert exc_info.value.status_code == 502
    assert isinstance(exc_info.value.__cause__, TransientError)
    assert len(seen) == 4


def test_fetch_document_too_many_redirects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("redirect loop", request=request)

    client, seen = _client(handler)

    with pytest.raises(FetchFailedError):
        asyncio.run(client.fetch_document(CONFIG))

    assert len(seen) == 1


def test_fetch_document_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client, _ = _client(handler)

    with pytest.raises(FetchFailedError):
        asyncio.run(client.fetch_document(CONFIG))


def test_fetch_document_malformed_body() -> None:
    client, _ = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(MalformedDocumentError):
        asyncio.run(client.fetch_document(CONFIG))


def test_replace_document_puts_whole_document() -> None:
    client, seen = _client(lambda request: httpx.Response(200, json={"ok": True}))
    document = Document(items=(make_item(),))

    asyncio.run(client.replace_document(CONFIG, document))

    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == "/v1/json/doc-1"
    assert request.url.params["apiKey"] == "secret-key"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content)["items"][0]["id"] == "1"


@pytest.mark.parametrize("status_code", [401, 403])
def test_replace_document_auth_failure_is_not_retried(status_code: int) -> None:
    client, seen = _client(lambda request: httpx.Response(status_code))

    with pytest.raises(AuthFailedError, match="Credential invalid for write"):
        asyncio.run(client.replace_document(CONFIG, Document.empty()))

    assert len(seen) == 1


def test_replace_document_not_found() -> None:
    client, _ = _client(lambda request: httpx.Response(404))

    with pytest.raises(NotFoundError):
        asyncio.run(client.replace_document(CONFIG, Document.empty()))


def test_replace_document_other_failure() -> None:
    client, _ = _client(lambda request: httpx.Response(413))

    with pytest.raises(ReplaceFailedError):
        asyncio.run(client.replace_document(CONFIG, Document.empty()))


def test_replace_document_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    client, seen = _client(handler)

    with pytest.raises(ReplaceFailedError):
        asyncio.run(client.replace_document(CONFIG, Document.empty()))

    assert len(seen) == 4


def test_replace_document_persistent_rate_limit_is_replace_failure() -> None:
    client, seen = _client(lambda request: httpx.Response(429))

    with pytest.raises(ReplaceFailedError) as exc_info:
        asyncio.run(client.replace_document(CONFIG, Document.empty()))

    assert exc_info.value.status_code == 429
    assert len(seen) == 4


def test_replace_document_decoding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.DecodingError("bad gzip", request=request)

    client, _ = _client(handler)

    with pytest.raises(ReplaceFailedError):
        asyncio.run(client.replace_document(CONFIG, Document.empty()))


def test_create_client_strips_trailing_slash() -> None:
    client = JsonStorageSyncClient.create(base_url=f"{BASE_URL}/")

    assert client.base_url == BASE_URL
    asyncio.run(client.close())
