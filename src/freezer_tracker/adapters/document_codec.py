"""Codec between the remote JSON document and the domain document."""

import json
import logging
from dataclasses import dataclass

from pydantic import TypeAdapter, ValidationError

from freezer_tracker.adapters.wire_models import (
    CreationLocatorPayload,
    DocumentPayload,
    ItemPayload,
    LogEntryPayload,
)
from freezer_tracker.domain.errors import CreationFailedError, MalformedDocumentError
from freezer_tracker.domain.models import Document

_logger = logging.getLogger(__name__)

_CREATION_RESPONSE = TypeAdapter(str | CreationLocatorPayload)


def decode_document(raw: str | bytes) -> Document:
    """Parse remote bytes into a canonical document.

    Blank input is a freshly created document. A bare JSON array is the
    legacy items-only shape and is migrated with an empty log. Entries that
    do not fit the item or log schema are kept aside unchanged. Parseable
    JSON of any other shape decodes to an empty document. Only bytes that
    are not JSON text raise ``MalformedDocumentError``.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as exc:
        raise MalformedDocumentError(f"Document is not UTF-8 text: {exc}") from exc
    if not text.strip():
        return Document.empty()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDocumentError(f"Document is not valid JSON: {exc}") from exc

    if isinstance(data, list):
        items, unreadable_items = _read_entries(data, ItemPayload)
        return Document(items=items, unreadable_items=unreadable_items)
    if isinstance(data, dict) and data.get("items") is not None:
        items, unreadable_items = _read_entries(data["items"], ItemPayload)
        logs, unreadable_logs = _read_entries(data.get("logs") or [], LogEntryPayload)
        return Document(
            items=items,
            logs=logs,
            unreadable_items=unreadable_items,
            unreadable_logs=unreadable_logs,
        )

    _logger.warning(
        "Unrecognized document shape (%s), treating as empty", type(data).__name__
    )
    return Document.empty()


def _read_entries(
    values: object, payload_type: type[ItemPayload] | type[LogEntryPayload]
) -> tuple[tuple, tuple[object, ...]]:
    if not isinstance(values, list):
        _logger.warning("Stored entries are not a list, keeping them as one entry")
        return (), (values,)
    readable = []
    unreadable = []
    for value in values:
        try:
            readable.append(payload_type.model_validate(value).to_domain())
        except ValidationError as exc:
            _logger.warning(
                "Keeping unreadable stored entry (%s errors)", exc.error_count()
            )
            unreadable.append(value)
    return tuple(readable), tuple(unreadable)


def encode_document(document: Document) -> str:
    """Serialize a document; always the object shape with items and logs.

    Unreadable stored entries are written back after the readable ones.
    """
    payload = DocumentPayload.from_domain(document)
    data = payload.model_dump(mode="json", by_alias=True)
    data["items"].extend(document.unreadable_items)
    data["logs"].extend(document.unreadable_logs)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class CreatedIdentifier:
    """Creation response that is the bare identifier string."""

    value: str

    @property
    def document_id(self) -> str:
        return _trailing_segment(self.value)


@dataclass(frozen=True)
class CreatedLocator:
    """Creation response carrying a locator whose last segment is the id."""

    uri: str

    @property
    def document_id(self) -> str:
        return _trailing_segment(self.uri)


CreationResponse = CreatedIdentifier | CreatedLocator


def parse_creation_response(raw: str) -> CreationResponse:
    """Parse the body returned when a document is created."""
    if not raw.strip():
        raise CreationFailedError("Empty response from the server on creation")
    try:
        data: object = json.loads(raw)
    except json.JSONDecodeError:
        data = raw.strip()
    try:
        parsed = _CREATION_RESPONSE.validate_python(data)
    except ValidationError as exc:
        raise CreationFailedError("Unexpected creation response format") from exc
    if isinstance(parsed, CreationLocatorPayload):
        return CreatedLocator(uri=parsed.uri)
    return CreatedIdentifier(value=parsed)


def parse_created_id(raw: str) -> str:
    """Extract the new document identifier from a creation response."""
    document_id = parse_creation_response(raw).document_id
    if not document_id:
        raise CreationFailedError("Creation response carries no document identifier")
    return document_id


def _trailing_segment(value: str) -> str:
    return value.strip().rstrip("/").rsplit("/", 1)[-1]
