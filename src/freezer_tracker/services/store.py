"""In-memory inventory store reconciled with the remote document."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol
from uuid import uuid4

from freezer_tracker.adapters.sync_client import SyncClient
from freezer_tracker.domain.errors import ConfigInvalidError, NotFoundError, SyncError
from freezer_tracker.domain.models import (
    AuditLogEntry,
    Category,
    Document,
    Item,
    Location,
    LogAction,
    wire_value,
)
from freezer_tracker.services.session import SessionContext

_logger = logging.getLogger(__name__)


class StoreState(Enum):
    """Lifecycle of a store instance."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    ERROR_FLAGGED = "error_flagged"
    CONFIG_INVALID = "config_invalid"


class Mutation(Protocol):
    """A change to the document paired with its audit log entry."""

    item: Item
    entry: AuditLogEntry

    def apply(self, document: Document) -> Document:
        """Return the candidate document."""

    def on_failure(self, current: Document, candidate: Document) -> Document:
        """Return the document to keep when the remote replace failed."""


@dataclass(frozen=True)
class AddMutation(Mutation):
    """Adds an item; rejected entirely when the replace fails."""

    item: Item
    entry: AuditLogEntry

    def apply(self, document: Document) -> Document:
        return document.with_added(self.item, self.entry)

    def on_failure(self, current: Document, candidate: Document) -> Document:
        return current


@dataclass(frozen=True)
class RemoveMutation(Mutation):
    """Removes an item; applied locally even when the replace fails.

    The log entry is kept with the removal so the next successful replace
    writes both.
    """

    item: Item
    entry: AuditLogEntry

    def apply(self, document: Document) -> Document:
        return document.with_removed(self.item.id, self.entry)

    def on_failure(self, current: Document, candidate: Document) -> Document:
        return candidate


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a mutation from the caller's point of view."""

    item: Item
    synced: bool
    error: SyncError | None = None


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _new_item_id() -> str:
    return str(uuid4())


@dataclass
class LocalStore:
    """Owns the canonical document and pushes every mutation to the remote copy."""

    sync_client: SyncClient
    session: SessionContext
    clock: Callable[[], datetime] = _utc_now
    id_factory: Callable[[], str] = _new_item_id
    document: Document = field(default_factory=Document.empty)
    state: StoreState = StoreState.UNINITIALIZED
    last_error: SyncError | None = None
    last_updated: datetime | None = None

    @property
    def items(self) -> tuple[Item, ...]:
        """Items, newest first."""
        return self.document.items

    @property
    def logs(self) -> tuple[AuditLogEntry, ...]:
        """Audit log entries, newest first."""
        return self.document.logs

    @property
    def has_error(self) -> bool:
        """Return True while the error flag is raised."""
        return self.state is StoreState.ERROR_FLAGGED

    async def hydrate(self, *, silent: bool = False) -> Document:
        """Replace the in-memory document with the remote one.

        A missing remote document discards the session configuration and
        raises ``ConfigInvalidError``. Other failures keep the current data
        and raise the error flag, unless ``silent`` is set.
        """
        config = self.session.require()
        previous_state = self.state
        self.state = StoreState.LOADING
        try:
            document = await self.sync_client.fetch_document(config)
        except NotFoundError as exc:
            _logger.warning("Remote document %s not found", config.document_id)
            self.session.clear()
            self.state = StoreState.CONFIG_INVALID
            self.last_error = exc
            raise ConfigInvalidError(
                "Invalid configuration or missing document, set up sync again"
            ) from exc
        except SyncError as exc:
            _logger.warning("Failed to load remote document: %s", exc)
            if silent:
                self.state = previous_state
            else:
                self._flag(exc)
            return self.document
        self._adopt(document)
        return document

    async def refresh(self, *, silent: bool = False) -> Document:
        """Pull the remote document again at any time."""
        return await self.hydrate(silent=silent)

    async def add_item(
        self,
        name: str,
        category: Category | str,
        location: Location | str,
        acting_user: str,
    ) -> MutationResult:
        """Add a new item and its ADDED log entry."""
        label = name.strip()
        if not label:
            raise ValueError("Item name must not be empty")
        now = self.clock()
        item = Item(
            id=self.id_factory(),
            name=label,
            category=Category(category),
            location=Location(location),
            date_added=now,
        )
        entry = AuditLogEntry(
            date=now,
            user=acting_user,
            action=LogAction.ADDED,
            item_name=item.name,
            category=wire_value(item.category),
        )
        return await self._commit(AddMutation(item=item, entry=entry))

    async def remove_item(
        self, item_id: str, acting_user: str
    ) -> MutationResult | None:
        """Remove an item and record a REMOVED log entry.

        Returns None when no item has that id; nothing is written then.
        """
        item = self.document.find_item(item_id)
        if item is None:
            return None
        entry = AuditLogEntry(
            date=self.clock(),
            user=acting_user,
            action=LogAction.REMOVED,
            item_name=item.name,
            category=wire_value(item.category),
        )
        return await self._commit(RemoveMutation(item=item, entry=entry))

    async def _commit(self, mutation: Mutation) -> MutationResult:
        config = self.session.require()
        current = self.document
        candidate = mutation.apply(current)
        self.state = StoreState.SAVING
        try:
            await self.sync_client.replace_document(config, candidate)
        except SyncError as exc:
            _logger.warning(
                "Failed to save %s of %r: %s",
                mutation.entry.action.name,
                mutation.item.name,
                exc,
            )
            self.document = mutation.on_failure(current, candidate)
            self._flag(exc)
            return MutationResult(item=mutation.item, synced=False, error=exc)
        self._adopt(candidate)
        return MutationResult(item=mutation.item, synced=True)

    def _adopt(self, document: Document) -> None:
        self.document = document
        self.state = StoreState.READY
        self.last_error = None
        self.last_updated = self.clock()

    def _flag(self, error: SyncError) -> None:
        self.state = StoreState.ERROR_FLAGGED
        self.last_error = error
