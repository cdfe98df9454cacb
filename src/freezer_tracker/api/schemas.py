"""Pydantic models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from freezer_tracker.domain.models import (
    AuditLogEntry,
    Category,
    Item,
    Location,
    LogAction,
)


class AddItemRequest(BaseModel):
    """Payload for adding an item."""

    name: str = Field(min_length=1)
    category: Category
    location: Location


class ConnectRequest(BaseModel):
    """Payload for targeting an existing remote document."""

    credential: str = Field(min_length=1)
    document_id: str = Field(min_length=1)


class CredentialRequest(BaseModel):
    """Payload carrying only a credential."""

    credential: str = Field(min_length=1)


class ItemView(BaseModel):
    """Item as returned to clients, with derived freshness fields."""

    id: str
    name: str
    category: Category | str
    location: Location | str
    date_added: datetime
    age_days: int
    expired: bool

    @classmethod
    def from_domain(
        cls, item: Item, now: datetime, horizon_days: int
    ) -> "ItemView":
        """Build the view of an item at ``now``."""
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            location=item.location,
            date_added=item.date_added,
            age_days=item.age_days(now),
            expired=item.is_expired(now, horizon_days),
        )


class LogEntryView(BaseModel):
    """Audit log entry as returned to clients."""

    date: datetime
    user: str
    action: str
    item_name: str
    category: str

    @classmethod
    def from_domain(cls, entry: AuditLogEntry) -> "LogEntryView":
        """Build the view of a log entry."""
        return cls(
            date=entry.date,
            user=entry.user,
            action=(
                entry.action.name
                if isinstance(entry.action, LogAction)
                else entry.action
            ),
            item_name=entry.item_name,
            category=entry.category,
        )


class StatusView(BaseModel):
    """Sync status shown by clients as a banner."""

    configured: bool
    document_id: str | None
    state: str
    error: bool
    message: str | None
    last_updated: datetime | None


class RemoveResult(BaseModel):
    """Outcome of a removal."""

    id: str
    synced: bool
    error: str | None = None
