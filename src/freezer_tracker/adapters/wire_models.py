"""Pydantic models for the remote document wire format."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from freezer_tracker.domain.models import (
    AuditLogEntry,
    Category,
    Document,
    Item,
    Location,
    LogAction,
)


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ItemPayload(BaseModel):
    """Stored item payload; unknown keys are kept for the next write."""

    model_config = ConfigDict(
        populate_by_name=True, coerce_numbers_to_str=True, extra="allow"
    )

    id: str
    name: str
    category: Category | str = Field(union_mode="left_to_right")
    location: Location | str = Field(union_mode="left_to_right")
    date_added: datetime = Field(alias="dateAdded")

    @field_validator("date_added")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        return _assume_utc(value)

    @classmethod
    def from_domain(cls, item: Item) -> "ItemPayload":
        """Build a payload from a domain item."""
        return cls.model_validate(
            {
                **item.extra,
                "id": item.id,
                "name": item.name,
                "category": item.category,
                "location": item.location,
                "dateAdded": item.date_added,
            }
        )

    def to_domain(self) -> Item:
        """Convert the payload to a domain item."""
        return Item(
            id=self.id,
            name=self.name,
            category=self.category,
            location=self.location,
            date_added=self.date_added,
            extra=dict(self.model_extra or {}),
        )


class LogEntryPayload(BaseModel):
    """Stored audit log entry payload; unknown keys are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    date: datetime
    user: str
    action: LogAction | str = Field(union_mode="left_to_right")
    item_name: str = Field(alias="itemName")
    category: str

    @field_validator("date")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        return _assume_utc(value)

    @classmethod
    def from_domain(cls, entry: AuditLogEntry) -> "LogEntryPayload":
        """Build a payload from a domain log entry."""
        return cls.model_validate(
            {
                **entry.extra,
                "date": entry.date,
                "user": entry.user,
                "action": entry.action,
                "itemName": entry.item_name,
                "category": entry.category,
            }
        )

    def to_domain(self) -> AuditLogEntry:
        """Convert the payload to a domain log entry."""
        return AuditLogEntry(
            date=self.date,
            user=self.user,
            action=self.action,
            item_name=self.item_name,
            category=self.category,
            extra=dict(self.model_extra or {}),
        )


class DocumentPayload(BaseModel):
    """Canonical document payload: items plus audit log."""

    items: list[ItemPayload]
    logs: list[LogEntryPayload] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, document: Document) -> "DocumentPayload":
        """Build a payload from the readable part of a domain document."""
        return cls(
            items=[ItemPayload.from_domain(item) for item in document.items],
            logs=[LogEntryPayload.from_domain(entry) for entry in document.logs],
        )


class CreationLocatorPayload(BaseModel):
    """Creation response carrying the new document's locator."""

    uri: str
