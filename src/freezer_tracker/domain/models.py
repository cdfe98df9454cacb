"""Domain models for the freezer inventory."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum

FRESHNESS_HORIZON_DAYS = 180
ALL_FILTER = "Tout"


class Category(str, Enum):
    """Food categories stored on items."""

    MEAT = "Viande"
    FISH = "Poisson"
    VEGETABLES = "Légumes"
    DISH = "Plat"
    SAUCE = "Sauce"
    HERBS = "Aromatiques"


class Location(str, Enum):
    """Physical storage locations in the freezer."""

    TOP_DRAWER = "Tiroir Haut"
    MIDDLE_DRAWER = "Tiroir du Milieu"
    BOTTOM_DRAWER = "Tiroir Bas"
    FREEZER = "Freezer"


class LogAction(str, Enum):
    """Kind of mutation recorded in the audit log."""

    ADDED = "AJOUTE"
    REMOVED = "SUPPRIME"


def wire_value(value: Enum | str) -> str:
    """Return the stored string of an enum member or of an unknown raw value."""
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class Item:
    """One physical food unit in storage.

    Category and location values written by other clients that are not known
    here are kept as plain strings. ``extra`` holds unknown stored keys.
    """

    id: str
    name: str
    category: Category | str
    location: Location | str
    date_added: datetime
    extra: Mapping[str, object] = field(default_factory=dict, repr=False)

    def age_days(self, now: datetime | None = None) -> int:
        """Return the number of started days since the item was added."""
        current = now or datetime.now(tz=UTC)
        seconds = abs((current - self.date_added).total_seconds())
        return math.ceil(seconds / 86400)

    def is_expired(
        self,
        now: datetime | None = None,
        horizon_days: int = FRESHNESS_HORIZON_DAYS,
    ) -> bool:
        """Return True once the item is older than the freshness horizon."""
        return self.age_days(now) > horizon_days


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of one inventory mutation."""

    date: datetime
    user: str
    action: LogAction | str
    item_name: str
    category: str
    extra: Mapping[str, object] = field(default_factory=dict, repr=False)


@dataclass(frozen=True)
class Document:
    """Whole remote-persisted state: items and audit log, newest first.

    Stored entries that cannot be read as an item or a log entry are carried
    unchanged in ``unreadable_items`` and ``unreadable_logs`` so a whole
    document overwrite writes them back.
    """

    items: tuple[Item, ...] = ()
    logs: tuple[AuditLogEntry, ...] = ()
    unreadable_items: tuple[object, ...] = ()
    unreadable_logs: tuple[object, ...] = ()

    @classmethod
    def empty(cls) -> "Document":
        """Return the representation of a never-written document."""
        return cls()

    def find_item(self, item_id: str) -> Item | None:
        """Return the item with the given id, if present."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def with_added(self, item: Item, entry: AuditLogEntry) -> "Document":
        """Return a candidate document with the item and its log entry prepended."""
        return replace(self, items=(item, *self.items), logs=(entry, *self.logs))

    def with_removed(self, item_id: str, entry: AuditLogEntry) -> "Document":
        """Return a candidate document without the item, with its log entry."""
        remaining = tuple(item for item in self.items if item.id != item_id)
        return replace(self, items=remaining, logs=(entry, *self.logs))


@dataclass(frozen=True)
class SessionConfig:
    """Credential and document identifier targeting one remote document."""

    credential: str = field(repr=False)
    document_id: str

    def with_credential(self, credential: str) -> "SessionConfig":
        """Return the same target with a rotated credential."""
        return replace(self, credential=credential)
