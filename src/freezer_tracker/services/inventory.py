"""Read-only queries over the inventory: filtering and statistics."""

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Literal

from freezer_tracker.domain.models import (
    ALL_FILTER,
    FRESHNESS_HORIZON_DAYS,
    Category,
    Item,
)

SHELF_LIFE_MONTHS = 6
MONTHS_PER_YEAR = 12

DateType = Literal["added", "expiration"]


def add_months(value: datetime, months: int) -> datetime:
    """Shift a timestamp by calendar months, clamping to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // MONTHS_PER_YEAR
    month = month_index % MONTHS_PER_YEAR + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def expiration_date(item: Item) -> datetime:
    """Return the date an item should be eaten by."""
    return add_months(item.date_added, SHELF_LIFE_MONTHS)


@dataclass(frozen=True)
class InventoryFilter:
    """Criteria for listing items; ``Tout`` matches every category or location."""

    category: str = ALL_FILTER
    location: str = ALL_FILTER
    query: str = ""
    start: date | None = None
    end: date | None = None
    date_type: DateType = "added"

    def matches(self, item: Item, tz: tzinfo = UTC) -> bool:
        """Return True when the item satisfies every criterion."""
        if self.category != ALL_FILTER and item.category != self.category:
            return False
        if self.location != ALL_FILTER and item.location != self.location:
            return False
        if self.query.lower() not in item.name.lower():
            return False
        if self.start is None and self.end is None:
            return True
        target = item.date_added
        if self.date_type == "expiration":
            target = expiration_date(item)
        day = target.astimezone(tz).date()
        if self.start is not None and day < self.start:
            return False
        return self.end is None or day <= self.end


def filter_items(
    items: Iterable[Item], criteria: InventoryFilter, tz: tzinfo = UTC
) -> list[Item]:
    """Return the items matching ``criteria``, keeping their order."""
    return [item for item in items if criteria.matches(item, tz)]


def category_counts(items: Iterable[Item]) -> dict[Category, int]:
    """Count items per known category, including empty ones."""
    counts = dict.fromkeys(Category, 0)
    for item in items:
        if isinstance(item.category, Category):
            counts[item.category] += 1
    return counts


def expired_items(
    items: Iterable[Item],
    now: datetime | None = None,
    horizon_days: int = FRESHNESS_HORIZON_DAYS,
) -> list[Item]:
    """Return the items past the freshness horizon."""
    return [item for item in items if item.is_expired(now, horizon_days)]
