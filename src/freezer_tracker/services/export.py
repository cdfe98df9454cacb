"""Downloadable exports of the inventory and its history."""

from collections.abc import Iterable, Sequence
from datetime import UTC, tzinfo

from pydantic import TypeAdapter

from freezer_tracker.adapters.wire_models import ItemPayload
from freezer_tracker.domain.models import AuditLogEntry, Item, wire_value

ITEMS_EXPORT_FILENAME = "congelator_backup.json"
LOGS_EXPORT_FILENAME = "congelator_history.txt"

_ITEM_LIST = TypeAdapter(list[ItemPayload])


def export_items_json(items: Sequence[Item]) -> str:
    """Return a JSON array of the items only, without the audit log."""
    payload = [ItemPayload.from_domain(item) for item in items]
    return _ITEM_LIST.dump_json(payload, indent=2, by_alias=True).decode("utf-8")


def format_log_line(entry: AuditLogEntry, tz: tzinfo = UTC) -> str:
    """Format one history line.

    Example: ``[05/01/2024] : bob a AJOUTE "Soup" dans Plat.``
    """
    day = entry.date.astimezone(tz).strftime("%d/%m/%Y")
    return (
        f'[{day}] : {entry.user} a {wire_value(entry.action)} "{entry.item_name}" '
        f"dans {entry.category}."
    )


def export_logs_text(entries: Iterable[AuditLogEntry], tz: tzinfo = UTC) -> str:
    """Return the history as plain text, one line per entry."""
    return "".join(f"{format_log_line(entry, tz)}\n" for entry in entries)
