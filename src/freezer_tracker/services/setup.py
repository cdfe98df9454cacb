"""Session setup: pointing the app at a remote document."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from freezer_tracker.adapters.sync_client import SyncClient
from freezer_tracker.domain.models import Item, SessionConfig
from freezer_tracker.services.session import SessionContext

_logger = logging.getLogger(__name__)


@dataclass
class SetupService:
    """Validates and commits session configurations."""

    sync_client: SyncClient
    session: SessionContext

    async def connect_existing(
        self, credential: str, document_id: str
    ) -> SessionConfig:
        """Probe an existing document and adopt it when reachable.

        ``NotFoundError`` means the identifier is wrong; the session is left
        untouched on any failure.
        """
        config = SessionConfig(
            credential=_required(credential, "credential"),
            document_id=_required(document_id, "document identifier"),
        )
        await self.sync_client.check_connection(config)
        self.session.set(config)
        return config

    async def create_new(
        self, credential: str, initial_items: Sequence[Item] = ()
    ) -> SessionConfig:
        """Create a fresh remote document and adopt it."""
        cleaned = _required(credential, "credential")
        document_id = await self.sync_client.create_document(cleaned, initial_items)
        _logger.info("Created remote document %s", document_id)
        config = SessionConfig(credential=cleaned, document_id=document_id)
        self.session.set(config)
        return config

    def rotate_credential(self, credential: str) -> SessionConfig:
        """Replace the credential of the current session."""
        return self.session.replace_credential(_required(credential, "credential"))


def _required(value: str, label: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"The {label} is required")
    return cleaned
