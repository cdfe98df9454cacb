"""Session configuration lifecycle."""

import logging
from dataclasses import dataclass
from typing import Protocol

from freezer_tracker.domain.errors import NoSessionError
from freezer_tracker.domain.models import SessionConfig

_logger = logging.getLogger(__name__)


class SessionConfigRepository(Protocol):
    """Persistence interface for the session configuration."""

    def load(self) -> SessionConfig | None:
        """Return the persisted configuration, if any."""

    def save(self, config: SessionConfig) -> None:
        """Persist the configuration."""

    def delete(self) -> None:
        """Remove the persisted configuration."""


@dataclass
class SessionContext:
    """Holds the one remote target of a session and keeps it persisted."""

    repository: SessionConfigRepository
    config: SessionConfig | None = None

    @classmethod
    def load(cls, repository: SessionConfigRepository) -> "SessionContext":
        """Read the persisted configuration once, at startup."""
        return cls(repository=repository, config=repository.load())

    @property
    def is_configured(self) -> bool:
        """Return True when a remote target is set."""
        return self.config is not None

    def require(self) -> SessionConfig:
        """Return the configuration or raise when none is set."""
        if self.config is None:
            raise NoSessionError("No remote document configured")
        return self.config

    def set(self, config: SessionConfig) -> None:
        """Start targeting ``config`` and persist it."""
        self.repository.save(config)
        self.config = config
        _logger.info("Session configured for document %s", config.document_id)

    def clear(self) -> None:
        """Discard the configuration so setup has to run again."""
        self.repository.delete()
        self.config = None
        _logger.info("Session configuration cleared")

    def replace_credential(self, credential: str) -> SessionConfig:
        """Rotate the credential, keeping the document identifier."""
        updated = self.require().with_credential(credential)
        self.repository.save(updated)
        self.config = updated
        return updated
