"""JSON file storage for the session configuration."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from freezer_tracker.domain.models import SessionConfig
from freezer_tracker.services.session import SessionConfigRepository

STORAGE_KEY = "congelator_storage_config"

_logger = logging.getLogger(__name__)


class StoredSessionConfig(BaseModel):
    """Persisted form of the session configuration."""

    model_config = ConfigDict(populate_by_name=True)

    credential: str
    document_id: str = Field(alias="documentId")


@dataclass
class FileSessionConfigRepository(SessionConfigRepository):
    """Keeps the configuration under a fixed key in a local JSON file.

    Other keys in the file are preserved.
    """

    path: Path

    def load(self) -> SessionConfig | None:
        """Return the stored configuration, ignoring unreadable files."""
        entry = self._read().get(STORAGE_KEY)
        if entry is None:
            return None
        try:
            stored = StoredSessionConfig.model_validate(entry)
        except ValidationError:
            _logger.warning("Ignoring invalid session configuration in %s", self.path)
            return None
        return SessionConfig(
            credential=stored.credential, document_id=stored.document_id
        )

    def save(self, config: SessionConfig) -> None:
        """Write the configuration, keeping other stored keys."""
        data = self._read()
        data[STORAGE_KEY] = StoredSessionConfig(
            credential=config.credential, document_id=config.document_id
        ).model_dump(by_alias=True)
        self._write(data)

    def delete(self) -> None:
        """Remove the configuration key."""
        data = self._read()
        if data.pop(STORAGE_KEY, None) is not None:
            self._write(data)

    def _read(self) -> dict[str, object]:
        path = self.path.expanduser()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            _logger.warning("Could not read local storage file %s", path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, object]) -> None:
        path = self.path.expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        text = json.dumps(data, ensure_ascii=False, indent=2)
        path.write_text(text, encoding="utf-8")
