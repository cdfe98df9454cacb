"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from freezer_tracker.adapters.sync_client import SyncClient
from freezer_tracker.config import Settings
from freezer_tracker.containers import AppContainer
from freezer_tracker.domain.models import (
    Category,
    Document,
    Item,
    Location,
    SessionConfig,
)
from freezer_tracker.services.session import SessionConfigRepository, SessionContext
from freezer_tracker.services.setup import SetupService
from freezer_tracker.services.store import LocalStore

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def make_item(
    item_id: str = "1",
    name: str = "Soup",
    category: Category | str = Category.DISH,
    location: Location = Location.FREEZER,
    date_added: datetime | None = None,
) -> Item:
    return Item(
        id=item_id,
        name=name,
        category=category,
        location=location,
        date_added=date_added or datetime(2024, 1, 1, tzinfo=UTC),
    )


@dataclass
class InMemorySessionConfigRepository(SessionConfigRepository):
    """In-memory session configuration storage for tests."""

    stored: SessionConfig | None = None
    saves: int = 0

    def load(self) -> SessionConfig | None:
        return self.stored

    def save(self, config: SessionConfig) -> None:
        self.stored = config
        self.saves += 1

    def delete(self) -> None:
        self.stored = None


@dataclass
class FakeSyncClient(SyncClient):
    """Fake sync client holding the remote document in memory."""

    remote: Document = field(default_factory=Document.empty)
    fetch_error: Exception | None = None
    replace_error: Exception | None = None
    check_error: Exception | None = None
    create_error: Exception | None = None
    created_id: str = "new-doc"
    replaced: list[Document] = field(default_factory=list)
    fetch_calls: int = 0
    checked: list[SessionConfig] = field(default_factory=list)

    async def create_document(
        self, credential: str, initial_items: Sequence[Item]
    ) -> str:
        if self.create_error is not None:
            raise self.create_error
        self.remote = Document(items=tuple(initial_items))
        return self.created_id

    async def check_connection(self, config: SessionConfig) -> None:
        self.checked.append(config)
        if self.check_error is not None:
            raise self.check_error

    async def fetch_document(self, config: SessionConfig) -> Document:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.remote

    async def replace_document(self, config: SessionConfig, document: Document) -> None:
        self.replaced.append(document)
        if self.replace_error is not None:
            raise self.replace_error
        self.remote = document

    async def close(self) -> None:
        return None


@dataclass
class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(credential="api-key", document_id="doc-1")


@pytest.fixture
def session_repository(
    session_config: SessionConfig,
) -> InMemorySessionConfigRepository:
    return InMemorySessionConfigRepository(stored=session_config)


@pytest.fixture
def session(session_repository: InMemorySessionConfigRepository) -> SessionContext:
    return SessionContext.load(session_repository)


@pytest.fixture
def sync_client() -> FakeSyncClient:
    return FakeSyncClient()


@pytest.fixture
def store(sync_client: FakeSyncClient, session: SessionContext) -> LocalStore:
    return LocalStore(sync_client=sync_client, session=session, clock=lambda: FIXED_NOW)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        session_config_path=tmp_path / "session.json",
        storage_base_url="https://storage.test/v1/json",
    )


@pytest.fixture
def container(
    settings: Settings,
    session: SessionContext,
    sync_client: FakeSyncClient,
    store: LocalStore,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session=session,
        sync_client=sync_client,
        store=store,
        setup_service=SetupService(sync_client=sync_client, session=session),
        close_resources=close_resources,
    )
