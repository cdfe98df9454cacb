"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from freezer_tracker.adapters.file_session_repository import FileSessionConfigRepository
from freezer_tracker.adapters.sync_client import JsonStorageSyncClient, SyncClient
from freezer_tracker.config import Settings
from freezer_tracker.services.session import SessionContext
from freezer_tracker.services.setup import SetupService
from freezer_tracker.services.store import LocalStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session: SessionContext
    sync_client: SyncClient
    store: LocalStore
    setup_service: SetupService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session = SessionContext.load(
        FileSessionConfigRepository(resolved_settings.session_config_path)
    )
    sync_client = JsonStorageSyncClient.create(
        base_url=resolved_settings.storage_base_url,
        retry_attempts=resolved_settings.storage_retry_attempts,
        backoff_seconds=resolved_settings.storage_retry_backoff_seconds,
        timeout_seconds=resolved_settings.storage_timeout_seconds,
    )
    store = LocalStore(sync_client=sync_client, session=session)
    setup_service = SetupService(sync_client=sync_client, session=session)

    async def close_resources() -> None:
        await sync_client.close()

    return AppContainer(
        settings=resolved_settings,
        session=session,
        sync_client=sync_client,
        store=store,
        setup_service=setup_service,
        close_resources=close_resources,
    )
