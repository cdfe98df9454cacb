"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

from fastapi import FastAPI, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from freezer_tracker.api.schemas import (
    AddItemRequest,
    ConnectRequest,
    CredentialRequest,
    ItemView,
    LogEntryView,
    RemoveResult,
    StatusView,
)
from freezer_tracker.app_logging import configure_logging
from freezer_tracker.config import parse_allowed_users
from freezer_tracker.containers import AppContainer
from freezer_tracker.domain.errors import (
    ConfigInvalidError,
    NoSessionError,
    NotFoundError,
    SyncError,
)
from freezer_tracker.domain.models import ALL_FILTER
from freezer_tracker.services.export import (
    ITEMS_EXPORT_FILENAME,
    LOGS_EXPORT_FILENAME,
    export_items_json,
    export_logs_text,
)
from freezer_tracker.services.inventory import (
    DateType,
    InventoryFilter,
    category_counts,
    expired_items,
    filter_items,
)

USER_HEADER = "X-Freezer-User"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())
    logger = logging.getLogger(__name__)
    allowed_users = parse_allowed_users(container.settings.allowed_users)
    horizon_days = container.settings.freshness_horizon_days

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        if state_container.session.is_configured:
            try:
                await state_container.store.hydrate()
            except ConfigInvalidError:
                logger.warning("Stored configuration is invalid, setup required")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.write_lock = asyncio.Lock()

    @app.exception_handler(NoSessionError)
    async def no_session_handler(
        request: Request, exc: NoSessionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(ConfigInvalidError)
    async def config_invalid_handler(
        request: Request, exc: ConfigInvalidError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(ValueError)
    async def invalid_value_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.exception_handler(SyncError)
    async def sync_error_handler(request: Request, exc: SyncError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)}
        )

    def acting_user(user: str | None) -> str:
        if not user or not user.strip():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"{USER_HEADER} header is required",
            )
        if allowed_users is not None and user.strip().lower() not in allowed_users:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return user.strip()

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/status")
    async def sync_status(request: Request) -> StatusView:
        """Return the sync state and error flag."""
        return _status_view(request.app.state.container)

    @app.get("/items")
    async def list_items(  # noqa: PLR0913
        request: Request,
        category: str = ALL_FILTER,
        location: str = ALL_FILTER,
        q: str = "",
        start: date | None = None,
        end: date | None = None,
        date_type: DateType = "added",
    ) -> list[ItemView]:
        """Return items matching the filters, newest first."""
        state_container: AppContainer = request.app.state.container
        criteria = InventoryFilter(
            category=category,
            location=location,
            query=q,
            start=start,
            end=end,
            date_type=date_type,
        )
        now = datetime.now(tz=UTC)
        return [
            ItemView.from_domain(item, now, horizon_days)
            for item in filter_items(state_container.store.items, criteria)
        ]

    @app.post("/items", status_code=status.HTTP_201_CREATED)
    async def add_item(
        payload: AddItemRequest,
        request: Request,
        x_freezer_user: str | None = Header(default=None),
    ) -> ItemView:
        """Add an item; rejected when the remote copy cannot be written."""
        user = acting_user(x_freezer_user)
        state_container: AppContainer = request.app.state.container
        async with request.app.state.write_lock:
            result = await state_container.store.add_item(
                payload.name, payload.category, payload.location, user
            )
        if not result.synced:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Save failed: {result.error}",
            )
        return ItemView.from_domain(result.item, datetime.now(tz=UTC), horizon_days)

    @app.delete("/items/{item_id}")
    async def remove_item(
        item_id: str,
        request: Request,
        x_freezer_user: str | None = Header(default=None),
    ) -> RemoveResult:
        """Remove an item; applied locally even if the save fails."""
        user = acting_user(x_freezer_user)
        state_container: AppContainer = request.app.state.container
        async with request.app.state.write_lock:
            result = await state_container.store.remove_item(item_id, user)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return RemoveResult(
            id=item_id,
            synced=result.synced,
            error=str(result.error) if result.error else None,
        )

    @app.post("/refresh")
    async def refresh(request: Request) -> StatusView:
        """Pull the remote document again."""
        state_container: AppContainer = request.app.state.container
        async with request.app.state.write_lock:
            await state_container.store.refresh()
        return _status_view(state_container)

    @app.get("/logs")
    async def list_logs(request: Request) -> list[LogEntryView]:
        """Return the audit log, newest first."""
        state_container: AppContainer = request.app.state.container
        return [
            LogEntryView.from_domain(entry) for entry in state_container.store.logs
        ]

    @app.get("/stats")
    async def stats(request: Request) -> dict[str, object]:
        """Return item counts per category and the expired count."""
        items = request.app.state.container.store.items
        counts = category_counts(items)
        return {
            "total": len(items),
            "expired": len(expired_items(items, horizon_days=horizon_days)),
            "categories": {category.value: count for category, count in counts.items()},
        }

    @app.get("/export/items")
    async def export_items(request: Request) -> Response:
        """Download the items as JSON."""
        items = request.app.state.container.store.items
        return Response(
            content=export_items_json(items),
            media_type="application/json",
            headers=_attachment(ITEMS_EXPORT_FILENAME),
        )

    @app.get("/export/logs")
    async def export_logs(request: Request) -> Response:
        """Download the audit log as plain text."""
        logs = request.app.state.container.store.logs
        return Response(
            content=export_logs_text(logs),
            media_type="text/plain; charset=utf-8",
            headers=_attachment(LOGS_EXPORT_FILENAME),
        )

    @app.post("/setup/connect")
    async def setup_connect(payload: ConnectRequest, request: Request) -> StatusView:
        """Target an existing remote document after probing it."""
        state_container: AppContainer = request.app.state.container
        async with request.app.state.write_lock:
            try:
                await state_container.setup_service.connect_existing(
                    payload.credential, payload.document_id
                )
            except NotFoundError as exc:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Document not found, check the identifier",
                ) from exc
            await state_container.store.hydrate()
        return _status_view(state_container)

    @app.post("/setup/create", status_code=status.HTTP_201_CREATED)
    async def setup_create(payload: CredentialRequest, request: Request) -> StatusView:
        """Create a remote document seeded with the current items."""
        state_container: AppContainer = request.app.state.container
        async with request.app.state.write_lock:
            await state_container.setup_service.create_new(
                payload.credential, state_container.store.items
            )
            await state_container.store.hydrate()
        return _status_view(state_container)

    @app.post("/setup/credential")
    async def setup_credential(
        payload: CredentialRequest, request: Request
    ) -> StatusView:
        """Rotate the credential of the current session."""
        state_container: AppContainer = request.app.state.container
        state_container.setup_service.rotate_credential(payload.credential)
        return _status_view(state_container)

    return app


def _status_view(container: AppContainer) -> StatusView:
    store = container.store
    config = container.session.config
    return StatusView(
        configured=config is not None,
        document_id=config.document_id if config else None,
        state=store.state.value,
        error=store.has_error,
        message=str(store.last_error) if store.last_error else None,
        last_updated=store.last_updated,
    )


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}
