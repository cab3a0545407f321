"""FastAPI application factory."""

import logging
import secrets
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from beer_tracker.api.admin import router as admin_router
from beer_tracker.api.models import (
    DatabaseWebhookPayload,
    DrinkEntryRequest,
    PurchaseRequest,
)
from beer_tracker.api.serializers import (
    serialize_cumulative,
    serialize_daily,
    serialize_entry,
    serialize_group_row,
    serialize_leaderboard,
    serialize_profile,
    serialize_purchase,
    serialize_purchase_history,
    serialize_user,
    serialize_user_series,
)
from beer_tracker.app_logging import configure_logging
from beer_tracker.config import parse_timezone
from beer_tracker.containers import AppContainer
from beer_tracker.domain.bac import JoinKey
from beer_tracker.domain.drinks import EntryChange
from beer_tracker.domain.errors import (
    BeerTrackerError,
    DataUnavailableError,
    InsufficientQuantityError,
    NotFoundError,
    ValidationError,
)
from beer_tracker.domain.models import SessionContext
from beer_tracker.services.time_ranges import BACRange, ConsumptionRange

ENTRIES_TABLE = "beer_entries"

_ERROR_STATUS: dict[type[BeerTrackerError], int] = {
    ValidationError: 422,
    NotFoundError: 404,
    InsufficientQuantityError: 409,
    DataUnavailableError: 503,
}


def current_session(
    request: Request, x_user_id: UUID = Header()
) -> SessionContext:
    """Resolve the authenticated user into an explicit session context."""
    container: AppContainer = request.app.state.container
    try:
        return container.user_service.session_for(x_user_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    tz = parse_timezone(container.settings.timezone)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.entry_cache.refresh()
        except DataUnavailableError:
            logger.exception("Failed to warm entry cache")
        yield
        app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    for error_type, status_code in _ERROR_STATUS.items():
        app.add_exception_handler(error_type, _error_handler(status_code))

    app.include_router(admin_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users")
    def list_users(request: Request) -> dict[str, object]:
        """Return the roster."""
        state_container: AppContainer = request.app.state.container
        users = state_container.user_service.list_users()
        return {"users": [serialize_user(user) for user in users]}

    @app.get("/users/{user_id}/profile")
    def user_profile(user_id: UUID, request: Request) -> dict[str, object]:
        """Return a user's consumption profile."""
        state_container: AppContainer = request.app.state.container
        return serialize_profile(state_container.consumption_service.profile(user_id))

    @app.get("/entries")
    def list_entries(
        request: Request, user_id: UUID | None = None
    ) -> dict[str, object]:
        """Return all entries, or one user's entries."""
        state_container: AppContainer = request.app.state.container
        if user_id is None:
            entries = state_container.entry_cache.entries()
        else:
            entries = state_container.entry_service.list_user_entries(user_id)
        return {"entries": [serialize_entry(entry) for entry in entries]}

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    def log_entry(
        payload: DrinkEntryRequest,
        request: Request,
        session: SessionContext = Depends(current_session),
    ) -> dict[str, object]:
        """Log a drink for the current user."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.entry_service.log_drink(
            session,
            volume_ml=payload.volume_ml,
            alcohol_percentage=payload.alcohol_percentage,
            beer_type=payload.beer_type,
            purchase_id=payload.purchase_id,
            occurred_at=payload.occurred_at,
        )
        state_container.entry_cache.invalidate()
        return serialize_entry(entry)

    @app.get("/purchases")
    def purchase_history(request: Request, limit: int = 10) -> dict[str, object]:
        """Return recent purchases with spend totals."""
        state_container: AppContainer = request.app.state.container
        return serialize_purchase_history(
            state_container.purchase_service.history(limit)
        )

    @app.get("/purchases/available")
    def available_purchases(request: Request) -> dict[str, object]:
        """Return lots that still have units left."""
        state_container: AppContainer = request.app.state.container
        lots = state_container.purchase_service.available_lots()
        return {"purchases": [serialize_purchase(lot) for lot in lots]}

    @app.post("/purchases", status_code=status.HTTP_201_CREATED)
    def log_purchase(
        payload: PurchaseRequest,
        request: Request,
        session: SessionContext = Depends(current_session),
    ) -> dict[str, object]:
        """Log a purchase for the current user."""
        state_container: AppContainer = request.app.state.container
        lot = state_container.purchase_service.log_purchase(
            session,
            beer_name=payload.beer_name,
            unit_size_ml=payload.unit_size_ml,
            quantity=payload.quantity,
            cost_per_unit=payload.cost_per_unit,
            beer_type=payload.beer_type,
            quantity_unit=payload.quantity_unit,
            store_name=payload.store_name,
            notes=payload.notes,
            purchase_date=payload.purchase_date,
        )
        return serialize_purchase(lot)

    @app.get("/bac/me")
    def my_bac(
        request: Request,
        session: SessionContext = Depends(current_session),
        preset: BACRange = Query(default=BACRange.TWELVE_HOURS, alias="range"),
    ) -> dict[str, object]:
        """Return the current user's BAC curve and sober estimate."""
        state_container: AppContainer = request.app.state.container
        series = state_container.bac_service.user_series(session.user_id, preset)
        return serialize_user_series(series, tz)

    @app.get("/bac")
    def group_bac(
        request: Request,
        preset: BACRange = Query(default=BACRange.TWELVE_HOURS, alias="range"),
        user_id: UUID | None = None,
        join: JoinKey = JoinKey.TIMESTAMP,
    ) -> dict[str, object]:
        """Return BAC comparison rows for all users or one user."""
        state_container: AppContainer = request.app.state.container
        rows = state_container.bac_service.group_series(
            preset, user_id=user_id, join_key=join
        )
        return {"rows": [serialize_group_row(row) for row in rows]}

    @app.get("/consumption/daily")
    def daily_consumption(
        request: Request,
        preset: ConsumptionRange = Query(default=ConsumptionRange.WEEK, alias="range"),
        user_id: UUID | None = None,
    ) -> dict[str, object]:
        """Return liters per user per day."""
        state_container: AppContainer = request.app.state.container
        rows = state_container.consumption_service.daily(preset, user_id=user_id)
        return {"rows": [serialize_daily(row) for row in rows]}

    @app.get("/consumption/cumulative")
    def cumulative_consumption(
        request: Request, user_id: UUID | None = None
    ) -> dict[str, object]:
        """Return running liters per user, one row per drink."""
        state_container: AppContainer = request.app.state.container
        rows = state_container.consumption_service.cumulative(user_id=user_id)
        return {"rows": [serialize_cumulative(row) for row in rows]}

    @app.get("/leaderboard")
    def leaderboard(request: Request) -> dict[str, object]:
        """Return users ranked by liters."""
        state_container: AppContainer = request.app.state.container
        rows = state_container.consumption_service.leaderboard()
        return {
            "group_total_liters": sum(row.liters for row in rows),
            "rankings": serialize_leaderboard(rows),
        }

    @app.post("/webhooks/entries")
    def entries_webhook(
        payload: DatabaseWebhookPayload,
        request: Request,
        x_webhook_secret: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Handle Supabase database webhooks for the entries table."""
        state_container: AppContainer = request.app.state.container
        if not x_webhook_secret or not secrets.compare_digest(
            x_webhook_secret, state_container.settings.webhook_secret
        ):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        if payload.table != ENTRIES_TABLE:
            logger.info("Ignoring webhook for table %s", payload.table)
            return {"status": "ignored"}
        change = EntryChange(
            event_type=payload.type.upper(),
            entry_id=_record_id(payload.record or payload.old_record),
        )
        delivered = state_container.notifier.publish(change)
        return {"status": "ok", "delivered": delivered}

    return app


def _error_handler(
    status_code: int,
) -> Callable[[Request, Exception], JSONResponse]:
    def handler(_request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def _record_id(record: dict[str, Any] | None) -> UUID | None:
    if not record or not record.get("id"):
        return None
    try:
        return UUID(str(record["id"]))
    except ValueError:
        return None
