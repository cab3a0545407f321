"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from beer_tracker.api.serializers import serialize_deletion, serialize_entry

if TYPE_CHECKING:
    from beer_tracker.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or not secrets.compare_digest(x_admin_token, admin_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/entries", dependencies=[Depends(require_admin)])
def list_entries(request: Request) -> dict[str, object]:
    """Return every entry, newest first."""
    container: AppContainer = request.app.state.container
    entries = sorted(
        container.entry_service.list_entries(),
        key=lambda entry: entry.occurred_at,
        reverse=True,
    )
    return {"entries": [serialize_entry(entry) for entry in entries]}


@router.delete("/entries/{entry_id}", dependencies=[Depends(require_admin)])
def delete_entry(entry_id: UUID, request: Request) -> dict[str, object]:
    """Delete an entry and hand its unit back to the purchase lot."""
    container: AppContainer = request.app.state.container
    deletion = container.entry_service.delete_entry(entry_id)
    container.entry_cache.invalidate()
    return serialize_deletion(deletion)


@router.delete("/purchases/{purchase_id}", dependencies=[Depends(require_admin)])
def delete_purchase(purchase_id: UUID, request: Request) -> dict[str, str]:
    """Delete a purchase lot."""
    container: AppContainer = request.app.state.container
    container.purchase_service.delete_purchase(purchase_id)
    return {"status": "deleted", "purchase_id": str(purchase_id)}
