"""Pydantic models for API request payloads."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class DrinkEntryRequest(BaseModel):
    """Payload for logging a drink."""

    volume_ml: float | None = Field(default=None, gt=0)
    alcohol_percentage: float | None = Field(default=None, ge=0, le=100)
    beer_type: str | None = None
    purchase_id: UUID | None = None
    occurred_at: datetime | None = None


class PurchaseRequest(BaseModel):
    """Payload for logging a purchase lot."""

    beer_name: str
    unit_size_ml: float = Field(gt=0)
    quantity: int = Field(gt=0)
    cost_per_unit: float = Field(gt=0)
    beer_type: str | None = None
    quantity_unit: str = "bottles"
    store_name: str | None = None
    notes: str | None = None
    purchase_date: datetime | None = None


class DatabaseWebhookPayload(BaseModel):
    """Supabase database webhook payload."""

    type: str
    table: str
    schema_name: str | None = Field(default=None, alias="schema")
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None
