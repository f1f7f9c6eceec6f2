"""Pydantic schemas for price resolution endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PriceQuoteResponse(BaseModel):
    """Resolved price for one symbol. ``price`` is null when unavailable."""

    symbol: str
    price: Decimal | None = None
    change_24h: Decimal | None = None
    source: str | None = None
    fetched_at: datetime | None = None
    tier: str
    is_stale: bool = False
    unavailable_reason: str | None = None


class PriceListResponse(BaseModel):
    prices: list[PriceQuoteResponse]
    errors: list[str] = []


class ManualPriceSet(BaseModel):
    """Request body for entering a manual price (base currency)."""

    price: Decimal = Field(ge=0)


class ManualPriceResponse(BaseModel):
    symbol: str
    price: Decimal
    entered_at: datetime

    model_config = {"from_attributes": True}
