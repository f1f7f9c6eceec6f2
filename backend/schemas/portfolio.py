"""Pydantic schemas for portfolio valuation endpoints.

Value fields are null when a holding has no price. A null value means
"unknown", not zero.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class OriginalCurrencyResponse(BaseModel):
    """Holding figures in the currency its lots were bought in."""

    currency: str
    average_cost: Decimal
    cost_basis: Decimal
    current_price: Decimal | None = None
    current_value: Decimal | None = None
    gain_loss: Decimal | None = None
    gain_loss_percent: Decimal | None = None


class HoldingValuationResponse(BaseModel):
    """One holding valued in the display currency."""

    symbol: str
    name: str
    asset_type: str
    precision: int
    quantity: Decimal
    lot_count: int
    platforms: list[str]
    average_cost: Decimal  # display currency, from the lot-by-lot cost basis
    primary_currency: str
    is_mixed_currency: bool
    average_cost_by_currency: dict[str, Decimal]
    cost_basis: Decimal
    current_price: Decimal | None = None
    price_source: str | None = None
    price_fetched_at: datetime | None = None
    price_is_stale: bool = False
    change_24h: Decimal | None = None
    current_value: Decimal | None = None
    gain_loss: Decimal | None = None
    gain_loss_percent: Decimal | None = None
    original_currency: OriginalCurrencyResponse | None = None


class AllocationResponse(BaseModel):
    asset_type: str
    value: Decimal
    percent: Decimal


class PortfolioValuationResponse(BaseModel):
    """Portfolio totals plus per-holding detail."""

    display_currency: str
    base_currency: str
    total_value: Decimal
    total_cost_basis: Decimal
    priced_cost_basis: Decimal
    total_gain_loss: Decimal
    total_gain_loss_percent: Decimal
    allocation: list[AllocationResponse]
    holdings: list[HoldingValuationResponse]
    unpriced_symbols: list[str]
    missing_rates: list[str]
