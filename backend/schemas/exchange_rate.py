"""Pydantic schemas for exchange rates."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.currency import normalize_currency


class ExchangeRateResponse(BaseModel):
    """A stored directed rate: ``amount_from * rate = amount_to``."""

    from_currency: str
    to_currency: str
    rate: Decimal
    source: str
    fetched_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExchangeRateSet(BaseModel):
    """Request body for pinning a manual directed rate."""

    from_currency: str
    to_currency: str
    rate: Decimal = Field(gt=0)

    @field_validator("from_currency", "to_currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)


class RateRefreshResponse(BaseModel):
    success: bool
    source: str | None = None
    pairs_written: int
    pairs_pinned: int
    errors: list[str]
