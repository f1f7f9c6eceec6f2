"""Pydantic schemas for purchase lots."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.currency import normalize_currency
from utils.ticker import normalize_symbol


class LotCreate(BaseModel):
    """Schema for recording a purchase lot."""

    symbol: str = Field(min_length=1, max_length=20)
    quantity: Decimal = Field(gt=0)
    purchase_price: Decimal = Field(gt=0)
    purchase_currency: str = "USD"
    purchase_date: date
    platform: str = Field(min_length=1, max_length=100)
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return normalize_symbol(v)

    @field_validator("purchase_currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        return normalize_currency(v)

    @field_validator("platform")
    @classmethod
    def strip_platform(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Platform is required")
        return v


class LotUpdate(BaseModel):
    """Schema for editing a lot. Unset fields are left unchanged."""

    quantity: Decimal | None = Field(default=None, gt=0)
    purchase_price: Decimal | None = Field(default=None, gt=0)
    purchase_currency: str | None = None
    purchase_date: date | None = None
    platform: str | None = Field(default=None, min_length=1, max_length=100)
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("purchase_currency")
    @classmethod
    def check_currency(cls, v: str | None) -> str | None:
        return normalize_currency(v) if v is not None else None

    @field_validator("platform")
    @classmethod
    def strip_platform(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Platform cannot be blank")
        return v


class LotResponse(BaseModel):
    """Schema for Lot API response."""

    id: str
    symbol: str
    asset_name: str
    asset_type: str
    precision: int
    quantity: Decimal
    purchase_price: Decimal
    purchase_currency: str
    purchase_date: date
    platform: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    # Computed by the route from quantity * purchase_price
    total_cost: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)
