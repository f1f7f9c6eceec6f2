"""Pydantic schemas for dividends and dividend yield."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.currency import normalize_currency


class DividendType(str, Enum):
    REGULAR = "REGULAR"
    SPECIAL = "SPECIAL"
    CAPITAL_GAIN = "CAPITAL_GAIN"


class DividendCreate(BaseModel):
    """Schema for recording a dividend payment against a lot.

    ``currency`` defaults to the lot's purchase currency.
    """

    lot_id: str
    amount: Decimal = Field(gt=0)
    currency: str | None = None
    payment_date: date
    dividend_type: DividendType = DividendType.REGULAR
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v: str | None) -> str | None:
        return normalize_currency(v) if v is not None else None


class DividendResponse(BaseModel):
    """Schema for Dividend API response."""

    id: str
    lot_id: str
    symbol: str
    amount: Decimal
    currency: str
    payment_date: date
    dividend_type: DividendType
    notes: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DividendSummaryResponse(BaseModel):
    """Dividend income totals converted into one currency."""

    currency: str
    ytd_total: Decimal
    this_month_total: Decimal
    last_year_total: Decimal
    by_symbol: dict[str, Decimal]


class DividendYieldResponse(BaseModel):
    """Trailing dividend yield for one held symbol.

    ``yield_percent`` is null when there is no dividend history or no
    known current value.
    """

    symbol: str
    currency: str
    trailing_income: Decimal | None
    current_value: Decimal | None
    yield_percent: Decimal | None
