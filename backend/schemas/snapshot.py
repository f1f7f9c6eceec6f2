"""Pydantic schemas for portfolio snapshots."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict


class SnapshotResponse(BaseModel):
    """One day's stored portfolio valuation."""

    id: str
    snapshot_date: date
    currency: str
    total_value: Decimal
    cost_basis: Decimal
    crypto_value: Decimal
    stock_value: Decimal
    etf_value: Decimal
    custom_value: Decimal
    holdings: list[dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SnapshotCaptureResponse(BaseModel):
    created: bool
    snapshot: SnapshotResponse


class SnapshotRunResponse(BaseModel):
    """Result of the scheduled capture across all users."""

    snapshot_date: date
    created: int
    updated: int
    failed: int
    errors: list[str]
