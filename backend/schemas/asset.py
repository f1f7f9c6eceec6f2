"""Pydantic schemas for the asset catalog."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.asset_types import MAX_PRECISION
from utils.ticker import normalize_symbol


class CustomAssetCreate(BaseModel):
    """Schema for defining a user-owned custom asset."""

    symbol: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    precision: int = Field(default=2, ge=0, le=MAX_PRECISION)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        v = normalize_symbol(v)
        if not v:
            raise ValueError("Symbol is required")
        return v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class AssetResponse(BaseModel):
    """Schema for Asset API response."""

    id: str
    symbol: str
    name: str
    asset_type: str
    precision: int
    is_active: bool
    is_global: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
