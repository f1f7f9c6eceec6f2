"""Test fixtures and sample data."""
import pytest
from datetime import date
from decimal import Decimal

from models import Asset, Lot
from sqlalchemy.orm import Session

from utils.asset_types import AssetType, default_precision

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def create_asset(
    db: Session,
    symbol: str,
    asset_type: AssetType = AssetType.STOCK,
    name: str | None = None,
    precision: int | None = None,
    user_id: str | None = None,
    is_active: bool = True,
) -> Asset:
    """Create a catalog asset. Passing ``user_id`` makes it a custom asset owned by that user."""
    asset = Asset(
        symbol=symbol,
        name=name or symbol,
        asset_type=asset_type.value,
        precision=precision if precision is not None else default_precision(asset_type),
        is_active=is_active,
        is_global=user_id is None,
        user_id=user_id,
    )
    db.add(asset)
    db.flush()
    return asset


def create_lot(
    db: Session,
    asset: Asset,
    quantity: str,
    price: str,
    currency: str = "USD",
    user_id: str = USER_ID,
    purchase_date: date = date(2024, 1, 15),
    platform: str = "Broker",
) -> Lot:
    """Create a lot directly, bypassing service validation."""
    lot = Lot(
        user_id=user_id,
        asset_id=asset.id,
        quantity=Decimal(quantity),
        purchase_price=Decimal(price),
        purchase_currency=currency,
        purchase_date=purchase_date,
        platform=platform,
    )
    lot.asset = asset
    db.add(lot)
    db.flush()
    return lot


@pytest.fixture
def aapl(db):
    return create_asset(db, "AAPL", AssetType.STOCK, name="Apple Inc.")


@pytest.fixture
def btc(db):
    return create_asset(db, "BTC", AssetType.CRYPTO, name="Bitcoin")


@pytest.fixture
def spy(db):
    return create_asset(db, "SPY", AssetType.ETF, name="SPDR S&P 500 ETF")
