"""Manual price service - user-entered prices for assets without a feed."""

import logging
from datetime import timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from integrations.market_data_protocol import PriceQuote
from models import ManualPrice
from services.asset_catalog_service import AssetCatalogService
from utils.ticker import MANUAL_SOURCE, normalize_symbol

logger = logging.getLogger(__name__)


class ManualPriceService:
    """Records and reads manual prices. The most recent entry per symbol wins."""

    @staticmethod
    def set_price(db: Session, user_id: str, symbol: str, price: Decimal) -> ManualPrice:
        """Record a manual price for an asset visible to the user.

        Raises:
            ValueError: If the price is negative or the asset is unknown.
        """
        if price < 0:
            raise ValueError("Manual price must be zero or greater")
        asset = AssetCatalogService.get_visible_asset(db, user_id, symbol)
        if asset is None:
            raise ValueError(f"Unknown asset symbol: {symbol}")

        entry = ManualPrice(
            asset_id=asset.id,
            symbol=asset.symbol,
            price=price,
            entered_by=user_id,
        )
        db.add(entry)
        db.flush()
        logger.info("Manual price for %s set to %s by %s", asset.symbol, price, user_id)
        return entry

    @staticmethod
    def get_latest(db: Session, symbol: str) -> ManualPrice | None:
        return (
            db.query(ManualPrice)
            .filter(ManualPrice.symbol == normalize_symbol(symbol))
            .order_by(ManualPrice.entered_at.desc())
            .first()
        )

    @staticmethod
    def get_history(db: Session, user_id: str, symbol: str, limit: int = 50) -> list[ManualPrice]:
        """Entries for an asset visible to the user, newest first.

        Raises:
            ValueError: If the asset is unknown or another user's custom asset.
        """
        asset = AssetCatalogService.get_visible_asset(db, user_id, symbol)
        if asset is None:
            raise ValueError(f"Unknown asset symbol: {symbol}")
        return (
            db.query(ManualPrice)
            .filter(ManualPrice.asset_id == asset.id)
            .order_by(ManualPrice.entered_at.desc())
            .limit(limit)
            .all()
        )


class DatabaseManualPriceSource:
    """Session-bound adapter that serves manual prices as ``manual`` quotes."""

    def __init__(self, db: Session):
        self._db = db

    def latest_quote(self, symbol: str) -> PriceQuote | None:
        entry = ManualPriceService.get_latest(self._db, symbol)
        if entry is None:
            return None
        entered_at = entry.entered_at
        if entered_at.tzinfo is None:
            entered_at = entered_at.replace(tzinfo=timezone.utc)
        return PriceQuote(
            symbol=entry.symbol,
            price=Decimal(str(entry.price)),
            change_24h=None,
            source=MANUAL_SOURCE,
            fetched_at=entered_at,
        )
