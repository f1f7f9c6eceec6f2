"""Asset catalog service - symbol lookups, custom assets, and default seeding."""

import logging
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import Asset
from schemas.asset import CustomAssetCreate
from utils.asset_types import AssetType, default_precision
from utils.ticker import normalize_symbol

logger = logging.getLogger(__name__)

# (symbol, name, asset_type) seeded into an empty catalog
DEFAULT_ASSETS: list[tuple[str, str, AssetType]] = [
    ("BTC", "Bitcoin", AssetType.CRYPTO),
    ("ETH", "Ethereum", AssetType.CRYPTO),
    ("SOL", "Solana", AssetType.CRYPTO),
    ("BNB", "Binance Coin", AssetType.CRYPTO),
    ("XRP", "XRP", AssetType.CRYPTO),
    ("ADA", "Cardano", AssetType.CRYPTO),
    ("DOGE", "Dogecoin", AssetType.CRYPTO),
    ("DOT", "Polkadot", AssetType.CRYPTO),
    ("MATIC", "Polygon", AssetType.CRYPTO),
    ("LINK", "Chainlink", AssetType.CRYPTO),
    ("SPY", "SPDR S&P 500 ETF", AssetType.ETF),
    ("QQQ", "Invesco QQQ Trust", AssetType.ETF),
    ("VTI", "Vanguard Total Stock Market ETF", AssetType.ETF),
    ("IVV", "iShares Core S&P 500 ETF", AssetType.ETF),
    ("VOO", "Vanguard S&P 500 ETF", AssetType.ETF),
    ("VEA", "Vanguard FTSE Developed Markets ETF", AssetType.ETF),
    ("VWO", "Vanguard FTSE Emerging Markets ETF", AssetType.ETF),
    ("AGG", "iShares Core U.S. Aggregate Bond ETF", AssetType.ETF),
    ("BND", "Vanguard Total Bond Market ETF", AssetType.ETF),
    ("GLD", "SPDR Gold Shares", AssetType.ETF),
    ("AAPL", "Apple Inc.", AssetType.STOCK),
    ("MSFT", "Microsoft Corporation", AssetType.STOCK),
    ("GOOGL", "Alphabet Inc.", AssetType.STOCK),
    ("AMZN", "Amazon.com Inc.", AssetType.STOCK),
    ("NVDA", "NVIDIA Corporation", AssetType.STOCK),
    ("META", "Meta Platforms Inc.", AssetType.STOCK),
    ("TSLA", "Tesla Inc.", AssetType.STOCK),
    ("JPM", "JPMorgan Chase & Co.", AssetType.STOCK),
    ("V", "Visa Inc.", AssetType.STOCK),
    ("JNJ", "Johnson & Johnson", AssetType.STOCK),
]


@dataclass(frozen=True)
class AssetInfo:
    """Catalog facts about one symbol."""

    symbol: str
    name: str
    asset_type: AssetType
    precision: int
    is_active: bool

    @classmethod
    def from_model(cls, asset: Asset) -> "AssetInfo":
        return cls(
            symbol=asset.symbol,
            name=asset.name,
            asset_type=AssetType(asset.asset_type),
            precision=asset.precision,
            is_active=asset.is_active,
        )


def _visible_to(user_id: str):
    """Filter clause: global assets plus the user's own custom assets."""
    return or_(Asset.is_global.is_(True), Asset.user_id == user_id)


class AssetCatalogService:
    """Manages the asset catalog."""

    @staticmethod
    def lookup(db: Session, user_id: str, symbol: str) -> AssetInfo | None:
        """Canonical symbol -> catalog facts, or None if the symbol is unknown.

        Another user's custom asset is reported as unknown.
        """
        asset = AssetCatalogService.get_visible_asset(db, user_id, symbol)
        return AssetInfo.from_model(asset) if asset else None

    @staticmethod
    def get_visible_asset(db: Session, user_id: str, symbol: str) -> Asset | None:
        """Return the asset if the user may hold it (global or their own custom asset)."""
        return (
            db.query(Asset)
            .filter(Asset.symbol == normalize_symbol(symbol), _visible_to(user_id))
            .first()
        )

    @staticmethod
    def search(
        db: Session,
        user_id: str,
        query: str | None = None,
        asset_type: AssetType | None = None,
        include_inactive: bool = False,
        limit: int = 50,
    ) -> list[Asset]:
        """Search assets visible to the user by symbol or name substring."""
        q = db.query(Asset).filter(_visible_to(user_id))
        if not include_inactive:
            q = q.filter(Asset.is_active.is_(True))
        if asset_type is not None:
            q = q.filter(Asset.asset_type == asset_type.value)
        if query:
            pattern = f"%{query.strip()}%"
            q = q.filter(or_(Asset.symbol.ilike(pattern), Asset.name.ilike(pattern)))
        return q.order_by(Asset.symbol).limit(limit).all()

    @staticmethod
    def create_custom_asset(db: Session, user_id: str, data: CustomAssetCreate) -> Asset:
        """Create a user-owned custom asset, priced manually.

        Raises:
            ValueError: If the symbol is already in the catalog.
        """
        if db.query(Asset).filter(Asset.symbol == data.symbol).first() is not None:
            raise ValueError(f"Asset symbol already exists: {data.symbol}")

        asset = Asset(
            symbol=data.symbol,
            name=data.name,
            asset_type=AssetType.CUSTOM.value,
            precision=data.precision,
            is_active=True,
            is_global=False,
            user_id=user_id,
        )
        db.add(asset)
        db.flush()
        logger.info("Created custom asset %s (precision %d) for user %s", data.symbol, data.precision, user_id)
        return asset

    @staticmethod
    def seed_default_assets(db: Session) -> int:
        """Seed the common crypto/ETF/stock symbols on a fresh database.

        If any assets already exist, this is a no-op. Returns the number seeded.
        """
        if db.query(Asset).count() > 0:
            logger.info("Assets already exist, skipping seed")
            return 0

        for symbol, name, asset_type in DEFAULT_ASSETS:
            db.add(
                Asset(
                    symbol=symbol,
                    name=name,
                    asset_type=asset_type.value,
                    precision=default_precision(asset_type),
                    is_active=True,
                    is_global=True,
                )
            )

        db.commit()
        logger.info("Seeded %d default assets", len(DEFAULT_ASSETS))
        return len(DEFAULT_ASSETS)


class DatabaseAssetCatalog:
    """Session-bound adapter exposing the assets one user can see as an asset-type lookup."""

    def __init__(self, db: Session, user_id: str):
        self._db = db
        self._user_id = user_id

    def asset_type_for(self, symbol: str) -> AssetType | None:
        info = AssetCatalogService.lookup(self._db, self._user_id, symbol)
        return info.asset_type if info else None
