"""Service for purchase lot CRUD and loading lots for valuation.

Validation that depends on the catalog (asset visibility, active flag,
per-asset quantity precision) lives here; shape checks (positive
quantity and price, supported currency, non-blank platform) are enforced
by the request schemas before a call reaches this layer.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from models import Asset, Lot
from schemas.lot import LotCreate, LotUpdate
from services.asset_catalog_service import AssetCatalogService
from services.holding_service import LotRecord
from utils.asset_types import AssetType, decimal_places

logger = logging.getLogger(__name__)


def _check_quantity(quantity: Decimal, asset: Asset) -> None:
    if quantity <= 0:
        raise ValueError("Quantity must be greater than zero")
    places = decimal_places(quantity)
    if places > asset.precision:
        raise ValueError(
            f"Quantity for {asset.symbol} allows at most {asset.precision} "
            f"decimal places, got {places}"
        )


def _check_price(price: Decimal) -> None:
    if price <= 0:
        raise ValueError("Purchase price must be greater than zero")


def to_record(lot: Lot) -> LotRecord:
    """Flatten a Lot and its asset into the aggregator's input type."""
    asset = lot.asset
    return LotRecord(
        lot_id=lot.id,
        symbol=asset.symbol,
        name=asset.name,
        asset_type=AssetType(asset.asset_type),
        precision=asset.precision,
        quantity=Decimal(str(lot.quantity)),
        purchase_price=Decimal(str(lot.purchase_price)),
        purchase_currency=lot.purchase_currency,
        purchase_date=lot.purchase_date,
        platform=lot.platform,
    )


class LotService:
    """Manages lot CRUD and queries for a single user at a time."""

    @staticmethod
    def create_lot(db: Session, user_id: str, lot_data: LotCreate) -> Lot:
        """Record a purchase lot.

        Raises:
            ValueError: If the asset is unknown to the user, inactive, or
                the quantity exceeds the asset's precision.
        """
        asset = AssetCatalogService.get_visible_asset(db, user_id, lot_data.symbol)
        if asset is None:
            raise ValueError(f"Unknown asset symbol: {lot_data.symbol}")
        if not asset.is_active:
            raise ValueError(f"Asset {asset.symbol} is not available for new lots")
        _check_quantity(lot_data.quantity, asset)
        _check_price(lot_data.purchase_price)

        lot = Lot(
            user_id=user_id,
            asset_id=asset.id,
            quantity=lot_data.quantity,
            purchase_price=lot_data.purchase_price,
            purchase_currency=lot_data.purchase_currency,
            purchase_date=lot_data.purchase_date,
            platform=lot_data.platform,
            notes=lot_data.notes,
        )
        lot.asset = asset
        db.add(lot)
        db.flush()
        logger.info(
            "Created lot: %s %s @ %s %s for user %s",
            lot_data.quantity,
            asset.symbol,
            lot_data.purchase_price,
            lot_data.purchase_currency,
            user_id,
        )
        return lot

    @staticmethod
    def get_lot(db: Session, user_id: str, lot_id: str) -> Lot | None:
        """Return the lot if it exists and belongs to the user."""
        return (
            db.query(Lot)
            .options(joinedload(Lot.asset))
            .filter(Lot.id == lot_id, Lot.user_id == user_id)
            .first()
        )

    @staticmethod
    def update_lot(db: Session, user_id: str, lot_id: str, lot_data: LotUpdate) -> Lot:
        """Apply an edit to a lot. Fields not set on ``lot_data`` are unchanged."""
        lot = LotService.get_lot(db, user_id, lot_id)
        if lot is None:
            raise ValueError(f"Lot not found: {lot_id}")

        changes = lot_data.model_dump(exclude_unset=True)
        if changes.get("quantity") is not None:
            _check_quantity(changes["quantity"], lot.asset)
        if changes.get("purchase_price") is not None:
            _check_price(changes["purchase_price"])

        for field_name, value in changes.items():
            if value is None and field_name != "notes":
                continue
            setattr(lot, field_name, value)

        db.flush()
        logger.info("Updated lot %s (%s)", lot_id, ", ".join(sorted(changes)) or "no changes")
        return lot

    @staticmethod
    def delete_lot(db: Session, user_id: str, lot_id: str) -> bool:
        """Delete a lot and its dividends. Returns False if not found."""
        lot = LotService.get_lot(db, user_id, lot_id)
        if lot is None:
            return False
        dividend_count = len(lot.dividends)
        db.delete(lot)
        db.flush()
        logger.info("Deleted lot %s with %d dividends", lot_id, dividend_count)
        return True

    @staticmethod
    def list_lots(
        db: Session,
        user_id: str,
        symbol: str | None = None,
        platform: str | None = None,
    ) -> list[Lot]:
        """List a user's lots, newest purchase first."""
        q = db.query(Lot).join(Lot.asset).options(joinedload(Lot.asset)).filter(Lot.user_id == user_id)
        if symbol:
            q = q.filter(Asset.symbol == symbol.strip().upper())
        if platform:
            q = q.filter(Lot.platform == platform.strip())
        return q.order_by(Lot.purchase_date.desc(), Lot.created_at.desc()).all()

    @staticmethod
    def get_lot_records(db: Session, user_id: str) -> list[LotRecord]:
        """Load every lot for a user with asset metadata joined in."""
        lots = (
            db.query(Lot)
            .options(joinedload(Lot.asset))
            .filter(Lot.user_id == user_id)
            .order_by(Lot.purchase_date, Lot.created_at)
            .all()
        )
        return [to_record(lot) for lot in lots]

    @staticmethod
    def get_user_ids(db: Session) -> list[str]:
        """Every user that owns at least one lot."""
        rows = db.query(Lot.user_id).distinct().order_by(Lot.user_id).all()
        return [row[0] for row in rows]

    @staticmethod
    def get_platforms(db: Session, user_id: str) -> list[str]:
        rows = (
            db.query(Lot.platform)
            .filter(Lot.user_id == user_id)
            .distinct()
            .order_by(Lot.platform)
            .all()
        )
        return [row[0] for row in rows]
