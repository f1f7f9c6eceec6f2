"""Snapshot service - one stored portfolio valuation per user per day.

Capturing twice on the same day overwrites the first row. The write is a
single ``INSERT ... ON CONFLICT (user_id, snapshot_date) DO UPDATE`` so
two concurrent captures cannot both insert; the unique constraint on
:class:`PortfolioSnapshot` decides which one lands first and the other
updates it.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import PortfolioSnapshot, generate_uuid
from models.utils import utcnow
from services.lot_service import LotService
from services.portfolio_service import PortfolioService
from services.valuation_service import HoldingValuation, PortfolioValuation
from utils.asset_types import AssetType

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}

# Columns overwritten when a same-day snapshot already exists
_UPDATE_COLUMNS = (
    "currency",
    "total_value",
    "cost_basis",
    "crypto_value",
    "stock_value",
    "etf_value",
    "custom_value",
    "holdings",
    "updated_at",
)


@dataclass
class CaptureResult:
    snapshot: PortfolioSnapshot
    created: bool


@dataclass
class CaptureAllResult:
    """Outcome of capturing snapshots for every user with lots."""

    snapshot_date: date
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


def normalize_snapshot_date(as_of: date | datetime | None) -> date:
    """Reduce ``as_of`` to its calendar day; None means today."""
    if as_of is None:
        return date.today()
    if isinstance(as_of, datetime):
        return as_of.date()
    return as_of


def _text(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def holding_summary(hv: HoldingValuation) -> dict:
    """Denormalized, JSON-safe copy of one holding's valuation.

    ``average_cost`` and the other amounts are in the snapshot currency;
    ``average_cost_by_currency`` keeps the as-purchased averages.
    """
    holding = hv.holding
    return {
        "symbol": hv.symbol,
        "asset_type": hv.asset_type.value,
        "quantity": str(holding.total_quantity),
        "average_cost": str(hv.average_cost),
        "average_cost_by_currency": {
            currency: str(cost) for currency, cost in holding.average_cost_by_currency.items()
        },
        "primary_currency": holding.primary_currency,
        "current_price": _text(hv.current_price),
        "price_source": hv.price_source,
        "value": _text(hv.current_value),
        "cost_basis": str(hv.cost_basis),
        "gain_loss": _text(hv.gain_loss),
        "gain_loss_percent": _text(hv.gain_loss_percent),
    }


def snapshot_values(valuation: PortfolioValuation) -> dict:
    """Column values for a snapshot row built from ``valuation``."""
    return {
        "currency": valuation.display_currency,
        "total_value": valuation.total_value,
        "cost_basis": valuation.total_cost_basis,
        "crypto_value": valuation.value_by_type(AssetType.CRYPTO),
        "stock_value": valuation.value_by_type(AssetType.STOCK),
        "etf_value": valuation.value_by_type(AssetType.ETF),
        "custom_value": valuation.value_by_type(AssetType.CUSTOM),
        "holdings": [holding_summary(hv) for hv in valuation.holdings],
    }


class SnapshotService:
    """Captures and lists daily portfolio snapshots.

    Snapshots are valued in the configured base currency so a user's
    history stays comparable if they later change display currency.
    """

    def __init__(self, portfolio_service: PortfolioService | None = None):
        self._portfolio_service = portfolio_service or PortfolioService()

    def capture_snapshot(
        self,
        db: Session,
        user_id: str,
        as_of: date | datetime | None = None,
    ) -> CaptureResult:
        """Value the user's portfolio and upsert the snapshot for that day.

        Commits the upsert.
        """
        snapshot_date = normalize_snapshot_date(as_of)
        valuation = self._portfolio_service.get_valuation(
            db, user_id, display_currency=settings.BASE_CURRENCY
        )
        values = snapshot_values(valuation)

        existed = SnapshotService.get_snapshot(db, user_id, snapshot_date) is not None
        self._upsert(db, user_id, snapshot_date, values)
        db.commit()

        snapshot = (
            db.query(PortfolioSnapshot)
            .populate_existing()
            .filter(
                PortfolioSnapshot.user_id == user_id,
                PortfolioSnapshot.snapshot_date == snapshot_date,
            )
            .one()
        )
        logger.info(
            "%s snapshot for user %s on %s: %s %s",
            "Updated" if existed else "Created",
            user_id,
            snapshot_date,
            snapshot.total_value,
            snapshot.currency,
        )
        return CaptureResult(snapshot=snapshot, created=not existed)

    @staticmethod
    def _upsert(db: Session, user_id: str, snapshot_date: date, values: dict) -> None:
        now = utcnow()
        insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
        if insert is None:
            SnapshotService._upsert_fallback(db, user_id, snapshot_date, values, now)
            return

        stmt = insert(PortfolioSnapshot).values(
            id=generate_uuid(),
            user_id=user_id,
            snapshot_date=snapshot_date,
            created_at=now,
            updated_at=now,
            **values,
        )
        update_values = {**values, "updated_at": now}
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "snapshot_date"],
            set_={col: update_values[col] for col in _UPDATE_COLUMNS},
        )
        db.execute(stmt)

    @staticmethod
    def _upsert_fallback(
        db: Session, user_id: str, snapshot_date: date, values: dict, now: datetime
    ) -> None:
        """Insert, and on a unique-constraint conflict update the winner's row."""
        try:
            with db.begin_nested():
                db.add(
                    PortfolioSnapshot(
                        user_id=user_id, snapshot_date=snapshot_date, updated_at=now, **values
                    )
                )
        except IntegrityError:
            db.query(PortfolioSnapshot).filter(
                PortfolioSnapshot.user_id == user_id,
                PortfolioSnapshot.snapshot_date == snapshot_date,
            ).update({**values, "updated_at": now}, synchronize_session=False)

    @staticmethod
    def get_snapshot(db: Session, user_id: str, snapshot_date: date) -> PortfolioSnapshot | None:
        return (
            db.query(PortfolioSnapshot)
            .filter(
                PortfolioSnapshot.user_id == user_id,
                PortfolioSnapshot.snapshot_date == snapshot_date,
            )
            .first()
        )

    @staticmethod
    def list_snapshots(
        db: Session,
        user_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PortfolioSnapshot]:
        """A user's snapshots in date order, optionally bounded (inclusive)."""
        q = db.query(PortfolioSnapshot).filter(PortfolioSnapshot.user_id == user_id)
        if start is not None:
            q = q.filter(PortfolioSnapshot.snapshot_date >= start)
        if end is not None:
            q = q.filter(PortfolioSnapshot.snapshot_date <= end)
        return q.order_by(PortfolioSnapshot.snapshot_date).all()

    def capture_all(self, db: Session, as_of: date | datetime | None = None) -> CaptureAllResult:
        """Capture a snapshot for every user that owns lots.

        One user's failure is logged and counted; the rest still run.
        """
        result = CaptureAllResult(snapshot_date=normalize_snapshot_date(as_of))
        for user_id in LotService.get_user_ids(db):
            try:
                outcome = self.capture_snapshot(db, user_id, result.snapshot_date)
            except Exception as e:
                db.rollback()
                result.failed += 1
                result.errors.append(f"{user_id}: {e}")
                logger.warning("Snapshot capture failed for user %s: %s", user_id, e, exc_info=True)
                continue
            if outcome.created:
                result.created += 1
            else:
                result.updated += 1

        logger.info(
            "Snapshot run for %s: %d created, %d updated, %d failed",
            result.snapshot_date,
            result.created,
            result.updated,
            result.failed,
        )
        return result
