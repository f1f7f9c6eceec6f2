"""PortfolioSnapshot model - one point-in-time valuation per user per day."""

from decimal import Decimal

from sqlalchemy import JSON, Column, Date, DateTime, Numeric, String, UniqueConstraint

from database import Base
from models.utils import generate_uuid, utcnow


class PortfolioSnapshot(Base):
    """Daily portfolio valuation used for performance history.

    The unique ``(user_id, snapshot_date)`` constraint is what makes
    repeated captures on the same day overwrite instead of duplicate.
    ``holdings`` is a denormalized copy of the per-holding breakdown.
    """

    __tablename__ = "portfolio_snapshots"
    __table_args__ = (
        UniqueConstraint("user_id", "snapshot_date", name="uix_portfolio_snapshot_user_date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    snapshot_date = Column(Date, nullable=False, index=True)
    currency = Column(String(3), nullable=False)
    total_value = Column(Numeric(24, 4), nullable=False, default=Decimal("0"))
    cost_basis = Column(Numeric(24, 4), nullable=False, default=Decimal("0"))
    crypto_value = Column(Numeric(24, 4), nullable=False, default=Decimal("0"))
    stock_value = Column(Numeric(24, 4), nullable=False, default=Decimal("0"))
    etf_value = Column(Numeric(24, 4), nullable=False, default=Decimal("0"))
    custom_value = Column(Numeric(24, 4), nullable=False, default=Decimal("0"))
    holdings = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
