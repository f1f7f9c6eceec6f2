"""ManualPrice model - user-entered prices for custom assets."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class ManualPrice(Base):
    """A manually entered price observation, in the base currency.

    Entries are append-only; the most recent ``entered_at`` wins.
    """

    __tablename__ = "manual_prices"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_manual_price_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    asset_id = Column(
        String(36), ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    symbol = Column(String, nullable=False, index=True)
    price = Column(Numeric(24, 8), nullable=False)
    entered_by = Column(String(36), nullable=True)
    entered_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    # Relationships
    asset = relationship("Asset", back_populates="manual_prices")
