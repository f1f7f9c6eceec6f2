"""Lot model - one purchase of an asset by a user."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Lot(Base):
    """A single purchase event: quantity of an asset bought at a price.

    Lots are owned by exactly one user. Holdings are derived from lots on
    every valuation request and are never stored.
    """

    __tablename__ = "lots"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_lot_quantity_positive"),
        CheckConstraint("purchase_price >= 0", name="ck_lot_purchase_price_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    asset_id = Column(String(36), ForeignKey("assets.id"), nullable=False, index=True)
    quantity = Column(Numeric(24, 8), nullable=False)
    purchase_price = Column(Numeric(24, 8), nullable=False)
    purchase_currency = Column(String(3), nullable=False)
    purchase_date = Column(Date, nullable=False)
    platform = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    asset = relationship("Asset", back_populates="lots")
    dividends = relationship(
        "Dividend", back_populates="lot", cascade="all, delete-orphan"
    )
