"""Dividend model - a dividend payment received on a lot."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Dividend(Base):
    """A dividend payment attributed to one lot.

    Deleted together with its lot.
    """

    __tablename__ = "dividends"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_dividend_amount_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    lot_id = Column(String(36), ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol = Column(String, nullable=False, index=True)  # Denormalized from the lot's asset
    amount = Column(Numeric(24, 8), nullable=False)
    currency = Column(String(3), nullable=False)
    payment_date = Column(Date, nullable=False)
    dividend_type = Column(String, nullable=False, default="REGULAR")  # REGULAR / SPECIAL / CAPITAL_GAIN
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    lot = relationship("Lot", back_populates="dividends")
