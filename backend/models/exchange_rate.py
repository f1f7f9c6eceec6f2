"""ExchangeRate model - directed currency conversion rates."""

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, UniqueConstraint

from database import Base
from models.utils import generate_uuid, utcnow


class ExchangeRate(Base):
    """Rate to multiply an amount in ``from_currency`` by to get ``to_currency``.

    Each direction is its own row: EUR->USD does not imply USD->EUR.
    """

    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("from_currency", "to_currency", name="uix_exchange_rate_pair"),
        CheckConstraint("rate > 0", name="ck_exchange_rate_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    from_currency = Column(String(3), nullable=False)
    to_currency = Column(String(3), nullable=False)
    rate = Column(Numeric(24, 10), nullable=False)
    source = Column(String, nullable=False)
    fetched_at = Column(DateTime, nullable=False, default=utcnow)
