"""Asset model - catalog of tradable symbols and user-defined custom assets."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Asset(Base):
    """A symbol in the asset catalog.

    Global assets are shared by every user; custom assets carry the
    owning ``user_id`` and are priced manually.
    """

    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint("precision >= 0 AND precision <= 8", name="ck_asset_precision_range"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    symbol = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    asset_type = Column(String, nullable=False)  # "crypto" / "stock" / "etf" / "custom"
    precision = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_global = Column(Boolean, nullable=False, default=True)
    user_id = Column(String(36), nullable=True, index=True)  # Owner of a custom asset
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    lots = relationship("Lot", back_populates="asset")
    manual_prices = relationship(
        "ManualPrice", back_populates="asset", cascade="all, delete-orphan"
    )
