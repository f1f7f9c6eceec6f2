"""UserPreference model - per-user key-value store for preferences."""

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint

from database import Base
from models.utils import generate_uuid, utcnow


class UserPreference(Base):
    """A single user preference stored as a JSON-serialized value."""

    __tablename__ = "user_preferences"
    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uix_user_preference_key"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    key = Column(String, nullable=False, index=True)
    value = Column(Text, nullable=False)  # JSON-serialized
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
