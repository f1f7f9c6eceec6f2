"""Preference service - manages per-user preference CRUD operations."""

import json
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models.user_preference import UserPreference
from utils.currency import normalize_currency

logger = logging.getLogger(__name__)

DISPLAY_CURRENCY_KEY = "portfolio.displayCurrency"


class PreferenceService:
    """Service for managing user preferences as a per-user key-value store."""

    @staticmethod
    def get_all(db: Session, user_id: str) -> dict[str, Any]:
        """Get all of a user's preferences as a {key: parsed_value} dict."""
        prefs = db.query(UserPreference).filter(UserPreference.user_id == user_id).all()
        return {p.key: json.loads(p.value) for p in prefs}

    @staticmethod
    def get(db: Session, user_id: str, key: str) -> Any | None:
        """Get a single preference value by key, or None if not found."""
        pref = PreferenceService.get_record(db, user_id, key)
        if pref is None:
            return None
        return json.loads(pref.value)

    @staticmethod
    def get_record(db: Session, user_id: str, key: str) -> UserPreference | None:
        """Get the full UserPreference record by key, or None if not found."""
        return (
            db.query(UserPreference)
            .filter(UserPreference.user_id == user_id, UserPreference.key == key)
            .first()
        )

    @staticmethod
    def set(db: Session, user_id: str, key: str, value: Any) -> UserPreference:
        """Create or update a preference. Returns the UserPreference record."""
        if key == DISPLAY_CURRENCY_KEY:
            if not isinstance(value, str):
                raise ValueError("Display currency must be a currency code string")
            value = normalize_currency(value)

        pref = PreferenceService.get_record(db, user_id, key)
        serialized = json.dumps(value)

        if pref is None:
            pref = UserPreference(user_id=user_id, key=key, value=serialized)
            db.add(pref)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                pref = PreferenceService.get_record(db, user_id, key)
                pref.value = serialized
                db.commit()
                logger.info("Updated preference (concurrent insert): %s", key)
            else:
                logger.info("Created preference: %s", key)
        else:
            pref.value = serialized
            db.commit()
            logger.info("Updated preference: %s", key)

        db.refresh(pref)
        return pref

    @staticmethod
    def delete(db: Session, user_id: str, key: str) -> bool:
        """Delete a preference by key. Returns True if deleted, False if not found."""
        pref = PreferenceService.get_record(db, user_id, key)
        if pref is None:
            return False
        db.delete(pref)
        db.commit()
        logger.info("Deleted preference: %s", key)
        return True

    @staticmethod
    def get_display_currency(db: Session, user_id: str) -> str:
        """The user's display currency, falling back to the configured default."""
        value = PreferenceService.get(db, user_id, DISPLAY_CURRENCY_KEY)
        if isinstance(value, str):
            try:
                return normalize_currency(value)
            except ValueError:
                logger.warning("Ignoring unsupported display currency %r for user %s", value, user_id)
        return settings.DEFAULT_DISPLAY_CURRENCY
