"""Pydantic schemas for per-user preferences (display currency, UI settings)."""

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

from models.user_preference import UserPreference

# Limit on the stored JSON text of one preference value
VALUE_MAX_LENGTH = 4096


class PreferenceSet(BaseModel):
    """Request body for setting a preference. ``null`` is rejected; DELETE clears a key."""

    value: Any

    @field_validator("value")
    @classmethod
    def value_is_storable(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Preference value may not be null; delete the preference instead")
        if len(json.dumps(v)) > VALUE_MAX_LENGTH:
            raise ValueError(f"Preference value must serialize to at most {VALUE_MAX_LENGTH} characters")
        return v


class PreferenceResponse(BaseModel):
    """A single preference with its decoded value."""

    key: str
    value: Any
    updated_at: datetime

    @classmethod
    def from_record(cls, pref: UserPreference) -> "PreferenceResponse":
        """Build a response from a stored row, decoding its JSON value."""
        return cls(key=pref.key, value=json.loads(pref.value), updated_at=pref.updated_at)
