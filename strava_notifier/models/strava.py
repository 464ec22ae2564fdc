from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ActivityEvent(BaseModel):
    """Payload sent by the Strava webhook."""

    model_config = ConfigDict(extra="ignore")

    object_type: str
    aspect_type: str
    object_id: int
    owner_id: int
    event_time: Optional[int] = None
    subscription_id: Optional[int] = None
    updates: dict[str, Any] | None = None


class ActivityDetail(BaseModel):
    """Subset of fields returned by the Strava activity detail endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    type: Optional[str] = None
    sport_type: Optional[str] = None
    distance: Optional[float] = None
    moving_time: Optional[float] = None
    elapsed_time: Optional[float] = None
    total_elevation_gain: Optional[float] = None
    calories: Optional[float] = None
    description: Optional[str] = None

    @field_validator(
        "distance",
        "moving_time",
        "elapsed_time",
        "total_elevation_gain",
        "calories",
        mode="before",
    )
    @classmethod
    def _drop_malformed_numbers(cls, value: Any) -> Any:
        # Malformed or non-finite numbers are treated as missing.
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return number


class AthleteSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None

    @property
    def full_name(self) -> str:
        parts = [part for part in (self.firstname, self.lastname) if part]
        return " ".join(parts)

    @property
    def display_name(self) -> str:
        return self.username or self.full_name or f"athlete {self.id}"


class TokenGrant(BaseModel):
    """Token payload returned by the Strava OAuth token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    expires_at: int
    athlete: Optional[AthleteSummary] = None
