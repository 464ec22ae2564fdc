from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """OAuth credential bound to a single Strava athlete."""

    model_config = ConfigDict(frozen=True)

    athlete_id: int = Field(..., description="Stable Strava athlete identifier.")
    display_name: str
    notify_target: str = Field(
        ..., description="Telegram chat that receives this athlete's notifications."
    )
    access_token: str
    refresh_token: str
    expires_at: int = Field(..., description="Access token expiry, epoch seconds.")

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now
