from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class OperationStatus(BaseModel):
    """Normalized status payload returned by webhook and admin endpoints."""

    status: str = Field(..., description="Short status indicator for the operation outcome.")
    outcome: Optional[str] = Field(
        None, description="Processing outcome of a webhook event, when relevant."
    )
    model_config = ConfigDict(json_schema_extra={"required": ["status"]})

    @model_serializer(mode="wrap")
    def _serialize(self, handler):  # type: ignore[override]
        payload = handler(self)
        if payload.get("outcome") is None:
            payload.pop("outcome", None)
        return payload


class AuthorizationLink(BaseModel):
    url: str


class AuthorizedAthlete(BaseModel):
    """Public view of a stored credential; tokens are never exposed."""

    athlete_id: int
    display_name: str
    notify_target: str
    expires_at: int
