"""Ports for the Strava application layer."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ...models.strava import ActivityDetail, TokenGrant


class StravaError(RuntimeError):
    """Base class for failures talking to Strava."""


class TransportError(StravaError):
    """Raised when an outbound Strava request fails or times out."""


class StravaAuthError(StravaError):
    """Raised when Strava rejects an OAuth token exchange."""


class RefreshFailed(StravaAuthError):
    """Raised when a refresh token can no longer be exchanged."""


@runtime_checkable
class StravaClientPort(Protocol):
    """Port that exposes the Strava client behaviour used by the application."""

    async def exchange_code(self, code: str) -> TokenGrant:
        """Trade an authorization code for a credential and athlete summary."""

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        """Trade a refresh token for a fresh token pair."""

    async def get_activity(self, activity_id: int, access_token: str) -> ActivityDetail:
        """Return the detail of one activity."""

    async def create_subscription(self, callback_url: str, verify_token: str) -> dict[str, Any]:
        """Register the push subscription callback."""

    async def list_subscriptions(self) -> list[dict[str, Any]]:
        """Return the push subscriptions registered for this application."""


__all__ = [
    "RefreshFailed",
    "StravaAuthError",
    "StravaClientPort",
    "StravaError",
    "TransportError",
]
