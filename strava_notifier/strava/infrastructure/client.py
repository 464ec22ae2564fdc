from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ...models.strava import ActivityDetail, TokenGrant
from ...settings import Settings
from ..application.ports import (
    RefreshFailed,
    StravaAuthError,
    StravaClientPort,
    TransportError,
)

logger = logging.getLogger(__name__)

STRAVA_API_URL = "https://www.strava.com/api/v3"
STRAVA_OAUTH_TOKEN_URL = "https://www.strava.com/oauth/token"


class StravaClient(StravaClientPort):
    """HTTP client for the Strava OAuth, activity and push-subscription APIs."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        self._http_client = http_client
        self._settings = settings

    async def exchange_code(self, code: str) -> TokenGrant:
        payload = {
            "client_id": self._settings.strava_client_id,
            "client_secret": self._settings.strava_client_secret,
            "code": code,
            "grant_type": "authorization_code",
        }
        try:
            response = await self._http_client.post(STRAVA_OAUTH_TOKEN_URL, data=payload)
        except httpx.HTTPError as exc:
            raise TransportError(f"Strava code exchange failed: {exc}") from exc

        if response.status_code != 200:
            raise StravaAuthError(
                f"Strava rejected the authorization code ({response.status_code})"
            )
        grant = self._parse_grant(response, StravaAuthError)
        if grant.athlete is None:
            raise StravaAuthError("Strava code exchange response missing athlete")
        return grant

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        payload = {
            "client_id": self._settings.strava_client_id,
            "client_secret": self._settings.strava_client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        try:
            response = await self._http_client.post(
                f"{STRAVA_API_URL}/oauth/token", data=payload
            )
        except httpx.HTTPError as exc:
            raise RefreshFailed(f"Strava token refresh request failed: {exc}") from exc

        if response.status_code != 200:
            raise RefreshFailed("Failed to refresh Strava access token")
        return self._parse_grant(response, RefreshFailed)

    async def get_activity(self, activity_id: int, access_token: str) -> ActivityDetail:
        """Fetch an activity using the athlete's access token."""

        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            response = await self._http_client.get(
                f"{STRAVA_API_URL}/activities/{activity_id}",
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Fetching Strava activity {activity_id} failed: {exc}") from exc

        try:
            return ActivityDetail.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TransportError(f"Unexpected Strava activity payload for {activity_id}") from exc

    async def create_subscription(self, callback_url: str, verify_token: str) -> dict[str, Any]:
        payload = {
            "client_id": self._settings.strava_client_id,
            "client_secret": self._settings.strava_client_secret,
            "callback_url": callback_url,
            "verify_token": verify_token,
        }
        try:
            response = await self._http_client.post(
                f"{STRAVA_API_URL}/push_subscriptions", data=payload
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Creating Strava push subscription failed: {exc}") from exc
        return response.json()

    async def list_subscriptions(self) -> list[dict[str, Any]]:
        params = {
            "client_id": self._settings.strava_client_id,
            "client_secret": self._settings.strava_client_secret,
        }
        try:
            response = await self._http_client.get(
                f"{STRAVA_API_URL}/push_subscriptions", params=params
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Listing Strava push subscriptions failed: {exc}") from exc
        return response.json()

    @staticmethod
    def _parse_grant(
        response: httpx.Response, error: type[StravaAuthError]
    ) -> TokenGrant:
        try:
            return TokenGrant.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Unexpected Strava token payload (status %s)", response.status_code)
            raise error("Strava token response missing required fields") from exc


def create_strava_client_adapter(
    *, http_client: httpx.AsyncClient, settings: Settings
) -> StravaClientPort:
    """Create a Strava client adapter without FastAPI dependencies."""
    return StravaClient(http_client=http_client, settings=settings)


__all__ = ["StravaClient", "create_strava_client_adapter"]
