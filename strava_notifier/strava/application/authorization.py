from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from ...credentials.application.ports import CredentialStore
from ...models.credential import Credential
from ...settings import Settings
from ...telegram.application.ports import DispatchError, NotifierPort
from ..domain.formatting import format_connected_message
from .ports import StravaAuthError, StravaClientPort

logger = logging.getLogger(__name__)

STRAVA_AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"
STRAVA_SCOPE = "read,activity:read"


def build_authorization_url(settings: Settings, notify_target: str) -> str:
    """Link that sends the athlete to Strava and back to ``/auth`` with ``state``."""
    query = urlencode(
        {
            "client_id": settings.strava_client_id,
            "response_type": "code",
            "redirect_uri": f"{settings.app_url.rstrip('/')}/auth",
            "approval_prompt": "force",
            "scope": STRAVA_SCOPE,
            "state": notify_target,
        },
        safe=",:",
    )
    return f"{STRAVA_AUTHORIZE_URL}?{query}"


@dataclass
class AuthorizeAthleteUseCase:
    """Exchange an authorization code and bind the athlete to a chat."""

    client: StravaClientPort
    store: CredentialStore
    notifier: NotifierPort

    async def __call__(self, code: str, notify_target: str) -> Credential:
        grant = await self.client.exchange_code(code)
        athlete = grant.athlete
        if athlete is None:
            raise StravaAuthError("Strava code exchange response missing athlete")

        credential = Credential(
            athlete_id=athlete.id,
            display_name=athlete.display_name,
            notify_target=notify_target,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=grant.expires_at,
        )
        await self.store.upsert(credential)
        logger.info("Authorized athlete %s for chat %s", athlete.id, notify_target)

        try:
            await self.notifier.send_message(notify_target, format_connected_message(athlete))
        except DispatchError:
            logger.exception("Failed to send connection notice to %s", notify_target)
        return credential


__all__ = ["AuthorizeAthleteUseCase", "build_authorization_url"]
