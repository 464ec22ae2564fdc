from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from ...credentials.application.ports import CredentialStore, StorageError
from ...models.credential import Credential
from ...models.strava import ActivityEvent
from ...telegram.application.ports import DispatchError, InlineButton, NotifierPort
from ..domain.formatting import format_activity_message, format_reauthorization_message
from .ports import RefreshFailed, StravaClientPort, TransportError
from .refresher import TokenRefresher

logger = logging.getLogger(__name__)

AuthorizationUrlBuilder = Callable[[str], str]


class Outcome(str, Enum):
    IGNORED = "ignored"
    DROPPED = "dropped"
    DELIVERED = "delivered"


class ActivityEventProcessor:
    """Turn Strava ``activity/create`` events into chat notifications.

    Every failure is resolved into an ``Outcome``; nothing raised while handling
    an event reaches the webhook response, because Strava keeps redelivering
    events it believes were not received.
    """

    def __init__(
        self,
        client: StravaClientPort,
        store: CredentialStore,
        refresher: TokenRefresher,
        notifier: NotifierPort,
        *,
        authorization_url: Optional[AuthorizationUrlBuilder] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._refresher = refresher
        self._notifier = notifier
        self._authorization_url = authorization_url
        self._prompted: set[tuple[int, str]] = set()

    async def handle(self, event: ActivityEvent) -> Outcome:
        if event.object_type != "activity" or event.aspect_type != "create":
            logger.debug("Ignoring %s/%s event", event.object_type, event.aspect_type)
            return Outcome.IGNORED

        try:
            credential = await self._store.find_by_athlete_id(event.owner_id)
        except StorageError:
            logger.exception("Could not load credential for athlete %s", event.owner_id)
            return Outcome.DROPPED
        if credential is None:
            logger.info("No credential for athlete %s; ignoring event", event.owner_id)
            return Outcome.IGNORED

        try:
            credential = await self._refresher.ensure_fresh(credential)
        except RefreshFailed:
            logger.warning(
                "Token refresh failed for athlete %s; dropping activity %s",
                event.owner_id,
                event.object_id,
            )
            await self._prompt_reauthorization(credential)
            return Outcome.DROPPED
        except StorageError:
            logger.exception("Could not persist refreshed tokens for athlete %s", event.owner_id)
            return Outcome.DROPPED

        try:
            activity = await self._client.get_activity(event.object_id, credential.access_token)
        except TransportError:
            logger.exception("Error fetching activity %s from Strava", event.object_id)
            return Outcome.DROPPED

        message = format_activity_message(activity, credential.display_name)
        try:
            await self._notifier.send_message(credential.notify_target, message)
        except DispatchError:
            logger.exception(
                "Failed to deliver activity %s to %s", event.object_id, credential.notify_target
            )
        return Outcome.DELIVERED

    async def _prompt_reauthorization(self, credential: Credential) -> None:
        # One prompt per stored refresh token; re-authorizing stores a new one.
        key = (credential.athlete_id, credential.refresh_token)
        if self._authorization_url is None or key in self._prompted:
            return
        self._prompted.add(key)

        url = self._authorization_url(credential.notify_target)
        try:
            await self._notifier.send_message(
                credential.notify_target,
                format_reauthorization_message(credential.display_name, url),
                buttons=[InlineButton("Authorize Strava", url)],
            )
        except DispatchError:
            logger.exception("Failed to send reauthorization prompt to %s", credential.notify_target)


__all__ = ["ActivityEventProcessor", "AuthorizationUrlBuilder", "Outcome"]
