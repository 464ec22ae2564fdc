from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from ...credentials.application.ports import CredentialStore, StorageError
from ...models.credential import Credential
from .ports import StravaClientPort

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TokenRefresher:
    """Keep stored Strava credentials usable, refreshing them when expired.

    Refreshes are single-flight per athlete: Strava invalidates the previous
    refresh token on every exchange, so concurrent callers for the same athlete
    wait on the exchange already in progress instead of issuing their own.
    """

    def __init__(
        self,
        client: StravaClientPort,
        store: CredentialStore,
        clock: Clock = time.time,
    ) -> None:
        self._client = client
        self._store = store
        self._clock = clock
        self._in_flight: dict[int, asyncio.Task[Credential]] = {}

    async def ensure_fresh(self, credential: Credential) -> Credential:
        if not credential.is_expired(self._clock()):
            return credential

        task = self._in_flight.get(credential.athlete_id)
        if task is None:
            task = asyncio.ensure_future(self._refresh(credential))
            self._in_flight[credential.athlete_id] = task
            task.add_done_callback(
                lambda done: self._forget(credential.athlete_id, done)
            )
        else:
            logger.debug("Joining in-flight token refresh for athlete %s", credential.athlete_id)
        return await asyncio.shield(task)

    def _forget(self, athlete_id: int, task: asyncio.Task[Credential]) -> None:
        if self._in_flight.get(athlete_id) is task:
            del self._in_flight[athlete_id]

    async def _refresh(self, credential: Credential) -> Credential:
        # Another refresh may have committed since the caller read its copy; the
        # refresh token in that copy is then already spent.
        stored = await self._store.find_by_athlete_id(credential.athlete_id)
        if stored is None:
            raise StorageError(f"No credential stored for athlete {credential.athlete_id}")
        if stored.refresh_token != credential.refresh_token or not stored.is_expired(
            self._clock()
        ):
            logger.debug("Using tokens already refreshed for athlete %s", stored.athlete_id)
            return stored

        grant = await self._client.refresh_token(stored.refresh_token)
        await self._store.update_tokens(
            stored.athlete_id,
            grant.access_token,
            grant.refresh_token,
            grant.expires_at,
        )
        logger.info(
            "Refreshed Strava tokens for athlete %s (expires at %s)",
            stored.athlete_id,
            grant.expires_at,
        )
        return stored.model_copy(
            update={
                "access_token": grant.access_token,
                "refresh_token": grant.refresh_token,
                "expires_at": grant.expires_at,
            }
        )


__all__ = ["Clock", "TokenRefresher"]
