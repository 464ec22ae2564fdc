"""Upstash Redis implementation of the credential store."""

from __future__ import annotations

from typing import Callable, List, Optional, TypeVar

import httpx
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from upstash_redis.errors import UpstashError

from ...models.credential import Credential
from ...platform.clients import RedisClient
from ..application.ports import CredentialStore, StorageError

T = TypeVar("T")

ATHLETES_KEY = "strava_athletes"


def credential_key(athlete_id: int) -> str:
    return f"strava_credential:{athlete_id}"


def notify_target_key(notify_target: str) -> str:
    return f"strava_notify_target:{notify_target}"


class RedisCredentialStore(CredentialStore):
    """Keep one JSON document per athlete; each write replaces the whole value."""

    def __init__(self, redis: RedisClient) -> None:
        self._redis = redis

    async def upsert(self, credential: Credential) -> None:
        previous = await self.find_by_athlete_id(credential.athlete_id)
        athlete_id = str(credential.athlete_id)

        def _write() -> None:
            self._redis.set(credential_key(credential.athlete_id), credential.model_dump_json())
            self._redis.set(notify_target_key(credential.notify_target), athlete_id)
            self._redis.sadd(ATHLETES_KEY, athlete_id)
            if previous and previous.notify_target != credential.notify_target:
                stale_key = notify_target_key(previous.notify_target)
                if self._redis.get(stale_key) == athlete_id:
                    self._redis.delete(stale_key)

        await self._call(_write)

    async def find_by_athlete_id(self, athlete_id: int) -> Optional[Credential]:
        raw = await self._call(lambda: self._redis.get(credential_key(athlete_id)))
        if raw is None:
            return None
        try:
            return Credential.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageError(f"Corrupt credential stored for athlete {athlete_id}") from exc

    async def find_by_notify_target(self, notify_target: str) -> Optional[Credential]:
        athlete_id = await self._call(lambda: self._redis.get(notify_target_key(notify_target)))
        if athlete_id is None:
            return None
        return await self.find_by_athlete_id(int(athlete_id))

    async def list_credentials(self) -> List[Credential]:
        members = await self._call(lambda: self._redis.smembers(ATHLETES_KEY))
        credentials = []
        for athlete_id in sorted(int(member) for member in members):
            credential = await self.find_by_athlete_id(athlete_id)
            if credential is not None:
                credentials.append(credential)
        return credentials

    async def update_tokens(
        self,
        athlete_id: int,
        access_token: str,
        refresh_token: str,
        expires_at: int,
    ) -> None:
        current = await self.find_by_athlete_id(athlete_id)
        if current is None:
            raise StorageError(f"No credential stored for athlete {athlete_id}")
        refreshed = current.model_copy(
            update={
                "access_token": access_token,
                "refresh_token": refresh_token,
                "expires_at": expires_at,
            }
        )
        await self._call(
            lambda: self._redis.set(credential_key(athlete_id), refreshed.model_dump_json())
        )

    async def _call(self, operation: Callable[[], T]) -> T:
        # The Upstash client is synchronous; keep its round trips off the event loop.
        try:
            return await run_in_threadpool(operation)
        except (UpstashError, httpx.HTTPError, OSError) as exc:
            raise StorageError(str(exc)) from exc


__all__ = ["ATHLETES_KEY", "RedisCredentialStore", "credential_key", "notify_target_key"]
