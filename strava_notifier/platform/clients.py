from __future__ import annotations

from typing import List, Optional, Protocol

from upstash_redis import Redis

from ..settings import Settings


class RedisClient(Protocol):
    """Minimal Redis client interface used by the application."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ex: int | None = None) -> None:
        ...

    def delete(self, *keys: str) -> int:
        ...

    def sadd(self, key: str, *members: str) -> int:
        ...

    def smembers(self, key: str) -> List[str]:
        ...


def create_redis_client(settings: Settings) -> RedisClient:
    """Build the Upstash REST client configured for this deployment."""

    if not settings.upstash_redis_rest_url or not settings.upstash_redis_rest_token:
        raise ValueError(
            "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN are required "
            "for the redis credential backend"
        )
    return Redis(
        url=settings.upstash_redis_rest_url,
        token=settings.upstash_redis_rest_token,
    )


__all__ = ["RedisClient", "create_redis_client"]
