"""Infrastructure adapters for credential persistence."""

from __future__ import annotations

from ...platform.clients import create_redis_client
from ...settings import Settings
from ..application.ports import CredentialStore
from .redis_store import RedisCredentialStore
from .sql_store import SqlCredentialStore, create_credentials_engine


def create_credential_store(settings: Settings) -> CredentialStore:
    """Create the credential store selected by ``settings.credential_backend``."""

    if settings.credential_backend == "redis":
        return RedisCredentialStore(create_redis_client(settings))
    return SqlCredentialStore(create_credentials_engine(settings.database_url))


__all__ = [
    "RedisCredentialStore",
    "SqlCredentialStore",
    "create_credential_store",
    "create_credentials_engine",
]
