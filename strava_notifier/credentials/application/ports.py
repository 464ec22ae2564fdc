"""Ports for persisting Strava credentials."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ...models.credential import Credential


class StorageError(RuntimeError):
    """Raised when the credential store is unavailable or rejects a write."""


class CredentialStore(ABC):
    """Interface describing credential persistence operations."""

    async def initialize(self) -> None:
        """Provision the backing storage if it does not exist yet."""

    @abstractmethod
    async def upsert(self, credential: Credential) -> None:
        """Insert or fully replace the credential for ``credential.athlete_id``."""

    @abstractmethod
    async def find_by_athlete_id(self, athlete_id: int) -> Optional[Credential]:
        """Return the stored credential, or ``None`` for unknown athletes."""

    @abstractmethod
    async def find_by_notify_target(self, notify_target: str) -> Optional[Credential]:
        """Return the credential currently bound to ``notify_target``."""

    @abstractmethod
    async def list_credentials(self) -> List[Credential]:
        """Return every stored credential ordered by athlete id."""

    @abstractmethod
    async def update_tokens(
        self,
        athlete_id: int,
        access_token: str,
        refresh_token: str,
        expires_at: int,
    ) -> None:
        """Replace token fields only; raise ``StorageError`` when the row is gone."""


__all__ = ["CredentialStore", "StorageError"]
