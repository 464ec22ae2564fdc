"""Application layer for credential persistence."""

from .ports import CredentialStore, StorageError

__all__ = ["CredentialStore", "StorageError"]
