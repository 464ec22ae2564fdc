"""Credential persistence package."""

from .application import CredentialStore, StorageError

__all__ = ["CredentialStore", "StorageError"]
