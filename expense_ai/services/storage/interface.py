"""
Abstract Storage Interface

Persisted state is a handful of keyed blobs (the expense list and the
budget), each overwritten wholesale on save. The interface is therefore
a plain key-value store of JSON-serializable values:
1. JSON files on local disk for the application
2. In-memory storage for testing
3. Any other backend later without touching the ledger or analytics

Values handed to `write` must already be JSON-serializable
(e.g. `model.model_dump(mode="json")`).
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for keyed blob storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key (e.g. 'expenses')

        Returns:
            The decoded value, or None if the key has never been written

        Raises:
            StorageReadError: If the value exists but cannot be read or decoded
        """
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """
        Overwrite the value stored under a key.

        Args:
            key: Storage key
            value: JSON-serializable value

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    def exists(self, key: str) -> bool:
        return self.read(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class StorageReadError(StorageError):
    """Stored value could not be read or decoded."""
    pass


class StorageWriteError(StorageError):
    """Value could not be written; in-memory state is unaffected."""
    pass
