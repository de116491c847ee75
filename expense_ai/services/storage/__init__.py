"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
JSON files on disk back the application; the in-memory store backs tests.
"""

from expense_ai.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from expense_ai.services.storage.json_file import JsonFileStorage
from expense_ai.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
