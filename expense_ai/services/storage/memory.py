"""In-memory key-value storage, used by tests and ephemeral sessions."""

import json
from typing import Any, Optional

from expense_ai.services.storage.interface import (
    KeyValueStorageInterface,
    StorageWriteError,
)


class InMemoryStorage(KeyValueStorageInterface):
    """
    Keeps each value as serialized JSON text.

    Values go through the same JSON round trip as on disk, so anything
    that would fail to persist to a file fails here too.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._blobs: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.write(key, value)

    def read(self, key: str) -> Optional[Any]:
        blob = self._blobs.get(key)
        if blob is None:
            return None
        return json.loads(blob)

    def write(self, key: str, value: Any) -> None:
        try:
            self._blobs[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(key, f"Value for '{key}' is not JSON-serializable: {e}") from e

    def delete(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None

    @property
    def keys(self) -> list[str]:
        return list(self._blobs)
