"""
JSON File Storage Implementation

Each key is stored as `<data_dir>/<key>.json`. Writes go to a temporary
file in the same directory and are moved into place with os.replace, so
a reader never sees a half-written blob.

Transient OSErrors (e.g. a file briefly locked by a sync client) are
retried a few times with a short backoff before being surfaced as
StorageWriteError.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_ai.config import get_settings
from expense_ai.services.storage.interface import (
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class JsonFileStorage(KeyValueStorageInterface):
    """Key-value storage backed by one JSON file per key."""

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = Path(data_dir) if data_dir is not None else get_settings().storage.data_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            logger.debug("storage_key_missing", key=key, path=str(path))
            return None

        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as e:
            logger.error("storage_decode_failed", key=key, path=str(path), error=str(e))
            raise StorageReadError(key, f"Stored data for '{key}' is not valid JSON: {e}") from e
        except OSError as e:
            logger.error("storage_read_failed", key=key, path=str(path), error=str(e))
            raise StorageReadError(key, f"Could not read '{key}': {e}") from e

    def write(self, key: str, value: Any) -> None:
        path = self._path_for(key)

        try:
            text = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(key, f"Value for '{key}' is not JSON-serializable: {e}") from e

        try:
            self._write_atomic(path, text)
        except OSError as e:
            logger.error("storage_write_failed", key=key, path=str(path), error=str(e))
            raise StorageWriteError(key, f"Could not write '{key}': {e}") from e

        logger.debug("storage_key_written", key=key, path=str(path), size=len(text))

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError(key, f"Could not delete '{key}': {e}") from e
        return True

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
