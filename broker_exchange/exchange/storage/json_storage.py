"""
JSON Document Store
Whole-document load/save/append keyed by name, one file per key
"""

import asyncio
import json
import logging
import os
import tempfile
from typing import Any, Optional

from ..errors import StorageError

logger = logging.getLogger(__name__)


class JsonStorage:
    """Stores each document as <storage_path>/<key>.json"""

    def __init__(self, storage_path: str):
        self.storage_path = os.path.abspath(storage_path)
        os.makedirs(self.storage_path, exist_ok=True)
        logger.info(f"JSON storage initialized at {self.storage_path}")

    def _path_for(self, key: str) -> str:
        if not key or os.sep in key or (os.altsep and os.altsep in key) or key.startswith('.'):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.storage_path, f"{key}.json")

    def _read(self, path: str) -> Any:
        with open(path, 'r', encoding='utf-8') as fh:
            return json.load(fh)

    def _write(self, path: str, document: Any):
        payload = json.dumps(document, indent=2)
        fd, tmp_path = tempfile.mkstemp(dir=self.storage_path, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(payload)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _load_sync(self, key: str) -> Any:
        path = self._path_for(key)
        try:
            return self._read(path)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to load data from {key}: {e}") from e

    def _save_sync(self, key: str, document: Any):
        path = self._path_for(key)
        try:
            self._write(path, document)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save data to {key}: {e}") from e

    def _append_sync(self, key: str, item: Any):
        path = self._path_for(key)
        try:
            try:
                existing = self._read(path)
            except FileNotFoundError:
                existing = []
            if not isinstance(existing, list):
                existing = []
            existing.append(item)
            self._write(path, existing)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to append data to {key}: {e}") from e

    async def load(self, key: str) -> Optional[Any]:
        """Load a document, or None if the key was never saved."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._load_sync, key)

    async def save(self, key: str, document: Any):
        """Overwrite the whole document."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._save_sync, key, document)

    async def append(self, key: str, item: Any):
        """Append an item to an array document."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._append_sync, key, item)
