"""
JSON File Store with Concurrency Control

Keeps every key in one JSON document on disk. Writes are
read-modify-write under a FileLock and land atomically via a temporary
file and ``os.replace``.

Version: 1.0.0
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock, Timeout

from pos_app.core.exceptions import PosError
from pos_app.services.storage.base import BaseStore

logger = logging.getLogger(__name__)


class StoreLockTimeout(PosError):
    """The store file stayed locked longer than the configured timeout."""


class JsonFileStore(BaseStore):
    """File-backed key-value store."""

    def __init__(self, path: Path, lock_timeout: int = 30):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout

    @property
    def backend_name(self) -> str:
        return "json"

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise PosError(f"Corrupt store file {self.path}: expected a JSON object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        self._ensure_data_dir()

        try:
            with FileLock(str(self.lock_path), timeout=self.lock_timeout):
                logger.debug(f"Lock acquired for key '{key}'")
                data = self._read_all()
                data[key] = value
                self._write_all(data)
            logger.debug(f"Lock released for key '{key}'")
        except Timeout:
            logger.error(f"Lock timeout for key '{key}' ({self.lock_timeout}s)")
            raise StoreLockTimeout(f"Lock timeout ({self.lock_timeout}s) writing '{key}'")

    def clear(self) -> None:
        """Delete the store file and its lock."""
        for f in (self.path, self.lock_path):
            if f.exists():
                f.unlink()
        logger.info(f"Store file cleared: {self.path}")
