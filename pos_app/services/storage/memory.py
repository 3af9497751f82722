"""
In-memory store used by tests and throwaway sessions.
"""

import copy
import json
from typing import Any, Optional

from pos_app.services.storage.base import BaseStore


class MemoryStore(BaseStore):
    """
    Dict-backed store.

    Values are round-tripped through ``json`` on write so that anything a
    file or SQL backend would reject is rejected here too.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    @property
    def backend_name(self) -> str:
        return "memory"

    def get(self, key: str) -> Optional[Any]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.loads(json.dumps(value))

    def keys(self) -> list[str]:
        return list(self._data)
