"""
Local Persistence Store Abstract Base Class

Narrow key-value contract shared by every storage backend. Values are
JSON-serializable documents; there are no transactions across keys and
callers may only rely on read-after-write consistency within a session.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseStore(ABC):
    """
    Abstract base class for key-value stores.

    Example:
        >>> store = get_store()
        >>> store.set("confirmed_orders", [])
        >>> store.get("confirmed_orders")
        []
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend name (e.g., "memory", "json", "sql")."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the document stored under ``key``.

        Returns:
            The decoded JSON value, or None when the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Replace the document stored under ``key``.

        Args:
            key: Store key
            value: JSON-serializable value
        """
        pass
