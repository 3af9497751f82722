"""
Store Factory

Provides a single entry point for obtaining the local persistence store.
The rest of the application only sees ``BaseStore.get``/``set`` and stays
agnostic about which backend is active.

Usage:
    from pos_app.services.storage import get_store

    store = get_store()
    orders = store.get("confirmed_orders") or []

Backend Switching:
    - STORE_BACKEND=memory → MemoryStore (lost on exit)
    - STORE_BACKEND=json   → JsonFileStore (data/pos_store.json)
    - STORE_BACKEND=sql    → SqlStore (DATABASE_URL)

Version: 1.0.0
"""

import logging
from functools import lru_cache
from pathlib import Path

from pos_app.core.config import StoreBackend, get_settings
from pos_app.services.storage.base import BaseStore
from pos_app.services.storage.json_file import JsonFileStore, StoreLockTimeout
from pos_app.services.storage.memory import MemoryStore
from pos_app.services.storage.sql import SqlStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_store() -> BaseStore:
    """
    Get the configured store instance.

    The instance is cached so every component of a session reads and
    writes the same backend.

    Returns:
        BaseStore: Configured store
    """
    settings = get_settings()

    if settings.store_backend == StoreBackend.MEMORY:
        logger.info("Store: Using MemoryStore")
        return MemoryStore()

    if settings.store_backend == StoreBackend.SQL:
        logger.info("Store: Using SqlStore")
        return SqlStore(settings.database_url)

    path = Path(settings.data_directory) / settings.store_filename
    logger.info(f"Store: Using JsonFileStore ({path})")
    return JsonFileStore(path, lock_timeout=settings.store_lock_timeout)


def reset_store() -> None:
    """
    Clear the cached store instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_store.cache_clear()
    logger.debug("Store cache cleared")


__all__ = [
    "get_store",
    "reset_store",
    "BaseStore",
    "MemoryStore",
    "JsonFileStore",
    "SqlStore",
    "StoreLockTimeout",
]
