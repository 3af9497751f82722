"""
SQL-backed key-value store (SQLite by default, any SQLAlchemy URL works).
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy.engine import Engine

from pos_app.database import create_session_factory, create_store_engine, init_db
from pos_app.models import StoreEntry
from pos_app.services.storage.base import BaseStore

logger = logging.getLogger(__name__)


class SqlStore(BaseStore):
    """One ``store_entries`` row per key, value kept as JSON text."""

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        self.engine = engine or create_store_engine(database_url)
        init_db(self.engine)
        self._session_factory = create_session_factory(self.engine)

    @property
    def backend_name(self) -> str:
        return "sql"

    def get(self, key: str) -> Optional[Any]:
        with self._session_factory() as session:
            entry = session.get(StoreEntry, key)
            if entry is None:
                return None
            return json.loads(entry.value)

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._session_factory() as session:
            with session.begin():
                entry = session.get(StoreEntry, key)
                if entry is None:
                    session.add(StoreEntry(key=key, value=payload))
                else:
                    entry.value = payload
        logger.debug(f"Stored key '{key}' ({len(payload)} bytes)")

    def dispose(self) -> None:
        self.engine.dispose()
