"""
Database Connection Module
Handles the SQLAlchemy engine used by the SQL key-value store backend.
"""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from pos_app.core.config import get_settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


def create_store_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create an engine for ``database_url`` (defaults to settings).

    SQLite parent directories are created on demand.
    """
    url = database_url or get_settings().database_url

    if url.startswith("sqlite:///") and not url.startswith("sqlite:///:memory:"):
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        url,
        echo=False,
        future=True,
    )
    logger.debug(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Session factory bound to ``engine``.
    Objects remain accessible after commit.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables in the database."""
    # Register models on Base.metadata
    from pos_app import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("✅ Store tables ready")
