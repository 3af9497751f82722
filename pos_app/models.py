"""
SQLAlchemy Database Models

The SQL backend stores each key of the local key-value store as one row
holding a JSON document.

Version: 1.0.0
"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from pos_app.database import Base


class StoreEntry(Base):
    """One key of the local persistence store (products, categories, orders)."""
    __tablename__ = "store_entries"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)  # JSON document

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<StoreEntry {self.key}>"
