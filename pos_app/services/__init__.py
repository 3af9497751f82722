"""
                        Services Module

Business logic of the terminal. External collaborators follow the hybrid
pattern: each has a Mock (development) and a Real (production)
implementation behind a cached factory.

Services:
    - storage: local key-value persistence (memory / JSON file / SQL)
    - catalog: products and categories
    - pricing: full/half portion prices
    - cart: in-memory order builder
    - orders: confirmed-order lifecycle
    - sequencer: admin display ordering
    - reports: daily sales summary and Excel export
    - sync: best-effort PocketBase mirror
"""

from pos_app.services.cart import Cart
from pos_app.services.catalog import CatalogRepository
from pos_app.services.orders import OrderLifecycleManager
from pos_app.services.sequencer import DisplayOrderSequencer

__all__ = ["Cart", "CatalogRepository", "OrderLifecycleManager", "DisplayOrderSequencer"]
