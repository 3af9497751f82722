"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from pos_app.core.config import get_settings, setup_logging, Settings, EnvironmentMode, StoreBackend
from pos_app.core.exceptions import PosError, ValidationError, NotFoundError, SyncError, RemoteNotFoundError

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "StoreBackend",
    "PosError",
    "ValidationError",
    "NotFoundError",
    "SyncError",
    "RemoteNotFoundError",
]
