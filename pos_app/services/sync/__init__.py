"""
Cloud Sync Factory

Provides a single entry point for obtaining the sync bridge. The factory
picks the collaborators (remote store, auth, connectivity) from ENV_MODE:

    - ENV_MODE=development → Mock collaborators (no server needed)
    - ENV_MODE=staging     → PocketBase collaborators
    - ENV_MODE=production  → PocketBase collaborators

Usage:
    from pos_app.services.sync import get_sync_bridge

    bridge = get_sync_bridge()
    outcome = await bridge.sync(order)

Version: 1.0.0
"""

import logging
from functools import lru_cache

from pos_app.core.config import get_settings
from pos_app.services.sync.base import (
    AuthUser,
    BaseAuthService,
    BaseConnectivityMonitor,
    BaseRemoteOrderStore,
    RemoteRecord,
    SyncOutcome,
    SyncReport,
)
from pos_app.services.sync.bridge import CloudSyncBridge
from pos_app.services.sync.mock import MockAuthService, MockConnectivityMonitor, MockRemoteOrderStore
from pos_app.services.sync.pocketbase import (
    HttpConnectivityMonitor,
    PocketBaseAuthService,
    PocketBaseClient,
    PocketBaseOrderStore,
)

logger = logging.getLogger(__name__)


@lru_cache()
def get_sync_bridge() -> CloudSyncBridge:
    """
    Get the configured sync bridge.

    Returns:
        CloudSyncBridge: Bridge wired to mock or PocketBase collaborators

    Raises:
        ValueError: If not in development mode and POCKETBASE_URL is missing
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Sync: Using mock collaborators (development mode)")
        return CloudSyncBridge(
            remote=MockRemoteOrderStore(failure_rate=0.05, min_latency=0.05, max_latency=0.2),
            auth=MockAuthService(),
            connectivity=MockConnectivityMonitor(online=True),
        )

    logger.info(f"Sync: Using PocketBase collaborators ({settings.env_mode.value} mode)")
    client = PocketBaseClient()
    return CloudSyncBridge(
        remote=PocketBaseOrderStore(client),
        auth=PocketBaseAuthService(client),
        connectivity=HttpConnectivityMonitor(client),
    )


def reset_sync_bridge() -> None:
    """
    Clear the cached bridge instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_sync_bridge.cache_clear()
    logger.debug("Sync bridge cache cleared")


__all__ = [
    "get_sync_bridge",
    "reset_sync_bridge",
    "CloudSyncBridge",
    "SyncOutcome",
    "SyncReport",
    "RemoteRecord",
    "AuthUser",
    "BaseRemoteOrderStore",
    "BaseAuthService",
    "BaseConnectivityMonitor",
    "MockRemoteOrderStore",
    "MockAuthService",
    "MockConnectivityMonitor",
    "PocketBaseClient",
    "PocketBaseOrderStore",
    "PocketBaseAuthService",
    "HttpConnectivityMonitor",
]
