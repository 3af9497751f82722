from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from pos_app.core.config import get_settings
from pos_app.schemas import PortionType, Product
from pos_app.services.catalog import CatalogRepository
from pos_app.services.orders import OrderLifecycleManager
from pos_app.services.storage import MemoryStore, reset_store
from pos_app.services.sync import (
    CloudSyncBridge,
    MockAuthService,
    MockConnectivityMonitor,
    MockRemoteOrderStore,
    reset_sync_bridge,
)
from pos_app.services.sync.base import AuthUser

MADRID = ZoneInfo("Europe/Madrid")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Fresh settings per test: development mode, memory store, temp data dir."""
    monkeypatch.setenv("ENV_MODE", "development")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path / "data"))
    monkeypatch.setenv("REPORTING_TIMEZONE", "Europe/Madrid")
    get_settings.cache_clear()
    reset_store()
    reset_sync_bridge()
    yield
    get_settings.cache_clear()
    reset_store()
    reset_sync_bridge()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def catalog(store):
    return CatalogRepository(store)


@pytest.fixture
def paella():
    return Product(
        id="paella",
        name="Paella",
        price=Decimal("12.00"),
        category="arroces",
        portion_type=PortionType.RATION,
        half_price=Decimal("7.00"),
    )


@pytest.fixture
def bravas_no_half():
    return Product(
        id="bravas",
        name="Patatas Bravas",
        price=Decimal("6.00"),
        category="entrantes",
        portion_type=PortionType.RATION,
    )


@pytest.fixture
def croqueta():
    return Product(id="croqueta", name="Croqueta", price=Decimal("1.50"), category="entrantes")


class FixedClock:
    """Returns a settable timestamp; advances nothing on its own."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 14, 13, 30, tzinfo=MADRID))


@pytest.fixture
def orders(store, clock):
    return OrderLifecycleManager(store, clock=clock)


@pytest.fixture
def connectivity():
    return MockConnectivityMonitor(online=True)


@pytest.fixture
def auth():
    return MockAuthService(user=AuthUser(id="user_1", email="staff@example.com"))


@pytest.fixture
def remote():
    return MockRemoteOrderStore()


@pytest.fixture
def bridge(remote, auth, connectivity):
    return CloudSyncBridge(remote=remote, auth=auth, connectivity=connectivity)
