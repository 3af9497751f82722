import asyncio
from decimal import Decimal

import pytest

from pos_app.core.exceptions import SyncError
from pos_app.schemas import OrderLineItem, OrderStatus, PaymentMethod, Variant
from pos_app.services.sync import (
    CloudSyncBridge,
    MockAuthService,
    MockRemoteOrderStore,
    SyncOutcome,
    get_sync_bridge,
)
from pos_app.services.sync.base import order_to_payload, payload_to_order


@pytest.fixture
def order(orders):
    return orders.finalize(
        [
            OrderLineItem(product_id="paella", name="Paella", price=Decimal("12.00"), quantity=1),
            OrderLineItem(product_id="paella", name="Paella", price=Decimal("7.00"), quantity=2, variant=Variant.HALF),
        ],
        PaymentMethod.CARD,
    )


class ExplodingRemote(MockRemoteOrderStore):
    """Raises a non-SyncError from every call."""

    async def find_by_order_id(self, order_id):
        raise RuntimeError("boom")


async def test_offline_sync_is_skipped(bridge, connectivity, remote, order):
    connectivity.set_online(False)
    assert await bridge.sync(order) == SyncOutcome.SKIPPED
    assert remote.calls == []


async def test_unauthenticated_sync_is_skipped(remote, connectivity, order):
    bridge = CloudSyncBridge(remote=remote, auth=MockAuthService(), connectivity=connectivity)
    assert await bridge.sync(order) == SyncOutcome.SKIPPED


async def test_remote_error_maps_to_failed(auth, connectivity, order):
    bridge = CloudSyncBridge(
        remote=MockRemoteOrderStore(failure_rate=1.0), auth=auth, connectivity=connectivity
    )
    assert await bridge.sync(order) == SyncOutcome.FAILED


async def test_unexpected_error_maps_to_failed(auth, connectivity, order):
    bridge = CloudSyncBridge(remote=ExplodingRemote(), auth=auth, connectivity=connectivity)
    assert await bridge.sync(order) == SyncOutcome.FAILED


async def test_sync_creates_then_updates(bridge, remote, orders, order):
    assert await bridge.sync(order) == SyncOutcome.SYNCED
    assert len(remote.records) == 1

    updated = orders.set_status(order.id, OrderStatus.CANCELLED)
    assert await bridge.sync(updated) == SyncOutcome.SYNCED
    assert await bridge.sync(updated) == SyncOutcome.SYNCED

    assert len(remote.records) == 1
    record = next(iter(remote.records.values()))
    assert record["order_id"] == order.id
    assert record["status"] == "cancelled"
    assert record["user"] == "user_1"
    assert remote.calls == ["find", "create", "find", "update", "find", "update"]


async def test_sync_all_tolerates_failures(auth, connectivity, orders):
    remote = MockRemoteOrderStore()
    bridge = CloudSyncBridge(remote=remote, auth=auth, connectivity=connectivity)
    line = OrderLineItem(product_id="agua", name="Agua", price=Decimal("1.80"), quantity=1)
    batch = [orders.finalize([line]) for _ in range(3)]

    original_create = remote.create
    calls = {"n": 0}

    async def flaky_create(payload):
        calls["n"] += 1
        if calls["n"] == 2:
            raise SyncError("timeout")
        return await original_create(payload)

    remote.create = flaky_create

    report = await bridge.sync_all(batch)

    assert list(report.outcomes) == [o.id for o in batch]
    assert report.outcomes[batch[1].id] == SyncOutcome.FAILED
    assert report.to_dict() == {"total": 3, "synced": 2, "failed": 1, "skipped": 0}


async def test_sync_all_offline_skips_everything(bridge, connectivity, order):
    connectivity.set_online(False)
    report = await bridge.sync_all([order])
    assert report.skipped == 1


async def test_schedule_runs_in_background(bridge, remote, order):
    task = bridge.schedule(order)
    assert task is not None
    await bridge.wait_idle()
    assert task.result() == SyncOutcome.SYNCED
    assert len(remote.records) == 1


def test_schedule_without_loop_is_deferred(bridge, order):
    assert bridge.schedule(order) is None


async def test_pull_orders_round_trip(bridge, order):
    await bridge.sync(order)
    pulled = await bridge.pull_orders()

    assert len(pulled) == 1
    assert pulled[0].id == order.id
    assert pulled[0].total == order.total
    assert pulled[0].items == order.items
    assert pulled[0].payment_method == PaymentMethod.CARD


async def test_pull_orders_offline_is_empty(bridge, connectivity, order):
    await bridge.sync(order)
    connectivity.set_online(False)
    assert await bridge.pull_orders() == []


def test_payload_mapping(order):
    payload = order_to_payload(order, "user_1")
    assert payload["order_id"] == order.id
    assert payload["total"] == 26.0
    assert isinstance(payload["items"], str)
    assert payload_to_order(payload).order_number == order.order_number


async def test_connectivity_listeners_fire_on_transitions(connectivity):
    seen = []
    unsubscribe = connectivity.subscribe(seen.append)
    connectivity.set_online(True)   # no change
    connectivity.set_online(False)
    connectivity.set_online(True)
    unsubscribe()
    connectivity.set_online(False)
    assert seen == [False, True]


async def test_mock_auth_login_and_listeners():
    auth = MockAuthService()
    states = []
    auth.on_change(states.append)

    user = await auth.login("google")
    assert auth.is_authenticated()
    assert auth.current_user() == user
    auth.logout()
    assert states == [True, False]

    auth.reject_logins = True
    with pytest.raises(SyncError):
        await auth.login("google")


def test_factory_uses_mocks_in_development():
    bridge = get_sync_bridge()
    assert bridge.remote.provider_name == "mock"
    assert get_sync_bridge() is bridge


def test_factory_requires_url_outside_development(monkeypatch):
    from pos_app.core.config import get_settings

    monkeypatch.setenv("ENV_MODE", "production")
    monkeypatch.delenv("POCKETBASE_URL", raising=False)
    get_settings.cache_clear()

    with pytest.raises(ValueError):
        get_sync_bridge()
