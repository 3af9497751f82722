"""
Cloud Sync Bridge

Best-effort mirroring of confirmed orders to the remote store. The local
store is always authoritative: sync runs after local persistence, never
raises to its caller and never undoes a local save.

Upsert is idempotent on the order's local id, so repeated triggers (every
reconnect re-syncs the whole history) are safe. There is no pending-sync
queue; a failed order is retried on the next trigger.

Version: 1.0.0
"""

import asyncio
import logging
from typing import Iterable, Optional

from pos_app.core.exceptions import RemoteNotFoundError, SyncError
from pos_app.schemas import ConfirmedOrder
from pos_app.services.sync.base import (
    BaseAuthService,
    BaseConnectivityMonitor,
    BaseRemoteOrderStore,
    SyncOutcome,
    SyncReport,
    order_to_payload,
    payload_to_order,
)

logger = logging.getLogger(__name__)


class CloudSyncBridge:
    """
    Mirrors ConfirmedOrder snapshots into a remote store.

    Example:
        >>> bridge = get_sync_bridge()
        >>> outcome = await bridge.sync(order)
        >>> outcome
        <SyncOutcome.SKIPPED: 'skipped'>  # offline or logged out
    """

    def __init__(
        self,
        remote: BaseRemoteOrderStore,
        auth: BaseAuthService,
        connectivity: BaseConnectivityMonitor,
    ):
        self.remote = remote
        self.auth = auth
        self.connectivity = connectivity
        self._tasks: set[asyncio.Task] = set()

    @property
    def can_sync(self) -> bool:
        return self.connectivity.is_online() and self.auth.is_authenticated()

    # =========================================================================
    # SYNC
    # =========================================================================

    async def sync(self, order: ConfirmedOrder) -> SyncOutcome:
        """
        Upsert ``order`` into the remote store.

        Returns:
            SKIPPED when offline or not authenticated, SYNCED on success,
            FAILED on any remote error
        """
        if not self.can_sync:
            logger.debug(f"Sync skipped for order #{order.order_number}: offline or not authenticated")
            return SyncOutcome.SKIPPED

        user = self.auth.current_user()
        payload = order_to_payload(order, user.id if user else None)

        try:
            try:
                existing = await self.remote.find_by_order_id(order.id)
            except RemoteNotFoundError:
                existing = None

            if existing is not None:
                record = await self.remote.update(existing.id, payload)
                logger.info(f"Order #{order.order_number} updated remotely ({record.id})")
            else:
                record = await self.remote.create(payload)
                logger.info(f"Order #{order.order_number} created remotely ({record.id})")

            return SyncOutcome.SYNCED

        except SyncError as e:
            logger.warning(f"Sync failed for order #{order.order_number}: {e}")
            return SyncOutcome.FAILED

        except Exception:
            logger.exception(f"Unexpected error syncing order #{order.order_number}")
            return SyncOutcome.FAILED

    async def sync_all(self, orders: Iterable[ConfirmedOrder]) -> SyncReport:
        """
        Sync ``orders`` one after another.

        Individual failures do not abort the batch.
        """
        orders = list(orders)
        report = SyncReport()

        if not self.can_sync:
            logger.info("Bulk sync skipped: offline or not authenticated")
            for order in orders:
                report.outcomes[order.id] = SyncOutcome.SKIPPED
            return report

        logger.info(f"Starting sync of {len(orders)} orders...")
        for order in orders:
            report.outcomes[order.id] = await self.sync(order)

        logger.info(
            f"Sync complete: {report.synced} synced, "
            f"{report.failed} failed, {report.skipped} skipped"
        )
        return report

    async def pull_orders(self) -> list[ConfirmedOrder]:
        """
        Fetch the current user's orders from the remote store.

        Returns an empty list when offline, logged out, or on failure.
        """
        user = self.auth.current_user()
        if not self.can_sync or user is None:
            return []

        try:
            records = await self.remote.list_for_user(user.id)
        except SyncError as e:
            logger.warning(f"Could not fetch remote orders: {e}")
            return []

        orders = []
        for record in records:
            try:
                orders.append(payload_to_order(record.data))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed remote record {record.id}: {e}")
        return orders

    # =========================================================================
    # FIRE-AND-FORGET
    # =========================================================================

    def _spawn(self, coro) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.debug("No running event loop; sync deferred to next trigger")
            return None

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def schedule(self, order: ConfirmedOrder) -> Optional[asyncio.Task]:
        """Start ``sync(order)`` in the background on the running loop."""
        return self._spawn(self.sync(order))

    def schedule_all(self, orders: Iterable[ConfirmedOrder]) -> Optional[asyncio.Task]:
        """Start ``sync_all(orders)`` in the background on the running loop."""
        return self._spawn(self.sync_all(list(orders)))

    async def wait_idle(self) -> None:
        """Wait for every scheduled sync to finish."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
