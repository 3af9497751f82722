"""
POS Terminal

Wires catalog, cart, order lifecycle, display ordering and cloud sync for
one terminal session. This is the surface a UI layer talks to.

Data flow:
    add_to_order → Cart
    confirm_order → OrderLifecycleManager → local store → sync (background)
    connectivity restored / login → sync of the whole local history

Version: 1.0.0
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from pos_app.core.dates import reporting_now, today_in_reporting_tz
from pos_app.core.exceptions import SyncError, ValidationError
from pos_app.schemas import (
    ConfirmedOrder,
    DailySalesSummary,
    OrderLineItem,
    PaymentMethod,
    Variant,
)
from pos_app.services.cart import Cart
from pos_app.services.catalog import CatalogRepository
from pos_app.services.orders import OrderLifecycleManager
from pos_app.services.reports import daily_summary
from pos_app.services.sequencer import DisplayOrderSequencer
from pos_app.services.storage import BaseStore, get_store
from pos_app.services.sync import CloudSyncBridge, get_sync_bridge
from pos_app.services.sync.base import AuthUser

logger = logging.getLogger(__name__)


class PosTerminal:
    """
    Single-session point of sale.

    Args:
        store: Local persistence store (defaults to the configured one)
        bridge: Sync bridge (defaults to the configured one)
        clock: Confirmation timestamp source
    """

    def __init__(
        self,
        store: Optional[BaseStore] = None,
        bridge: Optional[CloudSyncBridge] = None,
        clock: Callable[[], datetime] = reporting_now,
    ):
        self.store = store if store is not None else get_store()
        self.catalog = CatalogRepository(self.store)
        self.sequencer = DisplayOrderSequencer(self.catalog)
        self.orders = OrderLifecycleManager(self.store, clock=clock)
        self.cart = Cart()
        self.sync = bridge if bridge is not None else get_sync_bridge()

        self._unsubscribers = [
            self.orders.on_change(self.sync.schedule),
            self.sync.connectivity.subscribe(self._on_connectivity_change),
        ]

        logger.info(
            f"Terminal ready: store={self.store.backend_name}, "
            f"remote={self.sync.remote.provider_name}, "
            f"{len(self.orders.list_orders())} orders in history"
        )

    # =========================================================================
    # CART
    # =========================================================================

    def add_to_order(self, product_id: str, variant: Variant = Variant.FULL) -> list[OrderLineItem]:
        """Add one unit of a catalog product to the cart."""
        product = self.catalog.get_product(product_id)
        return self.cart.add_item(product, variant)

    def update_quantity(self, product_id: str, quantity: int, variant: Variant = Variant.FULL) -> list[OrderLineItem]:
        return self.cart.set_quantity(product_id, variant, quantity)

    def adjust_price(self, product_id: str, price: Decimal, variant: Variant = Variant.FULL) -> list[OrderLineItem]:
        return self.cart.set_price(product_id, variant, price)

    # =========================================================================
    # ORDERS
    # =========================================================================

    def confirm_order(
        self,
        payment_method: Optional[PaymentMethod] = None,
        items: Optional[Iterable[OrderLineItem]] = None,
    ) -> ConfirmedOrder:
        """
        Finalize the cart (or an edited copy of its lines) into an order.

        The cart is cleared only once the order is persisted. Cloud sync
        is scheduled in the background.

        Raises:
            ValidationError: nothing to confirm
        """
        lines = list(items) if items is not None else self.cart.snapshot()
        if not lines:
            raise ValidationError("Cart is empty")

        order = self.orders.finalize(lines, payment_method)
        self.cart.clear()
        return order

    def sales_summary(self, day: Optional[date] = None) -> DailySalesSummary:
        """Sales for ``day`` (default: today in the reporting timezone)."""
        self.orders.reload()
        return daily_summary(self.orders.list_orders(), day or today_in_reporting_tz())

    # =========================================================================
    # SYNC
    # =========================================================================

    def _on_connectivity_change(self, online: bool) -> None:
        if online:
            logger.info("Connection restored, re-syncing local orders")
            self.sync.schedule_all(self.orders.reload())
        else:
            logger.warning("Offline: orders are saved locally only")

    async def refresh_connectivity(self) -> bool:
        """
        Probe the sync backend and update the connectivity state.

        An offline → online transition triggers the full re-sync through
        the connectivity listener. Call on start-up and periodically.
        """
        return await self.sync.connectivity.check()

    async def login(self, provider: str = "google", **credentials: Any) -> AuthUser:
        """
        Log in to the sync backend, then re-sync the local history.

        Connectivity is probed first. The re-sync is attempted whether or
        not login succeeds.

        Raises:
            SyncError: offline, or login rejected
        """
        if not await self.refresh_connectivity():
            raise SyncError("No internet connection")

        try:
            return await self.sync.auth.login(provider, **credentials)
        finally:
            self.sync.schedule_all(self.orders.list_orders())

    def logout(self) -> None:
        self.sync.auth.logout()

    async def pull_remote_orders(self) -> list[ConfirmedOrder]:
        await self.refresh_connectivity()
        return await self.sync.pull_orders()

    def close(self) -> None:
        """Detach listeners registered by this terminal."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
