"""
Order Lifecycle Manager

Turns cart snapshots into confirmed orders and handles everything that
happens to them afterwards: item edits, status changes and deletion.

Lifecycle:
    (none) ──finalize──▶ in_progress | completed | cancelled
    Status moves freely among the three; items/total are edited
    independently of status.

Order numbers are ``max(existing) + 1`` (1 on an empty history). Deleting
the newest order frees its number for the next confirmation.

All mutations are read-modify-write on the ``confirmed_orders`` key of the
local store; the store is authoritative and ``reload()`` re-reads it.

Version: 1.0.0
"""

import logging
import uuid
from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from pos_app.core.dates import reporting_day, reporting_now
from pos_app.core.exceptions import NotFoundError, ValidationError
from pos_app.schemas import (
    ConfirmedOrder,
    OrderLineItem,
    OrderStatus,
    PaymentMethod,
    order_total,
)
from pos_app.services.storage.base import BaseStore

logger = logging.getLogger(__name__)

ORDERS_KEY = "confirmed_orders"

LineInput = Union[OrderLineItem, dict[str, Any]]
OrderListener = Callable[[ConfirmedOrder], None]


def normalize_items(items: Iterable[LineInput]) -> list[OrderLineItem]:
    """
    Validate and copy order lines.

    Raises:
        ValidationError: empty list, invalid line data, or two lines with
            the same (product id, variant)
    """
    try:
        lines = [
            OrderLineItem.model_validate(item.model_dump() if isinstance(item, OrderLineItem) else item)
            for item in items
        ]
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid order line: {e.errors()[0]['msg']}") from e

    if not lines:
        raise ValidationError("An order must contain at least one line")

    seen: set[tuple] = set()
    for line in lines:
        if line.key in seen:
            raise ValidationError(
                f"Duplicate line for product '{line.product_id}' ({line.variant.value})"
            )
        seen.add(line.key)

    return lines


class OrderLifecycleManager:
    """
    Confirmed-order history backed by a key-value store.

    Args:
        store: Local persistence store
        clock: Returns the confirmation timestamp (reporting timezone)
    """

    def __init__(
        self,
        store: BaseStore,
        clock: Callable[[], datetime] = reporting_now,
    ):
        self.store = store
        self.clock = clock
        self._orders: list[ConfirmedOrder] = []
        self._listeners: list[OrderListener] = []
        self.reload()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _read(self) -> list[ConfirmedOrder]:
        raw = self.store.get(ORDERS_KEY) or []
        return [ConfirmedOrder.model_validate(entry) for entry in raw]

    def _write(self, orders: list[ConfirmedOrder]) -> None:
        self.store.set(ORDERS_KEY, [order.model_dump(mode="json") for order in orders])
        self._orders = orders

    def _notify(self, order: ConfirmedOrder) -> None:
        for listener in list(self._listeners):
            listener(order)

    def _replace(self, order_id: str, update: Callable[[ConfirmedOrder], ConfirmedOrder]) -> ConfirmedOrder:
        orders = self._read()
        for index, order in enumerate(orders):
            if order.id == order_id:
                orders[index] = update(order)
                self._write(orders)
                return orders[index]
        raise NotFoundError("Order", order_id)

    def reload(self) -> list[ConfirmedOrder]:
        """Re-read the order history from the store."""
        self._orders = self._read()
        return self.list_orders()

    def on_change(self, listener: OrderListener) -> Callable[[], None]:
        """
        Register ``listener`` to receive every order after it is persisted.

        Returns:
            Callable that unregisters the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # =========================================================================
    # READS
    # =========================================================================

    def list_orders(self) -> list[ConfirmedOrder]:
        """Orders newest first."""
        return list(self._orders)

    def get(self, order_id: str) -> ConfirmedOrder:
        for order in self._read():
            if order.id == order_id:
                return order
        raise NotFoundError("Order", order_id)

    def next_order_number(self) -> int:
        orders = self._read()
        if not orders:
            return 1
        return max(order.order_number for order in orders) + 1

    def orders_for_day(self, day: date) -> list[ConfirmedOrder]:
        """Orders whose confirmation falls on ``day`` in the reporting timezone."""
        return [order for order in self._orders if reporting_day(order.created_at) == day]

    def available_days(self) -> list[date]:
        """Distinct reporting days that have orders, most recent first."""
        return sorted({reporting_day(order.created_at) for order in self._orders}, reverse=True)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def finalize(
        self,
        items: Iterable[LineInput],
        payment_method: Optional[PaymentMethod] = None,
        status: OrderStatus = OrderStatus.COMPLETED,
    ) -> ConfirmedOrder:
        """
        Confirm a cart snapshot as a new order.

        ``items`` is taken as given, including any manual price
        adjustments; nothing is re-priced from the catalog.

        Returns:
            ConfirmedOrder: The persisted order

        Raises:
            ValidationError: empty or invalid item list
        """
        lines = normalize_items(items)

        orders = self._read()
        order_number = max((o.order_number for o in orders), default=0) + 1

        order = ConfirmedOrder(
            id=str(uuid.uuid4()),
            order_number=order_number,
            items=lines,
            total=order_total(lines),
            created_at=self.clock(),
            status=status,
            payment_method=payment_method,
        )

        # Newest first
        orders.insert(0, order)
        self._write(orders)

        logger.info(
            f"Order #{order.order_number} confirmed "
            f"({order.item_count} items, total {order.total}, "
            f"payment={payment_method.value if payment_method else 'n/a'})"
        )
        self._notify(order)
        return order

    def edit_items(self, order_id: str, new_items: Iterable[LineInput]) -> ConfirmedOrder:
        """
        Replace the lines of an existing order and recompute its total.

        Status is left untouched. Validation happens before the store is
        touched, so a rejected edit leaves the stored order unchanged.

        Raises:
            ValidationError: empty or invalid item list
            NotFoundError: unknown order id
        """
        lines = normalize_items(new_items)

        order = self._replace(
            order_id,
            lambda o: o.model_copy(update={"items": lines, "total": order_total(lines)}),
        )
        logger.info(f"Order #{order.order_number} items updated (total {order.total})")
        self._notify(order)
        return order

    def set_status(self, order_id: str, status: OrderStatus) -> ConfirmedOrder:
        """
        Change order status without touching items or total.

        Raises:
            ValidationError: unknown status value
            NotFoundError: unknown order id
        """
        try:
            status = OrderStatus(status)
        except ValueError:
            valid = [s.value for s in OrderStatus]
            raise ValidationError(f"Invalid status '{status}'. Must be one of: {valid}")

        order = self._replace(order_id, lambda o: o.model_copy(update={"status": status}))
        logger.info(f"Order #{order.order_number} status → {status.value}")
        self._notify(order)
        return order

    def remove(self, order_id: str) -> ConfirmedOrder:
        """
        Permanently delete an order from the local store.

        Raises:
            NotFoundError: unknown order id
        """
        orders = self._read()
        for index, order in enumerate(orders):
            if order.id == order_id:
                del orders[index]
                self._write(orders)
                logger.warning(f"Order #{order.order_number} deleted")
                return order
        raise NotFoundError("Order", order_id)
