from datetime import date, datetime, timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from pos_app.core.exceptions import NotFoundError, ValidationError
from pos_app.schemas import OrderLineItem, OrderStatus, PaymentMethod, Variant
from pos_app.services.cart import Cart
from pos_app.services.orders import ORDERS_KEY, OrderLifecycleManager


def line(product_id="paella", price="12.00", quantity=1, variant=Variant.FULL):
    return OrderLineItem(
        product_id=product_id,
        name=product_id.title(),
        price=Decimal(price),
        quantity=quantity,
        variant=variant,
    )


def seed_numbers(orders, numbers):
    """Finalize orders then renumber them directly in the store."""
    for _ in numbers:
        orders.finalize([line()])
    raw = orders.store.get(ORDERS_KEY)
    for entry, number in zip(raw, numbers):
        entry["order_number"] = number
    orders.store.set(ORDERS_KEY, raw)
    orders.reload()


def test_first_order_is_number_one(orders):
    order = orders.finalize([line()], PaymentMethod.CASH)
    assert order.order_number == 1
    assert order.payment_method == PaymentMethod.CASH
    assert order.status == OrderStatus.COMPLETED


def test_next_number_is_max_plus_one(orders):
    seed_numbers(orders, [3, 5])
    assert orders.next_order_number() == 6
    assert orders.finalize([line()]).order_number == 6


def test_numbers_not_reused_after_delete(orders):
    first = orders.finalize([line()])
    second = orders.finalize([line()])
    orders.remove(first.id)
    assert orders.finalize([line()]).order_number == second.order_number + 1


def test_new_number_exceeds_all_existing(orders):
    seed_numbers(orders, [7, 2, 40, 11])
    new = orders.finalize([line()])
    assert all(new.order_number > o.order_number for o in orders.list_orders() if o.id != new.id)


def test_finalize_totals_and_timestamp(orders, clock):
    order = orders.finalize([
        line("paella", "12.00", 1, Variant.FULL),
        line("paella", "7.00", 2, Variant.HALF),
    ])
    assert order.total == Decimal("26.00")
    assert order.created_at == clock.now
    assert order.created_at.utcoffset() == timedelta(hours=1)


def test_finalize_accepts_adjusted_prices(orders, paella):
    cart = Cart()
    cart.add_item(paella)
    cart.set_price("paella", Variant.FULL, Decimal("9.50"))

    order = orders.finalize(cart.snapshot())
    assert order.items[0].price == Decimal("9.50")
    assert order.total == Decimal("9.50")


def test_finalize_rejects_empty_and_duplicates(orders):
    with pytest.raises(ValidationError):
        orders.finalize([])
    with pytest.raises(ValidationError):
        orders.finalize([line(), line()])
    assert orders.list_orders() == []


def test_finalize_rejects_bad_line_data(orders):
    with pytest.raises(ValidationError):
        orders.finalize([{"product_id": "paella", "name": "Paella", "price": "1", "quantity": 0}])


def test_orders_are_newest_first(orders):
    first = orders.finalize([line()])
    second = orders.finalize([line()])
    assert [o.id for o in orders.list_orders()] == [second.id, first.id]


def test_edit_items_recomputes_total(orders):
    order = orders.finalize([line()])
    orders.set_status(order.id, OrderStatus.IN_PROGRESS)

    orders.edit_items(order.id, [line("arroz", "13.50", 2), line("agua", "1.80", 3)])

    stored = OrderLifecycleManager(orders.store).get(order.id)
    assert stored.total == Decimal("32.40")
    assert len(stored.items) == 2
    assert stored.status == OrderStatus.IN_PROGRESS
    assert stored.order_number == order.order_number


def test_edit_items_empty_fails_without_mutation(orders):
    order = orders.finalize([line()])
    before = orders.store.get(ORDERS_KEY)

    with pytest.raises(ValidationError):
        orders.edit_items(order.id, [])

    assert orders.store.get(ORDERS_KEY) == before


def test_set_status_leaves_items(orders):
    order = orders.finalize([line(quantity=2)])
    updated = orders.set_status(order.id, OrderStatus.CANCELLED)
    assert updated.status == OrderStatus.CANCELLED
    assert updated.items == order.items
    assert updated.total == order.total

    # Free transitions among statuses
    assert orders.set_status(order.id, "completed").status == OrderStatus.COMPLETED


def test_set_status_rejects_unknown_value(orders):
    order = orders.finalize([line()])
    with pytest.raises(ValidationError):
        orders.set_status(order.id, "shipped")


def test_unknown_ids_raise_not_found(orders):
    with pytest.raises(NotFoundError):
        orders.get("missing")
    with pytest.raises(NotFoundError):
        orders.edit_items("missing", [line()])
    with pytest.raises(NotFoundError):
        orders.set_status("missing", OrderStatus.COMPLETED)
    with pytest.raises(NotFoundError):
        orders.remove("missing")


def test_remove_deletes_from_store(orders):
    order = orders.finalize([line()])
    orders.remove(order.id)
    assert orders.store.get(ORDERS_KEY) == []


def test_on_change_listeners(orders):
    seen = []
    unsubscribe = orders.on_change(seen.append)

    order = orders.finalize([line()])
    orders.set_status(order.id, OrderStatus.IN_PROGRESS)
    unsubscribe()
    orders.set_status(order.id, OrderStatus.COMPLETED)

    assert [o.status for o in seen] == [OrderStatus.COMPLETED, OrderStatus.IN_PROGRESS]


def test_reload_picks_up_external_writes(orders, store):
    other = OrderLifecycleManager(store)
    other.finalize([line()])
    assert orders.list_orders() == []
    assert len(orders.reload()) == 1


def test_orders_bucketed_by_reporting_day(orders, clock):
    madrid = ZoneInfo("Europe/Madrid")
    # 23:30 UTC on the 14th is already the 15th in Madrid
    clock.now = datetime(2026, 3, 14, 23, 30, tzinfo=ZoneInfo("UTC"))
    late = orders.finalize([line()])
    clock.now = datetime(2026, 3, 14, 12, 0, tzinfo=madrid)
    midday = orders.finalize([line()])

    assert [o.id for o in orders.orders_for_day(date(2026, 3, 15))] == [late.id]
    assert [o.id for o in orders.orders_for_day(date(2026, 3, 14))] == [midday.id]
    assert orders.available_days() == [date(2026, 3, 15), date(2026, 3, 14)]
