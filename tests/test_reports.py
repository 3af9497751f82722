from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pandas as pd

from pos_app.schemas import ConfirmedOrder, OrderLineItem, PaymentMethod, Variant
from pos_app.services.reports import daily_summary, export_orders_to_excel, orders_dataframe

MADRID = ZoneInfo("Europe/Madrid")


def item(pid, price, qty, variant=Variant.FULL):
    return OrderLineItem(product_id=pid, name=pid.title(), price=Decimal(price), quantity=qty, variant=variant)


def test_daily_summary_groups_by_variant(orders, clock):
    orders.finalize([item("paella", "12.00", 1), item("paella", "7.00", 2, Variant.HALF)], PaymentMethod.CARD)
    orders.finalize([item("paella", "12.00", 2), item("agua", "1.80", 1)])
    # Next day in Madrid, excluded
    clock.now = datetime(2026, 3, 15, 0, 30, tzinfo=MADRID)
    orders.finalize([item("flan", "4.00", 5)])

    summary = daily_summary(orders.list_orders(), date(2026, 3, 14))

    assert summary.total_orders == 2
    assert summary.total_products == 6
    assert summary.total_sales == Decimal("51.80")
    assert [(l.name, l.quantity, l.total) for l in summary.lines] == [
        ("Paella", 3, Decimal("36.00")),
        ("Paella (Media)", 2, Decimal("14.00")),
        ("Agua", 1, Decimal("1.80")),
    ]


def test_daily_summary_empty_day(orders):
    orders.finalize([item("paella", "12.00", 1)])
    summary = daily_summary(orders.list_orders(), date(2020, 1, 1))
    assert summary.is_empty
    assert summary.lines == []
    assert summary.total_sales == Decimal("0")


def test_export_orders_to_excel(orders, tmp_path):
    orders.finalize([item("paella", "7.00", 2, Variant.HALF)], PaymentMethod.MOBILE_TRANSFER)
    orders.finalize([item("agua", "1.80", 1)])
    path = tmp_path / "reports" / "orders.xlsx"

    result = export_orders_to_excel(orders.list_orders(), path)

    assert result["success"] is True
    assert result["rows"] == 2
    df = pd.read_excel(path, engine="openpyxl")
    assert list(df["order_number"]) == [2, 1]
    assert df.loc[1, "items"] == "2x Paella (Media)"
    assert df.loc[1, "payment_method"] == "mobile_transfer"
    assert df.loc[1, "date_time"] == "2026-03-14 13:30"


def test_naive_timestamps_render_in_reporting_timezone():
    order = ConfirmedOrder(
        id="legacy-1",
        order_number=1,
        items=[item("agua", "1.80", 1)],
        total=Decimal("1.80"),
        created_at=datetime(2026, 3, 14, 23, 30),
    )

    df = orders_dataframe([order])
    summary = daily_summary([order], date(2026, 3, 14))

    assert df.loc[0, "date_time"] == "2026-03-14 23:30"
    assert summary.total_orders == 1
