"""
Sales Reports

Daily sales summary for the order history view and an Excel export of the
order history with file locking.

Version: 1.0.0
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from filelock import FileLock, Timeout

from pos_app.core.config import get_settings
from pos_app.core.dates import reporting_day, to_reporting_tz
from pos_app.schemas import ConfirmedOrder, DailySalesSummary, SalesLine

logger = logging.getLogger(__name__)

ORDER_COLUMNS = [
    "order_number",
    "order_id",
    "date_time",
    "items",
    "item_count",
    "total",
    "status",
    "payment_method",
]


def _to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _from_cents(cents: int) -> Decimal:
    return (Decimal(int(cents)) / 100).quantize(Decimal("0.01"))


def daily_summary(orders: Iterable[ConfirmedOrder], day: date) -> DailySalesSummary:
    """
    Summarize the orders confirmed on ``day`` (reporting timezone).

    Products are grouped by display name, so half portions form their own
    "(Media)" line. Lines are sorted by revenue, highest first.
    """
    day_orders = [o for o in orders if reporting_day(o.created_at) == day]

    rows = [
        {
            "name": item.display_name,
            "quantity": item.quantity,
            "total_cents": _to_cents(item.line_total),
        }
        for order in day_orders
        for item in order.items
    ]

    lines: list[SalesLine] = []
    total_products = 0

    if rows:
        df = pd.DataFrame(rows, columns=["name", "quantity", "total_cents"])
        grouped = (
            df.groupby("name", sort=False)
            .agg(quantity=("quantity", "sum"), total_cents=("total_cents", "sum"))
            .reset_index()
            .sort_values("total_cents", ascending=False, kind="stable")
        )
        lines = [
            SalesLine(name=row.name, quantity=int(row.quantity), total=_from_cents(row.total_cents))
            for row in grouped.itertuples(index=False)
        ]
        total_products = int(df["quantity"].sum())

    return DailySalesSummary(
        day=day,
        total_sales=sum((o.total for o in day_orders), Decimal("0")),
        total_orders=len(day_orders),
        total_products=total_products,
        lines=lines,
    )


def orders_dataframe(orders: Iterable[ConfirmedOrder]) -> pd.DataFrame:
    """One row per order, timestamps rendered in the reporting timezone."""
    rows = [
        {
            "order_number": order.order_number,
            "order_id": order.id,
            "date_time": to_reporting_tz(order.created_at).strftime("%Y-%m-%d %H:%M"),
            "items": ", ".join(f"{item.quantity}x {item.display_name}" for item in order.items),
            "item_count": order.item_count,
            "total": float(order.total),
            "status": order.status.value,
            "payment_method": order.payment_method.value if order.payment_method else None,
        }
        for order in orders
    ]
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


def export_orders_to_excel(
    orders: Iterable[ConfirmedOrder],
    path: Optional[Path] = None,
) -> dict[str, Any]:
    """
    Write the order history to an Excel file under a file lock.

    Returns:
        dict with ``success``, ``message``, ``path`` and ``rows``
    """
    settings = get_settings()
    path = Path(path or Path(settings.data_directory) / settings.report_filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    lock_path = path.with_name(path.name + ".lock")

    result: dict[str, Any] = {
        "success": False,
        "message": "",
        "path": str(path),
        "rows": 0,
    }

    try:
        with FileLock(str(lock_path), timeout=settings.store_lock_timeout):
            df = orders_dataframe(orders)
            df.to_excel(str(path), index=False, engine="openpyxl")

            result["success"] = True
            result["rows"] = len(df)
            result["message"] = f"{len(df)} orders exported"
            logger.info(f"{len(df)} orders exported to {path}")

    except Timeout:
        result["message"] = f"Lock timeout ({settings.store_lock_timeout}s)"
        logger.error(f"Lock timeout exporting to {path}")

    except OSError as e:
        result["message"] = str(e)
        logger.exception(f"Error exporting orders to {path}")

    return result
