"""
Daily Sales Report Script

Prints the sales summary for one day from the local store and optionally
exports the order history to Excel.
Run from project root: python scripts/sales_report.py [--date YYYY-MM-DD] [--excel]

Version: 1.0.0
"""

import argparse
import os
import sys
from datetime import date, datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pos_app.core.config import get_settings
from pos_app.core.dates import today_in_reporting_tz
from pos_app.services.orders import OrderLifecycleManager
from pos_app.services.reports import daily_summary, export_orders_to_excel
from pos_app.services.storage import get_store


def print_report(day: date, excel: bool) -> bool:
    """Print the summary for ``day``; returns False when there were no sales."""
    settings = get_settings()
    orders = OrderLifecycleManager(get_store()).list_orders()
    summary = daily_summary(orders, day)

    print("=" * 60)
    print("🧾 DAILY SALES REPORT")
    print("=" * 60)
    print(f"⏰ Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📅 Day: {day.isoformat()} ({settings.reporting_timezone})")
    print(f"📄 Store: {settings.store_backend.value}")
    print("=" * 60)

    if summary.is_empty:
        print("\n❌ No orders on this day")
        available = OrderLifecycleManager(get_store()).available_days()
        if available:
            print(f"   Days with orders: {', '.join(d.isoformat() for d in available[:7])}")
        return False

    print(f"\n📊 STATISTICS:")
    print(f"   Total Orders: {summary.total_orders}")
    print(f"   Total Products: {summary.total_products}")
    print(f"   Total Sales: {summary.total_sales:.2f} {settings.currency}")

    print(f"\n📋 PRODUCTS:")
    print("-" * 60)
    for line in summary.lines:
        print(f"   {line.name:<36} x{line.quantity:<4} {line.total:>9.2f}")

    if excel:
        result = export_orders_to_excel(orders)
        if result["success"]:
            print(f"\n✅ {result['message']} → {result['path']}")
        else:
            print(f"\n⚠️ Export failed: {result['message']}")

    print("\n" + "=" * 60)
    print("✅ REPORT COMPLETE")
    print("=" * 60)

    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Daily sales report")
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="Day to report (YYYY-MM-DD)")
    parser.add_argument("--excel", action="store_true", help="Also export all orders to Excel")
    args = parser.parse_args()

    print_report(args.date or today_in_reporting_tz(), args.excel)
