"""
Service Shift Simulation Script

Runs a simulated service shift against the mock sync collaborators:
random carts (full and half portions, occasional discounts), a network
outage in the middle of the shift and the re-sync when it comes back.
Run from project root: python scripts/simulate.py [--orders N] [--failure-rate R]

Version: 1.0.0
"""

import argparse
import asyncio
import os
import random
import sys
import time
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pos_app.core.config import setup_logging
from pos_app.schemas import PaymentMethod, Variant
from pos_app.services.pricing import supports_half_portion
from pos_app.services.storage import MemoryStore
from pos_app.services.sync import (
    CloudSyncBridge,
    MockAuthService,
    MockConnectivityMonitor,
    MockRemoteOrderStore,
)
from pos_app.terminal import PosTerminal


def fill_random_cart(terminal: PosTerminal) -> None:
    """Add 1-4 random products, half portions where possible."""
    products = terminal.catalog.list_products()
    for _ in range(random.randint(1, 4)):
        product = random.choice(products)
        variant = Variant.HALF if supports_half_portion(product) and random.random() < 0.4 else Variant.FULL
        for _ in range(random.randint(1, 3)):
            terminal.cart.add_item(product, variant)

    # Occasional manual discount on the first line
    if random.random() < 0.1:
        line = terminal.cart.lines[0]
        terminal.cart.set_price(line.product_id, line.variant, (line.price * Decimal("0.9")).quantize(Decimal("0.01")))


async def run_simulation(num_orders: int, failure_rate: float) -> None:
    remote = MockRemoteOrderStore(failure_rate=failure_rate, min_latency=0.01, max_latency=0.05)
    connectivity = MockConnectivityMonitor(online=True)
    bridge = CloudSyncBridge(remote=remote, auth=MockAuthService(), connectivity=connectivity)
    terminal = PosTerminal(store=MemoryStore(), bridge=bridge)

    print("=" * 70)
    print("🍽️  SERVICE SHIFT SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"📉 Remote failure rate: {failure_rate:.0%}")
    print("=" * 70)

    start = time.time()
    await terminal.login("google")

    outage_start, outage_end = num_orders // 3, (2 * num_orders) // 3
    for n in range(num_orders):
        if n == outage_start:
            print("\n📴 Network down")
            connectivity.set_online(False)
        if n == outage_end:
            print("📶 Network back, re-syncing history\n")
            connectivity.set_online(True)

        fill_random_cart(terminal)
        terminal.confirm_order(random.choice(list(PaymentMethod)))
        await asyncio.sleep(0)

    await bridge.wait_idle()

    # Final reconciliation pass, as a reconnect would trigger
    report = await bridge.sync_all(terminal.orders.list_orders())
    summary = terminal.sales_summary()

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"✅ Orders confirmed locally: {len(terminal.orders.list_orders())}")
    print(f"☁️  Remote records: {len(remote.records)}")
    print(f"🔁 Final pass: {report.to_dict()}")
    print(f"💰 Today's sales: {summary.total_sales:.2f}")
    print(f"⏱️  Total Time: {round(time.time() - start, 2)}s")
    print("=" * 70)

    terminal.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate a service shift")
    parser.add_argument("--orders", type=int, default=30)
    parser.add_argument("--failure-rate", type=float, default=0.1)
    args = parser.parse_args()

    setup_logging()
    asyncio.run(run_simulation(args.orders, args.failure_rate))
