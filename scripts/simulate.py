"""
Concurrent Checkout Simulation

Drives many independent checkout sessions against a running orders service
(see scripts/seed.py for demo data), then walks every placed order through
its status chain.
Run from project root: python scripts/simulate.py --caterer 1
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orderflow.core import dates
from orderflow.core.exceptions import OrderflowError
from orderflow.pipeline import CheckoutOutcome, create_pipeline
from orderflow.schemas import MenuItemResponse, PaymentMethod
from orderflow.services.availability.http import HttpAvailabilityIndex
from orderflow.services.http import OrdersApiClient
from orderflow.services.order_cache import OrderCache
from orderflow.services.orders.http import HttpOrderGateway
from orderflow.services.payment import capture_payment
from orderflow.services.status_machine import next_forward_status

API_BASE_URL = "http://localhost:8001/api"
TOTAL_ORDERS = 20

STREETS = ["MG Road", "FC Road", "Baner Road", "Law College Road", "Koregaon Park"]


async def fetch_menu(api: OrdersApiClient, caterer_id: int, day: str) -> list[MenuItemResponse]:
    data = await api.get_json("/menus/by-date", params={"catererId": caterer_id, "date": day})
    return [MenuItemResponse.model_validate(item) for item in data]


async def place_order(
    api: OrdersApiClient,
    cache: OrderCache,
    menu: list[MenuItemResponse],
    caterer_id: int,
    order_num: int,
) -> dict[str, Any]:
    """Run one full checkout session with a random basket."""
    gateway = HttpOrderGateway(api)
    pipeline = create_pipeline(
        buyer_id=random.randint(1, 500),
        gateway=gateway,
        availability=HttpAvailabilityIndex(api),
        cache=cache,
    )
    session = pipeline.session
    start_time = time.time()

    try:
        await session.load_seller_profile(gateway, caterer_id)
        for item in random.sample(menu, k=random.randint(1, min(3, len(menu)))):
            for _ in range(random.randint(1, 3)):
                session.selection.add(item.to_cart_line())

        method = PaymentMethod.UPI if random.random() < 0.5 else PaymentMethod.COD
        if session.displayed_seller is None or not session.displayed_seller.accepts_upi:
            method = PaymentMethod.COD
        payment = capture_payment(
            method,
            session.payment_context(transaction_reference=f"UPI{random.randint(10**9, 10**10 - 1)}"),
        )

        result = await pipeline.checkout.checkout(
            payment,
            delivery_date=dates.today(),
            delivery_address=f"{random.randint(1, 200)} {random.choice(STREETS)}, Pune",
        )
        elapsed = round(time.time() - start_time, 3)
        if result.outcome != CheckoutOutcome.PLACED:
            return {"order_num": order_num, "success": False, "error": result.outcome.value, "time": elapsed}
        return {
            "order_num": order_num,
            "success": True,
            "order_id": result.order.order_id,
            "total": result.order.total_amount,
            "time": elapsed,
        }
    except OrderflowError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": f"{e.code}: {e.message}"[:100],
            "time": round(time.time() - start_time, 3),
        }


async def walk_status_chain(api: OrdersApiClient, order_id: str) -> int:
    """Advance an order to the end of its forward chain; returns the step count."""
    pipeline = create_pipeline(gateway=HttpOrderGateway(api), availability=HttpAvailabilityIndex(api))
    order = await pipeline.gateway.get_order(order_id)
    steps = 0
    target = next_forward_status(order.status, order.fulfillment_type)
    while target is not None:
        order = await pipeline.status.advance(order_id, target)
        steps += 1
        target = next_forward_status(order.status, order.fulfillment_type)
    return steps


async def run_simulation(caterer_id: int, num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("CONCURRENT CHECKOUT SIMULATION")
    print("=" * 70)
    print(f"Total Orders: {num_orders}")
    print(f"Target: {API_BASE_URL}")
    print(f"Caterer: #{caterer_id}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=30.0) as client:
        api = OrdersApiClient(base_url=API_BASE_URL, client=client)
        menu = await fetch_menu(api, caterer_id, dates.today())
        if not menu:
            print("\nNo items available today. Run scripts/seed.py first.")
            return {"total": num_orders, "successful": 0, "failed": num_orders, "results": []}

        cache = OrderCache()
        tasks = [place_order(api, cache, menu, caterer_id, i + 1) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        print("\nAdvancing placed orders through their status chain...")
        steps = await asyncio.gather(*(walk_status_chain(api, r["order_id"]) for r in successful))

    total_time = round(time.time() - start_time, 2)

    print("\n" + "=" * 70)
    print("SIMULATION RESULTS")
    print("=" * 70)
    print(f"\nSuccessful Orders: {len(successful)}/{num_orders}")
    print(f"Failed Orders: {len(failed)}/{num_orders}")
    print(f"Status transitions applied: {sum(steps)}")
    print(f"Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r.get("total", 0) for r in successful)
        print(f"\nAverage Checkout: {avg_time}s")
        print(f"Fastest: {min(r['time'] for r in successful)}s")
        print(f"Slowest: {max(r['time'] for r in successful)}s")
        print(f"Total Revenue: {total_revenue:.2f}")

    if failed:
        print("\nFailed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)
    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent Checkout Simulation")
    parser.add_argument("--caterer", type=int, default=1, help="Seller id to order from")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="Orders service API root")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    asyncio.run(run_simulation(caterer_id=args.caterer, num_orders=args.orders))
