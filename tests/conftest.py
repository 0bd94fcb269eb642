import os

# Test configuration must be in place before orderflow reads its settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV_MODE"] = "development"
os.environ["BUSINESS_TIMEZONE"] = "Asia/Kolkata"

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from orderflow.core import dates
from orderflow.database import build_engine, build_session_maker, get_db, init_db
from orderflow.main import app
from orderflow.models import MenuItem, RestaurantTable, Seller
from orderflow.pipeline import BasketReconciler, CartValidator, CheckoutSession
from orderflow.schemas import CartLine, OrderResponse, OrderStatus, PaymentMethod, basket_item_count, basket_total
from orderflow.services.availability.base import AvailabilityEntry
from orderflow.services.availability.mock import InMemoryAvailabilityIndex
from orderflow.services.order_cache import OrderCache
from orderflow.services.orders.mock import InMemoryOrderGateway
from orderflow.services.tables import build_table_payload

SELLER_ID = 7


class GatedAvailabilityIndex(InMemoryAvailabilityIndex):
    """Holds queries for a date until its gate is opened."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gates: dict[str, asyncio.Event] = {}

    async def available_items(self, seller_id, day):
        gate = self.gates.get(day)
        if gate is not None:
            await gate.wait()
        return await super().available_items(seller_id, day)


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def make_line():
    """Build a cart line; defaults to seller 7."""
    def _make(item_id, price=100.0, quantity=1, seller_id=SELLER_ID, name=None):
        return CartLine(
            item_id=item_id,
            name=name or f"Item {item_id}",
            price=price,
            quantity=quantity,
            caterer_id=seller_id,
            category="veg",
        )
    return _make


@pytest.fixture
def make_stored_order(make_line):
    """Build an OrderResponse as the store would return it."""
    def _make(order_id="ORD-1", items=None, customer_id=42, seller_id=SELLER_ID,
              status=OrderStatus.PENDING, table_number=None, created_at=None):
        items = items or [make_line(1, seller_id=seller_id)]
        stamp = created_at or datetime(2026, 2, 1, 6, 0, tzinfo=timezone.utc)
        return OrderResponse(
            order_id=order_id,
            customer_id=customer_id,
            caterer_id=seller_id,
            items=items,
            total_amount=basket_total(items),
            payment_method=PaymentMethod.COD,
            transaction_id="N/A",
            table_number=table_number,
            item_count=basket_item_count(items),
            order_date=stamp,
            delivery_date="2026-02-01",
            status=status,
            created_at=stamp,
        )
    return _make


# =============================================================================
# PIPELINE COLLABORATORS
# =============================================================================

@pytest.fixture
def gateway():
    return InMemoryOrderGateway()


@pytest.fixture
def availability():
    """In-memory index; set ``availability.gates[day]`` to hold queries for a day."""
    return GatedAvailabilityIndex()


@pytest.fixture
def stock(availability):
    """Mark items purchasable for seller 7 on the given dates (today by default)."""
    def _stock(*item_ids, days=None, seller_id=SELLER_ID):
        for item_id in item_ids:
            availability.add(AvailabilityEntry(
                item_id=item_id,
                seller_id=seller_id,
                dates=set(days or [dates.today()]),
            ))
    return _stock


@pytest.fixture
def order_cache(tmp_path):
    return OrderCache(path=tmp_path / "order_history.json", lock_timeout=5)


@pytest.fixture
def session():
    return CheckoutSession(buyer_id=42)


@pytest.fixture
def validator(availability):
    return CartValidator(availability)


@pytest.fixture
def reconciler(session, validator):
    return BasketReconciler(session, validator)


# =============================================================================
# ORDERS SERVICE
# =============================================================================

@pytest.fixture
async def session_maker():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)

    yield build_session_maker(engine)

    await engine.dispose()


@pytest.fixture
async def client(session_maker):
    """HTTP client wired straight into the FastAPI app."""
    async def override_get_db():
        async with session_maker() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def seeded(session_maker):
    """
    Seller 7 (caterer, takes UPI) with items 1-3 on today and tomorrow,
    item 3 out of stock; seller 8 (restaurant, cash only) with tables T1/T2.
    """
    today, tomorrow = dates.today(), dates.tomorrow()
    async with session_maker() as db:
        db.add_all([
            Seller(id=7, name="Annapurna Kitchen", service_name="Annapurna Tiffins",
                   payment_address="annapurna@upi"),
            Seller(id=8, name="Spice Route", payment_address=None),
        ])
        await db.flush()
        db.add_all([
            MenuItem(id=1, seller_id=7, name="Paneer Thali", price=120.0,
                     available_dates=[today, tomorrow], in_stock=True),
            MenuItem(id=2, seller_id=7, name="Masala Dosa", price=70.0,
                     available_dates=[today], in_stock=True),
            MenuItem(id=3, seller_id=7, name="Chicken Biryani", price=180.0,
                     available_dates=[today, tomorrow], in_stock=False),
            MenuItem(id=4, seller_id=8, name="Butter Chicken", price=260.0,
                     available_dates=[today], in_stock=True),
            RestaurantTable(id=1, seller_id=8, table_number="T1",
                            qr_data=build_table_payload(8, "T1", "Spice Route")),
            RestaurantTable(id=2, seller_id=8, table_number="T2", is_active=False,
                            qr_data=build_table_payload(8, "T2", "Spice Route")),
        ])
        await db.commit()
    return {"today": today, "tomorrow": tomorrow}
