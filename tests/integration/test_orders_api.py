"""
Integration tests for the orders service API, and for the checkout pipeline
driven end to end through the HTTP collaborators.
"""

import httpx
import pytest

from orderflow.core.exceptions import InvalidStatusTransitionError, OrderSubmissionError
from orderflow.main import app
from orderflow.pipeline import CheckoutOutcome, ReorderOutcome, create_pipeline
from orderflow.schemas import MenuItemResponse, OrderStatus, PaymentMethod
from orderflow.services.availability.http import HttpAvailabilityIndex
from orderflow.services.http import OrdersApiClient
from orderflow.services.orders.http import HttpOrderGateway
from orderflow.services.payment import capture_payment
from orderflow.services.tables import resolve_table_context


def order_body(order_id="ORD-API-1", **overrides):
    body = {
        "orderId": order_id,
        "customerId": 42,
        "catererId": 7,
        "items": [
            {"id": 1, "name": "Paneer Thali", "price": 120.0, "quantity": 2, "catererId": 7},
            {"id": 2, "name": "Masala Dosa", "price": 70.0, "quantity": 1, "catererId": 7},
        ],
        "totalAmount": 310.0,
        "paymentMethod": "cod",
        "transactionId": "",
        "deliveryAddress": "12 MG Road, Pune",
        "itemCount": 3,
        "orderDate": "2026-02-04T10:30:00+05:30",
        "deliveryDate": "2026-02-04",
    }
    body.update(overrides)
    return body


@pytest.fixture
async def api(client):
    """OrdersApiClient routed into the app under test."""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test/api") as routed:
        yield OrdersApiClient(base_url="http://test/api", client=routed)


@pytest.fixture
def pipeline(api, order_cache):
    return create_pipeline(
        buyer_id=42,
        gateway=HttpOrderGateway(api),
        availability=HttpAvailabilityIndex(api),
        cache=order_cache,
    )


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "healthy"

    async def test_root(self, client):
        assert (await client.get("/")).json()["health"] == "/health"


class TestCreateOrder:

    async def test_create(self, client):
        response = await client.post("/api/orders", json=order_body())

        assert response.status_code == 201
        data = response.json()
        assert data["orderId"] == "ORD-API-1"
        assert data["transactionId"] == "N/A"
        assert data["status"] == "pending"
        assert data["items"][0]["id"] == 1
        assert data["createdAt"] is not None

    async def test_duplicate_order_id(self, client):
        await client.post("/api/orders", json=order_body())
        response = await client.post("/api/orders", json=order_body(totalAmount=310.0))

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "error": "duplicate_order",
            "detail": "Order ORD-API-1 already exists",
            "order_id": "ORD-API-1",
        }

    async def test_upi_without_transaction_is_rejected(self, client):
        response = await client.post("/api/orders", json=order_body(paymentMethod="upi"))
        assert response.status_code == 422

    async def test_total_mismatch_is_rejected(self, client):
        response = await client.post("/api/orders", json=order_body(totalAmount=1.0))
        assert response.status_code == 422


class TestQueryOrders:

    async def test_get_and_missing(self, client):
        await client.post("/api/orders", json=order_body())

        assert (await client.get("/api/orders/ORD-API-1")).json()["totalAmount"] == 310.0

        missing = await client.get("/api/orders/ORD-NOPE")
        assert missing.status_code == 404
        assert missing.json()["error"] == "order_not_found"

    async def test_customer_orders_newest_first(self, client):
        await client.post("/api/orders", json=order_body("ORD-A"))
        await client.post("/api/orders", json=order_body("ORD-B"))
        await client.post("/api/orders", json=order_body("ORD-C", customerId=99))

        response = await client.get("/api/orders/customer", params={"customerId": 42})

        assert [o["orderId"] for o in response.json()] == ["ORD-B", "ORD-A"]

    async def test_seller_orders_filters(self, client):
        await client.post("/api/orders", json=order_body("ORD-A"))
        await client.post("/api/orders", json=order_body("ORD-B", deliveryDate="2026-02-05"))
        await client.patch("/api/orders/ORD-A/status", json={"status": "confirmed"})

        by_status = await client.get("/api/orders/caterer", params={"catererId": 7, "status": "confirmed"})
        by_date = await client.get("/api/orders/caterer", params={"catererId": 7, "deliveryDate": "2026-02-05"})
        other = await client.get("/api/orders/caterer", params={"catererId": 8})

        assert [o["orderId"] for o in by_status.json()] == ["ORD-A"]
        assert [o["orderId"] for o in by_date.json()] == ["ORD-B"]
        assert other.json() == []


class TestStatusUpdates:

    async def test_walks_delivery_chain(self, client):
        await client.post("/api/orders", json=order_body())

        for status in ("confirmed", "preparing", "out_for_delivery", "delivered"):
            response = await client.patch("/api/orders/ORD-API-1/status", json={"status": status})
            assert response.status_code == 200
            assert response.json()["status"] == status

    async def test_skipping_is_rejected(self, client):
        await client.post("/api/orders", json=order_body())

        response = await client.patch("/api/orders/ORD-API-1/status", json={"status": "out_for_delivery"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_status_transition"
        assert body["allowed"] == ["cancelled", "confirmed"]
        assert (await client.get("/api/orders/ORD-API-1")).json()["status"] == "pending"

    async def test_table_orders_skip_delivery_leg(self, client):
        await client.post("/api/orders", json=order_body(tableNumber=3, deliveryAddress=None))
        for status in ("confirmed", "preparing"):
            await client.patch("/api/orders/ORD-API-1/status", json={"status": status})

        rejected = await client.patch("/api/orders/ORD-API-1/status", json={"status": "out_for_delivery"})
        accepted = await client.patch("/api/orders/ORD-API-1/status", json={"status": "delivered"})

        assert rejected.status_code == 400
        assert accepted.status_code == 200

    async def test_cancelled_is_terminal(self, client):
        await client.post("/api/orders", json=order_body())
        await client.patch("/api/orders/ORD-API-1/status", json={"status": "cancelled"})

        response = await client.patch("/api/orders/ORD-API-1/status", json={"status": "confirmed"})
        assert response.status_code == 400

    async def test_unknown_order(self, client):
        response = await client.patch("/api/orders/ORD-NOPE/status", json={"status": "confirmed"})
        assert response.status_code == 404


class TestMenusSellersTables:

    async def test_menu_by_date(self, client, seeded):
        today = await client.get("/api/menus/by-date", params={"catererId": 7, "date": seeded["today"]})
        tomorrow = await client.get("/api/menus/by-date", params={"catererId": 7, "date": seeded["tomorrow"]})

        assert [i["id"] for i in today.json()] == [1, 2]
        assert [i["id"] for i in tomorrow.json()] == [1]
        assert today.json()[0]["catererId"] == 7

    async def test_menu_bad_date(self, client, seeded):
        response = await client.get("/api/menus/by-date", params={"catererId": 7, "date": "soon"})
        assert response.status_code == 422

    async def test_seller(self, client, seeded):
        data = (await client.get("/api/sellers/7")).json()

        assert data["paymentAddress"] == "annapurna@upi"
        assert data["serviceName"] == "Annapurna Tiffins"
        assert (await client.get("/api/sellers/99")).status_code == 404

    async def test_tables(self, client, seeded):
        tables = (await client.get("/api/tables", params={"catererId": 8})).json()

        assert [t["tableNumber"] for t in tables] == ["T1", "T2"]
        assert (await client.get("/api/tables/2")).json()["isActive"] is False
        assert (await client.get("/api/tables/99")).status_code == 404


class TestPipelineOverHttp:
    """The client pipeline talking to the real app through its HTTP collaborators."""

    async def test_checkout_round_trip(self, pipeline, api, seeded):
        session = pipeline.session
        await session.load_seller_profile(pipeline.gateway, 7)
        menu = await api.get_json("/menus/by-date", params={"catererId": 7, "date": seeded["today"]})
        for item in menu:
            session.selection.add(MenuItemResponse.model_validate(item).to_cart_line())
        submitted = session.selection.lines

        payment = capture_payment(PaymentMethod.UPI, session.payment_context("T2602041234"))
        result = await pipeline.checkout.checkout(payment, delivery_address="12 MG Road, Pune")

        assert result.outcome == CheckoutOutcome.PLACED
        fetched = await pipeline.gateway.get_order(result.order.order_id)
        assert tuple(fetched.items) == submitted
        assert fetched.total_amount == 190.0
        assert fetched.transaction_id == "T2602041234"
        assert session.selection.is_empty

    async def test_checkout_drops_out_of_stock_item(self, pipeline, seeded, make_line):
        session = pipeline.session
        session.selection.replace([make_line(1, price=120.0), make_line(3, price=180.0)])
        payment = capture_payment(PaymentMethod.COD, session.payment_context())

        result = await pipeline.checkout.checkout(payment)

        assert result.outcome == CheckoutOutcome.ITEMS_REMOVED
        assert [line.item_id for line in session.selection] == [1]

    async def test_tomorrow_only_keeps_scheduled_items(self, pipeline, seeded, make_line):
        session = pipeline.session
        session.selection.replace([make_line(1, price=120.0), make_line(2, price=70.0)])

        outcome = await pipeline.reconciler.change_date(seeded["tomorrow"])

        assert outcome.notice.date_label == "Tomorrow"
        assert [line.item_id for line in session.selection] == [1]

    async def test_table_checkout(self, pipeline, seeded):
        session = pipeline.session
        table = await resolve_table_context(
            '{"catererId": 8, "tableNumber": "T1", "restaurantName": "Spice Route"}',
            pipeline.gateway,
        )
        await session.load_seller_profile(pipeline.gateway, table.seller_id)
        menu = await pipeline.gateway.api.get_json(
            "/menus/by-date", params={"catererId": 8, "date": seeded["today"]}
        )
        session.selection.add(MenuItemResponse.model_validate(menu[0]).to_cart_line())
        payment = capture_payment(PaymentMethod.COD, session.payment_context(on_premise=True))

        result = await pipeline.checkout.checkout(payment, table=table)

        assert result.order.table_number == 1
        assert result.order.transaction_id == "WALK-IN"
        await pipeline.status.advance(result.order.order_id, OrderStatus.CONFIRMED)
        await pipeline.status.advance(result.order.order_id, OrderStatus.PREPARING)
        with pytest.raises(InvalidStatusTransitionError):
            await pipeline.gateway.update_status(result.order.order_id, OrderStatus.OUT_FOR_DELIVERY)

    async def test_reorder(self, pipeline, seeded, make_line):
        session = pipeline.session
        session.selection.replace([make_line(1, price=120.0), make_line(2, price=70.0)])
        placed = await pipeline.checkout.checkout(capture_payment(PaymentMethod.COD, session.payment_context()))

        result = await pipeline.reorder.reorder(placed.order.order_id)

        assert result.outcome == ReorderOutcome.RESTORED
        assert [line.item_id for line in session.selection] == [1, 2]

    async def test_duplicate_submission_surfaces_remote_message(self, pipeline, seeded, make_line):
        ids = iter(["ORD-SAME", "ORD-SAME"])
        pipeline.checkout.order_id_factory = lambda: next(ids)
        session = pipeline.session

        session.selection.add(make_line(1, price=120.0))
        await pipeline.checkout.checkout(capture_payment(PaymentMethod.COD, session.payment_context()))

        session.selection.add(make_line(1, price=120.0))
        with pytest.raises(OrderSubmissionError) as exc_info:
            await pipeline.checkout.checkout(capture_payment(PaymentMethod.COD, session.payment_context()))

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Order ORD-SAME already exists"
        assert len(session.selection) == 1
