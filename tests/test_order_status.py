"""Tests for order status updates, order reads and the retailer order views."""

from datetime import datetime, timezone

import pytest

from conftest import count, create_product, create_user, fetch, login_as, run
from shared.config.database import AsyncSessionLocal
from services.auth_service.models import UserRole
from services.notification_service.messages import STATUS_MESSAGES
from services.order_service.models import Order, OrderStatusHistory

ADDRESS = {"line1": "4 Park Street", "city": "Kolkata", "pincode": "700016"}


def place(client, customer, *lines):
    login_as(client, customer)
    body = {
        "total_amount": sum(p.price * qty for p, qty in lines),
        "shipping_address": ADDRESS,
        "items": [{"product_id": p.id, "quantity": qty, "price": p.price} for p, qty in lines],
    }
    response = client.post("/orders/place", json=body)
    assert response.status_code == 200
    return response.json()["order"]


def set_status(order_id, status):
    async def _set():
        async with AsyncSessionLocal() as db:
            order = await db.get(Order, order_id)
            order.status = status
            await db.commit()

    run(_set())


@pytest.fixture
def order(client, customer, retailer):
    product = create_product(retailer, name="Toor Dal", price=150.0, quantity=20)
    return place(client, customer, (product, 2))


class TestStatusUpdate:
    def test_owner_retailer_confirms(self, client, retailer, order):
        login_as(client, retailer)

        response = client.patch(f"/orders/{order['id']}", json={"status": "confirmed"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["order"]["status"] == "confirmed"
        assert fetch(Order, id=order["id"])[0].status == "confirmed"

    def test_full_lifecycle(self, client, retailer, order):
        login_as(client, retailer)

        for status in ("confirmed", "shipped", "delivered"):
            response = client.patch(f"/orders/{order['id']}", json={"status": status})
            assert response.status_code == 200

        assert fetch(Order, id=order["id"])[0].status == "delivered"

    def test_skipping_ahead_is_rejected(self, client, retailer, order):
        login_as(client, retailer)

        response = client.patch(f"/orders/{order['id']}", json={"status": "delivered"})

        assert response.status_code == 409
        assert response.json() == {
            "error": "Cannot change order status from 'pending' to 'delivered'",
            "code": "invalid_status_transition",
        }
        assert fetch(Order, id=order["id"])[0].status == "pending"

    @pytest.mark.parametrize("terminal", ["delivered", "cancelled"])
    def test_terminal_states_are_final(self, client, retailer, order, terminal):
        set_status(order["id"], terminal)
        login_as(client, retailer)

        response = client.patch(f"/orders/{order['id']}", json={"status": "confirmed"})

        assert response.status_code == 409

    def test_unknown_status_value(self, client, retailer, order):
        login_as(client, retailer)

        response = client.patch(f"/orders/{order['id']}", json={"status": "teleported"})

        assert response.status_code == 400

    def test_customer_cannot_update(self, client, customer, order):
        login_as(client, customer)

        response = client.patch(f"/orders/{order['id']}", json={"status": "cancelled"})

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_retailer_without_products_in_order(self, client, order):
        stranger = create_user(name="Other Mart", role=UserRole.RETAILER, email="other@example.com")
        login_as(client, stranger)

        response = client.patch(f"/orders/{order['id']}", json={"status": "confirmed"})

        assert response.status_code == 403
        assert fetch(Order, id=order["id"])[0].status == "pending"

    def test_unknown_order(self, client, retailer):
        login_as(client, retailer)

        response = client.patch("/orders/does-not-exist", json={"status": "confirmed"})

        assert response.status_code == 404

    def test_tracking_and_delivery_date(self, client, retailer, order):
        set_status(order["id"], "confirmed")
        login_as(client, retailer)
        delivery = datetime(2026, 11, 2, 10, 30, tzinfo=timezone.utc)

        response = client.patch(
            f"/orders/{order['id']}",
            json={"status": "shipped", "tracking_number": "BLR-778812", "delivery_date": delivery.isoformat()},
        )

        assert response.status_code == 200
        body = response.json()["order"]
        assert body["tracking_number"] == "BLR-778812"
        assert body["delivery_date"].startswith("2026-11-02")

    def test_retailer_endpoint(self, client, retailer, order):
        login_as(client, retailer)

        response = client.patch(
            "/retailer/orders/update-status",
            json={"order_id": order["id"], "status": "cancelled", "comment": "Out of delivery range"},
        )

        assert response.status_code == 200
        assert response.json()["order"]["status"] == "cancelled"
        assert count(OrderStatusHistory, order_id=order["id"]) == 1


class TestStatusHistory:
    def test_comment_appends_history(self, client, customer, retailer, order):
        login_as(client, retailer)
        client.patch(f"/orders/{order['id']}", json={"status": "confirmed", "comment": "Packed and ready"})

        login_as(client, customer)
        response = client.get(f"/orders/{order['id']}/status-history")

        assert response.status_code == 200
        history = response.json()["history"]
        assert len(history) == 1
        assert history[0]["status"] == "confirmed"
        assert history[0]["comment"] == "Packed and ready"
        assert history[0]["created_by"] == retailer.id

    def test_no_comment_no_history(self, client, retailer, order):
        login_as(client, retailer)

        client.patch(f"/orders/{order['id']}", json={"status": "confirmed"})

        assert count(OrderStatusHistory, order_id=order["id"]) == 0

    def test_history_is_for_the_owning_customer_only(self, client, retailer, order):
        login_as(client, retailer)
        client.patch(f"/orders/{order['id']}", json={"status": "confirmed", "comment": "Packed"})

        response = client.get(f"/orders/{order['id']}/status-history")

        assert response.status_code == 404
        assert response.json()["error"] == "Order not found or access denied"

    def test_history_hidden_from_other_customers(self, client, order):
        nosy = create_user(name="Nosy", email="nosy@example.com")
        login_as(client, nosy)

        response = client.get(f"/orders/{order['id']}/status-history")

        assert response.status_code == 404


class TestStatusNotifications:
    def test_customer_notified_on_both_channels(self, client, retailer, order, sms_sender, email_sender):
        login_as(client, retailer)
        sms_sender.sent.clear()
        email_sender.sent.clear()

        client.patch(f"/orders/{order['id']}", json={"status": "confirmed"})

        assert email_sender.sent[0]["recipient"] == "asha@example.com"
        assert email_sender.sent[0]["body"].startswith(f"Hi Asha, {STATUS_MESSAGES['confirmed']}")
        assert order["order_number"] in email_sender.sent[0]["body"]
        assert sms_sender.sent[0]["recipient"] == "+919876543210"
        assert STATUS_MESSAGES["confirmed"] in sms_sender.sent[0]["body"]

    def test_rejected_update_sends_nothing(self, client, retailer, order, sms_sender, email_sender):
        login_as(client, retailer)
        sms_sender.sent.clear()
        email_sender.sent.clear()

        client.patch(f"/orders/{order['id']}", json={"status": "delivered"})

        assert sms_sender.sent == []
        assert email_sender.sent == []

    def test_email_failure_does_not_fail_update(self, client, retailer, order, sms_sender, email_sender):
        email_sender.fail = True
        login_as(client, retailer)

        response = client.patch(f"/orders/{order['id']}", json={"status": "confirmed"})

        assert response.status_code == 200
        assert sms_sender.sent[-1]["body"].startswith(STATUS_MESSAGES["confirmed"])


class TestOrderReads:
    def test_customer_lists_own_orders(self, client, customer, retailer):
        product = create_product(retailer, quantity=20)
        first = place(client, customer, (product, 1))
        second = place(client, customer, (product, 2))
        other = create_user(name="Meera", email="meera@example.com")
        place(client, other, (product, 1))

        login_as(client, customer)
        response = client.get("/orders")

        assert response.status_code == 200
        ids = {o["id"] for o in response.json()["orders"]}
        assert ids == {first["id"], second["id"]}

    def test_order_detail_includes_product_names(self, client, customer, order):
        login_as(client, customer)

        response = client.get(f"/orders/{order['id']}")

        assert response.status_code == 200
        body = response.json()["order"]
        assert body["shipping_address"] == ADDRESS
        assert body["items"][0]["product_name"] == "Toor Dal"
        assert body["items"][0]["price_at_purchase"] == 150.0

    def test_retailer_with_products_can_read(self, client, retailer, order):
        login_as(client, retailer)

        assert client.get(f"/orders/{order['id']}").status_code == 200

    def test_other_customer_cannot_read(self, client, order):
        nosy = create_user(name="Nosy", email="nosy@example.com")
        login_as(client, nosy)

        response = client.get(f"/orders/{order['id']}")

        assert response.status_code == 404
        assert response.json()["error"] == "Order not found or access denied"


class TestRetailerOrders:
    def test_lists_only_orders_with_own_products(self, client, customer, retailer):
        other_shop = create_user(name="Other Mart", role=UserRole.RETAILER, email="other@example.com")
        mine = create_product(retailer, name="Ragi Flour", quantity=20)
        theirs = create_product(other_shop, name="Jaggery", quantity=20)
        mixed = place(client, customer, (mine, 1), (theirs, 1))
        place(client, customer, (theirs, 1))

        login_as(client, retailer)
        response = client.get("/retailer/orders")

        assert response.status_code == 200
        assert [o["id"] for o in response.json()["orders"]] == [mixed["id"]]

    def test_customer_is_forbidden(self, client, customer):
        login_as(client, customer)

        assert client.get("/retailer/orders").status_code == 403
