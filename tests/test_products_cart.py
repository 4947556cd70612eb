"""Tests for the product catalogue and the shopping cart."""

import pytest

from conftest import count, create_product, create_user, login_as, reload_product
from services.auth_service.models import UserRole
from services.cart_service.models import CartItem


class TestProducts:
    def test_retailer_creates_product(self, client, retailer):
        login_as(client, retailer)

        response = client.post("/products", json={"name": "Cold Pressed Oil", "price": 320.0, "quantity": 8})

        assert response.status_code == 201
        body = response.json()
        assert body["retailer_id"] == retailer.id
        assert body["status"] == "low-stock"

    @pytest.mark.parametrize("quantity, expected", [(0, "out-of-stock"), (1, "low-stock"), (10, "low-stock"), (11, "in-stock")])
    def test_initial_tier(self, client, retailer, quantity, expected):
        login_as(client, retailer)

        response = client.post("/products", json={"name": "Millet", "price": 60.0, "quantity": quantity})

        assert response.json()["status"] == expected

    def test_customer_cannot_create(self, client, customer):
        login_as(client, customer)

        response = client.post("/products", json={"name": "Tea", "price": 90.0, "quantity": 3})

        assert response.status_code == 403

    def test_negative_price_rejected(self, client, retailer):
        login_as(client, retailer)

        response = client.post("/products", json={"name": "Tea", "price": -1, "quantity": 3})

        assert response.status_code == 400

    def test_list_and_search(self, client, retailer):
        create_product(retailer, name="Basmati Rice")
        create_product(retailer, name="Brown Rice")
        create_product(retailer, name="Toor Dal")

        all_names = [p["name"] for p in client.get("/products").json()]
        rice = [p["name"] for p in client.get("/products", params={"query": "rice"}).json()]

        assert all_names == ["Basmati Rice", "Brown Rice", "Toor Dal"]
        assert rice == ["Basmati Rice", "Brown Rice"]

    def test_filter_by_retailer(self, client, retailer):
        other = create_user(name="Other Mart", role=UserRole.RETAILER, email="other@example.com")
        create_product(retailer, name="Ghee")
        create_product(other, name="Honey")

        response = client.get("/products", params={"retailer_id": other.id})

        assert [p["name"] for p in response.json()] == ["Honey"]

    def test_get_unknown_product(self, client):
        response = client.get("/products/missing")

        assert response.status_code == 404
        assert response.json() == {"error": "Product not found", "code": "not_found"}

    def test_restock_recomputes_tier(self, client, retailer):
        product = create_product(retailer, quantity=0)
        login_as(client, retailer)

        response = client.patch(f"/products/{product.id}", json={"quantity": 25})

        assert response.status_code == 200
        assert response.json()["status"] == "in-stock"
        assert reload_product(product.id).quantity == 25

    def test_price_change_keeps_tier(self, client, retailer):
        product = create_product(retailer, quantity=5)
        login_as(client, retailer)

        response = client.patch(f"/products/{product.id}", json={"price": 110.0})

        assert response.json()["price"] == 110.0
        assert response.json()["status"] == "low-stock"

    def test_cannot_edit_other_retailers_product(self, client, retailer):
        other = create_user(name="Other Mart", role=UserRole.RETAILER, email="other@example.com")
        product = create_product(other, quantity=5)
        login_as(client, retailer)

        response = client.patch(f"/products/{product.id}", json={"quantity": 0})

        assert response.status_code == 403
        assert reload_product(product.id).quantity == 5


class TestCart:
    def test_empty_cart(self, client, customer):
        login_as(client, customer)

        response = client.get("/cart")

        assert response.status_code == 200
        assert response.json() == {"items": [], "subtotal": 0.0}

    def test_add_items_and_subtotal(self, client, customer, retailer):
        rice = create_product(retailer, name="Basmati Rice", price=100.0, quantity=5)
        dal = create_product(retailer, name="Toor Dal", price=150.0, quantity=5)
        login_as(client, customer)

        client.post("/cart", json={"product_id": rice.id, "quantity": 2})
        response = client.post("/cart", json={"product_id": dal.id})

        assert response.status_code == 201
        body = response.json()
        assert len(body["items"]) == 2
        assert body["subtotal"] == 350.0

    def test_adding_same_product_increments(self, client, customer, retailer):
        product = create_product(retailer, quantity=5)
        login_as(client, customer)

        client.post("/cart", json={"product_id": product.id, "quantity": 2})
        response = client.post("/cart", json={"product_id": product.id, "quantity": 3})

        items = response.json()["items"]
        assert len(items) == 1
        assert items[0]["quantity"] == 5

    def test_cannot_exceed_stock(self, client, customer, retailer):
        product = create_product(retailer, name="Jaggery", quantity=3)
        login_as(client, customer)
        client.post("/cart", json={"product_id": product.id, "quantity": 2})

        response = client.post("/cart", json={"product_id": product.id, "quantity": 2})

        assert response.status_code == 400
        assert response.json()["error"] == "Insufficient stock for Jaggery. Only 3 available."

    def test_unknown_product(self, client, customer):
        login_as(client, customer)

        response = client.post("/cart", json={"product_id": "missing", "quantity": 1})

        assert response.status_code == 404

    def test_remove_item(self, client, customer, retailer):
        product = create_product(retailer, quantity=5)
        login_as(client, customer)
        item_id = client.post("/cart", json={"product_id": product.id}).json()["items"][0]["id"]

        response = client.delete(f"/cart/{item_id}")

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_cannot_remove_someone_elses_item(self, client, customer, retailer):
        product = create_product(retailer, quantity=5)
        login_as(client, customer)
        item_id = client.post("/cart", json={"product_id": product.id}).json()["items"][0]["id"]

        other = create_user(name="Meera", email="meera@example.com")
        login_as(client, other)

        assert client.delete(f"/cart/{item_id}").status_code == 404

    def test_requires_credentials(self, client):
        assert client.get("/cart").status_code == 401


class TestCatalogueFilters:
    def test_filter_by_category(self, client, retailer):
        login_as(client, retailer)
        client.post("/products", json={"name": "Toor Dal", "price": 150.0, "quantity": 20, "category": "pulses"})
        client.post("/products", json={"name": "Ghee", "price": 550.0, "quantity": 20, "category": "dairy"})

        response = client.get("/products", params={"category": "pulses"})

        assert [p["name"] for p in response.json()] == ["Toor Dal"]
        assert response.json()[0]["category"] == "pulses"

    def test_filter_by_stock_tier(self, client, retailer):
        create_product(retailer, name="Ghee", quantity=0)
        create_product(retailer, name="Honey", quantity=4)
        create_product(retailer, name="Jaggery", quantity=40)

        response = client.get("/products", params={"status": "low-stock"})

        assert [p["name"] for p in response.json()] == ["Honey"]

    def test_unknown_tier(self, client):
        assert client.get("/products", params={"status": "plenty"}).status_code == 400


class TestDeleteProduct:
    def test_owner_deletes_and_carts_are_cleaned(self, client, customer, retailer):
        product = create_product(retailer, quantity=5)
        login_as(client, customer)
        client.post("/cart", json={"product_id": product.id, "quantity": 2})

        login_as(client, retailer)
        response = client.delete(f"/products/{product.id}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": product.id}
        assert client.get(f"/products/{product.id}").status_code == 404
        assert count(CartItem) == 0

    def test_other_retailer_cannot_delete(self, client, retailer):
        other = create_user(name="Other Mart", role=UserRole.RETAILER, email="other@example.com")
        product = create_product(other, quantity=5)
        login_as(client, retailer)

        response = client.delete(f"/products/{product.id}")

        assert response.status_code == 403
        assert reload_product(product.id).quantity == 5

    def test_customer_cannot_delete(self, client, customer, retailer):
        product = create_product(retailer, quantity=5)
        login_as(client, customer)

        assert client.delete(f"/products/{product.id}").status_code == 403

    def test_unknown_product(self, client, retailer):
        login_as(client, retailer)

        assert client.delete("/products/missing").status_code == 404
