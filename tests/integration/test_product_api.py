"""Integration tests for the Product API."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.catalog.models import Category, Subcategory
from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/v1/products/"


def _payload(subcategory, **overrides):
    data = {
        "name": "Desk Lamp",
        "price": "49.90",
        "stock": 7,
        "subcategory_id": subcategory.id,
        "category_id": subcategory.category_id,
    }
    data.update(overrides)
    return data


class TestCreateProduct:
    def test_staff_creates_product(self, staff_client, subcategory):
        response = staff_client.post(URL, _payload(subcategory), format="json")

        assert response.status_code == 201
        data = response.data
        assert data["name"] == "Desk Lamp"
        assert data["price"] == "49.90"
        assert data["stock"] == 7
        assert data["subcategory_name"] == "Monitors"
        assert data["category_name"] == "Electronics"
        assert data["available"] is True

    def test_regular_user_forbidden(self, auth_client, subcategory):
        response = auth_client.post(URL, _payload(subcategory), format="json")
        assert response.status_code == 403

    def test_negative_price(self, staff_client, subcategory):
        response = staff_client.post(URL, _payload(subcategory, price="-1"), format="json")
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "price"

    def test_price_beyond_column_precision(self, staff_client, subcategory):
        response = staff_client.post(
            URL, _payload(subcategory, price="123456789012.34"), format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "price"
        assert not Product.objects.exists()

    def test_short_name(self, staff_client, subcategory):
        response = staff_client.post(URL, _payload(subcategory, name="ab"), format="json")
        assert response.status_code == 400

    def test_category_mismatch(self, staff_client, subcategory):
        books = Category.objects.create(name="Books")
        response = staff_client.post(
            URL, _payload(subcategory, category_id=books.id), format="json"
        )
        assert response.status_code == 400
        assert not Product.objects.exists()

    def test_missing_subcategory(self, staff_client, subcategory):
        response = staff_client.post(
            URL, _payload(subcategory, subcategory_id=999), format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "missing_parent"

    def test_inactive_subcategory(self, staff_client, subcategory):
        Subcategory.objects.filter(pk=subcategory.pk).update(active=False)
        response = staff_client.post(URL, _payload(subcategory), format="json")
        assert response.status_code == 409


class TestReadProducts:
    def test_users_only_see_available_products(self, auth_client, make_product, subcategory):
        make_product(name="Visible")
        make_product(name="Inactive", active=False)
        make_product(name="Deleted").delete()
        hidden_sub = Subcategory.objects.create(
            category=subcategory.category, name="Hidden", active=False
        )
        make_product(name="Hidden Parent", subcategory=hidden_sub)

        response = auth_client.get(URL)

        assert [p["name"] for p in response.data["results"]] == ["Visible"]

    def test_staff_see_inactive_but_not_deleted(self, staff_client, make_product):
        make_product(name="Visible")
        make_product(name="Inactive", active=False)
        make_product(name="Deleted").delete()

        response = staff_client.get(URL)

        assert [p["name"] for p in response.data["results"]] == ["Inactive", "Visible"]

    def test_unavailable_product_is_404_for_users(self, auth_client, staff_client, make_product):
        product = make_product(active=False)
        assert auth_client.get(f"{URL}{product.id}/").status_code == 404
        assert staff_client.get(f"{URL}{product.id}/").status_code == 200

    def test_deleted_product_is_404(self, staff_client, product):
        product.delete()
        assert staff_client.get(f"{URL}{product.id}/").status_code == 404

    @pytest.mark.parametrize(
        "params,expected",
        [
            ({"min_price": "10"}, ["Lamp", "Monitor"]),
            ({"max_price": "10"}, ["Cable"]),
            ({"name": "mon"}, ["Monitor"]),
            ({"in_stock": "false"}, ["Lamp"]),
            ({"ordering": "-price"}, ["Monitor", "Lamp", "Cable"]),
        ],
    )
    def test_filters(self, auth_client, make_product, params, expected):
        make_product(name="Cable", price=Decimal("5.00"))
        make_product(name="Lamp", price=Decimal("25.00"), stock=0)
        make_product(name="Monitor", price=Decimal("300.00"))

        response = auth_client.get(URL, params)

        assert [p["name"] for p in response.data["results"]] == expected

    def test_filter_by_category(self, auth_client, make_product, subcategory):
        books = Category.objects.create(name="Books")
        novels = Subcategory.objects.create(category=books, name="Novels")
        make_product(name="Dune", subcategory=novels)
        make_product(name="Monitor")

        response = auth_client.get(URL, {"category": books.id})

        assert [p["name"] for p in response.data["results"]] == ["Dune"]


class TestUpdateProduct:
    def test_partial_update_ignores_stock(self, staff_client, product):
        response = staff_client.patch(
            f"{URL}{product.id}/", {"price": "21.00", "stock": 999}, format="json"
        )
        assert response.status_code == 200
        assert response.data["price"] == "21.00"
        assert response.data["stock"] == 10

    def test_deactivate_and_activate(self, staff_client, product):
        response = staff_client.post(f"{URL}{product.id}/deactivate/")
        assert response.data["active"] is False
        assert response.data["available"] is False

        response = staff_client.post(f"{URL}{product.id}/activate/")
        assert response.data["active"] is True


class TestStockAction:
    def test_increase(self, staff_client, product):
        response = staff_client.post(
            f"{URL}{product.id}/stock/",
            {"operation": "increase", "quantity": 5},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["stock"] == 15

    def test_decrease(self, staff_client, product):
        response = staff_client.post(
            f"{URL}{product.id}/stock/",
            {"operation": "decrease", "quantity": 10},
            format="json",
        )
        assert response.data["stock"] == 0

    def test_decrease_below_zero(self, staff_client, product):
        response = staff_client.post(
            f"{URL}{product.id}/stock/",
            {"operation": "decrease", "quantity": 11},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["errors"][0]["code"] == "insufficient_stock"
        product.refresh_from_db()
        assert product.stock == 10

    def test_increase_past_limit(self, staff_client, product):
        response = staff_client.post(
            f"{URL}{product.id}/stock/",
            {"operation": "increase", "quantity": 2_147_483_640},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "stock_limit"
        assert staff_client.get(f"{URL}{product.id}/").data["stock"] == 10

    def test_unknown_operation(self, staff_client, product):
        response = staff_client.post(
            f"{URL}{product.id}/stock/",
            {"operation": "steal", "quantity": 1},
            format="json",
        )
        assert response.status_code == 400


class TestDeleteProduct:
    def test_soft_delete(self, staff_client, product):
        response = staff_client.delete(f"{URL}{product.id}/")

        assert response.status_code == 204
        product.refresh_from_db()
        assert product.is_deleted

    def test_delete_twice(self, staff_client, product):
        staff_client.delete(f"{URL}{product.id}/")
        assert staff_client.delete(f"{URL}{product.id}/").status_code == 404

    def test_regular_user_forbidden(self, auth_client, product):
        assert auth_client.delete(f"{URL}{product.id}/").status_code == 403
