from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.carts.dtos import AddCartLineDTO
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.services import CartService
from modules.catalog.models import Category, Subcategory
from modules.orders.dtos import CheckoutDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def user():
    return User.objects.create_user(username="shopper", password="testpass123")


@pytest.fixture()
def other_user():
    return User.objects.create_user(username="other", password="testpass123")


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="staff", password="testpass123", is_staff=True
    )


@pytest.fixture()
def auth_client(user):
    """APIClient force-authenticated as a regular user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def staff_client(staff_user):
    """APIClient force-authenticated as a staff user."""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def category():
    return Category.objects.create(name="Electronics")


@pytest.fixture()
def subcategory(category):
    return Subcategory.objects.create(category=category, name="Monitors")


@pytest.fixture()
def make_product(subcategory):
    """Factory creating products under ``subcategory`` by default."""

    def _make(**overrides) -> Product:
        sub = overrides.pop("subcategory", subcategory)
        defaults = {
            "name": "Widget",
            "price": Decimal("19.99"),
            "stock": 10,
            "subcategory": sub,
            "category": sub.category,
        }
        defaults.update(overrides)
        return Product.objects.create(**defaults)

    return _make


@pytest.fixture()
def product(make_product):
    return make_product()


# ---------------------------------------------------------------------------
# Cart / Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def cart_service():
    return CartService(
        cart_repository=CartDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def place_order(cart_service, order_service):
    """Fill ``user``'s cart with ``(product, quantity)`` pairs and check out."""

    def _place(user, lines, **checkout) -> Order:
        for product, quantity in lines:
            cart_service.add_line(
                user.id, AddCartLineDTO(product_id=product.id, quantity=quantity)
            )
        dto = CheckoutDTO(
            shipping_address=checkout.get("shipping_address", "1 Main St"),
            contact_phone=checkout.get("contact_phone", "555-0100"),
            notes=checkout.get("notes", ""),
        )
        return order_service.checkout(user.id, dto)

    return _place
