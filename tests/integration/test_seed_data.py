"""The development seed command builds a usable dataset and is re-runnable."""

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from modules.catalog.models import Category
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.products.models import Product

pytestmark = pytest.mark.integration


def test_seed_data_creates_catalog_users_and_orders():
    call_command("seed_data")

    assert get_user_model().objects.filter(username__in=["admin", "manager", "user"]).count() == 3
    assert Category.objects.count() == 3
    assert Product.objects.count() == 13
    assert sorted(Order.objects.values_list("status", flat=True)) == sorted(
        [
            OrderStatus.PENDING,
            OrderStatus.PAID,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        ]
    )


def test_seed_data_is_idempotent():
    call_command("seed_data")
    call_command("seed_data")

    assert Product.objects.count() == 13
    assert Order.objects.count() == 4
