"""Unit tests for the Product model.

Covers:
- Availability through the catalog hierarchy.
- ``has_stock`` predicate.
- DB CHECK constraints on price and stock.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from modules.products.models import Product

pytestmark = pytest.mark.unit


class TestAvailability:
    def test_available_by_default(self, product):
        assert product.is_available is True
        assert Product.objects.available().filter(pk=product.pk).exists()

    def test_inactive_product(self, product):
        product.active = False
        assert product.is_available is False

    def test_deleted_product(self, product):
        product.delete()
        assert product.is_available is False
        assert not Product.objects.available().filter(pk=product.pk).exists()

    def test_inactive_subcategory_hides_product(self, product):
        product.subcategory.active = False
        product.subcategory.save()
        product.refresh_from_db()
        assert product.is_available is False
        assert not Product.objects.available().filter(pk=product.pk).exists()

    def test_inactive_category_hides_product(self, product):
        product.category.active = False
        product.category.save()
        product.refresh_from_db()
        assert product.is_available is False


class TestHasStock:
    @pytest.mark.parametrize(
        "quantity, expected", [(1, True), (10, True), (11, False)]
    )
    def test_has_stock(self, product, quantity, expected):
        assert product.has_stock(quantity) is expected

    def test_has_stock_does_not_change_stock(self, product):
        product.has_stock(5)
        product.refresh_from_db()
        assert product.stock == 10


class TestConstraints:
    def test_negative_price_rejected_by_db(self, product):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.filter(pk=product.pk).update(price=Decimal("-1.00"))

    def test_negative_stock_rejected_by_db(self, product):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.filter(pk=product.pk).update(stock=-1)

    def test_str(self, product):
        assert str(product) == "Widget"
