"""Unit tests for ProductDjangoRepository.

Covers:
- Look-ups (get_by_id, list, list_available, parent look-ups).
- Soft delete.
- Conditional stock updates.
"""

from __future__ import annotations

import pytest

from modules.products.constants import STOCK_MAX
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.repositories.interfaces import IProductRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


class TestRepositoryInstantiation:
    def test_is_instance_of_interface(self, repo):
        assert isinstance(repo, IProductRepository)


class TestLookups:
    def test_get_by_id(self, repo, product):
        assert repo.get_by_id(product.id) == product

    def test_get_by_id_not_found(self, repo):
        assert repo.get_by_id(999) is None

    def test_get_by_id_malformed(self, repo):
        assert repo.get_by_id("abc") is None

    def test_list_excludes_soft_deleted(self, repo, make_product):
        kept = make_product(name="Kept")
        gone = make_product(name="Gone")
        gone.delete()
        assert list(repo.list()) == [kept]

    def test_list_with_filters(self, repo, make_product):
        make_product(name="Blue Widget")
        make_product(name="Red Gadget")
        names = [p.name for p in repo.list({"name__icontains": "widget"})]
        assert names == ["Blue Widget"]

    def test_list_available_hides_inactive_ancestors(self, repo, product, subcategory):
        assert list(repo.list_available()) == [product]
        subcategory.active = False
        subcategory.save()
        assert list(repo.list_available()) == []

    def test_parent_lookups(self, repo, subcategory):
        assert repo.get_subcategory(subcategory.id) == subcategory
        assert repo.get_category(subcategory.category_id) == subcategory.category
        assert repo.get_subcategory(999) is None
        assert repo.get_category(999) is None


class TestDelete:
    def test_soft_deletes(self, repo, product):
        assert repo.delete(product.id) is True
        product.refresh_from_db()
        assert product.is_deleted

    def test_not_found(self, repo):
        assert repo.delete(999) is False


class TestStock:
    def test_decrease_stock(self, repo, product):
        assert repo.decrease_stock(product.id, 4) is True
        product.refresh_from_db()
        assert product.stock == 6

    def test_decrease_to_zero(self, repo, product):
        assert repo.decrease_stock(product.id, 10) is True
        product.refresh_from_db()
        assert product.stock == 0

    def test_decrease_refused_leaves_stock_unchanged(self, repo, product):
        assert repo.decrease_stock(product.id, 11) is False
        product.refresh_from_db()
        assert product.stock == 10

    def test_decrease_missing_product(self, repo):
        assert repo.decrease_stock(999, 1) is False

    def test_increase_stock(self, repo, product):
        assert repo.increase_stock(product.id, 5) is True
        product.refresh_from_db()
        assert product.stock == 15

    def test_increase_missing_product(self, repo):
        assert repo.increase_stock(999, 1) is False

    def test_increase_past_column_limit_refused(self, repo, product):
        assert repo.increase_stock(product.id, STOCK_MAX - 9) is False
        product.refresh_from_db()
        assert product.stock == 10

    def test_increase_up_to_column_limit(self, repo, product):
        assert repo.increase_stock(product.id, STOCK_MAX - 10) is True
        product.refresh_from_db()
        assert product.stock == STOCK_MAX

    def test_stock_never_negative_over_a_sequence(self, repo, product):
        for quantity in (3, 3, 3, 3, 1, 1):
            repo.decrease_stock(product.id, quantity)
        assert Product.objects.get(pk=product.pk).stock == 0
