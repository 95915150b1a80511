"""Product DRF serializers (read side)."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Renders a product with its catalog placement.

    ``available`` is false when the product, its subcategory or its
    category is inactive.
    """

    subcategory_name = serializers.CharField(source="subcategory.name", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)
    available = serializers.BooleanField(source="is_available", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "image",
            "subcategory_id",
            "subcategory_name",
            "category_id",
            "category_name",
            "active",
            "available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
