"""Catalog DRF serializers (read side).

Writes go through Pydantic DTOs and ``CatalogService``; these
serializers only render model instances.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Category, Subcategory


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "description", "active", "created_at", "updated_at"]
        read_only_fields = fields


class SubcategorySerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Subcategory
        fields = [
            "id",
            "category_id",
            "category_name",
            "name",
            "description",
            "active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DeactivationSummarySerializer(serializers.Serializer):
    subcategories = serializers.IntegerField()
    products = serializers.IntegerField()
