"""Catalog API views.

Expose ``CatalogService`` over HTTP.  Domain exceptions propagate to the
project-wide DRF exception handler, which maps them to status codes.
Non-staff users only ever see active catalog nodes.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateSubcategoryDTO,
    UpdateCategoryDTO,
    UpdateSubcategoryDTO,
)
from modules.catalog.filters import CategoryFilter, SubcategoryFilter
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    SubcategoryDjangoRepository,
)
from modules.catalog.serializers import (
    CategorySerializer,
    DeactivationSummarySerializer,
    SubcategorySerializer,
)
from modules.catalog.services import CatalogService
from modules.core.pagination import StandardResultsSetPagination
from modules.core.permissions import IsStaffOrReadOnly


def _catalog_service() -> CatalogService:
    return CatalogService(
        category_repository=CategoryDjangoRepository(),
        subcategory_repository=SubcategoryDjangoRepository(),
    )


class _CatalogViewSet(GenericViewSet):
    permission_classes = [IsStaffOrReadOnly]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name", "id"]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _catalog_service()

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def _visible_only(self) -> bool:
        return not self.request.user.is_staff


class CategoryViewSet(_CatalogViewSet):
    serializer_class = CategorySerializer
    filterset_class = CategoryFilter

    def get_queryset(self):
        return self._service.list_categories(active_only=self._visible_only())

    def retrieve(self, request: Request, pk: str) -> Response:
        """GET /api/v1/categories/{pk}/"""
        category = self._service.get_category(int(pk))
        return Response(CategorySerializer(category).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/categories/"""
        dto = CreateCategoryDTO(
            name=request.data.get("name", ""),
            description=request.data.get("description") or "",
        )
        category = self._service.create_category(dto)
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str) -> Response:
        """PATCH /api/v1/categories/{pk}/"""
        dto = UpdateCategoryDTO(
            name=request.data.get("name"),
            description=request.data.get("description"),
        )
        category = self._service.update_category(int(pk), dto)
        return Response(CategorySerializer(category).data)

    def destroy(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/categories/{pk}/"""
        self._service.delete_category(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def deactivate(self, request: Request, pk: str) -> Response:
        """POST /api/v1/categories/{pk}/deactivate/

        Cascades to every subcategory and product beneath the category.
        """
        summary = self._service.deactivate_category(int(pk))
        category = self._service.get_category(int(pk))
        data = CategorySerializer(category).data
        data["deactivated"] = DeactivationSummarySerializer(summary).data
        return Response(data)

    @action(detail=True, methods=["post"])
    def activate(self, request: Request, pk: str) -> Response:
        """POST /api/v1/categories/{pk}/activate/ (no cascade)."""
        category = self._service.activate_category(int(pk))
        return Response(CategorySerializer(category).data)

    @action(detail=True, methods=["get"])
    def stats(self, request: Request, pk: str) -> Response:
        """GET /api/v1/categories/{pk}/stats/"""
        category_id = int(pk)
        return Response(
            {
                "category_id": category_id,
                "subcategories": self._service.count_subcategories(category_id),
                "products": self._service.count_products(category_id),
            }
        )


class SubcategoryViewSet(_CatalogViewSet):
    serializer_class = SubcategorySerializer
    filterset_class = SubcategoryFilter

    def get_queryset(self):
        return self._service.list_subcategories(active_only=self._visible_only())

    def retrieve(self, request: Request, pk: str) -> Response:
        """GET /api/v1/subcategories/{pk}/"""
        subcategory = self._service.get_subcategory(int(pk))
        return Response(SubcategorySerializer(subcategory).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/subcategories/"""
        dto = CreateSubcategoryDTO(
            category_id=request.data.get("category_id"),
            name=request.data.get("name", ""),
            description=request.data.get("description") or "",
        )
        subcategory = self._service.create_subcategory(dto)
        return Response(
            SubcategorySerializer(subcategory).data, status=status.HTTP_201_CREATED
        )

    def partial_update(self, request: Request, pk: str) -> Response:
        """PATCH /api/v1/subcategories/{pk}/"""
        dto = UpdateSubcategoryDTO(
            name=request.data.get("name"),
            description=request.data.get("description"),
        )
        subcategory = self._service.update_subcategory(int(pk), dto)
        return Response(SubcategorySerializer(subcategory).data)

    def destroy(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/subcategories/{pk}/"""
        self._service.delete_subcategory(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def deactivate(self, request: Request, pk: str) -> Response:
        """POST /api/v1/subcategories/{pk}/deactivate/ (cascades to products)."""
        summary = self._service.deactivate_subcategory(int(pk))
        subcategory = self._service.get_subcategory(int(pk))
        data = SubcategorySerializer(subcategory).data
        data["deactivated"] = DeactivationSummarySerializer(summary).data
        return Response(data)

    @action(detail=True, methods=["post"])
    def activate(self, request: Request, pk: str) -> Response:
        """POST /api/v1/subcategories/{pk}/activate/"""
        subcategory = self._service.activate_subcategory(int(pk))
        return Response(SubcategorySerializer(subcategory).data)
