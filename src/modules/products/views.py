"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.  Domain
exceptions propagate to the project-wide exception handler.  Non-staff
users only see available products; an unavailable product answers 404.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.core.permissions import IsStaffOrReadOnly
from modules.products.dtos import CreateProductDTO, StockChangeDTO, UpdateProductDTO
from modules.products.exceptions import ProductNotFound
from modules.products.filters import ProductFilter
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


class ProductViewSet(GenericViewSet):
    """ViewSet for Product operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = ProductSerializer
    filterset_class = ProductFilter
    permission_classes = [IsStaffOrReadOnly]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    ordering = ["name", "id"]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_queryset(self):
        if self.request.user.is_staff:
            return self._service.list_products()
        return self._service.list_available_products()

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(int(pk))
        if not request.user.is_staff and not product.is_available:
            raise ProductNotFound(f"Product {pk} not found.")
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = request.data
        dto = CreateProductDTO(
            name=data.get("name", ""),
            price=data.get("price"),
            subcategory_id=data.get("subcategory_id"),
            category_id=data.get("category_id"),
            description=data.get("description") or "",
            stock=data.get("stock", 0),
            image=data.get("image") or "",
        )
        product = self._service.create_product(dto)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str) -> Response:
        """PATCH /api/v1/products/{pk}/

        ``stock`` and ``active`` are ignored here; they have dedicated
        actions.
        """
        data = request.data
        dto = UpdateProductDTO(
            name=data.get("name"),
            price=data.get("price"),
            description=data.get("description"),
            image=data.get("image"),
        )
        product = self._service.update_product(int(pk), dto)
        return Response(ProductSerializer(product).data)

    def destroy(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/products/{pk}/ (soft delete)."""
        self._service.delete_product(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def activate(self, request: Request, pk: str) -> Response:
        product = self._service.activate_product(int(pk))
        return Response(ProductSerializer(product).data)

    @action(detail=True, methods=["post"])
    def deactivate(self, request: Request, pk: str) -> Response:
        product = self._service.deactivate_product(int(pk))
        return Response(ProductSerializer(product).data)

    @action(detail=True, methods=["post"])
    def stock(self, request: Request, pk: str) -> Response:
        """POST /api/v1/products/{pk}/stock/  ``{operation, quantity}``"""
        dto = StockChangeDTO(
            operation=request.data.get("operation"),
            quantity=request.data.get("quantity"),
        )
        if dto.operation == "increase":
            product = self._service.increase_stock(int(pk), dto.quantity)
        else:
            product = self._service.decrease_stock(int(pk), dto.quantity)
        return Response(ProductSerializer(product).data)
