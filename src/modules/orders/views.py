"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.  Domain
exceptions propagate to the project-wide exception handler.

Regular users see and cancel only their own orders; someone else's
order answers 404.  Staff see every order and drive status changes.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import ChangeStatusDTO, CheckoutDTO
from modules.orders.exceptions import OrderNotFound
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Checkout has its own throttle scope."""
        self.throttle_scope = "checkout" if self.action == "create" else None
        return super().get_throttles()

    def get_queryset(self):
        if self.request.user.is_staff:
            return self._service.list_orders()
        return self._service.history_for_user(self.request.user.id)

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderSerializer

    def _get_visible_order(self, pk: str) -> Order:
        order = self._service.get_order(int(pk))
        user = self.request.user
        if not user.is_staff and order.user_id != user.id:
            raise OrderNotFound(f"Order {pk} not found.")
        return order

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str) -> Response:
        """GET /api/v1/orders/{pk}/"""
        return Response(OrderSerializer(self._get_visible_order(pk)).data)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/ checks out the caller's cart."""
        dto = CheckoutDTO(
            shipping_address=request.data.get("shipping_address") or "",
            contact_phone=request.data.get("contact_phone") or "",
            notes=request.data.get("notes") or "",
        )
        order = self._service.checkout(request.user.id, dto)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str) -> Response:
        """PATCH /api/v1/orders/{pk}/  ``{status, notes}`` (staff only)."""
        if not request.user.is_staff:
            raise PermissionDenied("Only staff can change order status.")
        dto = ChangeStatusDTO(
            status=request.data.get("status") or "",
            notes=request.data.get("notes") or "",
        )
        order = self._service.change_status(
            int(pk), dto.status, notes=dto.notes, user=request.user
        )
        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str) -> Response:
        """DELETE /api/v1/orders/{pk}/ is always refused."""
        self._service.delete_order(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        order = self._get_visible_order(pk)
        order = self._service.cancel(
            order.id, notes=request.data.get("notes") or "", user=request.user
        )
        return Response(OrderSerializer(order).data)
