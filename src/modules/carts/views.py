"""Cart API views.

Every request works on the authenticated user's own cart; there is no
way to address another user's lines.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.carts.dtos import AddCartLineDTO, UpdateCartLineDTO
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.serializers import CartLineSerializer, CartSerializer
from modules.carts.services import CartService
from modules.products.repositories.django_repository import ProductDjangoRepository


class CartViewSet(GenericViewSet):
    serializer_class = CartLineSerializer
    lookup_field = "product_id"
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.get_cart(self.request.user.id)

    def _cart_response(self, status_code: int = status.HTTP_200_OK) -> Response:
        user_id = self.request.user.id
        data = CartSerializer(
            {
                "lines": self._service.get_cart(user_id),
                "total": self._service.total(user_id),
            }
        ).data
        return Response(data, status=status_code)

    def list(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        return self._cart_response()

    def create(self, request: Request) -> Response:
        """POST /api/v1/cart/  ``{product_id, quantity}``"""
        dto = AddCartLineDTO(
            product_id=request.data.get("product_id"),
            quantity=request.data.get("quantity", 1),
        )
        self._service.add_line(request.user.id, dto)
        return self._cart_response(status.HTTP_201_CREATED)

    def partial_update(self, request: Request, product_id: str) -> Response:
        """PATCH /api/v1/cart/{product_id}/  ``{quantity}``"""
        dto = UpdateCartLineDTO(quantity=request.data.get("quantity"))
        self._service.update_quantity(request.user.id, int(product_id), dto)
        return self._cart_response()

    def destroy(self, request: Request, product_id: str) -> Response:
        """DELETE /api/v1/cart/{product_id}/"""
        self._service.remove_line(request.user.id, int(product_id))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"])
    def clear(self, request: Request) -> Response:
        """POST /api/v1/cart/clear/"""
        removed = self._service.clear(request.user.id)
        return Response({"removed": removed})
