"""Domain error taxonomy and the DRF exception handler.

Every business-rule failure raised by a Service Layer is a ``DomainError``
subclass carrying an HTTP status and a machine-readable ``code``.  Raising
inside ``transaction.atomic`` rolls the unit of work back; the exception
then reaches the API layer untouched, where ``exception_handler`` renders
it in the standard error body::

    {"type": "client_error", "errors": [{"code": ..., "detail": ..., "attr": ...}]}
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


class DomainError(Exception):
    """Base class for business-rule violations."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "domain_error"


class ValidationError(DomainError):
    """Malformed or missing field, or a uniqueness violation."""

    code = "invalid"


class MissingParentError(ValidationError):
    """The referenced parent catalog entity does not exist."""

    code = "missing_parent"


class InactiveParentError(ValidationError):
    """The operation is blocked by an inactive ancestor."""

    status_code = status.HTTP_409_CONFLICT
    code = "inactive_parent"


class NotFoundError(DomainError):
    """The referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InactiveProductError(DomainError):
    """The product is inactive or hidden by an inactive ancestor."""

    status_code = status.HTTP_409_CONFLICT
    code = "inactive_product"


class InsufficientStockError(DomainError):
    """The requested quantity exceeds the available stock."""

    status_code = status.HTTP_409_CONFLICT
    code = "insufficient_stock"


class InvalidTransitionError(DomainError):
    """An order status change that the state machine does not allow."""

    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"


class InvalidStatusError(InvalidTransitionError):
    """Unknown target status, or a transition outside the allowed set."""

    code = "invalid_status"


class EmptyCartError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "empty_cart"


class ImmutableRecordError(DomainError):
    """Attempted physical delete of a record that may only be cancelled."""

    status_code = status.HTTP_409_CONFLICT
    code = "immutable_record"


# ---------------------------------------------------------------------------
# DRF exception handler
# ---------------------------------------------------------------------------


def _error_type(status_code: int) -> str:
    if status_code >= 500:
        return "server_error"
    return "client_error"


def _flatten_drf_detail(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            name = key if attr is None else f"{attr}.{key}"
            if key == "non_field_errors":
                name = attr
            errors.extend(_flatten_drf_detail(value, name))
        return errors
    if isinstance(detail, list):
        errors = []
        for item in detail:
            errors.extend(_flatten_drf_detail(item, attr))
        return errors
    return [
        {
            "code": getattr(detail, "code", "error"),
            "detail": str(detail),
            "attr": attr,
        }
    ]


def exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """Render every API error in the standard ``{type, errors}`` body."""
    if isinstance(exc, DomainError):
        logger.info(
            "api.domain_error",
            error=exc.__class__.__name__,
            code=exc.code,
            detail=str(exc),
        )
        return Response(
            {
                "type": _error_type(exc.status_code),
                "errors": [{"code": exc.code, "detail": str(exc), "attr": None}],
            },
            status=exc.status_code,
        )

    if isinstance(exc, PydanticValidationError):
        errors = [
            {
                "code": "invalid",
                "detail": error["msg"],
                "attr": ".".join(str(part) for part in error["loc"]) or None,
            }
            for error in exc.errors()
        ]
        return Response(
            {"type": "validation_error", "errors": errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, DRFValidationError):
        error_type = "validation_error"
    else:
        error_type = _error_type(response.status_code)

    if isinstance(exc, APIException):
        detail = exc.detail
    else:
        # Http404 / PermissionDenied converted by DRF
        detail = response.data.get("detail", response.data)
    response.data = {
        "type": error_type,
        "errors": _flatten_drf_detail(detail),
    }
    return response
