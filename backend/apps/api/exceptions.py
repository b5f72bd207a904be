from __future__ import annotations

from typing import Any, Dict

from django.core.exceptions import (
    PermissionDenied as DjangoPermissionDenied,
    ValidationError as DjangoValidationError,
)
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import error_response
from apps.carts.exceptions import CartError
from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="exception")

GENERIC_SERVER_MESSAGE = "Something went wrong"

# (exception types, code, fallback message, keep payload as details)
DRF_ERROR_RULES = (
    ((ValidationError,), "VALIDATION_ERROR", "Validation failed", True),
    ((ParseError,), "VALIDATION_ERROR", "Malformed request", True),
    ((NotAuthenticated, AuthenticationFailed), "UNAUTHORIZED", "Authentication required", False),
    (
        (PermissionDenied, DjangoPermissionDenied),
        "FORBIDDEN",
        "You do not have permission to perform this action",
        False,
    ),
    ((NotFound, Http404), "NOT_FOUND", "Resource not found", False),
    ((MethodNotAllowed,), "METHOD_NOT_ALLOWED", "Method not allowed", False),
)


def cart_error_response(exc: CartError) -> Response:
    """Envelope for resolver, aggregator and cart lookup failures."""
    return error_response(exc.error_code, str(exc), exc.details())


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Central exception handler for DRF views returning structured JSON errors.
    """

    log = _bind_logger(context)

    if isinstance(exc, CartError):
        log.info("Handled cart error", code=exc.error_code, error=exc.__class__.__name__)
        return cart_error_response(exc)

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(_django_validation_payload(exc))

    response = drf_exception_handler(exc, context)
    if response is None:
        log.exception("Unhandled exception bubbled to global handler")
        return error_response(
            "SERVER_ERROR",
            GENERIC_SERVER_MESSAGE,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    status_code = response.status_code
    code, message, details = _classify(exc, response.data, status_code)
    if status_code >= 500:
        log.error("Converted server error", code=code, status=status_code)
    else:
        log.info("Converted API exception", code=code, status=status_code)
    headers = dict(response.headers) if getattr(response, "headers", None) else None
    return error_response(code, message, details, http_status=status_code, headers=headers)


def _bind_logger(context: Dict[str, Any]):
    log = logger
    view = context.get("view")
    request = context.get("request")
    if view:
        log = log.bind(view=type(view).__name__)
    if request is not None:
        log = log.bind(
            method=getattr(request, "method", None),
            path=getattr(request, "path", None),
        )
    return log


def _django_validation_payload(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    if hasattr(exc, "messages"):
        return list(exc.messages)
    return {"detail": getattr(exc, "message", "Validation failed")}


def _classify(exc: Exception, payload: Any, status_code: int):
    """Return (code, message, details) for an exception DRF already rendered."""
    if status_code >= 500:
        return "SERVER_ERROR", GENERIC_SERVER_MESSAGE, None
    for types, code, fallback, keep_details in DRF_ERROR_RULES:
        if isinstance(exc, types):
            return code, _message_from(payload, fallback), payload if keep_details else None
    details = payload if isinstance(payload, (dict, list)) and payload else None
    return "VALIDATION_ERROR", _message_from(payload, "Request failed"), details


def _message_from(payload: Any, fallback: str) -> str:
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("detail"), str):
        return payload["detail"]
    if isinstance(payload, list) and payload and isinstance(payload[0], str):
        return payload[0]
    return fallback


__all__ = ["cart_error_response", "global_exception_handler"]
