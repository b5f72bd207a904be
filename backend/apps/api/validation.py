import re
from typing import Any, Dict, Optional

from django.conf import settings
from django.http import HttpRequest

from apps.api.utils import error_response
from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="validation")

CART_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{8,64}$")

CART_VIEWS = ("CartView", "CartItemListView", "CartItemDetailView")


def cart_session_header() -> str:
    return getattr(settings, "CART_SESSION_HEADER", "X-Cart-Session")


def is_valid_cart_key(value: Any) -> bool:
    return isinstance(value, str) and bool(CART_KEY_PATTERN.match(value))


def _validate_cart_header(request: HttpRequest):
    header = cart_session_header()
    raw = request.headers.get(header)
    if raw is None:
        request.cart_key = None
        return None
    if not is_valid_cart_key(raw):
        logger.warning("Malformed cart session header", header=header, length=len(raw))
        return error_response(
            "VALIDATION_ERROR",
            "Invalid cart session key",
            {header: raw},
            hint="Use 8-64 characters from A-Z, a-z, 0-9, '_' and '-'.",
        )
    request.cart_key = raw
    logger.debug("Cart key taken from header", header=header)
    return None


def _parse_optional_int(raw: Optional[str], name: str):
    """Return (value, error_response); blank means absent."""
    if raw is None or str(raw).strip() == "":
        return None, None
    try:
        return int(str(raw).strip()), None
    except (TypeError, ValueError):
        logger.warning("Non-integer query parameter", param=name, value=raw)
        return None, error_response(
            "VALIDATION_ERROR", f"{name} must be an integer", {name: raw}
        )


def _validate_quote_params(request: HttpRequest):
    params = request.GET
    flavor_id, error = _parse_optional_int(params.get("flavorId"), "flavorId")
    if error:
        return error
    quantity, error = _parse_optional_int(params.get("quantity"), "quantity")
    if error:
        return error
    selection: Dict[str, Any] = {
        "flavor_id": flavor_id,
        "weight": params.get("weight") or None,
        # Product page opens with a quantity of one.
        "quantity": 1 if quantity is None else quantity,
    }
    request.quote_selection = selection
    logger.debug("Validated quote parameters", **selection)
    return None


def validate_request_context(
    request: HttpRequest, view_class, view_kwargs: Dict[str, Any]
) -> Optional[Any]:
    """
    Run request-level checks for a resolved view before it is dispatched.

    Returns an error response to short-circuit the request, or None to continue.
    Parsed values are attached to the request (``cart_key``, ``quote_selection``).
    """

    view_name = getattr(view_class, "__name__", "")
    logger.debug(
        "Validating request context",
        view=view_name,
        method=getattr(request, "method", None),
    )
    if view_name in CART_VIEWS:
        result = _validate_cart_header(request)
        if result:
            return result
    elif view_name == "ProductQuoteView":
        if request.method == "GET":
            result = _validate_quote_params(request)
            if result:
                return result
    return None
