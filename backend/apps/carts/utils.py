from __future__ import annotations

from typing import Optional

from apps.api.validation import cart_session_header, is_valid_cart_key
from apps.common import get_logger

logger = get_logger(__name__).bind(component="carts", layer="utils")

SESSION_MARKER = "cart"


def resolve_cart_key(request) -> Optional[str]:
    """
    Key of the caller's cart.

    The validated ``X-Cart-Session`` header wins; otherwise the Django session
    key is used, creating the session on first use.
    """
    key = getattr(request, "cart_key", None)
    if key:
        return key
    raw = request.headers.get(cart_session_header())
    if raw and is_valid_cart_key(raw):
        return raw
    session = getattr(request, "session", None)
    if session is None:
        return None
    if not session.session_key:
        # A non-empty session is needed for the middleware to issue the cookie.
        session[SESSION_MARKER] = True
        session.save()
        logger.debug("Created session for cart")
    return session.session_key


def with_cart_header(response, key: Optional[str]):
    if key:
        response[cart_session_header()] = key
    return response
