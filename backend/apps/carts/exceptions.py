"""Errors raised by the configuration resolver, the cart aggregator and the cart service.

All of them are recoverable at the call site: the caller re-prompts with
corrected input and the cart is left exactly as it was.
"""
from typing import Any, Dict, Optional


class CartError(Exception):
    """Base class carrying the API error code the failure maps to."""

    error_code = "VALIDATION_ERROR"

    def details(self) -> Optional[Dict[str, Any]]:
        return None


class ConfigurationError(CartError):
    """A selection or quantity the product does not allow."""

    reason = "INVALID_CONFIGURATION"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context

    def details(self) -> Dict[str, Any]:
        return {"reason": self.reason, **self.context}


class InvalidQuantity(ConfigurationError):
    reason = "INVALID_QUANTITY"


class UnavailableFlavor(ConfigurationError):
    reason = "UNAVAILABLE_FLAVOR"


class InvalidWeightOption(ConfigurationError):
    reason = "INVALID_WEIGHT_OPTION"


class LineNotFound(CartError):
    error_code = "NOT_FOUND"

    def __init__(self, line_id: str):
        super().__init__("Cart line not found")
        self.line_id = line_id

    def details(self) -> Dict[str, Any]:
        return {"lineId": str(self.line_id)}


class ProductNotFoundError(CartError):
    """The product is missing or not on sale."""

    error_code = "NOT_FOUND"

    def __init__(self, product_id: Any):
        super().__init__("Product not found")
        self.product_id = product_id

    def details(self) -> Dict[str, Any]:
        return {"id": str(self.product_id)}
