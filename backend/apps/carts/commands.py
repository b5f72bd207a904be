from dataclasses import dataclass
from typing import Any, Dict

from .pricing import Selection


def _first(payload: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in payload:
            return payload[key]
    return default


def _coerce_int(raw):
    """Digit strings become ints; anything else is passed through for the resolver to judge."""
    if isinstance(raw, str):
        text = raw.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return raw


@dataclass
class CartItemCommand:
    product_id: int
    selection: Selection

    @staticmethod
    def from_raw(raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            raise ValueError("Payload must be a dict")
        pid = _coerce_int(_first(raw, "product_id", "productId"))
        if not isinstance(pid, int) or isinstance(pid, bool):
            raise ValueError("product_id is required")
        flavor_id = _coerce_int(_first(raw, "flavor_id", "flavorId"))
        weight = _first(raw, "weight", "weight_label", "weightLabel")
        selection = Selection(
            flavor_id=flavor_id,
            weight=str(weight) if weight is not None else None,
            quantity=_coerce_int(_first(raw, "quantity", default=1)),
        )
        return CartItemCommand(product_id=pid, selection=selection)


@dataclass
class CartQuantityCommand:
    line_id: str
    quantity: Any

    @staticmethod
    def from_raw(line_id: str, raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            raise ValueError("Payload must be a dict")
        if "quantity" not in raw:
            raise ValueError("quantity is required")
        return CartQuantityCommand(line_id=str(line_id), quantity=_coerce_int(raw["quantity"]))
