from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass
class CartLineDTO:
    id: str
    product_id: int
    product_name: str
    image_url: Optional[str]
    flavor_id: Optional[int]
    flavor_name: Optional[str]
    weight: Optional[str]
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass
class CartDTO:
    key: Optional[str]
    lines: List[CartLineDTO] = field(default_factory=list)
    total: Decimal = Decimal("0")
    item_count: int = 0


@dataclass
class QuoteDTO:
    product_id: int
    flavor_id: Optional[int]
    flavor_name: Optional[str]
    weight: Optional[str]
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
