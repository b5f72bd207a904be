from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional


def _parse_decimal(raw, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if raw is None or raw == "":
        return default
    try:
        return Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return default


def _parse_int(raw) -> Optional[int]:
    try:
        return int(raw) if raw is not None else None
    except (ValueError, TypeError):
        return None


def _clean_labels(raw) -> List[str]:
    """Trim entries and drop blanks, as the back-office form submits empty rows."""
    if not raw:
        return []
    return [str(item).strip() for item in raw if str(item or "").strip()]


def _first(payload: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in payload:
            return payload[key]
    return default


@dataclass
class FlavorCommand:
    name: str
    price_adjustment: Decimal = Decimal("0")
    is_available: bool = True

    @staticmethod
    def from_raw(raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            return None
        name = str(_first(raw, "flavor_name", "flavorName", "name", default="") or "").strip()
        if not name:
            return None
        return FlavorCommand(
            name=name,
            price_adjustment=_parse_decimal(
                _first(raw, "price_adjustment", "priceAdjustment"), Decimal("0")
            ),
            is_available=bool(_first(raw, "is_available", "isAvailable", default=True)),
        )

    @staticmethod
    def many_from_raw(raw_items) -> List["FlavorCommand"]:
        out: List[FlavorCommand] = []
        for r in raw_items or []:
            cmd = FlavorCommand.from_raw(r)
            if cmd:
                out.append(cmd)
        return out


@dataclass
class ProductCreateCommand:
    subcategory_id: int
    name: str
    base_price: Decimal
    description: str = ""
    weight_options: List[str] = field(default_factory=list)
    image_urls: List[str] = field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False
    flavors: List[FlavorCommand] = field(default_factory=list)

    @staticmethod
    def from_raw(payload: Dict[str, Any]):
        if not isinstance(payload, dict):
            raise ValueError("Payload must be a dict")
        data = dict(payload)
        # ids are server-assigned
        data.pop("id", None)
        subcategory_id = _parse_int(_first(data, "subcategory_id", "subcategoryId"))
        if subcategory_id is None:
            raise ValueError("subcategory_id is required")
        base_price = _parse_decimal(_first(data, "base_price", "basePrice"), Decimal("0"))
        if base_price < 0:
            raise ValueError("base_price must not be negative")
        return ProductCreateCommand(
            subcategory_id=subcategory_id,
            name=str(data.get("name", "")).strip(),
            base_price=base_price,
            description=str(data.get("description") or "").strip(),
            weight_options=_clean_labels(_first(data, "weight_options", "weightOptions")),
            image_urls=_clean_labels(_first(data, "image_urls", "imageUrls")),
            is_active=bool(_first(data, "is_active", "isActive", default=True)),
            is_featured=bool(_first(data, "is_featured", "isFeatured", default=False)),
            flavors=FlavorCommand.many_from_raw(data.get("flavors")),
        )


@dataclass
class ProductUpdateCommand:
    product_id: int
    partial: bool
    subcategory_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[Decimal] = None
    weight_options: Optional[List[str]] = None
    image_urls: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    # None leaves flavors untouched; a list (even empty) replaces them.
    flavors: Optional[List[FlavorCommand]] = None

    def scalar_fields(self) -> Dict[str, Any]:
        return {
            "subcategory_id": self.subcategory_id,
            "name": self.name,
            "description": self.description,
            "base_price": self.base_price,
            "weight_options": self.weight_options,
            "image_urls": self.image_urls,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
        }

    @staticmethod
    def from_raw(product_id: int, payload: Dict[str, Any], partial: bool):
        if not isinstance(payload, dict):
            raise ValueError("Payload must be a dict")
        data = dict(payload)
        data.pop("id", None)
        base_price = None
        if "base_price" in data or "basePrice" in data:
            base_price = _parse_decimal(_first(data, "base_price", "basePrice"))
            if base_price is not None and base_price < 0:
                raise ValueError("base_price must not be negative")
        weights = None
        if "weight_options" in data or "weightOptions" in data:
            weights = _clean_labels(_first(data, "weight_options", "weightOptions"))
        images = None
        if "image_urls" in data or "imageUrls" in data:
            images = _clean_labels(_first(data, "image_urls", "imageUrls"))
        flavors = None
        if "flavors" in data:
            flavors = FlavorCommand.many_from_raw(data.get("flavors"))
        is_active = _first(data, "is_active", "isActive")
        is_featured = _first(data, "is_featured", "isFeatured")
        name = data.get("name")
        return ProductUpdateCommand(
            product_id=product_id,
            partial=partial,
            subcategory_id=_parse_int(_first(data, "subcategory_id", "subcategoryId")),
            name=str(name).strip() if name is not None else None,
            description=data.get("description"),
            base_price=base_price,
            weight_options=weights,
            image_urls=images,
            is_active=bool(is_active) if is_active is not None else None,
            is_featured=bool(is_featured) if is_featured is not None else None,
            flavors=flavors,
        )
