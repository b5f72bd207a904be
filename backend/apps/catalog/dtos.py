from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass
class StoreDTO:
    id: int
    name: str
    address: str
    phone: str
    is_active: bool


@dataclass
class CategoryDTO:
    id: int
    name: str
    description: str
    image_url: str
    display_order: int
    is_active: bool


@dataclass
class SubcategoryDTO:
    id: int
    category_id: int
    name: str
    description: str
    image_url: str
    display_order: int
    is_active: bool


@dataclass
class FlavorDTO:
    id: int
    product_id: int
    name: str
    price_adjustment: Decimal
    is_available: bool


@dataclass
class ProductDTO:
    id: int
    subcategory_id: Optional[int]
    name: str
    description: str
    base_price: Decimal
    weight_options: List[str] = field(default_factory=list)
    image_urls: List[str] = field(default_factory=list)
    flavors: List[FlavorDTO] = field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False

    def find_flavor(self, flavor_id) -> Optional[FlavorDTO]:
        for flavor in self.flavors:
            if flavor.id == flavor_id:
                return flavor
        return None


@dataclass
class PromotionDTO:
    id: int
    promotion_type: str
    display_order: int
    product: ProductDTO


@dataclass
class HomeFeedDTO:
    categories: List[CategoryDTO]
    top_deals: List[ProductDTO]
    most_selling: List[ProductDTO]
