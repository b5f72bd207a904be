from decimal import Decimal
from typing import Iterable, List, Optional

from .dtos import (
    CategoryDTO,
    FlavorDTO,
    ProductDTO,
    PromotionDTO,
    StoreDTO,
    SubcategoryDTO,
)
from .models import Category, Product, ProductFlavor, Promotion, Store, Subcategory


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value if value is not None else 0))


def _as_str_list(value) -> List[str]:
    # JSON columns may hold null or legacy non-list payloads.
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value]


class StoreMapper:
    @staticmethod
    def to_dto(store: Store) -> StoreDTO:
        return StoreDTO(
            id=store.id,
            name=store.name,
            address=store.address or "",
            phone=store.phone or "",
            is_active=bool(store.is_active),
        )

    @staticmethod
    def many_to_dto(stores: Iterable[Store]) -> List[StoreDTO]:
        return [StoreMapper.to_dto(s) for s in stores]


class CategoryMapper:
    @staticmethod
    def to_dto(cat: Category) -> CategoryDTO:
        return CategoryDTO(
            id=cat.id,
            name=cat.name,
            description=cat.description or "",
            image_url=cat.image_url or "",
            display_order=cat.display_order,
            is_active=bool(cat.is_active),
        )

    @staticmethod
    def many_to_dto(categories: Iterable[Category]) -> List[CategoryDTO]:
        return [CategoryMapper.to_dto(c) for c in categories]


class SubcategoryMapper:
    @staticmethod
    def to_dto(sub: Subcategory) -> SubcategoryDTO:
        return SubcategoryDTO(
            id=sub.id,
            category_id=sub.category_id,
            name=sub.name,
            description=sub.description or "",
            image_url=sub.image_url or "",
            display_order=sub.display_order,
            is_active=bool(sub.is_active),
        )

    @staticmethod
    def many_to_dto(subcategories: Iterable[Subcategory]) -> List[SubcategoryDTO]:
        return [SubcategoryMapper.to_dto(s) for s in subcategories]


class FlavorMapper:
    @staticmethod
    def to_dto(flavor: ProductFlavor) -> FlavorDTO:
        return FlavorDTO(
            id=flavor.id,
            product_id=flavor.product_id,
            name=flavor.flavor_name,
            price_adjustment=_as_decimal(flavor.price_adjustment),
            is_available=bool(flavor.is_available),
        )


class ProductMapper:
    @staticmethod
    def to_dto(product: Product) -> ProductDTO:
        flavors = getattr(product, "flavors", None)
        flavor_rows = flavors.all() if flavors is not None else []
        return ProductDTO(
            id=product.id,
            subcategory_id=getattr(product, "subcategory_id", None),
            name=product.name,
            description=product.description or "",
            base_price=_as_decimal(product.base_price),
            weight_options=_as_str_list(product.weight_options),
            image_urls=_as_str_list(product.image_urls),
            flavors=[FlavorMapper.to_dto(f) for f in flavor_rows],
            is_active=bool(product.is_active),
            is_featured=bool(product.is_featured),
        )

    @staticmethod
    def many_to_dto(products: Iterable[Product]) -> List[ProductDTO]:
        return [ProductMapper.to_dto(p) for p in products]


class PromotionMapper:
    def __init__(self, product_mapper: Optional[ProductMapper] = None) -> None:
        self.product_mapper = product_mapper or ProductMapper()

    def to_dto(self, promotion: Promotion) -> PromotionDTO:
        return PromotionDTO(
            id=promotion.id,
            promotion_type=promotion.promotion_type,
            display_order=promotion.display_order,
            product=self.product_mapper.to_dto(promotion.product),
        )
