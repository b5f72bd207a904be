from __future__ import annotations

from django.core.cache import cache

from .mappers import PromotionMapper
from .repositories import (
    CategoryRepository,
    ProductRepository,
    PromotionRepository,
    StoreRepository,
    SubcategoryRepository,
)
from .services import CategoryService, ProductService, StorefrontService


def build_product_service(*, disable_cache: bool = False) -> ProductService:
    return ProductService(
        products=ProductRepository(),
        cache_backend=cache,
        disable_cache=disable_cache,
    )


def build_category_service() -> CategoryService:
    return CategoryService(
        categories=CategoryRepository(),
        subcategories=SubcategoryRepository(),
    )


def build_storefront_service() -> StorefrontService:
    return StorefrontService(
        categories=CategoryRepository(),
        promotions=PromotionRepository(),
        stores=StoreRepository(),
        products=ProductRepository(),
        promotion_mapper=PromotionMapper(),
    )
