from __future__ import annotations

from django.conf import settings
from django.core.cache import cache

from apps.catalog.mappers import ProductMapper
from apps.catalog.repositories import ProductRepository

from .mappers import CartLineMapper, CartMapper
from .registry import CartRegistry
from .services import CartService
from .store import CacheCartStore

# Live carts are shared by every service instance in the process.
cart_registry = CartRegistry(
    max_carts=settings.CART_REGISTRY_MAX_CARTS,
    idle_seconds=settings.CART_REGISTRY_IDLE_SECONDS,
)


def build_cart_service() -> CartService:
    return CartService(
        registry=cart_registry,
        products=ProductRepository(),
        product_mapper=ProductMapper(),
        cart_mapper=CartMapper(CartLineMapper()),
        store=CacheCartStore(cache),
    )
