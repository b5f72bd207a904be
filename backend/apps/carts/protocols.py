from __future__ import annotations

from typing import Callable, ContextManager, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from apps.catalog.models import Product
    from .aggregator import Cart, CartSnapshot


class ProductRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Product"]:
        ...


class CartStoreProtocol(Protocol):
    def load(self, cart_key: str) -> Optional["CartSnapshot"]:
        ...

    def save(self, cart_key: str, snapshot: "CartSnapshot") -> None:
        ...

    def delete(self, cart_key: str) -> None:
        ...


class CartRegistryProtocol(Protocol):
    def checkout(
        self,
        key: str,
        loader: Optional[Callable[[str], Optional["CartSnapshot"]]] = None,
    ) -> ContextManager["Cart"]:
        ...
