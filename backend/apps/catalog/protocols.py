from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .commands import FlavorCommand
    from .models import Category, Product, Promotion, Store, Subcategory


class CacheBackendProtocol(Protocol):
    def get(self, key: str) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        ...


class ProductRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Product"]:
        ...

    def list(self, **filters) -> Iterable["Product"]:
        ...

    def create(self, **data) -> "Product":
        ...

    def update_scalar(self, product: "Product", **fields) -> "Product":
        ...

    def delete(self, product: "Product") -> None:
        ...

    def list_similar(self, product: "Product", limit: int = 4) -> Iterable["Product"]:
        ...

    def replace_flavors(self, product: "Product", flavors: Sequence["FlavorCommand"]):
        ...

    def refresh(self, product: "Product") -> Optional["Product"]:
        ...


class CategoryRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Category"]:
        ...

    def list(self, **filters) -> Iterable["Category"]:
        ...

    def create(self, **data) -> "Category":
        ...

    def delete(self, category: "Category") -> None:
        ...


class SubcategoryRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Subcategory"]:
        ...

    def list(self, **filters) -> Iterable["Subcategory"]:
        ...

    def create(self, **data) -> "Subcategory":
        ...


class StoreRepositoryProtocol(Protocol):
    def list(self, **filters) -> Iterable["Store"]:
        ...


class PromotionRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Promotion"]:
        ...

    def create(self, **data) -> "Promotion":
        ...

    def delete(self, promotion: "Promotion") -> None:
        ...

    def list_active_with_products(self) -> Iterable["Promotion"]:
        ...
