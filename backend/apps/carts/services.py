from __future__ import annotations

from typing import Any, ContextManager, Dict, Optional, Tuple, Union

from apps.catalog.dtos import ProductDTO
from apps.catalog.mappers import ProductMapper
from apps.common import get_logger
from .aggregator import Cart, CartSnapshot
from .dtos import CartDTO, CartLineDTO, QuoteDTO
from .exceptions import ConfigurationError, ProductNotFoundError
from .mappers import CartLineMapper, CartMapper, QuoteMapper
from .pricing import Selection, quote, resolve
from .protocols import (
    CartRegistryProtocol,
    CartStoreProtocol,
    ProductRepositoryProtocol,
)

logger = get_logger(__name__).bind(component="carts", layer="service")


class CartService:
    """
    Session carts on top of the resolver and the aggregator.

    Products are read through the catalog repository; only active products can
    be quoted or added. Each mutation and the snapshot it produces happen while
    the cart is checked out of the registry and under its lock, and the snapshot
    is handed to ``store`` when one is set. Without a store an evicted cart
    comes back empty.
    """

    def __init__(
        self,
        registry: CartRegistryProtocol,
        products: ProductRepositoryProtocol,
        product_mapper: Optional[ProductMapper] = None,
        cart_mapper: Optional[CartMapper] = None,
        store: Optional[CartStoreProtocol] = None,
    ):
        self.registry = registry
        self.products = products
        self.product_mapper = product_mapper or ProductMapper()
        self.cart_mapper = cart_mapper or CartMapper()
        self.store = store
        self.logger = logger.bind(service="CartService")

    def _load_product(self, product_id: int) -> ProductDTO:
        product = self.products.get(id=product_id, is_active=True)
        if not product:
            self.logger.info("Product unavailable for cart", product_id=product_id)
            raise ProductNotFoundError(product_id)
        return self.product_mapper.to_dto(product)

    def _checkout(self, key: str) -> ContextManager[Cart]:
        loader = self.store.load if self.store is not None else None
        return self.registry.checkout(key, loader)

    def _persist(self, key: str, cart: Cart) -> CartSnapshot:
        snapshot = cart.snapshot()
        if self.store is not None:
            self.store.save(key, snapshot)
        return snapshot

    @staticmethod
    def _selection(data: Union[Dict[str, Any], Selection]) -> Selection:
        if isinstance(data, Selection):
            return data
        return Selection(
            flavor_id=data.get("flavor_id"),
            weight=data.get("weight"),
            quantity=data.get("quantity", 1),
        )

    def quote(self, product_id: int, selection: Union[Dict[str, Any], Selection]) -> QuoteDTO:
        product = self._load_product(product_id)
        try:
            result = quote(product, self._selection(selection))
        except ConfigurationError as exc:
            self.logger.info(
                "Quote rejected", product_id=product_id, reason=exc.reason, detail=str(exc)
            )
            raise
        self.logger.debug(
            "Quoted product",
            product_id=product_id,
            unit_price=result.unit_price,
            subtotal=result.subtotal,
        )
        return QuoteMapper.to_dto(result)

    def get_cart(self, key: str) -> CartDTO:
        with self._checkout(key) as cart:
            snapshot = cart.snapshot()
        self.logger.debug("Fetched cart", cart=key, lines=len(snapshot.lines))
        return self.cart_mapper.to_dto(key, snapshot)

    def add_item(
        self, key: str, product_id: int, selection: Union[Dict[str, Any], Selection]
    ) -> Tuple[CartLineDTO, CartDTO]:
        """Resolve the selection and append it as a new line; never merges."""
        product = self._load_product(product_id)
        try:
            configuration, unit_price = resolve(product, self._selection(selection))
        except ConfigurationError as exc:
            self.logger.info(
                "Add to cart rejected", cart=key, product_id=product_id, reason=exc.reason
            )
            raise
        with self._checkout(key) as cart, cart.locked():
            line = cart.add_line(configuration)
            snapshot = self._persist(key, cart)
        self.logger.info(
            "Cart line added",
            cart=key,
            line_id=line.id,
            product_id=product_id,
            quantity=line.quantity,
            unit_price=unit_price,
        )
        return CartLineMapper.to_dto(line), self.cart_mapper.to_dto(key, snapshot)

    def update_quantity(self, key: str, line_id: str, quantity: int) -> CartDTO:
        with self._checkout(key) as cart, cart.locked():
            try:
                line = cart.update_quantity(line_id, quantity)
            except ConfigurationError as exc:
                self.logger.info(
                    "Quantity update rejected", cart=key, line_id=line_id, reason=exc.reason
                )
                raise
            snapshot = self._persist(key, cart)
        self.logger.info(
            "Cart line quantity updated", cart=key, line_id=line_id, quantity=line.quantity
        )
        return self.cart_mapper.to_dto(key, snapshot)

    def remove_line(self, key: str, line_id: str) -> CartDTO:
        with self._checkout(key) as cart, cart.locked():
            before = len(cart)
            cart.remove_line(line_id)
            snapshot = self._persist(key, cart)
        self.logger.info(
            "Cart line removed",
            cart=key,
            line_id=line_id,
            removed=before != len(snapshot.lines),
        )
        return self.cart_mapper.to_dto(key, snapshot)

    def clear_cart(self, key: str) -> CartDTO:
        """Empty the cart in place; requests already holding it see the cleared lines."""
        with self._checkout(key) as cart, cart.locked():
            cart.clear()
            if self.store is not None:
                self.store.delete(key)
            snapshot = cart.snapshot()
        self.logger.info("Cart cleared", cart=key)
        return self.cart_mapper.to_dto(key, snapshot)
