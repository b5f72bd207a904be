"""Product configuration resolver.

Turns a shopper's raw choice of flavor, weight and quantity into a fully
specified line configuration and its unit price. Everything here is a pure
function of its arguments.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Tuple

from apps.catalog.dtos import FlavorDTO, ProductDTO
from .exceptions import InvalidQuantity, InvalidWeightOption, UnavailableFlavor


@dataclass(frozen=True)
class Selection:
    """What the shopper picked on the product page; None means not chosen."""

    flavor_id: Optional[Any] = None
    weight: Optional[str] = None
    quantity: int = 1


@dataclass(frozen=True)
class LineConfiguration:
    product: ProductDTO
    flavor: Optional[FlavorDTO]
    weight: Optional[str]
    quantity: int

    def with_quantity(self, quantity: int) -> "LineConfiguration":
        return LineConfiguration(self.product, self.flavor, self.weight, quantity)


@dataclass(frozen=True)
class Quote:
    configuration: LineConfiguration
    unit_price: Decimal
    subtotal: Decimal


# Largest quantity a single line may carry.
MAX_QUANTITY = 999


def is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def check_quantity(quantity: Any, **context) -> int:
    """Return ``quantity`` if it is an integer between 1 and ``MAX_QUANTITY``."""
    if not is_positive_int(quantity):
        raise InvalidQuantity("Quantity must be a positive integer", quantity=quantity, **context)
    if quantity > MAX_QUANTITY:
        raise InvalidQuantity(
            f"Quantity must not exceed {MAX_QUANTITY}",
            quantity=quantity,
            max_quantity=MAX_QUANTITY,
            **context,
        )
    return quantity


def unit_price(product: ProductDTO, flavor: Optional[FlavorDTO]) -> Decimal:
    """Base price plus the flavor's adjustment, taken at face value (no floor)."""
    adjustment = flavor.price_adjustment if flavor is not None else Decimal("0")
    return product.base_price + adjustment


def _weight_chosen(weight: Optional[str]) -> bool:
    # The storefront form reports an untouched weight picker as ''.
    return weight is not None and weight != ""


def resolve(product: ProductDTO, selection: Selection) -> Tuple[LineConfiguration, Decimal]:
    """
    Validate ``selection`` against ``product`` and fill in the defaults.

    Checks run in order: quantity, flavor, weight. An omitted flavor falls back
    to the first declared flavor even when that one is unavailable; an omitted
    weight falls back to the first weight option.

    Raises:
        InvalidQuantity: quantity is not an integer between 1 and MAX_QUANTITY.
        UnavailableFlavor: flavor is not one of the product's, or is not available.
        InvalidWeightOption: weight is not one of the product's options.
    """
    quantity = check_quantity(selection.quantity)

    flavor: Optional[FlavorDTO] = None
    if selection.flavor_id is not None:
        flavor = product.find_flavor(selection.flavor_id)
        if flavor is None:
            raise UnavailableFlavor(
                "Flavor does not belong to this product",
                flavor_id=selection.flavor_id,
                product_id=product.id,
            )
        if not flavor.is_available:
            raise UnavailableFlavor(
                "Flavor is currently unavailable",
                flavor_id=selection.flavor_id,
                product_id=product.id,
            )

    weight: Optional[str] = None
    if _weight_chosen(selection.weight):
        if selection.weight not in product.weight_options:
            raise InvalidWeightOption(
                "Weight is not offered for this product",
                weight=selection.weight,
                options=list(product.weight_options),
            )
        weight = selection.weight

    if flavor is None and product.flavors:
        flavor = product.flavors[0]
    if weight is None and product.weight_options:
        weight = product.weight_options[0]

    configuration = LineConfiguration(
        product=product, flavor=flavor, weight=weight, quantity=quantity
    )
    return configuration, unit_price(product, flavor)


def validate_configuration(configuration: LineConfiguration) -> LineConfiguration:
    """
    Structural check for a configuration entering a cart.

    Availability is not re-checked so a defaulted first flavor stays accepted.
    """
    check_quantity(configuration.quantity)
    product = configuration.product
    flavor = configuration.flavor
    if flavor is not None:
        owned = product.find_flavor(flavor.id)
        if owned is None or flavor.product_id != product.id:
            raise UnavailableFlavor(
                "Flavor does not belong to this product",
                flavor_id=flavor.id,
                product_id=product.id,
            )
    if _weight_chosen(configuration.weight) and configuration.weight not in product.weight_options:
        raise InvalidWeightOption(
            "Weight is not offered for this product",
            weight=configuration.weight,
            options=list(product.weight_options),
        )
    return configuration


def quote(product: ProductDTO, selection: Selection) -> Quote:
    configuration, price = resolve(product, selection)
    return Quote(
        configuration=configuration,
        unit_price=price,
        subtotal=price * configuration.quantity,
    )
