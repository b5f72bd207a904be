from typing import Iterable, List, Optional

from .aggregator import CartLine, CartSnapshot
from .dtos import CartDTO, CartLineDTO, QuoteDTO
from .pricing import LineConfiguration, Quote


def _flavor_fields(configuration: LineConfiguration):
    flavor = configuration.flavor
    if flavor is None:
        return None, None
    return flavor.id, flavor.name


class CartLineMapper:
    @staticmethod
    def to_dto(line: CartLine) -> CartLineDTO:
        cfg = line.configuration
        flavor_id, flavor_name = _flavor_fields(cfg)
        images = cfg.product.image_urls
        return CartLineDTO(
            id=line.id,
            product_id=cfg.product.id,
            product_name=cfg.product.name,
            image_url=images[0] if images else None,
            flavor_id=flavor_id,
            flavor_name=flavor_name,
            weight=cfg.weight,
            quantity=cfg.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )

    @staticmethod
    def many_to_dto(lines: Iterable[CartLine]) -> List[CartLineDTO]:
        return [CartLineMapper.to_dto(line) for line in lines]


class CartMapper:
    def __init__(self, line_mapper: Optional[CartLineMapper] = None) -> None:
        self.line_mapper = line_mapper or CartLineMapper()

    def to_dto(self, key: Optional[str], snapshot: CartSnapshot) -> CartDTO:
        lines = self.line_mapper.many_to_dto(snapshot.lines)
        return CartDTO(
            key=key,
            lines=lines,
            total=snapshot.total,
            item_count=sum(line.quantity for line in lines),
        )


class QuoteMapper:
    @staticmethod
    def to_dto(quote: Quote) -> QuoteDTO:
        cfg = quote.configuration
        flavor_id, flavor_name = _flavor_fields(cfg)
        return QuoteDTO(
            product_id=cfg.product.id,
            flavor_id=flavor_id,
            flavor_name=flavor_name,
            weight=cfg.weight,
            quantity=cfg.quantity,
            unit_price=quote.unit_price,
            subtotal=quote.subtotal,
        )
