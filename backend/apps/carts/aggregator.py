"""Cart aggregator: ordered cart lines with derived subtotals and a grand total."""
import threading
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from .exceptions import LineNotFound
from .pricing import LineConfiguration, check_quantity, unit_price, validate_configuration


@dataclass
class CartLine:
    id: str
    configuration: LineConfiguration
    unit_price: Decimal

    @property
    def quantity(self) -> int:
        return self.configuration.quantity

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.configuration.quantity


@dataclass(frozen=True)
class CartSnapshot:
    """Point-in-time copy of a cart, safe to hand to a persistence collaborator."""

    lines: Tuple[CartLine, ...] = ()
    total: Decimal = Decimal("0")


class Cart:
    """
    Lines in insertion order.

    Every read and mutation holds the cart's lock, so concurrent callers never
    observe a half-applied change and snapshots are always consistent.
    """

    def __init__(self, lines: Optional[Iterable[CartLine]] = None):
        self._lines: List[CartLine] = [replace(line) for line in lines or ()]
        self._lock = threading.RLock()

    def locked(self):
        """Hold the cart lock across several calls, e.g. a mutation and its persistence."""
        return self._lock

    def add_line(self, configuration: LineConfiguration) -> CartLine:
        """Append a new line; identical configurations are never merged."""
        validate_configuration(configuration)
        line = CartLine(
            id=uuid.uuid4().hex,
            configuration=configuration,
            unit_price=unit_price(configuration.product, configuration.flavor),
        )
        with self._lock:
            self._lines.append(line)
            return replace(line)

    def update_quantity(self, line_id: str, quantity: int) -> CartLine:
        check_quantity(quantity, line_id=line_id)
        with self._lock:
            line = self._find(line_id)
            if line is None:
                raise LineNotFound(line_id)
            line.configuration = line.configuration.with_quantity(quantity)
            return replace(line)

    def remove_line(self, line_id: str) -> None:
        """Drop a line; unknown ids are ignored so double removals stay harmless."""
        with self._lock:
            self._lines = [line for line in self._lines if line.id != line_id]

    def clear(self) -> None:
        with self._lock:
            self._lines = []

    def total(self) -> Decimal:
        with self._lock:
            return sum((line.subtotal for line in self._lines), Decimal("0"))

    def lines(self) -> List[CartLine]:
        with self._lock:
            return [replace(line) for line in self._lines]

    def get_line(self, line_id: str) -> Optional[CartLine]:
        with self._lock:
            line = self._find(line_id)
            return replace(line) if line is not None else None

    def snapshot(self) -> CartSnapshot:
        with self._lock:
            return CartSnapshot(lines=tuple(self.lines()), total=self.total())

    @classmethod
    def from_snapshot(cls, snapshot: Optional[CartSnapshot]) -> "Cart":
        if snapshot is None:
            return cls()
        return cls(snapshot.lines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def _find(self, line_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.id == line_id:
                return line
        return None
