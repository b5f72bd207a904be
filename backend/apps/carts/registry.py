import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from apps.common import get_logger
from .aggregator import Cart, CartSnapshot

logger = get_logger(__name__).bind(component="carts", layer="registry")

SnapshotLoader = Callable[[str], Optional[CartSnapshot]]

DEFAULT_MAX_CARTS = 10000
DEFAULT_IDLE_SECONDS = 60 * 30


class _Entry:
    __slots__ = ("cart", "users", "last_used")

    def __init__(self, cart: Cart, now: float):
        self.cart = cart
        self.users = 0
        self.last_used = now


class CartRegistry:
    """
    Process-wide map of cart key to live ``Cart``.

    While a cart is checked out it is the authoritative copy; ``loader`` is
    consulted only when a key is not held, e.g. after a restart or eviction.
    Carts nobody holds are evicted least recently used first once more than
    ``max_carts`` are held, and after ``idle_seconds`` without use. Callers
    persist a snapshot before releasing a cart they changed, so an evicted cart
    comes back intact through ``loader``.
    """

    def __init__(
        self,
        max_carts: int = DEFAULT_MAX_CARTS,
        idle_seconds: Optional[float] = DEFAULT_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_carts < 1:
            raise ValueError("max_carts must be at least 1")
        self.max_carts = max_carts
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.Lock()

    @contextmanager
    def checkout(self, key: str, loader: Optional[SnapshotLoader] = None) -> Iterator[Cart]:
        """Hold the live cart for ``key``; it is not evicted until the block exits."""
        entry = self._acquire(key, loader)
        try:
            yield entry.cart
        finally:
            self._release(entry)

    def _acquire(self, key: str, loader: Optional[SnapshotLoader]) -> _Entry:
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None:
                snapshot = loader(key) if loader else None
                entry = _Entry(Cart.from_snapshot(snapshot), now)
                self._entries[key] = entry
                logger.debug(
                    "Cart attached to registry",
                    cart=key,
                    restored=snapshot is not None,
                    lines=len(entry.cart),
                )
            else:
                self._entries.move_to_end(key)
            entry.users += 1
            entry.last_used = now
            self._evict(now)
            return entry

    def _release(self, entry: _Entry) -> None:
        with self._lock:
            entry.users -= 1
            entry.last_used = self._clock()
            self._evict(entry.last_used)

    def _evict(self, now: float) -> None:
        # Entries are in least recently acquired order.
        over = len(self._entries) - self.max_carts
        for key in list(self._entries):
            entry = self._entries[key]
            if entry.users:
                continue
            idle = self.idle_seconds is not None and now - entry.last_used >= self.idle_seconds
            if over <= 0 and not idle:
                break
            del self._entries[key]
            over -= 1
            logger.debug("Cart evicted from registry", cart=key, idle=idle)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
