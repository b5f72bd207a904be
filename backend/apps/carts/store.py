from typing import Optional

from django.conf import settings

from apps.common import get_logger
from .aggregator import CartSnapshot

logger = get_logger(__name__).bind(component="carts", layer="store")


class CacheCartStore:
    """Persists cart snapshots in the Django cache (Redis in deployment)."""

    def __init__(self, cache_backend, prefix: Optional[str] = None, ttl: Optional[int] = None):
        self.cache = cache_backend
        self.prefix = prefix or getattr(settings, "CART_CACHE_PREFIX", "carts:session")
        self.ttl = ttl if ttl is not None else getattr(settings, "CART_TTL", None)

    def _key(self, cart_key: str) -> str:
        return f"{self.prefix}:{cart_key}"

    def load(self, cart_key: str) -> Optional[CartSnapshot]:
        value = self.cache.get(self._key(cart_key))
        if value is None:
            return None
        if not isinstance(value, CartSnapshot):
            logger.warning("Discarding unexpected cart payload", cart=cart_key, type=type(value).__name__)
            return None
        logger.debug("Cart snapshot loaded", cart=cart_key, lines=len(value.lines))
        return value

    def save(self, cart_key: str, snapshot: CartSnapshot) -> None:
        self.cache.set(self._key(cart_key), snapshot, timeout=self.ttl)
        logger.debug("Cart snapshot saved", cart=cart_key, lines=len(snapshot.lines), total=snapshot.total)

    def delete(self, cart_key: str) -> None:
        self.cache.delete(self._key(cart_key))
        logger.debug("Cart snapshot deleted", cart=cart_key)
