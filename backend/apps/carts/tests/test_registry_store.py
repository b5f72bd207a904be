import unittest
from decimal import Decimal

from apps.carts.aggregator import Cart, CartSnapshot
from apps.carts.pricing import Selection, resolve
from apps.carts.registry import CartRegistry
from apps.carts.store import CacheCartStore
from apps.carts.tests.factories import make_product
from apps.catalog.tests.fakes import FakeCache


def filled_snapshot(quantity=2):
    cart = Cart()
    configuration, _ = resolve(make_product(), Selection(quantity=quantity))
    cart.add_line(configuration)
    return cart.snapshot()


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class CartRegistryTests(unittest.TestCase):
    def test_checkout_returns_same_cart(self):
        registry = CartRegistry()
        with registry.checkout("abc12345") as first:
            pass
        with registry.checkout("abc12345") as second:
            self.assertIs(second, first)
        self.assertEqual(len(registry), 1)

    def test_loader_used_only_on_miss(self):
        registry = CartRegistry()
        calls = []

        def loader(key):
            calls.append(key)
            return filled_snapshot()

        with registry.checkout("abc12345", loader) as cart:
            pass
        with registry.checkout("abc12345", loader):
            pass
        self.assertEqual(calls, ["abc12345"])
        self.assertEqual(cart.total(), Decimal("1100"))

    def test_loader_returning_none_gives_empty_cart(self):
        with CartRegistry().checkout("abc12345", lambda key: None) as cart:
            self.assertEqual(len(cart), 0)

    def test_rejects_non_positive_bound(self):
        with self.assertRaises(ValueError):
            CartRegistry(max_carts=0)

    def test_least_recently_used_cart_evicted_past_bound(self):
        registry = CartRegistry(max_carts=2, idle_seconds=None)
        for key in ("cart-aaaa", "cart-bbbb", "cart-cccc"):
            with registry.checkout(key):
                pass
        with registry.checkout("cart-bbbb"):
            pass
        with registry.checkout("cart-dddd"):
            pass
        self.assertEqual(len(registry), 2)

        loaded = []
        with registry.checkout("cart-bbbb", loaded.append):
            pass
        with registry.checkout("cart-cccc", loaded.append):
            pass
        self.assertEqual(loaded, ["cart-cccc"])

    def test_cycling_keys_keeps_registry_bounded(self):
        registry = CartRegistry(max_carts=10, idle_seconds=None)
        for index in range(50):
            with registry.checkout(f"session-{index:04d}"):
                pass
        self.assertEqual(len(registry), 10)

    def test_held_cart_survives_eviction(self):
        registry = CartRegistry(max_carts=1, idle_seconds=None)
        with registry.checkout("cart-aaaa") as held:
            with registry.checkout("cart-bbbb"):
                pass
            with registry.checkout("cart-cccc"):
                pass
            with registry.checkout("cart-aaaa") as again:
                self.assertIs(again, held)
        self.assertEqual(len(registry), 1)

    def test_idle_cart_evicted_and_restored_from_snapshot(self):
        clock = FakeClock()
        registry = CartRegistry(max_carts=100, idle_seconds=60, clock=clock)
        snapshots = {"cart-aaaa": filled_snapshot(quantity=3)}
        with registry.checkout("cart-aaaa", snapshots.get) as first:
            pass

        clock.now = 61
        with registry.checkout("cart-bbbb"):
            pass
        self.assertEqual(len(registry), 1)

        with registry.checkout("cart-aaaa", snapshots.get) as restored:
            self.assertIsNot(restored, first)
            self.assertEqual(restored.total(), Decimal("1650"))


class CacheCartStoreTests(unittest.TestCase):
    def setUp(self):
        self.cache = FakeCache()
        self.store = CacheCartStore(self.cache, prefix="test-carts", ttl=60)

    def test_save_uses_prefixed_key(self):
        snapshot = filled_snapshot()
        self.store.save("abc12345", snapshot)
        self.assertIs(self.cache.store["test-carts:abc12345"], snapshot)
        self.assertEqual(self.store.load("abc12345"), snapshot)

    def test_load_missing(self):
        self.assertIsNone(self.store.load("abc12345"))

    def test_unexpected_payload_ignored(self):
        self.cache.set("test-carts:abc12345", {"lines": []})
        self.assertIsNone(self.store.load("abc12345"))

    def test_delete(self):
        self.store.save("abc12345", CartSnapshot())
        self.store.delete("abc12345")
        self.store.delete("abc12345")
        self.assertEqual(self.cache.store, {})
