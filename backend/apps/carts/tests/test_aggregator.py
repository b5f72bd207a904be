import threading
import unittest
from decimal import Decimal

from apps.carts.aggregator import Cart, CartSnapshot
from apps.carts.exceptions import InvalidQuantity, LineNotFound, UnavailableFlavor
from apps.carts.pricing import MAX_QUANTITY, LineConfiguration, Selection, resolve
from apps.catalog.dtos import FlavorDTO
from apps.carts.tests.factories import make_product


def configure(product=None, **selection):
    configuration, _ = resolve(product or make_product(), Selection(**selection))
    return configuration


class CartAggregatorTests(unittest.TestCase):
    def setUp(self):
        self.cart = Cart()

    def test_empty_cart_total_is_zero(self):
        self.assertEqual(self.cart.total(), Decimal("0"))
        self.assertEqual(len(self.cart), 0)
        self.assertEqual(self.cart.lines(), [])

    def test_identical_configurations_are_not_merged(self):
        cfg = configure(flavor_id=10, weight="1kg", quantity=2)
        first = self.cart.add_line(cfg)
        second = self.cart.add_line(cfg)
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(len(self.cart), 2)
        self.assertEqual(self.cart.total(), first.subtotal * 2)
        self.assertEqual(self.cart.total(), Decimal("2200"))

    def test_lines_keep_insertion_order(self):
        ids = [self.cart.add_line(configure(quantity=q)).id for q in (1, 2, 3)]
        self.assertEqual([line.id for line in self.cart.lines()], ids)

    def test_total_tracks_sum_of_subtotals(self):
        self.cart.add_line(configure(quantity=1))
        line = self.cart.add_line(configure(quantity=3))
        self.assertEqual(self.cart.total(), sum(l.subtotal for l in self.cart.lines()))
        for l in self.cart.lines():
            self.cart.remove_line(l.id)
        self.assertEqual(self.cart.total(), Decimal("0"))
        self.assertIsNone(self.cart.get_line(line.id))

    def test_update_quantity_recomputes_subtotal(self):
        line = self.cart.add_line(configure(quantity=1))
        updated = self.cart.update_quantity(line.id, 5)
        self.assertEqual(updated.quantity, 5)
        self.assertEqual(updated.subtotal, Decimal("2750"))
        self.assertEqual(self.cart.total(), Decimal("2750"))

    def test_update_quantity_rejects_out_of_range_and_keeps_cart(self):
        line = self.cart.add_line(configure(quantity=2))
        for bad in (0, -3, MAX_QUANTITY + 1, 10 ** 13):
            with self.assertRaises(InvalidQuantity):
                self.cart.update_quantity(line.id, bad)
        self.assertEqual(self.cart.get_line(line.id).quantity, 2)
        self.assertEqual(self.cart.total(), Decimal("1100"))

    def test_update_quantity_unknown_line(self):
        with self.assertRaises(LineNotFound):
            self.cart.update_quantity("nonexistent", 2)

    def test_remove_unknown_line_is_noop(self):
        self.cart.add_line(configure())
        before = self.cart.snapshot()
        self.cart.remove_line("nonexistent")
        self.assertEqual(self.cart.snapshot(), before)

    def test_rejected_configuration_leaves_cart_unchanged(self):
        product = make_product()
        foreign = FlavorDTO(id=5, product_id=9, name="Lemon", price_adjustment=Decimal("0"), is_available=True)
        with self.assertRaises(UnavailableFlavor):
            self.cart.add_line(LineConfiguration(product, foreign, "500g", 1))
        self.assertEqual(len(self.cart), 0)

    def test_returned_lines_are_copies(self):
        line = self.cart.add_line(configure(quantity=1))
        copy = self.cart.lines()[0]
        copy.unit_price = Decimal("1")
        self.assertEqual(self.cart.get_line(line.id).unit_price, Decimal("550"))

    def test_clear(self):
        self.cart.add_line(configure())
        self.cart.clear()
        self.assertEqual(len(self.cart), 0)
        self.assertEqual(self.cart.total(), Decimal("0"))


class CartSnapshotTests(unittest.TestCase):
    def test_snapshot_round_trip(self):
        cart = Cart()
        line = cart.add_line(configure(flavor_id=10, quantity=2))
        snapshot = cart.snapshot()
        self.assertEqual(snapshot.total, Decimal("1100"))
        restored = Cart.from_snapshot(snapshot)
        self.assertEqual(restored.lines(), cart.lines())
        restored.update_quantity(line.id, 1)
        self.assertEqual(cart.total(), Decimal("1100"))

    def test_from_missing_snapshot_is_empty(self):
        self.assertEqual(len(Cart.from_snapshot(None)), 0)
        self.assertEqual(CartSnapshot().total, Decimal("0"))

    def test_concurrent_adds_are_all_recorded(self):
        cart = Cart()
        cfg = configure(quantity=1)

        def worker():
            for _ in range(50):
                cart.add_line(cfg)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(cart), 400)
        snapshot = cart.snapshot()
        self.assertEqual(snapshot.total, Decimal("550") * 400)
        self.assertEqual(len(snapshot.lines), 400)
