import unittest

from apps.carts.commands import CartItemCommand, CartQuantityCommand
from apps.carts.pricing import Selection


class CartItemCommandTests(unittest.TestCase):
    def test_snake_case_payload(self):
        cmd = CartItemCommand.from_raw(
            {"product_id": 4, "flavor_id": 10, "weight": "1kg", "quantity": 2}
        )
        self.assertEqual(cmd.product_id, 4)
        self.assertEqual(cmd.selection, Selection(flavor_id=10, weight="1kg", quantity=2))

    def test_camel_case_payload_and_digit_strings(self):
        cmd = CartItemCommand.from_raw(
            {"productId": "4", "flavorId": "10", "weightLabel": "500g", "quantity": "3"}
        )
        self.assertEqual(cmd.product_id, 4)
        self.assertEqual(cmd.selection.flavor_id, 10)
        self.assertEqual(cmd.selection.weight, "500g")
        self.assertEqual(cmd.selection.quantity, 3)

    def test_defaults(self):
        cmd = CartItemCommand.from_raw({"product_id": 1})
        self.assertEqual(cmd.selection, Selection(flavor_id=None, weight=None, quantity=1))

    def test_non_numeric_quantity_passed_through(self):
        cmd = CartItemCommand.from_raw({"product_id": 1, "quantity": "two"})
        self.assertEqual(cmd.selection.quantity, "two")

    def test_missing_product_id(self):
        with self.assertRaises(ValueError):
            CartItemCommand.from_raw({"quantity": 1})
        with self.assertRaises(ValueError):
            CartItemCommand.from_raw({"product_id": True})

    def test_non_dict_payload(self):
        with self.assertRaises(ValueError):
            CartItemCommand.from_raw([("product_id", 1)])


class CartQuantityCommandTests(unittest.TestCase):
    def test_from_raw(self):
        cmd = CartQuantityCommand.from_raw("line-1", {"quantity": "5"})
        self.assertEqual(cmd.line_id, "line-1")
        self.assertEqual(cmd.quantity, 5)

    def test_quantity_required(self):
        with self.assertRaises(ValueError):
            CartQuantityCommand.from_raw("line-1", {})
