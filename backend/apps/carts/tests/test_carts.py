import uuid
from decimal import Decimal

from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APITestCase

from apps.carts.pricing import MAX_QUANTITY
from apps.catalog.models import Category, Product, ProductFlavor, Subcategory


class TestCarts(APITestCase):
    def setUp(self):
        cache.clear()
        self.key = f"test-{uuid.uuid4().hex[:16]}"
        self.headers = {"HTTP_X_CART_SESSION": self.key}
        category = Category.objects.create(name="Cakes")
        sub = Subcategory.objects.create(category=category, name="Celebration")
        self.product = Product.objects.create(
            subcategory=sub,
            name="Celebration Cake",
            base_price=Decimal("500"),
            weight_options=["500g", "1kg"],
            image_urls=["https://cdn.example/cake.jpg"],
        )
        self.chocolate = ProductFlavor.objects.create(
            product=self.product, flavor_name="Chocolate", price_adjustment=Decimal("50")
        )
        self.mango = ProductFlavor.objects.create(
            product=self.product,
            flavor_name="Mango",
            price_adjustment=Decimal("80"),
            is_available=False,
        )
        self.items_url = "/api/cart/items/"
        self.cart_url = "/api/cart/"

    def _add(self, **payload):
        body = {"product_id": self.product.id}
        body.update(payload)
        return self.client.post(self.items_url, body, format="json", **self.headers)

    def test_add_and_get_cart(self):
        res = self._add(flavor_id=self.chocolate.id, weight="1kg", quantity=2)
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res["X-Cart-Session"], self.key)
        self.assertEqual(res.data["line"]["flavor_name"], "Chocolate")
        self.assertEqual(res.data["line"]["unit_price"], "550.00")
        self.assertEqual(res.data["cart"]["total"], "1100.00")

        res_get = self.client.get(self.cart_url, **self.headers)
        self.assertEqual(res_get.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res_get.data["lines"]), 1)
        self.assertEqual(res_get.data["item_count"], 2)

    def test_defaults_when_nothing_chosen(self):
        res = self._add()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["line"]["weight"], "500g")
        self.assertEqual(res.data["line"]["flavor_id"], self.chocolate.id)
        self.assertEqual(res.data["line"]["quantity"], 1)

    def test_identical_adds_are_separate_lines(self):
        self._add(flavor_id=self.chocolate.id, weight="1kg", quantity=2)
        res = self._add(flavor_id=self.chocolate.id, weight="1kg", quantity=2)
        self.assertEqual(len(res.data["cart"]["lines"]), 2)
        self.assertEqual(res.data["cart"]["total"], "2200.00")

    def test_rejections_report_reason(self):
        cases = [
            ({"quantity": 0}, "INVALID_QUANTITY"),
            ({"flavor_id": self.mango.id}, "UNAVAILABLE_FLAVOR"),
            ({"weight": "3kg"}, "INVALID_WEIGHT_OPTION"),
        ]
        for payload, reason in cases:
            with self.subTest(reason=reason):
                res = self._add(**payload)
                self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(res.data["error"]["details"]["reason"], reason)
        res_get = self.client.get(self.cart_url, **self.headers)
        self.assertEqual(res_get.data["lines"], [])

    def test_oversized_quantity_rejected_and_cart_still_readable(self):
        self._add(quantity=2)
        res = self._add(quantity=10 ** 13)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        details = res.data["error"]["details"]
        self.assertEqual(details["reason"], "INVALID_QUANTITY")
        self.assertEqual(details["max_quantity"], MAX_QUANTITY)

        res = self._add(quantity=MAX_QUANTITY)
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        line_id = res.data["line"]["id"]
        res = self.client.patch(
            f"{self.items_url}{line_id}/", {"quantity": 10 ** 13}, format="json", **self.headers
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res_get = self.client.get(self.cart_url, **self.headers)
        self.assertEqual(res_get.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res_get.data["lines"]), 2)
        self.assertEqual(res_get.data["item_count"], MAX_QUANTITY + 2)
        self.assertEqual(res_get.data["total"], "550550.00")

    def test_inactive_product_not_found(self):
        self.product.is_active = False
        self.product.save()
        res = self._add()
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_update_remove_and_clear(self):
        line_id = self._add(quantity=1).data["line"]["id"]
        res = self.client.patch(
            f"{self.items_url}{line_id}/", {"quantity": 4}, format="json", **self.headers
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], "2200.00")

        res = self.client.patch(
            f"{self.items_url}{line_id}/", {"quantity": 0}, format="json", **self.headers
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["details"]["reason"], "INVALID_QUANTITY")

        res = self.client.patch(
            f"{self.items_url}nope/", {"quantity": 2}, format="json", **self.headers
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        res = self.client.delete(f"{self.items_url}nope/", **self.headers)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], "2200.00")

        res = self.client.delete(f"{self.items_url}{line_id}/", **self.headers)
        self.assertEqual(res.data["lines"], [])

        self._add()
        res = self.client.delete(self.cart_url, **self.headers)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total"], "0.00")

    def test_malformed_cart_header(self):
        res = self.client.get(self.cart_url, HTTP_X_CART_SESSION="bad key")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.json()["error"]["code"], "VALIDATION_ERROR")

    def test_session_cookie_fallback(self):
        res = self.client.post(
            self.items_url, {"product_id": self.product.id}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        session_key = res["X-Cart-Session"]
        self.assertTrue(session_key)
        res_get = self.client.get(self.cart_url)
        self.assertEqual(res_get["X-Cart-Session"], session_key)
        self.assertEqual(len(res_get.data["lines"]), 1)
        self.client.delete(self.cart_url)


class TestProductQuote(APITestCase):
    def setUp(self):
        category = Category.objects.create(name="Cakes")
        sub = Subcategory.objects.create(category=category, name="Celebration")
        self.product = Product.objects.create(
            subcategory=sub,
            name="Celebration Cake",
            base_price=Decimal("500"),
            weight_options=["500g", "1kg"],
        )
        self.flavor = ProductFlavor.objects.create(
            product=self.product, flavor_name="Chocolate", price_adjustment=Decimal("50")
        )
        self.url = f"/api/products/{self.product.id}/quote/"

    def test_quote_defaults(self):
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["unit_price"], "550.00")
        self.assertEqual(res.data["weight"], "500g")
        self.assertEqual(res.data["quantity"], 1)

    def test_quote_with_selection(self):
        res = self.client.get(
            self.url, {"flavorId": self.flavor.id, "weight": "1kg", "quantity": 3}
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["subtotal"], "1650.00")

    def test_quote_errors(self):
        res = self.client.get(self.url, {"weight": "2kg"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["details"]["reason"], "INVALID_WEIGHT_OPTION")
        res = self.client.get(self.url, {"quantity": 10 ** 13})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["details"]["reason"], "INVALID_QUANTITY")
        res = self.client.get(self.url, {"quantity": "lots"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        res = self.client.get("/api/products/999999/quote/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
