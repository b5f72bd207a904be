import types
import unittest
from decimal import Decimal
from unittest.mock import Mock, patch

from rest_framework.response import Response
from rest_framework.test import APIRequestFactory, force_authenticate

from apps.api.validation import validate_request_context
from apps.catalog.dtos import (
    CategoryDTO,
    FlavorDTO,
    HomeFeedDTO,
    ProductDTO,
    PromotionDTO,
    StoreDTO,
)
from apps.catalog.pagination import ProductListPagination
from apps.catalog.serializers import ProductReadSerializer
from apps.catalog.services import CategoryAlreadyExistsError
from apps.catalog.views import (
    CategoryListView,
    HomeView,
    ProductDetailView,
    ProductListView,
    ProductSimilarView,
    ProductToggleView,
    PromotionListView,
    StoreListView,
    SubcategoryListView,
)


def make_product_dto(product_id=1, name="Celebration Cake"):
    return ProductDTO(
        id=product_id,
        subcategory_id=1,
        name=name,
        description="",
        base_price=Decimal("500"),
        weight_options=["500g", "1kg"],
        image_urls=[],
        flavors=[FlavorDTO(10, product_id, "Chocolate", Decimal("50"), True)],
    )


def make_category_dto(category_id=1, name="Cakes"):
    return CategoryDTO(
        id=category_id, name=name, description="", image_url="", display_order=0, is_active=True
    )


class CatalogViewsUnitTests(unittest.TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()

    def dispatch(self, request, view_cls, **kwargs):
        pre_response = validate_request_context(request, view_cls, kwargs)
        if pre_response is not None:
            return pre_response
        view = view_cls.as_view()
        return view(request, **kwargs)

    def authenticate(self, request, user):
        request.user = user
        force_authenticate(request, user=user)

    @staticmethod
    def _user(user_id=1, *, staff=False):
        return types.SimpleNamespace(
            id=user_id, is_authenticated=True, is_staff=staff, is_superuser=False
        )

    def test_product_list_paginates_and_filters(self):
        service_mock = Mock()
        expected_response = Response({"results": []})
        service_mock.list_products_paginated.return_value = expected_response
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.get(
                "/api/products/", {"limit": 1, "category": "2", "featured": "true"}
            )
            response = self.dispatch(request, ProductListView)
        self.assertIs(response, expected_response)
        _, kwargs = service_mock.list_products_paginated.call_args
        self.assertEqual(kwargs["category_id"], 2)
        self.assertIsNone(kwargs["subcategory_id"])
        self.assertTrue(kwargs["featured"])
        self.assertIs(kwargs["paginator_class"], ProductListPagination)
        self.assertIs(kwargs["serializer_class"], ProductReadSerializer)
        self.assertEqual(kwargs["view"].__class__, ProductListView)

    def test_product_list_rejects_non_integer_filter(self):
        service_mock = Mock()
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.get("/api/products/", {"subcategory": "cakes"})
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
        service_mock.list_products_paginated.assert_not_called()

    def test_product_create_requires_staff(self):
        service_mock = Mock()
        payload = {"subcategory_id": 1, "name": "Cake", "base_price": "100.00"}
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post("/api/products/", payload, format="json")
            self.authenticate(request, self._user())
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["error"]["code"], "FORBIDDEN")
        service_mock.create_product.assert_not_called()

    def test_product_create_by_staff(self):
        service_mock = Mock()
        service_mock.create_product.return_value = make_product_dto(3, "Black Forest")
        payload = {
            "subcategory_id": 1,
            "name": "Black Forest",
            "base_price": "650.00",
            "weight_options": ["500g"],
            "flavors": [{"flavor_name": "Classic"}],
        }
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post("/api/products/", payload, format="json")
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["id"], 3)
        data = service_mock.create_product.call_args[0][0]
        self.assertEqual(data["base_price"], Decimal("650.00"))

    def test_product_create_rejects_negative_price(self):
        service_mock = Mock()
        payload = {"subcategory_id": 1, "name": "Cake", "base_price": "-1"}
        with patch.object(ProductListView, "service", service_mock):
            request = self.factory.post("/api/products/", payload, format="json")
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, ProductListView)
        self.assertEqual(response.status_code, 400)
        service_mock.create_product.assert_not_called()

    def test_product_detail_active_only_for_shoppers(self):
        service_mock = Mock()
        service_mock.get_product.return_value = make_product_dto()
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.get("/api/products/1/")
            response = self.dispatch(request, ProductDetailView, product_id=1)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["base_price"], "500.00")
        self.assertEqual(response.data["flavors"][0]["name"], "Chocolate")
        service_mock.get_product.assert_called_once_with(1, active_only=True)

    def test_product_detail_staff_sees_hidden(self):
        service_mock = Mock()
        service_mock.get_product.return_value = make_product_dto()
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.get("/api/products/1/")
            self.authenticate(request, self._user(staff=True))
            self.dispatch(request, ProductDetailView, product_id=1)
        service_mock.get_product.assert_called_once_with(1, active_only=False)

    def test_product_detail_not_found(self):
        service_mock = Mock()
        service_mock.get_product.return_value = None
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.get("/api/products/9/")
            response = self.dispatch(request, ProductDetailView, product_id=9)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["details"], {"id": "9"})

    def test_product_patch_is_partial(self):
        service_mock = Mock()
        service_mock.update_product.return_value = make_product_dto(name="Renamed")
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.patch("/api/products/1/", {"name": "Renamed"}, format="json")
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, ProductDetailView, product_id=1)
        self.assertEqual(response.status_code, 200)
        _, kwargs = service_mock.update_product.call_args
        self.assertTrue(kwargs["partial"])

    def test_product_delete(self):
        service_mock = Mock()
        service_mock.delete_product.return_value = False
        with patch.object(ProductDetailView, "service", service_mock):
            request = self.factory.delete("/api/products/5/")
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, ProductDetailView, product_id=5)
        self.assertEqual(response.status_code, 404)

    def test_toggle_accepts_camel_case_field(self):
        service_mock = Mock()
        service_mock.toggle_flag.return_value = make_product_dto()
        with patch.object(ProductToggleView, "service", service_mock):
            request = self.factory.post(
                "/api/products/1/toggle/", {"field": "isFeatured"}, format="json"
            )
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, ProductToggleView, product_id=1)
        self.assertEqual(response.status_code, 200)
        service_mock.toggle_flag.assert_called_once_with(1, "is_featured")

    def test_toggle_rejects_unknown_field(self):
        service_mock = Mock()
        with patch.object(ProductToggleView, "service", service_mock):
            request = self.factory.post(
                "/api/products/1/toggle/", {"field": "name"}, format="json"
            )
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, ProductToggleView, product_id=1)
        self.assertEqual(response.status_code, 400)
        service_mock.toggle_flag.assert_not_called()

    def test_similar_products(self):
        service_mock = Mock()
        service_mock.list_similar_products.return_value = [make_product_dto(2)]
        with patch.object(ProductSimilarView, "service", service_mock):
            request = self.factory.get("/api/products/1/similar/")
            response = self.dispatch(request, ProductSimilarView, product_id=1)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([p["id"] for p in response.data], [2])

    def test_category_create_conflict(self):
        service_mock = Mock()
        service_mock.create_category.side_effect = CategoryAlreadyExistsError("exists")
        with patch.object(CategoryListView, "service", service_mock):
            request = self.factory.post("/api/categories/", {"name": "Cakes"}, format="json")
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, CategoryListView)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "CONFLICT")

    def test_subcategories_unknown_category(self):
        service_mock = Mock()
        service_mock.list_subcategories.return_value = None
        with patch.object(SubcategoryListView, "service", service_mock):
            request = self.factory.get("/api/categories/8/subcategories/")
            response = self.dispatch(request, SubcategoryListView, category_id=8)
        self.assertEqual(response.status_code, 404)

    def test_home_feed(self):
        service_mock = Mock()
        service_mock.home_feed.return_value = HomeFeedDTO(
            categories=[make_category_dto()],
            top_deals=[make_product_dto(1)],
            most_selling=[],
        )
        with patch.object(HomeView, "service", service_mock):
            response = self.dispatch(self.factory.get("/api/home/"), HomeView)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["categories"][0]["name"], "Cakes")
        self.assertEqual(response.data["top_deals"][0]["id"], 1)
        self.assertEqual(response.data["most_selling"], [])

    def test_store_list(self):
        service_mock = Mock()
        service_mock.list_stores.return_value = [
            StoreDTO(id=1, name="Indiranagar", address="100ft Rd", phone="080", is_active=True)
        ]
        with patch.object(StoreListView, "service", service_mock):
            response = self.dispatch(self.factory.get("/api/stores/"), StoreListView)
        self.assertEqual(response.data[0]["name"], "Indiranagar")

    def test_promotion_create(self):
        service_mock = Mock()
        service_mock.create_promotion.return_value = PromotionDTO(
            id=4, promotion_type="top_deal", display_order=1, product=make_product_dto()
        )
        payload = {"product_id": 1, "promotion_type": "top_deal", "display_order": 1}
        with patch.object(PromotionListView, "service", service_mock):
            request = self.factory.post("/api/promotions/", payload, format="json")
            self.authenticate(request, self._user(staff=True))
            response = self.dispatch(request, PromotionListView)
        self.assertEqual(response.status_code, 201)
        service_mock.create_promotion.assert_called_once_with(1, "top_deal", 1)
