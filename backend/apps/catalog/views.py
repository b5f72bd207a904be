from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.schemas import paginated_response, ErrorResponseSerializer
from apps.api.utils import error_response
from apps.common import get_logger
from .container import (
    build_category_service,
    build_product_service,
    build_storefront_service,
)
from .pagination import ProductListPagination
from .serializers import (
    CategorySerializer,
    HomeFeedSerializer,
    ProductReadSerializer,
    ProductToggleSerializer,
    ProductWriteSerializer,
    PromotionSerializer,
    PromotionWriteSerializer,
    StoreSerializer,
    SubcategorySerializer,
)
from .services import CategoryAlreadyExistsError

logger = get_logger(__name__).bind(component="catalog", layer="view")

TRUTHY = {"1", "true", "yes", "on"}


def _int_param(request, name):
    """Return (value, error_response) for an optional integer query parameter."""
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None, None
    try:
        return int(raw), None
    except (TypeError, ValueError):
        return None, error_response(
            "VALIDATION_ERROR", f"{name} must be an integer", {name: raw}
        )


def _product_not_found(product_id):
    return error_response("NOT_FOUND", "Product not found", {"id": str(product_id)})


class AdminWriteMixin:
    """Storefront reads are public; every other method needs a staff user."""

    def get_permissions(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return [AllowAny()]
        return [IsAdminUser()]


@extend_schema(tags=["Storefront"])
class HomeView(APIView):
    permission_classes = [AllowAny]
    service = build_storefront_service()
    log = logger.bind(view="HomeView")

    @extend_schema(summary="Home feed", responses={200: HomeFeedSerializer})
    def get(self, request):
        self.log.debug("Building home feed")
        feed = self.service.home_feed()
        return Response(HomeFeedSerializer(feed).data)


@extend_schema(tags=["Storefront"])
class StoreListView(APIView):
    permission_classes = [AllowAny]
    service = build_storefront_service()
    log = logger.bind(view="StoreListView")

    @extend_schema(summary="List stores", responses={200: StoreSerializer(many=True)})
    def get(self, request):
        self.log.debug("Listing stores")
        data = self.service.list_stores()
        return Response(StoreSerializer(data, many=True).data)


@extend_schema(tags=["Catalog"])
class CategoryListView(AdminWriteMixin, APIView):
    service = build_category_service()
    log = logger.bind(view="CategoryListView")

    @extend_schema(
        summary="List categories", responses={200: CategorySerializer(many=True)}
    )
    def get(self, request):
        self.log.debug("Listing categories")
        data = self.service.list_categories()
        return Response(CategorySerializer(data, many=True).data)

    @extend_schema(
        summary="Create category",
        request=CategorySerializer,
        responses={
            201: CategorySerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = self.service.create_category(serializer.validated_data)
        except CategoryAlreadyExistsError as exc:
            self.log.warning("Category creation conflict", detail=str(exc))
            return error_response(
                "CONFLICT", str(exc), {"name": serializer.validated_data.get("name")}
            )
        except ValueError as exc:
            return error_response("VALIDATION_ERROR", str(exc))
        self.log.info("Category created via API", category_id=dto.id)
        return Response(CategorySerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"])
class CategoryDetailView(AdminWriteMixin, APIView):
    service = build_category_service()
    log = logger.bind(view="CategoryDetailView")

    @extend_schema(
        summary="Get category",
        parameters=[OpenApiParameter("category_id", int, OpenApiParameter.PATH)],
        responses={
            200: CategorySerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, category_id: int):
        dto = self.service.get_category(category_id)
        if not dto:
            self.log.info("Category not found", category_id=category_id)
            return error_response(
                "NOT_FOUND", "Category not found", {"id": str(category_id)}
            )
        return Response(CategorySerializer(dto).data)

    @extend_schema(
        summary="Delete category",
        responses={204: None, 404: OpenApiResponse(response=ErrorResponseSerializer)},
    )
    def delete(self, request, category_id: int):
        self.log.info("Deleting category", category_id=category_id)
        if not self.service.delete_category(category_id):
            return error_response(
                "NOT_FOUND", "Category not found", {"id": str(category_id)}
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Catalog"])
class SubcategoryListView(AdminWriteMixin, APIView):
    service = build_category_service()
    log = logger.bind(view="SubcategoryListView")

    @extend_schema(
        summary="List subcategories of a category",
        parameters=[OpenApiParameter("category_id", int, OpenApiParameter.PATH)],
        responses={
            200: SubcategorySerializer(many=True),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, category_id: int):
        self.log.debug("Listing subcategories", category_id=category_id)
        data = self.service.list_subcategories(category_id)
        if data is None:
            return error_response(
                "NOT_FOUND", "Category not found", {"id": str(category_id)}
            )
        return Response(SubcategorySerializer(data, many=True).data)

    @extend_schema(
        summary="Create subcategory",
        request=SubcategorySerializer,
        responses={
            201: SubcategorySerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request, category_id: int):
        serializer = SubcategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = self.service.create_subcategory(category_id, serializer.validated_data)
        except ValueError as exc:
            return error_response("VALIDATION_ERROR", str(exc))
        if dto is None:
            return error_response(
                "NOT_FOUND", "Category not found", {"id": str(category_id)}
            )
        self.log.info("Subcategory created via API", subcategory_id=dto.id)
        return Response(SubcategorySerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"])
class ProductListView(AdminWriteMixin, APIView):
    service = build_product_service()
    log = logger.bind(view="ProductListView")

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="Active products only. Supports pagination via ?page and ?limit.",
        parameters=[
            OpenApiParameter("subcategory", int, required=False, description="Filter by subcategory id"),
            OpenApiParameter("category", int, required=False, description="Filter by category id"),
            OpenApiParameter("featured", bool, required=False, description="Only featured products"),
        ],
        responses={
            200: paginated_response(ProductReadSerializer),
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request):
        subcategory_id, error = _int_param(request, "subcategory")
        if error:
            return error
        category_id, error = _int_param(request, "category")
        if error:
            return error
        featured = str(request.query_params.get("featured", "")).lower() in TRUTHY
        self.log.debug(
            "Handling product list request",
            subcategory_id=subcategory_id,
            category_id=category_id,
            featured=featured,
        )
        return self.service.list_products_paginated(
            request,
            subcategory_id=subcategory_id,
            category_id=category_id,
            featured=featured,
            paginator_class=ProductListPagination,
            serializer_class=ProductReadSerializer,
            view=self,
        )

    @extend_schema(
        summary="Create product",
        request=ProductWriteSerializer,
        responses={
            201: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.log.info(
            "Creating product via API", name=serializer.validated_data.get("name")
        )
        try:
            dto = self.service.create_product(serializer.validated_data)
        except ValueError as exc:
            return error_response("VALIDATION_ERROR", str(exc))
        self.log.info("Product created via API", product_id=dto.id)
        return Response(ProductReadSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Catalog"])
class ProductDetailView(AdminWriteMixin, APIView):
    service = build_product_service()
    log = logger.bind(view="ProductDetailView")

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product",
        parameters=[OpenApiParameter("product_id", int, OpenApiParameter.PATH)],
        responses={
            200: ProductReadSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: int):
        user = getattr(request, "user", None)
        # Staff can preview hidden products.
        active_only = not bool(getattr(user, "is_staff", False))
        self.log.debug(
            "Fetching product detail", product_id=product_id, active_only=active_only
        )
        dto = self.service.get_product(product_id, active_only=active_only)
        if not dto:
            return _product_not_found(product_id)
        return Response(ProductReadSerializer(dto).data)

    def _update(self, request, product_id: int, partial: bool):
        serializer = ProductWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            dto = self.service.update_product(
                product_id, serializer.validated_data, partial=partial
            )
        except ValueError as exc:
            return error_response("VALIDATION_ERROR", str(exc))
        if not dto:
            self.log.warning("Product update failed: not found", product_id=product_id)
            return _product_not_found(product_id)
        return Response(ProductReadSerializer(dto).data)

    @extend_schema(
        summary="Replace product",
        request=ProductWriteSerializer,
        responses={
            200: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def put(self, request, product_id: int):
        self.log.info("Replacing product", product_id=product_id)
        return self._update(request, product_id, partial=False)

    @extend_schema(
        summary="Update product",
        request=ProductWriteSerializer,
        responses={
            200: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, product_id: int):
        self.log.info("Patching product", product_id=product_id)
        return self._update(request, product_id, partial=True)

    @extend_schema(
        summary="Delete product",
        responses={204: None, 404: OpenApiResponse(response=ErrorResponseSerializer)},
    )
    def delete(self, request, product_id: int):
        self.log.info("Deleting product", product_id=product_id)
        if not self.service.delete_product(product_id):
            return _product_not_found(product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Catalog"])
class ProductToggleView(APIView):
    permission_classes = [IsAdminUser]
    service = build_product_service()
    log = logger.bind(view="ProductToggleView")

    @extend_schema(
        summary="Flip a product flag",
        request=ProductToggleSerializer,
        responses={
            200: ProductReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request, product_id: int):
        serializer = ProductToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        field = serializer.validated_data["field"]
        self.log.info("Toggling product flag", product_id=product_id, field=field)
        dto = self.service.toggle_flag(product_id, field)
        if not dto:
            return _product_not_found(product_id)
        return Response(ProductReadSerializer(dto).data)


@extend_schema(tags=["Catalog"])
class ProductSimilarView(APIView):
    permission_classes = [AllowAny]
    service = build_product_service()
    log = logger.bind(view="ProductSimilarView")

    @extend_schema(
        summary="Similar products",
        description="Up to four active products from the same subcategory.",
        parameters=[OpenApiParameter("product_id", int, OpenApiParameter.PATH)],
        responses={
            200: ProductReadSerializer(many=True),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: int):
        data = self.service.list_similar_products(product_id)
        if data is None:
            return _product_not_found(product_id)
        return Response(ProductReadSerializer(data, many=True).data)


@extend_schema(tags=["Storefront"])
class PromotionListView(APIView):
    permission_classes = [IsAdminUser]
    service = build_storefront_service()
    log = logger.bind(view="PromotionListView")

    @extend_schema(
        summary="Promote a product",
        request=PromotionWriteSerializer,
        responses={
            201: PromotionSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = PromotionWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        dto = self.service.create_promotion(
            data["product_id"], data["promotion_type"], data.get("display_order", 0)
        )
        if dto is None:
            return _product_not_found(data["product_id"])
        self.log.info("Promotion created via API", promotion_id=dto.id)
        return Response(PromotionSerializer(dto).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Storefront"])
class PromotionDetailView(APIView):
    permission_classes = [IsAdminUser]
    service = build_storefront_service()
    log = logger.bind(view="PromotionDetailView")

    @extend_schema(
        summary="Remove a promotion",
        responses={204: None, 404: OpenApiResponse(response=ErrorResponseSerializer)},
    )
    def delete(self, request, promotion_id: int):
        if not self.service.delete_promotion(promotion_id):
            return error_response(
                "NOT_FOUND", "Promotion not found", {"id": str(promotion_id)}
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
