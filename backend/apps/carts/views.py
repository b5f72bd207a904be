from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse

from apps.api.exceptions import cart_error_response
from apps.api.schemas import ErrorResponseSerializer, cart_session_parameter
from apps.api.utils import error_response
from apps.common import get_logger
from .commands import CartItemCommand
from .container import build_cart_service
from .exceptions import CartError
from .serializers import (
    CartItemWriteSerializer,
    CartLineCreatedSerializer,
    CartQuantitySerializer,
    CartReadSerializer,
    QuoteSerializer,
)
from .utils import resolve_cart_key, with_cart_header

logger = get_logger(__name__).bind(component="carts", layer="view")


def _missing_cart_key():
    return error_response(
        "VALIDATION_ERROR",
        "Cart session required",
        hint="Send an X-Cart-Session header or enable cookies.",
    )


class CartSessionMixin:
    permission_classes = [AllowAny]

    def cart_key(self, request):
        key = resolve_cart_key(request)
        if not key:
            self.log.warning("Cart request without session")
        return key


@extend_schema(tags=["Cart"], parameters=[cart_session_parameter()])
class CartView(CartSessionMixin, APIView):
    service = build_cart_service()
    log = logger.bind(view="CartView")

    @extend_schema(
        summary="Get cart",
        responses={200: CartReadSerializer, 400: OpenApiResponse(response=ErrorResponseSerializer)},
    )
    def get(self, request):
        key = self.cart_key(request)
        if not key:
            return _missing_cart_key()
        dto = self.service.get_cart(key)
        return with_cart_header(Response(CartReadSerializer(dto).data), key)

    @extend_schema(
        summary="Clear cart",
        responses={200: CartReadSerializer, 400: OpenApiResponse(response=ErrorResponseSerializer)},
    )
    def delete(self, request):
        key = self.cart_key(request)
        if not key:
            return _missing_cart_key()
        self.log.info("Clearing cart", cart=key)
        dto = self.service.clear_cart(key)
        return with_cart_header(Response(CartReadSerializer(dto).data), key)


@extend_schema(tags=["Cart"], parameters=[cart_session_parameter()])
class CartItemListView(CartSessionMixin, APIView):
    service = build_cart_service()
    log = logger.bind(view="CartItemListView")

    @extend_schema(
        summary="Add to cart",
        description=(
            "Resolves flavor, weight and quantity against the product and appends "
            "a new line. Identical selections produce separate lines."
        ),
        request=CartItemWriteSerializer,
        responses={
            201: CartLineCreatedSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        key = self.cart_key(request)
        if not key:
            return _missing_cart_key()
        serializer = CartItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cmd = CartItemCommand.from_raw(serializer.validated_data)
        self.log.info("Adding cart line", cart=key, product_id=cmd.product_id)
        try:
            line, cart = self.service.add_item(key, cmd.product_id, cmd.selection)
        except CartError as exc:
            return with_cart_header(cart_error_response(exc), key)
        payload = CartLineCreatedSerializer({"line": line, "cart": cart}).data
        return with_cart_header(Response(payload, status=status.HTTP_201_CREATED), key)


@extend_schema(tags=["Cart"], parameters=[cart_session_parameter()])
class CartItemDetailView(CartSessionMixin, APIView):
    service = build_cart_service()
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        summary="Change line quantity",
        parameters=[OpenApiParameter("line_id", str, OpenApiParameter.PATH)],
        request=CartQuantitySerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def patch(self, request, line_id: str):
        key = self.cart_key(request)
        if not key:
            return _missing_cart_key()
        serializer = CartQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quantity = serializer.validated_data["quantity"]
        self.log.info("Updating cart line", cart=key, line_id=line_id, quantity=quantity)
        try:
            dto = self.service.update_quantity(key, line_id, quantity)
        except CartError as exc:
            return with_cart_header(cart_error_response(exc), key)
        return with_cart_header(Response(CartReadSerializer(dto).data), key)

    @extend_schema(
        summary="Remove line",
        description="Removing an unknown line is a no-op.",
        parameters=[OpenApiParameter("line_id", str, OpenApiParameter.PATH)],
        responses={200: CartReadSerializer},
    )
    def delete(self, request, line_id: str):
        key = self.cart_key(request)
        if not key:
            return _missing_cart_key()
        self.log.info("Removing cart line", cart=key, line_id=line_id)
        dto = self.service.remove_line(key, line_id)
        return with_cart_header(Response(CartReadSerializer(dto).data), key)


@extend_schema(tags=["Cart"])
class ProductQuoteView(APIView):
    permission_classes = [AllowAny]
    service = build_cart_service()
    log = logger.bind(view="ProductQuoteView")

    @extend_schema(
        summary="Price a product configuration",
        description="Preview of unit price and subtotal for a flavor, weight and quantity.",
        parameters=[
            OpenApiParameter("product_id", int, OpenApiParameter.PATH),
            OpenApiParameter("flavorId", int, required=False),
            OpenApiParameter("weight", str, required=False),
            OpenApiParameter("quantity", int, required=False, description="Defaults to 1"),
        ],
        responses={
            200: QuoteSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def get(self, request, product_id: int):
        selection = getattr(request, "quote_selection", None)
        if selection is None:
            self.log.warning("Quote selection missing from pre-validation", product_id=product_id)
            return error_response("VALIDATION_ERROR", "Invalid quote parameters")
        try:
            dto = self.service.quote(product_id, selection)
        except CartError as exc:
            return cart_error_response(exc)
        return Response(QuoteSerializer(dto).data)
