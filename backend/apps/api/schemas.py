from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, inline_serializer
from rest_framework import serializers


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField()
    message = serializers.CharField()
    status = serializers.IntegerField()
    details = serializers.JSONField(required=False)
    hint = serializers.CharField(required=False, allow_blank=True)
    extra = serializers.JSONField(required=False)


class ErrorResponseSerializer(serializers.Serializer):
    error = ErrorDetailSerializer()


def cart_session_parameter() -> OpenApiParameter:
    """Optional header naming the cart; the session cookie is used when absent."""
    return OpenApiParameter(
        name=getattr(settings, "CART_SESSION_HEADER", "X-Cart-Session"),
        type=str,
        location=OpenApiParameter.HEADER,
        required=False,
        description="Cart key, 8-64 characters of A-Z, a-z, 0-9, '_' or '-'.",
    )


def paginated_response(
    item_serializer_class: type[serializers.Serializer],
) -> type[serializers.Serializer]:
    """Inline serializer in DRF's PageNumberPagination shape: count, next, previous, results."""
    name = getattr(item_serializer_class, "__name__", "Items")
    return inline_serializer(
        name=f"Paginated{name}",
        fields={
            "count": serializers.IntegerField(),
            "next": serializers.CharField(allow_null=True),
            "previous": serializers.CharField(allow_null=True),
            "results": item_serializer_class(many=True),
        },
    )
