from rest_framework import serializers

from .models import Promotion
from .services import TOGGLE_FIELDS


class StoreSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField()
    address = serializers.CharField(allow_blank=True)
    phone = serializers.CharField(allow_blank=True)
    is_active = serializers.BooleanField()


class CategorySerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.CharField(required=False, allow_blank=True)
    display_order = serializers.IntegerField(required=False)
    is_active = serializers.BooleanField(required=False)


class SubcategorySerializer(CategorySerializer):
    category_id = serializers.IntegerField(read_only=True)


class FlavorReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    price_adjustment = serializers.DecimalField(max_digits=10, decimal_places=2)
    is_available = serializers.BooleanField()


class ProductReadSerializer(serializers.Serializer):
    # Matches ProductDTO shapes used for responses
    id = serializers.IntegerField()
    subcategory_id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    base_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    weight_options = serializers.ListField(child=serializers.CharField())
    image_urls = serializers.ListField(child=serializers.CharField())
    flavors = FlavorReadSerializer(many=True)
    is_active = serializers.BooleanField()
    is_featured = serializers.BooleanField()


class FlavorWriteSerializer(serializers.Serializer):
    # Blank names are accepted here and dropped by the command layer.
    flavor_name = serializers.CharField(allow_blank=True)
    price_adjustment = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False
    )
    is_available = serializers.BooleanField(required=False)


class ProductWriteSerializer(serializers.Serializer):
    # 'id' is server-assigned and MUST NOT be provided by clients.
    subcategory_id = serializers.IntegerField()
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    base_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    weight_options = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False
    )
    image_urls = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False
    )
    is_active = serializers.BooleanField(required=False)
    is_featured = serializers.BooleanField(required=False)
    flavors = FlavorWriteSerializer(many=True, required=False)


class ProductToggleSerializer(serializers.Serializer):
    field = serializers.ChoiceField(choices=TOGGLE_FIELDS)

    def to_internal_value(self, data):
        # The back-office sends camelCase flag names.
        aliases = {"isActive": "is_active", "isFeatured": "is_featured"}
        if isinstance(data, dict) and data.get("field") in aliases:
            data = {**data, "field": aliases[data["field"]]}
        return super().to_internal_value(data)


class PromotionWriteSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    promotion_type = serializers.ChoiceField(choices=Promotion.PROMOTION_TYPES)
    display_order = serializers.IntegerField(required=False, default=0)


class PromotionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    promotion_type = serializers.CharField()
    display_order = serializers.IntegerField()
    product = ProductReadSerializer()


class HomeFeedSerializer(serializers.Serializer):
    categories = CategorySerializer(many=True)
    top_deals = ProductReadSerializer(many=True)
    most_selling = ProductReadSerializer(many=True)
