from rest_framework import serializers


class CartLineSerializer(serializers.Serializer):
    id = serializers.CharField()
    product_id = serializers.IntegerField()
    product_name = serializers.CharField()
    image_url = serializers.CharField(allow_null=True)
    flavor_id = serializers.IntegerField(allow_null=True)
    flavor_name = serializers.CharField(allow_null=True)
    weight = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=None, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=None, decimal_places=2)


class CartReadSerializer(serializers.Serializer):
    key = serializers.CharField(allow_null=True)
    lines = CartLineSerializer(many=True)
    total = serializers.DecimalField(max_digits=None, decimal_places=2)
    item_count = serializers.IntegerField()


class CartItemWriteSerializer(serializers.Serializer):
    # Quantity bounds (1..MAX_QUANTITY) are enforced by the resolver so failures carry a reason.
    product_id = serializers.IntegerField()
    flavor_id = serializers.IntegerField(required=False, allow_null=True)
    weight = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quantity = serializers.IntegerField(required=False, default=1)


class CartQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CartLineCreatedSerializer(serializers.Serializer):
    line = CartLineSerializer()
    cart = CartReadSerializer()


class QuoteSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    flavor_id = serializers.IntegerField(allow_null=True)
    flavor_name = serializers.CharField(allow_null=True)
    weight = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=None, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=None, decimal_places=2)
