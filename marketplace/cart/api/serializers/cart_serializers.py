from rest_framework import serializers

from marketplace.catalog.api.serializers.product_serializers import ProductListSerializer


class CartLineSerializer(serializers.Serializer):
    """Serializes CartLine dataclasses returned by CartService."""

    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    product = ProductListSerializer(read_only=True)
    variant_id = serializers.SerializerMethodField()
    quantity = serializers.IntegerField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    def get_variant_id(self, obj):
        return str(obj.variant.id) if obj.variant else None


class CartSummarySerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)
    shipping = serializers.DecimalField(max_digits=10, decimal_places=2)
    tax = serializers.DecimalField(max_digits=10, decimal_places=2)
    total = serializers.DecimalField(max_digits=10, decimal_places=2)
    items_count = serializers.IntegerField()
    total_quantity = serializers.IntegerField()
    free_shipping_threshold = serializers.DecimalField(max_digits=10, decimal_places=2)


class CartSerializer(serializers.Serializer):
    items = CartLineSerializer(many=True, source="lines")
    summary = CartSummarySerializer()


class CartValidationSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    issues = serializers.ListField(child=serializers.DictField())
    summary = CartSummarySerializer()


class AddToCartRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    variant_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemRequestSerializer(serializers.Serializer):
    # 0 removes the item
    quantity = serializers.IntegerField(min_value=0)
