from rest_framework import serializers

from marketplace.catalog.domain.models import Category, Product, ProductImage, ProductVariant, WishlistItem


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "product_count"]


class ProductImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ["id", "url", "alt_text", "order"]


class ProductVariantSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source="effective_price", read_only=True)

    class Meta:
        model = ProductVariant
        fields = ["id", "name", "sku", "price", "stock_quantity", "is_active"]


class ProductListSerializer(serializers.ModelSerializer):
    """Compact product representation for listings and cart lines."""

    category = CategorySerializer(read_only=True)
    image = serializers.CharField(source="primary_image_url", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "price",
            "category",
            "image",
            "stock_quantity",
            "in_stock",
            "is_featured",
            "created_at",
        ]


class ProductDetailSerializer(ProductListSerializer):
    images = ProductImageSerializer(many=True, read_only=True)
    variants = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + ["description", "images", "variants", "updated_at"]

    def get_variants(self, obj):
        variants = [variant for variant in obj.variants.all() if variant.is_active]
        return ProductVariantSerializer(variants, many=True).data


class ProductListQuerySerializer(serializers.Serializer):
    """Validates the product listing query string (camelCase names kept for API compatibility)."""

    category = serializers.CharField(required=False)
    featured = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False)
    minPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    maxPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    sortBy = serializers.ChoiceField(choices=["name", "price", "created_at"], required=False)
    sortOrder = serializers.ChoiceField(choices=["asc", "desc"], required=False)

    def validate(self, attrs):
        min_price, max_price = attrs.get("minPrice"), attrs.get("maxPrice")
        if min_price is not None and max_price is not None and min_price > max_price:
            raise serializers.ValidationError("minPrice cannot be greater than maxPrice")
        return attrs

    def to_filters(self):
        data = self.validated_data
        return {
            "category": data.get("category"),
            "featured": data.get("featured"),
            "search": data.get("search"),
            "min_price": data.get("minPrice"),
            "max_price": data.get("maxPrice"),
            "sort_by": data.get("sortBy"),
            "sort_order": data.get("sortOrder"),
        }


class WishlistItemSerializer(serializers.ModelSerializer):
    product = ProductListSerializer(read_only=True)

    class Meta:
        model = WishlistItem
        fields = ["id", "product", "created_at"]


class AddToWishlistRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
