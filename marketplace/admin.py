from django.contrib import admin

from .models import Cart, CartItem, Category, Order, OrderItem, Product, ProductImage, ProductVariant, WishlistItem


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 1
    fields = ("url", "alt_text", "order")


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ("name", "sku", "price", "stock_quantity", "is_active")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "is_active", "product_count", "created_at")
    list_filter = ("is_active", "created_at")
    search_fields = ("name", "description")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("created_at", "product_count")

    def product_count(self, obj):
        return obj.products.filter(is_active=True).count()

    product_count.short_description = "Active Products"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock_quantity", "in_stock", "is_active", "is_featured", "created_at")
    list_filter = ("is_active", "is_featured", "in_stock", "category", "created_at")
    search_fields = ("name", "description")
    readonly_fields = ("id", "slug", "created_at", "updated_at")

    inlines = [ProductImageInline, ProductVariantInline]

    fieldsets = (
        (None, {"fields": ("id", "name", "slug", "description", "category")}),
        ("Pricing and Inventory", {"fields": ("price", "stock_quantity", "in_stock")}),
        ("Status", {"fields": ("is_active", "is_featured")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    actions = ["make_featured", "remove_featured", "activate_products", "deactivate_products"]

    def make_featured(self, request, queryset):
        updated = queryset.update(is_featured=True)
        self.message_user(request, f"{updated} products marked as featured.")

    make_featured.short_description = "Mark selected products as featured"

    def remove_featured(self, request, queryset):
        updated = queryset.update(is_featured=False)
        self.message_user(request, f"{updated} products removed from featured.")

    remove_featured.short_description = "Remove featured status"

    def activate_products(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} products activated.")

    activate_products.short_description = "Activate selected products"

    def deactivate_products(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} products deactivated.")

    deactivate_products.short_description = "Deactivate selected products"


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "variant", "quantity", "unit_price", "total_price", "product_snapshot")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "buyer", "status", "payment_status", "total_amount", "item_count", "created_at")
    list_filter = ("status", "payment_status", "created_at")
    search_fields = ("order_number", "buyer__email", "payment_intent_id")
    readonly_fields = (
        "id",
        "order_number",
        "subtotal",
        "shipping_amount",
        "tax_amount",
        "total_amount",
        "payment_intent_id",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]

    def item_count(self, obj):
        return obj.items.count()

    item_count.short_description = "Items"

    # Bulk shipping transitions only; payment and cancellation go through the order workflow
    actions = ["mark_shipped", "mark_delivered"]

    def mark_shipped(self, request, queryset):
        updated = queryset.filter(status=Order.STATUS_PROCESSING).update(status=Order.STATUS_SHIPPED)
        self.message_user(request, f"{updated} orders marked as shipped.")

    mark_shipped.short_description = "Mark as shipped"

    def mark_delivered(self, request, queryset):
        updated = queryset.filter(status=Order.STATUS_SHIPPED).update(status=Order.STATUS_DELIVERED)
        self.message_user(request, f"{updated} orders marked as delivered.")

    mark_delivered.short_description = "Mark as delivered"


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ("product", "variant", "quantity", "added_at")


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("user", "created_at", "updated_at")
    search_fields = ("user__email",)
    inlines = [CartItemInline]


@admin.register(WishlistItem)
class WishlistItemAdmin(admin.ModelAdmin):
    list_display = ("user", "product", "created_at")
    search_fields = ("user__email", "product__name")
