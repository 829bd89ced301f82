from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import Category, Product, ProductImage, ProductVariant, WishlistItem
from marketplace.ordering.domain.models import Order, OrderItem


__all__ = [
    "Category",
    "Product",
    "ProductImage",
    "ProductVariant",
    "WishlistItem",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
]
