from .catalog import Category, Product, ProductImage, ProductVariant
from .interaction import WishlistItem


__all__ = [
    "Category",
    "Product",
    "ProductImage",
    "ProductVariant",
    "WishlistItem",
]
