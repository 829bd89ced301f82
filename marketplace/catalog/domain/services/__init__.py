from .catalog_service import CatalogService
from .category_matching import CategoryMatcher, ExactCategoryMatcher, FuzzyCategoryMatcher, get_category_matcher
from .wishlist_service import WishlistService


__all__ = [
    "CatalogService",
    "CategoryMatcher",
    "ExactCategoryMatcher",
    "FuzzyCategoryMatcher",
    "get_category_matcher",
    "WishlistService",
]
