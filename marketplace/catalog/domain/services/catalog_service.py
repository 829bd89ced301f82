"""
CatalogService - Product Browsing & Search

Read side of the catalog: filtered and paginated product listings, product
detail, categories, featured and related products.
"""

from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db.models import Count, Q

from infrastructure.observability.tracing import get_tracer
from marketplace.catalog.domain.models.catalog import Category, Product
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .category_matching import CategoryMatcher

tracer = get_tracer(__name__)

SORT_FIELDS = {
    "created_at": "created_at",
    "name": "name",
    "price": "price",
}
MIN_SEARCH_LENGTH = 2


class CatalogService(BaseService):
    """
    Service for product catalog reads.

    Responsibilities:
    - List products with filtering, sorting and pagination
    - Get product details (by id or slug)
    - List categories, featured products, products by category
    - Related products (same category)

    Listings only include active, in-stock products.
    """

    def __init__(self, category_matcher: CategoryMatcher):
        super().__init__()
        self.category_matcher = category_matcher

    def _base_queryset(self):
        return (
            Product.objects.filter(is_active=True, in_stock=True)
            .select_related("category")
            .prefetch_related("images", "variants")
        )

    @BaseService.log_performance
    def list_products(
        self,
        filters: Optional[Dict[str, Any]] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> ServiceResult[Dict[str, Any]]:
        """
        List products with filtering and pagination.

        Args:
            filters: category, featured, search, min_price, max_price, sort_by, sort_order
            offset: Rows to skip
            limit: Page size

        Returns:
            ServiceResult with {"results": [Product], "total": int}

        Example:
            >>> result = catalog_service.list_products({"category": "shoes", "sort_by": "price"}, limit=20)
            >>> products, total = result.value["results"], result.value["total"]
        """
        filters = filters or {}
        with tracer.start_as_current_span("catalog_list_products") as span:
            span.set_attribute("filters.count", len(filters))

            queryset = self._base_queryset()

            if filters.get("category"):
                queryset = queryset.filter(self.category_matcher.q(filters["category"]))
                span.set_attribute("filter.category", filters["category"])

            if filters.get("featured") is not None:
                queryset = queryset.filter(is_featured=filters["featured"])

            if filters.get("search"):
                term = filters["search"]
                queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))

            if filters.get("min_price") is not None:
                queryset = queryset.filter(price__gte=filters["min_price"])

            if filters.get("max_price") is not None:
                queryset = queryset.filter(price__lte=filters["max_price"])

            sort_field = SORT_FIELDS.get(filters.get("sort_by") or "created_at", "created_at")
            descending = (filters.get("sort_order") or "desc").lower() != "asc"
            queryset = queryset.order_by(f"-{sort_field}" if descending else sort_field, "id")

            total = queryset.count()
            results = list(queryset[offset : offset + limit])
            span.set_attribute("result.count", total)

        self.logger.info(f"Listed products: total={total}, offset={offset}, limit={limit}")
        return service_ok({"results": results, "total": total})

    @BaseService.log_performance
    def search_products(self, query: str, offset: int = 0, limit: int = 10, sort_by=None, sort_order=None):
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_LENGTH:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"Search query must be at least {MIN_SEARCH_LENGTH} characters"
            )
        filters = {"search": query, "sort_by": sort_by or "name", "sort_order": sort_order or "asc"}
        return self.list_products(filters, offset=offset, limit=limit)

    @BaseService.log_performance
    def get_product(self, product_ref: str) -> ServiceResult[Product]:
        """
        Get product details by id or slug.

        Inactive products are reported as not found.
        """
        queryset = Product.objects.filter(is_active=True).select_related("category").prefetch_related(
            "images", "variants"
        )
        try:
            product = queryset.filter(id=product_ref).first()
        except (ValueError, ValidationError):
            product = None
        if product is None:
            product = queryset.filter(slug=product_ref).first()

        if product is None:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product not found")
        return service_ok(product)

    def list_categories(self) -> ServiceResult[List[Category]]:
        categories = Category.objects.filter(is_active=True).annotate(
            product_count=Count("products", filter=Q(products__is_active=True))
        )
        return service_ok(list(categories.order_by("name")))

    def get_featured_products(self, limit: int = 8) -> ServiceResult[List[Product]]:
        result = self.list_products({"featured": True, "sort_by": "created_at", "sort_order": "desc"}, limit=limit)
        return result.map(lambda page: page["results"])

    @BaseService.log_performance
    def get_products_by_category(
        self, category: str, offset: int = 0, limit: int = 10, sort_by=None, sort_order=None
    ) -> ServiceResult[Dict[str, Any]]:
        filters = {"category": category, "sort_by": sort_by or "name", "sort_order": sort_order or "asc"}
        result = self.list_products(filters, offset=offset, limit=limit)
        if result.ok and not result.value["total"]:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "No products found in this category")
        return result

    @BaseService.log_performance
    def get_related_products(self, product_ref: str, limit: int = 4) -> ServiceResult[List[Product]]:
        """Newest products of the same category, excluding the product itself."""
        product_result = self.get_product(product_ref)
        if not product_result.ok:
            return product_result
        product = product_result.value

        if product.category_id is None:
            return service_ok([])

        related = (
            self._base_queryset()
            .filter(category_id=product.category_id)
            .exclude(id=product.id)
            .order_by("-created_at", "id")[:limit]
        )
        return service_ok(list(related))
