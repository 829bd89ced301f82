from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny

from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, SuccessResponseSerializer
from marketplace.catalog.api.serializers.product_serializers import (
    CategorySerializer,
    ProductDetailSerializer,
    ProductListQuerySerializer,
    ProductListSerializer,
)
from marketplace.catalog.domain.services import CatalogService
from utils.api_response import error_response, pagination_meta, parse_pagination, success_response

PAGINATION_PARAMETERS = [
    OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
    OpenApiParameter(name="limit", type=int, description="Items per page (default: 10, max: 100)"),
]
SORT_PARAMETERS = [
    OpenApiParameter(name="sortBy", type=str, enum=["name", "price", "created_at"]),
    OpenApiParameter(name="sortOrder", type=str, enum=["asc", "desc"]),
]


def _int_param(request, name, default):
    try:
        return max(1, int(request.query_params.get(name, default)))
    except (TypeError, ValueError):
        return default


class ProductViewSet(viewsets.ViewSet):
    """Public product catalog."""

    permission_classes = [AllowAny]

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    def _paginated(self, result, page, limit):
        if not result.ok:
            return error_response(result)
        data = ProductListSerializer(result.value["results"], many=True).data
        return success_response(data, meta=pagination_meta(page, limit, result.value["total"]))

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="""
        **What it receives:**
        - Optional filters: category, featured, search, minPrice, maxPrice
        - Sorting: sortBy (name | price | created_at), sortOrder (asc | desc)
        - Pagination: page, limit

        **What it returns:**
        - Active, in-stock products with pagination meta
        """,
        parameters=[
            OpenApiParameter(name="category", type=str, description="Category slug or name"),
            OpenApiParameter(name="featured", type=bool, description="Only featured (or non-featured) products"),
            OpenApiParameter(name="search", type=str, description="Match name or description"),
            OpenApiParameter(name="minPrice", type=float, description="Minimum price"),
            OpenApiParameter(name="maxPrice", type=float, description="Maximum price"),
            *SORT_PARAMETERS,
            *PAGINATION_PARAMETERS,
        ],
        responses={
            200: OpenApiResponse(response=SuccessResponseSerializer, description="Products retrieved successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filters"),
        },
        tags=["Products"],
    )
    def list(self, request):
        query = ProductListQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        page, limit, offset = parse_pagination(request.query_params)

        result = self.get_service().list_products(query.to_filters(), offset=offset, limit=limit)
        return self._paginated(result, page, limit)

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product details by id or slug",
        responses={
            200: OpenApiResponse(response=SuccessResponseSerializer, description="Product details"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Products"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_product(pk)
        if not result.ok:
            return error_response(result)
        return success_response(ProductDetailSerializer(result.value).data)

    @extend_schema(
        operation_id="products_featured",
        summary="Featured products",
        parameters=[OpenApiParameter(name="limit", type=int, description="Number of products (default: 8)")],
        responses={200: SuccessResponseSerializer},
        tags=["Products"],
    )
    @action(detail=False, methods=["get"])
    def featured(self, request):
        limit = min(_int_param(request, "limit", 8), 100)
        result = self.get_service().get_featured_products(limit=limit)
        return success_response(ProductListSerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="products_categories",
        summary="List active categories",
        responses={200: SuccessResponseSerializer},
        tags=["Products"],
    )
    @action(detail=False, methods=["get"])
    def categories(self, request):
        result = self.get_service().list_categories()
        return success_response(CategorySerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="products_search",
        summary="Search products",
        parameters=[
            OpenApiParameter(name="q", type=str, required=True, description="At least 2 characters"),
            *SORT_PARAMETERS,
            *PAGINATION_PARAMETERS,
        ],
        responses={
            200: SuccessResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Query too short"),
        },
        tags=["Products"],
    )
    @action(detail=False, methods=["get"])
    def search(self, request):
        page, limit, offset = parse_pagination(request.query_params)
        result = self.get_service().search_products(
            request.query_params.get("q", ""),
            offset=offset,
            limit=limit,
            sort_by=request.query_params.get("sortBy"),
            sort_order=request.query_params.get("sortOrder"),
        )
        return self._paginated(result, page, limit)

    @extend_schema(
        operation_id="products_by_category",
        summary="Products in a category",
        parameters=[*SORT_PARAMETERS, *PAGINATION_PARAMETERS],
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="No products in this category"),
        },
        tags=["Products"],
    )
    @action(detail=False, methods=["get"], url_path=r"category/(?P<category>[^/]+)")
    def by_category(self, request, category=None):
        page, limit, offset = parse_pagination(request.query_params)
        result = self.get_service().get_products_by_category(
            category,
            offset=offset,
            limit=limit,
            sort_by=request.query_params.get("sortBy"),
            sort_order=request.query_params.get("sortOrder"),
        )
        return self._paginated(result, page, limit)

    @extend_schema(
        operation_id="products_related",
        summary="Related products (same category)",
        parameters=[OpenApiParameter(name="limit", type=int, description="Number of products (default: 4)")],
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Products"],
    )
    @action(detail=True, methods=["get"])
    def related(self, request, pk=None):
        limit = min(_int_param(request, "limit", 4), 100)
        result = self.get_service().get_related_products(pk, limit=limit)
        if not result.ok:
            return error_response(result)
        return success_response(ProductListSerializer(result.value, many=True).data)
