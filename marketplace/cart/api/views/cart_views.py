from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from infrastructure.container import container  # For DI
from marketplace.api.serializers import ErrorResponseSerializer, SuccessResponseSerializer
from marketplace.cart.api.serializers.cart_serializers import (
    AddToCartRequestSerializer,
    CartLineSerializer,
    CartSerializer,
    CartValidationSerializer,
    UpdateCartItemRequestSerializer,
)
from marketplace.cart.domain.services import CartService
from utils.api_response import error_response, success_response


class CartViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> CartService:
        # Inject CartService via DI container
        return container.cart_service()

    @extend_schema(
        operation_id="cart_get",
        summary="Get user's shopping cart",
        description="""
        **What it receives:**
        - Authentication token (header)

        **What it returns:**
        - Cart lines with product details and resolved prices
        - Summary (subtotal, shipping, tax, total, item count)
        """,
        responses={200: OpenApiResponse(response=SuccessResponseSerializer, description="Cart retrieved")},
        tags=["Cart"],
    )
    def list(self, request):
        result = self.get_service().get_cart(request.user)
        return success_response(CartSerializer(result.value).data)

    @extend_schema(
        operation_id="cart_clear",
        summary="Remove every item from the cart",
        responses={200: SuccessResponseSerializer},
        tags=["Cart"],
    )
    def destroy_all(self, request):
        result = self.get_service().clear_cart(request.user)
        return success_response({"removed": result.value})

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to add
        - `variant_id` (UUID, optional): Variant of the product
        - `quantity` (integer, optional): Quantity to add (default: 1)

        **What it returns:**
        - The resulting cart line
        """,
        request=AddToCartRequestSerializer,
        responses={
            201: OpenApiResponse(response=SuccessResponseSerializer, description="Item added"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid quantity or insufficient stock"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Cart"],
    )
    @action(detail=False, methods=["post"])
    def add(self, request):
        serializer = AddToCartRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.get_service().add_item(
            request.user, data["product_id"], data["quantity"], variant_id=data.get("variant_id")
        )
        if not result.ok:
            return error_response(result)
        return success_response(CartLineSerializer(result.value).data, status_code=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Change the quantity of a cart item (0 removes it)",
        request=UpdateCartItemRequestSerializer,
        responses={
            200: SuccessResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Insufficient stock"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Cart item not found"),
        },
        tags=["Cart"],
    )
    def update(self, request, pk=None):
        serializer = UpdateCartItemRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.get_service().update_item(request.user, pk, serializer.validated_data["quantity"])
        if not result.ok:
            return error_response(result)
        if result.value is None:
            return success_response({"removed": True})
        return success_response(CartLineSerializer(result.value).data)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove an item from the cart",
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Cart item not found"),
        },
        tags=["Cart"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().remove_item(request.user, pk)
        if not result.ok:
            return error_response(result)
        return success_response({"removed": True})

    @extend_schema(
        operation_id="cart_count",
        summary="Number of lines and units in the cart",
        responses={200: SuccessResponseSerializer},
        tags=["Cart"],
    )
    @action(detail=False, methods=["get"])
    def count(self, request):
        result = self.get_service().get_item_count(request.user)
        return success_response(result.value)

    @extend_schema(
        operation_id="cart_validate",
        summary="Check every cart line against current stock",
        responses={
            200: SuccessResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Cart is empty"),
        },
        tags=["Cart"],
    )
    @action(detail=False, methods=["get"])
    def validate(self, request):
        result = self.get_service().validate_cart(request.user)
        if not result.ok:
            return error_response(result)
        return success_response(CartValidationSerializer(result.value).data)
