from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.views import APIView

from authentication.api.serializers import ProfileUpdateRequestSerializer, UserSerializer
from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, SuccessResponseSerializer
from marketplace.catalog.api.serializers.product_serializers import (
    AddToWishlistRequestSerializer,
    WishlistItemSerializer,
)
from marketplace.ordering.api.serializers.order_serializers import OrderListSerializer
from utils.api_response import error_response, success_response


class ProfileView(APIView):
    """
    Get or update the profile of the authenticated user.
    """

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="profile_get",
        summary="Get current user's profile",
        responses={200: OpenApiResponse(response=UserSerializer, description="Profile retrieved")},
        tags=["Profile"],
    )
    def get(self, request):
        return success_response(UserSerializer(request.user).data)

    @extend_schema(
        operation_id="profile_update",
        summary="Update current user's profile",
        description="""
        Update profile fields. Only `first_name`, `last_name` and `phone`
        can be changed; email and role are read-only.
        """,
        request=ProfileUpdateRequestSerializer,
        responses={
            200: OpenApiResponse(response=UserSerializer, description="Profile updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
        },
        tags=["Profile"],
    )
    def put(self, request):
        serializer = ProfileUpdateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        container.profile_service().update_profile(request.user, serializer.validated_data)
        return success_response(UserSerializer(request.user).data)


class ProfileStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="profile_stats",
        summary="Order and wishlist statistics of the current user",
        responses={200: SuccessResponseSerializer},
        tags=["Profile"],
    )
    def get(self, request):
        stats = container.profile_service().get_stats(request.user).data
        if stats["last_order"] is not None:
            stats["last_order"] = OrderListSerializer(stats["last_order"]).data
        return success_response(stats)


class WishlistView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="wishlist_list",
        summary="Products saved by the current user",
        responses={200: OpenApiResponse(response=WishlistItemSerializer(many=True))},
        tags=["Wishlist"],
    )
    def get(self, request):
        result = container.wishlist_service().list_items(request.user)
        return success_response(WishlistItemSerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="wishlist_add",
        summary="Save a product to the wishlist",
        request=AddToWishlistRequestSerializer,
        responses={
            201: OpenApiResponse(response=WishlistItemSerializer, description="Product saved"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Already in wishlist"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Wishlist"],
    )
    def post(self, request):
        serializer = AddToWishlistRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = container.wishlist_service().add_item(request.user, serializer.validated_data["product_id"])
        if not result.ok:
            return error_response(result)
        return success_response(WishlistItemSerializer(result.value).data, status_code=status.HTTP_201_CREATED)


class WishlistItemView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="wishlist_remove",
        summary="Remove a product from the wishlist",
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not in wishlist"),
        },
        tags=["Wishlist"],
    )
    def delete(self, request, product_id):
        result = container.wishlist_service().remove_item(request.user, product_id)
        if not result.ok:
            return error_response(result)
        return success_response({"removed": True})
