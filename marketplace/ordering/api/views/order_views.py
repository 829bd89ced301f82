from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, SuccessResponseSerializer
from marketplace.ordering.api.serializers.order_serializers import (
    CancelOrderRequestSerializer,
    CreateOrderRequestSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusRequestSerializer,
)
from marketplace.ordering.domain.services.order_service import OrderService
from marketplace.permissions import IsAdminRole
from utils.api_response import error_response, pagination_meta, parse_pagination, success_response


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    def get_permissions(self):
        if self.action == "update_status":
            return [IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    @extend_schema(
        operation_id="orders_list",
        summary="List user's orders",
        description="""
        **What it receives:**
        - Authentication token
        - Optional status filter (query param)
        - Pagination parameters (page, limit)

        **What it returns:**
        - Orders placed by the user, newest first, with pagination meta
        """,
        parameters=[
            OpenApiParameter(name="status", type=str, description="Filter by order status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 10)"),
        ],
        responses={
            200: OpenApiResponse(response=SuccessResponseSerializer, description="Orders retrieved successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status filter"),
        },
        tags=["Orders"],
    )
    def list(self, request):
        page, limit, offset = parse_pagination(request.query_params)
        result = self.get_service().list_orders(
            request.user, status=request.query_params.get("status"), offset=offset, limit=limit
        )
        if not result.ok:
            return error_response(result)
        data = OrderListSerializer(result.value["results"], many=True).data
        return success_response(data, meta=pagination_meta(page, limit, result.value["total"]))

    @extend_schema(
        operation_id="orders_create",
        summary="Create an order from the cart",
        description="""
        **What it receives:**
        - `shipping_address` (object, required)
        - `billing_address` (object, optional)
        - `payment_method` (card | paypal, optional)
        - `notes` (string, optional)

        **What it does:**
        - Checks stock for every cart line
        - Creates the order with snapshot prices, decrements stock and clears the cart atomically
        - Queues the order confirmation email
        """,
        request=CreateOrderRequestSerializer,
        responses={
            201: OpenApiResponse(response=SuccessResponseSerializer, description="Order created"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Cart empty or insufficient stock"),
        },
        tags=["Orders"],
    )
    def create(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.get_service().create_order(request.user, serializer.validated_data)
        if not result.ok:
            return error_response(result)
        return success_response(OrderSerializer(result.value.order).data, status_code=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(pk, request.user)
        if not result.ok:
            return error_response(result)
        return success_response(OrderSerializer(result.value).data)

    @extend_schema(
        operation_id="orders_summary",
        summary="Order statistics of the current user",
        responses={200: SuccessResponseSerializer},
        tags=["Orders"],
    )
    @action(detail=False, methods=["get"])
    def summary(self, request):
        summary = self.get_service().get_order_summary(request.user).value
        summary["recent_orders"] = OrderListSerializer(summary["recent_orders"], many=True).data
        return success_response(summary)

    @extend_schema(
        operation_id="orders_track",
        summary="Tracking steps of an order",
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Orders"],
    )
    @action(detail=True, methods=["get"])
    def track(self, request, pk=None):
        result = self.get_service().track_order(pk, request.user)
        if not result.ok:
            return error_response(result)
        return success_response(result.value)

    @extend_schema(
        operation_id="orders_reorder",
        summary="Add the items of a past order to the cart",
        request=None,
        responses={
            200: SuccessResponseSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Orders"],
    )
    @action(detail=True, methods=["post"])
    def reorder(self, request, pk=None):
        result = self.get_service().reorder(pk, request.user)
        if not result.ok:
            return error_response(result)
        outcome = result.value
        return success_response(
            {
                "added_items": outcome.added_items,
                "unavailable_items": outcome.unavailable_items,
                "total_items": outcome.total_items,
            }
        )

    @extend_schema(
        operation_id="orders_cancel",
        summary="Cancel an order",
        description="""
        Orders can be cancelled until they ship. Stock is restored. Paid orders
        are flagged with `refund_required`; the refund itself is issued by an admin.
        """,
        request=CancelOrderRequestSerializer,
        responses={
            200: SuccessResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Order cannot be cancelled"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Orders"],
    )
    @action(detail=True, methods=["put"])
    def cancel(self, request, pk=None):
        serializer = CancelOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.get_service().cancel_order(pk, request.user, reason=serializer.validated_data.get("reason"))
        if not result.ok:
            return error_response(result)
        data = OrderSerializer(result.value.order).data
        data["refund_required"] = result.value.refund_required
        return success_response(data)

    @extend_schema(
        operation_id="orders_update_status",
        summary="Set the order status (admin)",
        request=UpdateOrderStatusRequestSerializer,
        responses={
            200: SuccessResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Orders"],
    )
    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = UpdateOrderStatusRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.get_service().update_order_status(pk, serializer.validated_data["status"])
        if not result.ok:
            return error_response(result)
        return success_response(OrderSerializer(result.value.order).data)
