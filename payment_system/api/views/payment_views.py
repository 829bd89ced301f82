import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from drf_spectacular.utils import OpenApiResponse, OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, SuccessResponseSerializer
from marketplace.ordering.api.serializers.order_serializers import OrderSerializer
from marketplace.permissions import IsAdminRole
from payment_system.api.serializers.request_serializers import (
    ConfirmPaymentRequestSerializer,
    CreatePaymentIntentRequestSerializer,
    RefundRequestSerializer,
)
from payment_system.api.serializers.response_serializers import (
    PaymentHistoryEntrySerializer,
    PaymentIntentResponseSerializer,
    RefundResponseSerializer,
)
from utils.api_response import build_envelope, error_response, status_for_error, success_response

logger = logging.getLogger(__name__)


# Handle Stripe webhook events
@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(View):
    """Process gateway webhooks - thin router that delegates to WebhookService."""

    @extend_schema(
        operation_id="payment_stripe_webhook",
        summary="Stripe Webhook Endpoint",
        description="Endpoint for receiving Stripe webhook events. Verifies signature and processes events.",
        request=OpenApiTypes.OBJECT,
        responses={
            200: OpenApiResponse(description="Webhook processed successfully"),
            401: OpenApiResponse(description="Missing or invalid signature"),
        },
        tags=["Webhooks"],
        auth=[],
    )
    def post(self, request):
        """Process Stripe webhooks.

        Summary:
        - Verifies the webhook signature before looking at the payload.
        - Delegates event processing to WebhookService.process_event().
        - Unknown event types are acknowledged so the gateway stops retrying.
        """
        payload = request.body
        sig_header = request.headers.get("stripe-signature", "")

        client_ip = request.META.get("HTTP_X_FORWARDED_FOR", "").split(",")[0] or request.META.get(
            "REMOTE_ADDR", "unknown"
        )

        if not sig_header:
            logger.warning(f"Webhook rejected: Missing stripe-signature header from IP {client_ip}")

        result = container.webhook_service().handle(payload, sig_header)
        if not result.ok:
            logger.warning(f"Webhook rejected from IP {client_ip}: {result.error_detail}")
            body = build_envelope(False, error=result.error_detail)
            body["code"] = result.error
            return JsonResponse(body, status=status_for_error(result.error))

        outcome = result.value
        return JsonResponse(
            build_envelope(
                True,
                data={"received": True, "handled": outcome.handled, "event_type": outcome.event_type},
            ),
            status=200,
        )


@extend_schema(
    operation_id="payment_create_intent",
    summary="Create a payment intent for an order",
    description="""
    **What it receives:**
    - `order_id` (UUID): Order owned by the caller

    **What it does:**
    - Creates a gateway payment intent for the order total (in cents)
    - Moves the order to `confirmed`

    **What it returns:**
    - `client_secret` used by the storefront to complete the payment
    """,
    request=CreatePaymentIntentRequestSerializer,
    responses={
        201: OpenApiResponse(response=PaymentIntentResponseSerializer, description="Payment intent created"),
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Order already paid or cancelled"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        502: OpenApiResponse(response=ErrorResponseSerializer, description="Payment provider error"),
        503: OpenApiResponse(response=ErrorResponseSerializer, description="Payment provider timed out"),
    },
    tags=["Payments"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def create_payment_intent(request):
    serializer = CreatePaymentIntentRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = container.order_service().process_payment(serializer.validated_data["order_id"], request.user)
    if not result.ok:
        return error_response(result)

    created = result.value
    data = {
        "client_secret": created.client_secret,
        "payment_intent_id": created.payment_intent_id,
        "amount": created.amount,
        "currency": created.currency,
        "order_id": created.order.id,
    }
    return success_response(PaymentIntentResponseSerializer(data).data, status_code=status.HTTP_201_CREATED)


@extend_schema(
    operation_id="payment_confirm",
    summary="Confirm a completed payment",
    request=ConfirmPaymentRequestSerializer,
    responses={
        200: OpenApiResponse(response=SuccessResponseSerializer, description="Payment confirmed, order returned"),
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Payment not successful"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
    },
    tags=["Payments"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def confirm_payment(request):
    serializer = ConfirmPaymentRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = container.order_service().confirm_payment(serializer.validated_data["payment_intent_id"], request.user)
    if not result.ok:
        return error_response(result)
    return success_response(OrderSerializer(result.value.order).data)


@extend_schema(
    operation_id="payment_methods",
    summary="Supported payment methods",
    responses={200: SuccessResponseSerializer},
    tags=["Payments"],
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def payment_methods(request):
    result = container.payment_service().get_payment_methods()
    return success_response(result.value)


@extend_schema(
    operation_id="payment_history",
    summary="Paid orders of the current user",
    responses={200: OpenApiResponse(response=PaymentHistoryEntrySerializer(many=True))},
    tags=["Payments"],
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def payment_history(request):
    result = container.payment_service().get_payment_history(request.user)
    return success_response(PaymentHistoryEntrySerializer(result.value, many=True).data)


@extend_schema(
    operation_id="payment_refund",
    summary="Refund a paid order (admin)",
    description="""
    **What it receives:**
    - `amount` (decimal, optional): Partial amount, defaults to the order total
    - `reason` (string, optional)

    **What it does:**
    - Issues the refund through the gateway
    - Marks the order refunded and cancelled
    """,
    request=RefundRequestSerializer,
    responses={
        200: OpenApiResponse(response=RefundResponseSerializer, description="Refund processed"),
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Order not paid or invalid amount"),
        403: OpenApiResponse(response=ErrorResponseSerializer, description="Admin access required"),
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
    },
    tags=["Payments"],
)
@api_view(["POST"])
@permission_classes([IsAuthenticated, IsAdminRole])
def refund_payment(request, order_id):
    serializer = RefundRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = container.payment_service().refund_order(
        order_id,
        amount=serializer.validated_data.get("amount"),
        reason=serializer.validated_data.get("reason"),
    )
    if not result.ok:
        return error_response(result)

    refunded = result.value
    data = {
        "order_id": refunded.order.id,
        "refund_amount": refunded.refund_amount,
        "status": "refunded",
        "refund_id": refunded.refund_id,
    }
    return success_response(RefundResponseSerializer(data).data)
