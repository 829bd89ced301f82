from rest_framework import serializers


class CreatePaymentIntentRequestSerializer(serializers.Serializer):
    order_id = serializers.UUIDField(required=True, help_text="Order to pay for")


class ConfirmPaymentRequestSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(required=True, max_length=255, help_text="Gateway payment intent id")


class RefundRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
        help_text="Partial refund amount, defaults to the order total",
    )
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, help_text="Why the refund is issued")
