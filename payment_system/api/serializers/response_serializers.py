from rest_framework import serializers


class PaymentIntentResponseSerializer(serializers.Serializer):
    client_secret = serializers.CharField(help_text="Secret used by the storefront to complete the payment")
    payment_intent_id = serializers.CharField()
    amount = serializers.IntegerField(help_text="Amount in cents")
    currency = serializers.CharField()
    order_id = serializers.UUIDField()


class PaymentHistoryEntrySerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    order_number = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField()
    payment_method = serializers.CharField()
    payment_date = serializers.DateTimeField()
    status = serializers.CharField()


class RefundResponseSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    refund_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.CharField()
    refund_id = serializers.CharField(allow_null=True)
