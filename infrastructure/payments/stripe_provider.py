"""
Stripe Payment Provider
========================

PaymentProviderInterface implemented with the Stripe SDK.
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import stripe
from django.conf import settings
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .interface import (
    PaymentException,
    PaymentIntent,
    PaymentProviderInterface,
    PaymentStatus,
    PaymentTimeoutException,
    RefundResult,
    WebhookEvent,
    WebhookVerificationException,
    to_minor_units,
)

logger = logging.getLogger(__name__)

TRANSIENT_STRIPE_ERRORS = (
    stripe.RateLimitError,
    stripe.APIConnectionError,
    stripe.APIError,
)

stripe_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(TRANSIENT_STRIPE_ERRORS),
    reraise=True,
)

STATUS_MAP = {
    "succeeded": PaymentStatus.SUCCEEDED,
    "processing": PaymentStatus.PROCESSING,
    "canceled": PaymentStatus.CANCELED,
    "requires_payment_method": PaymentStatus.PENDING,
    "requires_confirmation": PaymentStatus.PENDING,
    "requires_action": PaymentStatus.PENDING,
    "requires_capture": PaymentStatus.PROCESSING,
}


class StripeProvider(PaymentProviderInterface):
    """
    Stripe payment provider implementation.

    Configuration (in settings.py):
        STRIPE_SECRET_KEY: Stripe secret API key
        STRIPE_WEBHOOK_SECRET: Webhook endpoint secret for signature verification
        STRIPE_TIMEOUT_SECONDS: Upper bound for each HTTP call to Stripe
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        stripe.api_key = api_key or getattr(settings, "STRIPE_SECRET_KEY", "")
        self.webhook_secret = webhook_secret or getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
        self.timeout = timeout or getattr(settings, "STRIPE_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=self.timeout)

        if not stripe.api_key:
            logger.warning("STRIPE_SECRET_KEY not configured")

    @stripe_retry
    def _create_intent_api(self, **params):
        return stripe.PaymentIntent.create(**params)

    @stripe_retry
    def _retrieve_intent_api(self, intent_id: str):
        return stripe.PaymentIntent.retrieve(intent_id)

    @stripe_retry
    def _create_refund_api(self, **params):
        return stripe.Refund.create(**params)

    def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: Optional[Dict[str, Any]] = None,
        customer_email: Optional[str] = None,
    ) -> PaymentIntent:
        params = {
            "amount": to_minor_units(amount),
            "currency": currency.lower(),
            "metadata": metadata or {},
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_email:
            params["receipt_email"] = customer_email

        intent = self._call(self._create_intent_api, "create payment intent", **params)
        logger.info(f"Created Stripe payment intent {intent.id} for order {params['metadata'].get('order_id')}")
        return self._to_payment_intent(intent)

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        intent = self._call(self._retrieve_intent_api, "retrieve payment intent", intent_id)
        return self._to_payment_intent(intent)

    def create_refund(
        self,
        payment_intent_id: str,
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
    ) -> RefundResult:
        params: Dict[str, Any] = {"payment_intent": payment_intent_id}
        if amount is not None:
            params["amount"] = to_minor_units(amount)
        if reason:
            params["metadata"] = {"reason": reason}

        refund = self._call(self._create_refund_api, "create refund", **params)
        logger.info(f"Created Stripe refund {refund.id} for {payment_intent_id}")
        return RefundResult(
            refund_id=refund.id,
            payment_intent_id=payment_intent_id,
            amount=refund.amount,
            status=refund.status,
        )

    def verify_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        if not self.webhook_secret:
            raise WebhookVerificationException("STRIPE_WEBHOOK_SECRET is not configured")
        if not signature:
            raise WebhookVerificationException("Missing stripe signature")

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as e:
            raise WebhookVerificationException(f"Invalid payload: {str(e)}") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationException(f"Invalid signature: {str(e)}") from e

        body = json.loads(payload)
        return WebhookEvent(
            event_id=body.get("id", ""),
            event_type=body.get("type", ""),
            data=body.get("data", {}).get("object", {}),
            created_at=body.get("created", 0),
        )

    def _call(self, func, action: str, *args, **kwargs):
        """Run a retried Stripe call and translate SDK errors."""
        try:
            return func(*args, **kwargs)
        except (stripe.APIConnectionError, stripe.RateLimitError) as e:
            logger.error(f"Stripe unavailable during {action}: {str(e)}")
            raise PaymentTimeoutException(f"Payment gateway unavailable: {str(e)}") from e
        except stripe.StripeError as e:
            logger.error(f"Stripe failed to {action}: {str(e)}")
            raise PaymentException(f"Failed to {action}: {e.user_message or str(e)}") from e

    @staticmethod
    def _to_payment_intent(intent) -> PaymentIntent:
        return PaymentIntent(
            intent_id=intent.id,
            amount=intent.amount,
            currency=intent.currency,
            status=STATUS_MAP.get(intent.status, PaymentStatus.FAILED),
            client_secret=getattr(intent, "client_secret", None),
            metadata=dict(intent.metadata or {}),
        )
