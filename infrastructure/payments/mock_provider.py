"""
Mock Payment Provider
=====================

In-memory payment gateway used by tests and local development.
"""

import json
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .interface import (
    PaymentException,
    PaymentIntent,
    PaymentProviderInterface,
    PaymentStatus,
    RefundResult,
    WebhookEvent,
    WebhookVerificationException,
    to_minor_units,
)

logger = logging.getLogger(__name__)


class MockPaymentProvider(PaymentProviderInterface):
    """
    Payment provider that keeps intents in memory.

    Webhooks are accepted when the signature equals the configured secret.
    ``fail_with`` makes the next gateway call raise the given exception.
    """

    def __init__(self, webhook_secret: str = "whsec_mock"):
        self.webhook_secret = webhook_secret
        self.intents: Dict[str, PaymentIntent] = {}
        self.refunds: List[RefundResult] = []
        self.fail_with: Optional[PaymentException] = None

    def _maybe_fail(self):
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: Optional[Dict[str, Any]] = None,
        customer_email: Optional[str] = None,
    ) -> PaymentIntent:
        self._maybe_fail()
        intent_id = f"pi_mock_{uuid.uuid4().hex[:16]}"
        intent = PaymentIntent(
            intent_id=intent_id,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            status=PaymentStatus.PENDING,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:8]}",
            metadata=dict(metadata or {}),
        )
        self.intents[intent_id] = intent
        logger.info(f"[MOCK PAYMENT] Created intent {intent_id} for {intent.amount} {intent.currency}")
        return intent

    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        self._maybe_fail()
        if intent_id not in self.intents:
            raise PaymentException(f"No such payment_intent: {intent_id}")
        return self.intents[intent_id]

    def create_refund(
        self,
        payment_intent_id: str,
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
    ) -> RefundResult:
        self._maybe_fail()
        intent = self.intents.get(payment_intent_id)
        refund = RefundResult(
            refund_id=f"re_mock_{uuid.uuid4().hex[:16]}",
            payment_intent_id=payment_intent_id,
            amount=to_minor_units(amount) if amount is not None else (intent.amount if intent else 0),
            status="succeeded",
        )
        self.refunds.append(refund)
        return refund

    def verify_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        if not signature or signature != self.webhook_secret:
            raise WebhookVerificationException("Invalid signature")
        try:
            body = json.loads(payload)
        except ValueError as e:
            raise WebhookVerificationException(f"Invalid payload: {str(e)}") from e
        return WebhookEvent(
            event_id=body.get("id", ""),
            event_type=body.get("type", ""),
            data=body.get("data", {}).get("object", {}),
            created_at=body.get("created", 0),
        )

    def set_intent_status(self, intent_id: str, status: PaymentStatus) -> PaymentIntent:
        """Simulate the customer completing (or failing) a payment."""
        self.intents[intent_id].status = status
        return self.intents[intent_id]
