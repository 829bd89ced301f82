"""
Tests for WebhookService

Signature handling and dispatch of verified gateway events.
"""

import json
from unittest.mock import MagicMock

from django.test import TestCase

from infrastructure.payments import MockPaymentProvider, PaymentProviderInterface, WebhookEvent
from marketplace.ordering.domain.results import WebhookOutcome
from marketplace.ordering.domain.services.order_service import OrderService
from marketplace.services.base import ErrorCodes
from payment_system.domain.services.webhook_service import WebhookService


def _event(event_type, data=None, event_id="evt_123"):
    return WebhookEvent(event_id=event_id, event_type=event_type, data=data or {}, created_at=1234567890)


class WebhookServiceTest(TestCase):
    def setUp(self):
        self.mock_provider = MagicMock(spec=PaymentProviderInterface)
        self.mock_order_service = MagicMock(spec=OrderService)

        self.service = WebhookService(payment_provider=self.mock_provider, order_service=self.mock_order_service)

    def test_invalid_signature(self):
        service = WebhookService(payment_provider=MockPaymentProvider("whsec_x"), order_service=self.mock_order_service)

        result = service.handle(b"{}", "wrong")

        self.assertFalse(result.ok)
        self.assertEqual(result.error, ErrorCodes.WEBHOOK_SIGNATURE_INVALID)
        self.mock_order_service.mark_payment_succeeded.assert_not_called()

    def test_verified_payload_is_dispatched(self):
        service = WebhookService(payment_provider=MockPaymentProvider("whsec_x"), order_service=self.mock_order_service)
        self.mock_order_service.mark_payment_succeeded.return_value = WebhookOutcome(
            event_type="payment_intent.succeeded", handled=True
        )
        payload = json.dumps(
            {"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {"id": "pi_1", "metadata": {}}}}
        ).encode()

        result = service.handle(payload, "whsec_x")

        self.assertTrue(result.ok)
        self.assertTrue(result.value.handled)
        self.mock_order_service.mark_payment_succeeded.assert_called_once_with("pi_1", order_id=None)

    def test_payment_succeeded_passes_metadata_order_id(self):
        self.service.process_event(
            _event("payment_intent.succeeded", {"id": "pi_123", "metadata": {"order_id": "order-1"}})
        )

        self.mock_order_service.mark_payment_succeeded.assert_called_once_with("pi_123", order_id="order-1")

    def test_payment_failed(self):
        self.service.process_event(
            _event(
                "payment_intent.payment_failed",
                {"id": "pi_123", "metadata": {"order_id": "order-1"}, "last_payment_error": {"message": "declined"}},
            )
        )

        self.mock_order_service.mark_payment_failed.assert_called_once_with("pi_123", order_id="order-1")

    def test_dispute_is_logged(self):
        with self.assertLogs("payment_system.domain.services.webhook_service", level="WARNING") as logs:
            outcome = self.service.process_event(
                _event("charge.dispute.created", {"id": "dp_1", "charge": "ch_1", "amount": 500, "reason": "fraudulent"})
            )

        self.assertTrue(outcome.handled)
        self.assertIn("dp_1", logs.output[0])

    def test_unknown_event_is_acknowledged(self):
        outcome = self.service.process_event(_event("customer.created"))

        self.assertFalse(outcome.handled)
        self.assertEqual(outcome.detail, "Ignored")
        self.mock_order_service.mark_payment_succeeded.assert_not_called()
        self.mock_order_service.mark_payment_failed.assert_not_called()
