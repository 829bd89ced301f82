import json
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from infrastructure.container import container
from infrastructure.payments import PaymentStatus, PaymentTimeoutException
from marketplace.models import Order
from marketplace.tests.factories import (
    AdminFactory,
    OrderFactory,
    OrderItemFactory,
    PaidOrderFactory,
    ProductFactory,
    UserFactory,
)

WEBHOOK_SECRET = "whsec_test_mock_secret"


class PaymentViewsTestCase(TestCase):
    def setUp(self):
        container.configure_for_testing()
        self.addCleanup(container.reset)
        self.gateway = container.payment()
        self.email = container.email()

        self.client = APIClient()
        self.buyer = UserFactory(email="buyer@example.com")
        self.client.force_authenticate(user=self.buyer)
        self.order = OrderFactory(
            buyer=self.buyer,
            subtotal=Decimal("110.00"),
            tax_amount=Decimal("8.80"),
            shipping_amount=Decimal("0.00"),
        )


class CreateIntentViewTest(PaymentViewsTestCase):
    def test_create_intent(self):
        response = self.client.post(
            reverse("payment_system:create_payment_intent"), {"order_id": str(self.order.id)}, format="json"
        )

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["amount"], 11880)
        self.assertEqual(data["currency"], "usd")
        self.assertTrue(data["client_secret"])
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)

    def test_requires_authentication(self):
        response = APIClient().post(
            reverse("payment_system:create_payment_intent"), {"order_id": str(self.order.id)}, format="json"
        )

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

    def test_invalid_body(self):
        response = self.client.post(reverse("payment_system:create_payment_intent"), {}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "validation_error")

    def test_foreign_order(self):
        other = OrderFactory()

        response = self.client.post(
            reverse("payment_system:create_payment_intent"), {"order_id": str(other.id)}, format="json"
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "order_not_found")

    def test_already_paid(self):
        paid = PaidOrderFactory(buyer=self.buyer)

        response = self.client.post(
            reverse("payment_system:create_payment_intent"), {"order_id": str(paid.id)}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "order_already_paid")

    def test_gateway_timeout_is_503(self):
        self.gateway.fail_with = PaymentTimeoutException("timed out")

        response = self.client.post(
            reverse("payment_system:create_payment_intent"), {"order_id": str(self.order.id)}, format="json"
        )

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["code"], "upstream_timeout")


class ConfirmPaymentViewTest(PaymentViewsTestCase):
    def test_confirm_succeeded_intent(self):
        intent_id = container.order_service().process_payment(self.order.id, self.buyer).value.payment_intent_id
        self.gateway.set_intent_status(intent_id, PaymentStatus.SUCCEEDED)

        response = self.client.post(
            reverse("payment_system:confirm_payment"), {"payment_intent_id": intent_id}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["status"], Order.STATUS_PROCESSING)
        self.assertEqual(len(self.email.messages_for_template("payment_confirmation")), 1)

    def test_confirm_pending_intent(self):
        intent_id = container.order_service().process_payment(self.order.id, self.buyer).value.payment_intent_id

        response = self.client.post(
            reverse("payment_system:confirm_payment"), {"payment_intent_id": intent_id}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "payment_not_successful")


class PaymentReadViewsTest(PaymentViewsTestCase):
    def test_methods(self):
        response = self.client.get(reverse("payment_system:payment_methods"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"][0]["id"], "card")

    def test_history(self):
        paid = PaidOrderFactory(buyer=self.buyer)

        response = self.client.get(reverse("payment_system:payment_history"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([entry["order_number"] for entry in response.json()["data"]], [paid.order_number])


class RefundViewTest(PaymentViewsTestCase):
    def setUp(self):
        super().setUp()
        self.paid = PaidOrderFactory(buyer=self.buyer, subtotal=Decimal("40.00"))

    def test_admin_refund(self):
        self.client.force_authenticate(user=AdminFactory())

        response = self.client.post(
            reverse("payment_system:refund_payment", args=[self.paid.id]), {"reason": "damaged"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "refunded")
        self.assertEqual(Decimal(data["refund_amount"]), Decimal("40.00"))
        self.paid.refresh_from_db()
        self.assertEqual(self.paid.payment_status, Order.PAYMENT_REFUNDED)

    def test_refund_requires_admin(self):
        response = self.client.post(reverse("payment_system:refund_payment", args=[self.paid.id]), {}, format="json")

        self.assertEqual(response.status_code, 403)
        self.paid.refresh_from_db()
        self.assertEqual(self.paid.payment_status, Order.PAYMENT_PAID)

    def test_refund_unpaid_order(self):
        self.client.force_authenticate(user=AdminFactory())

        response = self.client.post(reverse("payment_system:refund_payment", args=[self.order.id]), {}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "order_not_refundable")


class StripeWebhookViewTest(PaymentViewsTestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.product = ProductFactory(stock_quantity=0)
        self.order.status = Order.STATUS_CONFIRMED
        self.order.payment_intent_id = "pi_hook_1"
        self.order.save()
        OrderItemFactory(order=self.order, product=self.product, quantity=2)

    def _post(self, event_type, signature=WEBHOOK_SECRET, intent_id="pi_hook_1"):
        payload = {
            "id": "evt_1",
            "type": event_type,
            "data": {"object": {"id": intent_id, "metadata": {"order_id": str(self.order.id)}}},
            "created": 1700000000,
        }
        return self.client.post(
            reverse("payment_system:stripe_webhook"),
            data=json.dumps(payload),
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signature,
        )

    def test_invalid_signature_is_rejected(self):
        response = self._post("payment_intent.succeeded", signature="forged")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "webhook_signature_invalid")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_missing_signature_is_rejected(self):
        response = self._post("payment_intent.succeeded", signature="")

        self.assertEqual(response.status_code, 401)

    def test_succeeded_is_idempotent(self):
        first = self._post("payment_intent.succeeded")
        second = self._post("payment_intent.succeeded")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertTrue(first.json()["data"]["handled"])
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.status, Order.STATUS_PROCESSING)
        self.assertEqual(len(self.email.messages_for_template("payment_confirmation")), 1)

    def test_failed_cancels_and_restores_stock(self):
        response = self._post("payment_intent.payment_failed")

        self.assertEqual(response.status_code, 200)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)

    def test_unknown_event_is_acknowledged(self):
        response = self._post("customer.created")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["data"]["handled"])
        self.assertEqual(response.json()["data"]["event_type"], "customer.created")
