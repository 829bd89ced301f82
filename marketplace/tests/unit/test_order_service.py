from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.test import TestCase, override_settings

from infrastructure.notifications import NotificationService
from infrastructure.payments import MockPaymentProvider, PaymentException, PaymentStatus, PaymentTimeoutException
from marketplace.cart.domain.services import CartService, InventoryService, PricingService
from marketplace.models import CartItem, Order
from marketplace.services.base import ErrorCodes, service_err
from marketplace.tests.factories import (
    CartFactory,
    CartItemFactory,
    OrderFactory,
    OrderItemFactory,
    PaidOrderFactory,
    ProductFactory,
    ProductVariantFactory,
    UserFactory,
)
from marketplace.ordering.domain.services.order_service import OrderService

SHIPPING_ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "address_line_1": "12 Analytical Row",
    "city": "London",
    "postal_code": "N1 7AA",
    "country": "UK",
}


class OrderServiceTestCase(TestCase):
    def setUp(self):
        self.inventory = InventoryService()
        self.pricing = PricingService(
            tax_rate=Decimal("0.08"), free_shipping_threshold=Decimal("100"), default_shipping_rate=Decimal("10")
        )
        self.cart_service = CartService(inventory_service=self.inventory, pricing_service=self.pricing)
        self.gateway = MockPaymentProvider()
        self.notifications = MagicMock(spec=NotificationService)
        self.service = OrderService(
            cart_service=self.cart_service,
            inventory_service=self.inventory,
            pricing_service=self.pricing,
            payment_provider=self.gateway,
            notifications=self.notifications,
        )
        self.user = UserFactory(email="buyer@example.com")


class CreateOrderTest(OrderServiceTestCase):
    def setUp(self):
        super().setUp()
        self.lamp = ProductFactory(name="Desk Lamp", price=Decimal("55.00"), stock_quantity=3)
        self.cart = CartFactory(user=self.user)

    def test_checkout_turns_cart_into_pending_order(self):
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=2)

        result = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS})

        self.assertTrue(result.ok)
        order = result.value.order
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)
        self.assertEqual(order.subtotal, Decimal("110.00"))
        self.assertEqual(order.shipping_amount, Decimal("0.00"))
        self.assertEqual(order.tax_amount, Decimal("8.80"))
        self.assertEqual(order.total_amount, Decimal("118.80"))
        self.assertRegex(order.order_number, r"^ORD-\d+-[0-9A-Z]{5}$")

        item = order.items.get()
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.unit_price, Decimal("55.00"))
        self.assertEqual(item.product_snapshot["name"], "Desk Lamp")

        self.lamp.refresh_from_db()
        self.assertEqual(self.lamp.stock_quantity, 1)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())
        self.notifications.send_order_confirmation.assert_called_once_with(order)

    def test_price_snapshot_survives_later_price_change(self):
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=1)
        order = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS}).value.order

        self.lamp.price = Decimal("99.00")
        self.lamp.save()

        self.assertEqual(order.items.get().unit_price, Decimal("55.00"))

    def test_small_order_pays_shipping(self):
        CartItemFactory(cart=self.cart, product=ProductFactory(price=Decimal("40.00")), quantity=2)

        order = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS}).value.order

        self.assertEqual(order.shipping_amount, Decimal("10.00"))
        self.assertEqual(order.total_amount, Decimal("96.40"))

    def test_variant_line_consumes_variant_stock(self):
        variant = ProductVariantFactory(product=self.lamp, price=Decimal("60.00"), stock_quantity=2, name="Brass")
        CartItemFactory(cart=self.cart, product=self.lamp, variant=variant, quantity=2)

        order = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS}).value.order

        variant.refresh_from_db()
        self.lamp.refresh_from_db()
        self.assertEqual(variant.stock_quantity, 0)
        self.assertEqual(self.lamp.stock_quantity, 3)
        self.assertEqual(order.items.get().product_snapshot["variant"], "Brass")

    @override_settings(STOREFRONT={"CURRENCY": "eur"})
    def test_order_uses_configured_currency(self):
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=1)

        order = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS}).value.order

        self.assertEqual(order.currency, "EUR")

    def test_checkout_succeeds_when_confirmation_cannot_be_queued(self):
        service = OrderService(
            cart_service=self.cart_service,
            inventory_service=self.inventory,
            pricing_service=self.pricing,
            payment_provider=self.gateway,
            notifications=NotificationService(dispatch=MagicMock(side_effect=ConnectionError("broker down"))),
        )
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=2)

        result = service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS})

        self.assertTrue(result.ok)
        self.assertFalse(result.value.notification_queued)
        self.assertEqual(result.value.order.status, Order.STATUS_PENDING)
        self.lamp.refresh_from_db()
        self.assertEqual(self.lamp.stock_quantity, 1)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())

    def test_empty_cart(self):
        result = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS})

        self.assertEqual(result.error, ErrorCodes.CART_EMPTY)
        self.assertFalse(Order.objects.exists())

    def test_insufficient_stock_writes_nothing(self):
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=4)

        result = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS})

        self.assertEqual(result.error, ErrorCodes.INSUFFICIENT_STOCK)
        self.assertFalse(Order.objects.exists())
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)
        self.notifications.send_order_confirmation.assert_not_called()

    def test_stock_race_rolls_back_everything(self):
        other = ProductFactory(stock_quantity=5)
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=1)
        CartItemFactory(cart=self.cart, product=other, quantity=1)
        real_adjust = self.inventory.adjust_stock

        def adjust(product_id, variant_id=None, delta=0):
            if product_id == other.id:
                return service_err(ErrorCodes.INSUFFICIENT_STOCK, "gone")
            return real_adjust(product_id, variant_id, delta)

        with patch.object(self.inventory, "adjust_stock", side_effect=adjust):
            result = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS})

        self.assertEqual(result.error, ErrorCodes.INSUFFICIENT_STOCK)
        self.assertFalse(Order.objects.exists())
        self.lamp.refresh_from_db()
        self.assertEqual(self.lamp.stock_quantity, 3)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 2)

    def test_optional_fields_are_stored(self):
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=1)

        order = self.service.create_order(
            self.user,
            {"shipping_address": SHIPPING_ADDRESS, "notes": "Leave at the door", "payment_method": "paypal"},
        ).value.order

        self.assertEqual(order.notes, "Leave at the door")
        self.assertEqual(order.payment_method, "paypal")
        self.assertEqual(order.shipping_address["city"], "London")


class PaymentFlowTest(OrderServiceTestCase):
    def setUp(self):
        super().setUp()
        self.order = OrderFactory(
            buyer=self.user,
            subtotal=Decimal("110.00"),
            tax_amount=Decimal("8.80"),
            shipping_amount=Decimal("0.00"),
        )

    def test_process_payment_creates_intent_in_cents(self):
        result = self.service.process_payment(self.order.id, self.user)

        self.assertTrue(result.ok)
        self.assertEqual(result.value.amount, 11880)
        self.assertEqual(result.value.currency, "usd")
        intent = self.gateway.intents[result.value.payment_intent_id]
        self.assertEqual(intent.metadata["order_id"], str(self.order.id))
        self.assertEqual(intent.metadata["user_id"], str(self.user.id))

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)
        self.assertEqual(self.order.payment_intent_id, result.value.payment_intent_id)

    def test_process_payment_for_someone_elses_order(self):
        result = self.service.process_payment(self.order.id, UserFactory())

        self.assertEqual(result.error, ErrorCodes.ORDER_NOT_FOUND)

    def test_process_payment_already_paid(self):
        paid = PaidOrderFactory(buyer=self.user)

        self.assertEqual(self.service.process_payment(paid.id, self.user).error, ErrorCodes.ORDER_ALREADY_PAID)

    def test_process_payment_cancelled_order(self):
        self.order.status = Order.STATUS_CANCELLED
        self.order.save()

        self.assertEqual(self.service.process_payment(self.order.id, self.user).error, ErrorCodes.INVALID_STATUS)

    def test_gateway_timeout_maps_to_retryable_error(self):
        self.gateway.fail_with = PaymentTimeoutException("timed out")

        result = self.service.process_payment(self.order.id, self.user)

        self.assertEqual(result.error, ErrorCodes.UPSTREAM_TIMEOUT)
        self.assertTrue(result.retryable)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)

    def test_gateway_error(self):
        self.gateway.fail_with = PaymentException("card_declined")

        result = self.service.process_payment(self.order.id, self.user)

        self.assertEqual(result.error, ErrorCodes.PAYMENT_PROVIDER_ERROR)
        self.assertFalse(result.retryable)

    def test_confirm_payment_moves_to_processing_once(self):
        intent_id = self.service.process_payment(self.order.id, self.user).value.payment_intent_id
        self.gateway.set_intent_status(intent_id, PaymentStatus.SUCCEEDED)

        first = self.service.confirm_payment(intent_id, self.user)
        second = self.service.confirm_payment(intent_id, self.user)

        self.assertEqual(first.value.order.status, Order.STATUS_PROCESSING)
        self.assertEqual(second.value.order.status, Order.STATUS_PROCESSING)
        self.notifications.send_payment_confirmation.assert_called_once()

    def test_confirm_unsuccessful_payment(self):
        intent_id = self.service.process_payment(self.order.id, self.user).value.payment_intent_id

        result = self.service.confirm_payment(intent_id, self.user)

        self.assertEqual(result.error, ErrorCodes.PAYMENT_NOT_SUCCESSFUL)

    def test_confirm_unknown_intent(self):
        result = self.service.confirm_payment("pi_missing", self.user)

        self.assertEqual(result.error, ErrorCodes.PAYMENT_PROVIDER_ERROR)


class CancelOrderTest(OrderServiceTestCase):
    def setUp(self):
        super().setUp()
        self.product = ProductFactory(stock_quantity=1)
        self.order = OrderFactory(buyer=self.user)
        OrderItemFactory(order=self.order, product=self.product, quantity=2)

    def test_cancel_restores_stock(self):
        result = self.service.cancel_order(self.order.id, self.user, "Changed my mind")

        self.assertTrue(result.ok)
        self.assertEqual(result.value.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(result.value.order.cancellation_reason, "Changed my mind")
        self.assertIsNotNone(result.value.order.cancelled_at)
        self.assertEqual(result.value.restored_items, 1)
        self.assertFalse(result.value.refund_required)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_cancel_skips_stock_of_deleted_variant(self):
        product = ProductFactory(stock_quantity=5)
        variant = ProductVariantFactory(product=product, stock_quantity=2)
        CartItemFactory(cart=CartFactory(user=self.user), product=product, variant=variant, quantity=2)
        order = self.service.create_order(self.user, {"shipping_address": SHIPPING_ADDRESS}).value.order
        variant.delete()

        result = self.service.cancel_order(order.id, self.user)

        self.assertTrue(result.ok)
        self.assertEqual(result.value.restored_items, 0)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 5)

    def test_default_reason(self):
        result = self.service.cancel_order(self.order.id, self.user, "")

        self.assertEqual(result.value.reason, "Customer request")

    def test_paid_order_requires_refund(self):
        paid = PaidOrderFactory(buyer=self.user)

        result = self.service.cancel_order(paid.id, self.user)

        self.assertTrue(result.value.refund_required)

    def test_shipped_order_cannot_be_cancelled(self):
        self.order.status = Order.STATUS_SHIPPED
        self.order.save()

        result = self.service.cancel_order(self.order.id, self.user)

        self.assertEqual(result.error, ErrorCodes.ORDER_CANNOT_CANCEL)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 1)

    def test_second_cancel_is_rejected_and_stock_restored_once(self):
        self.service.cancel_order(self.order.id, self.user)

        result = self.service.cancel_order(self.order.id, self.user)

        self.assertEqual(result.error, ErrorCodes.ORDER_CANNOT_CANCEL)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)

    def test_other_users_order(self):
        result = self.service.cancel_order(self.order.id, UserFactory())

        self.assertEqual(result.error, ErrorCodes.ORDER_NOT_FOUND)


class GatewayEventTest(OrderServiceTestCase):
    def setUp(self):
        super().setUp()
        self.product = ProductFactory(stock_quantity=0)
        self.order = OrderFactory(buyer=self.user, status=Order.STATUS_CONFIRMED, payment_intent_id="pi_evt_1")
        OrderItemFactory(order=self.order, product=self.product, quantity=2)

    def test_succeeded_marks_paid_and_emails_once(self):
        first = self.service.mark_payment_succeeded("pi_evt_1")
        second = self.service.mark_payment_succeeded("pi_evt_1")

        self.assertTrue(first.handled)
        self.assertEqual(first.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(first.order.status, Order.STATUS_PROCESSING)
        self.assertEqual(second.detail, "Already processed")
        self.notifications.send_payment_confirmation.assert_called_once()

    def test_succeeded_falls_back_to_metadata_order_id(self):
        outcome = self.service.mark_payment_succeeded("pi_other", order_id=str(self.order.id))

        self.assertTrue(outcome.handled)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_intent_id, "pi_other")

    def test_succeeded_for_unknown_order(self):
        outcome = self.service.mark_payment_succeeded("pi_unknown")

        self.assertFalse(outcome.handled)

    def test_succeeded_for_cancelled_order_keeps_status(self):
        self.order.status = Order.STATUS_CANCELLED
        self.order.save()

        outcome = self.service.mark_payment_succeeded("pi_evt_1")

        self.assertEqual(outcome.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(outcome.order.payment_status, Order.PAYMENT_PAID)
        self.notifications.send_payment_confirmation.assert_not_called()

    def test_failed_cancels_and_restores_stock_once(self):
        self.service.mark_payment_failed("pi_evt_1")
        outcome = self.service.mark_payment_failed("pi_evt_1")

        self.assertTrue(outcome.handled)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(self.order.payment_status, Order.PAYMENT_FAILED)
        self.assertEqual(self.order.cancellation_reason, "Payment failed")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)

    def test_failed_after_paid_is_ignored(self):
        self.service.mark_payment_succeeded("pi_evt_1")

        outcome = self.service.mark_payment_failed("pi_evt_1")

        self.assertFalse(outcome.handled)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)


class OrderQueriesTest(OrderServiceTestCase):
    def test_update_status_validates_and_notifies(self):
        order = PaidOrderFactory(buyer=self.user)

        self.assertEqual(self.service.update_order_status(order.id, "lost").error, ErrorCodes.INVALID_STATUS)

        result = self.service.update_order_status(order.id, Order.STATUS_SHIPPED)
        self.assertEqual(result.value.previous_status, Order.STATUS_PROCESSING)
        self.assertEqual(result.value.order.status, Order.STATUS_SHIPPED)
        self.notifications.send_status_update.assert_called_once()

    def test_list_orders_filters_by_status(self):
        OrderFactory(buyer=self.user)
        PaidOrderFactory(buyer=self.user)
        OrderFactory()

        result = self.service.list_orders(self.user, status=Order.STATUS_PROCESSING)

        self.assertEqual(result.value["total"], 1)
        self.assertEqual(self.service.list_orders(self.user).value["total"], 2)
        self.assertEqual(self.service.list_orders(self.user, status="lost").error, ErrorCodes.INVALID_STATUS)

    def test_order_summary(self):
        OrderFactory(buyer=self.user, subtotal=Decimal("10.00"))
        PaidOrderFactory(buyer=self.user, subtotal=Decimal("20.50"))

        summary = self.service.get_order_summary(self.user).value

        self.assertEqual(summary["total_orders"], 2)
        self.assertEqual(summary["total_spent"], Decimal("30.50"))
        self.assertEqual(summary["orders_by_status"], {"pending": 1, "processing": 1})

    def test_track_shipped_order(self):
        order = OrderFactory(buyer=self.user, status=Order.STATUS_SHIPPED)

        tracking = self.service.track_order(order.id, self.user).value

        self.assertEqual(
            [step["completed"] for step in tracking["tracking_steps"]], [True, True, True, True, False]
        )
        self.assertIsNotNone(tracking["estimated_delivery"])

    def test_track_cancelled_order_only_shows_placed(self):
        order = OrderFactory(buyer=self.user, status=Order.STATUS_CANCELLED)

        tracking = self.service.track_order(order.id, self.user).value

        self.assertEqual(
            [step["completed"] for step in tracking["tracking_steps"]], [True, False, False, False, False]
        )
        self.assertIsNone(tracking["estimated_delivery"])

    def test_reorder_skips_unavailable_products(self):
        order = OrderFactory(buyer=self.user)
        available = ProductFactory(stock_quantity=5)
        gone = ProductFactory(is_active=False, name="Retired Mug")
        OrderItemFactory(order=order, product=available, quantity=2)
        OrderItemFactory(order=order, product=gone, quantity=1)

        outcome = self.service.reorder(order.id, self.user).value

        self.assertEqual(outcome.added_items, 1)
        self.assertEqual(outcome.unavailable_items, ["Retired Mug"])
        self.assertEqual(outcome.total_items, 2)
        self.assertEqual(CartItem.objects.get(cart__user=self.user).quantity, 2)

    def test_reorder_reports_deleted_variant_unavailable(self):
        order = OrderFactory(buyer=self.user)
        product = ProductFactory(stock_quantity=5)
        OrderItemFactory(
            order=order,
            product=product,
            quantity=1,
            product_snapshot={"name": "Brass Lamp", "variant_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7"},
        )

        outcome = self.service.reorder(order.id, self.user).value

        self.assertEqual(outcome.added_items, 0)
        self.assertEqual(outcome.unavailable_items, ["Brass Lamp"])
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())
