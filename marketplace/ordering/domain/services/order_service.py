"""
OrderService - Order Lifecycle Management

Handles checkout, payment, cancellation and status changes for orders.
Orchestrates the cart, inventory, pricing, payment gateway and notification
services, all of which are injected by the service container.

Checkout writes (order, items, stock decrement, cart clear) run in a single
transaction; notifications are queued only after it commits.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from infrastructure.notifications import NotificationService
from infrastructure.observability.tracing import get_tracer
from infrastructure.payments import (
    PaymentException,
    PaymentProviderInterface,
    PaymentStatus,
    PaymentTimeoutException,
)
from marketplace.cart.domain.services.cart_service import CartLine, CartService
from marketplace.cart.domain.services.inventory_service import InventoryService
from marketplace.cart.domain.services.pricing_service import PricingService
from marketplace.infra.observability.metrics import (
    order_status_updates_total,
    order_value,
    orders_cancelled_total,
    orders_placed_total,
    payment_intents_total,
)
from marketplace.ordering.domain.exceptions import OrderWorkflowError
from marketplace.ordering.domain.models import Order
from marketplace.ordering.domain.results import (
    OrderCancelled,
    OrderCreated,
    OrderStatusUpdated,
    PaymentConfirmed,
    PaymentIntentCreated,
    ReorderOutcome,
    WebhookOutcome,
)
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .order_repository import OrderRepository

tracer = get_tracer(__name__)

DEFAULT_CANCEL_REASON = "Customer request"
PAYMENT_FAILED_REASON = "Payment failed"
ESTIMATED_DELIVERY_DAYS = 3
RECENT_ORDERS_LIMIT = 5

TRACKING_STEPS = [
    (Order.STATUS_PENDING, "Order Placed"),
    (Order.STATUS_CONFIRMED, "Order Confirmed"),
    (Order.STATUS_PROCESSING, "Processing"),
    (Order.STATUS_SHIPPED, "Shipped"),
    (Order.STATUS_DELIVERED, "Delivered"),
]
FULFILMENT_ORDER = [status for status, _ in TRACKING_STEPS]


class OrderService(BaseService):
    """
    Service for managing order lifecycle.

    States: pending -> confirmed -> processing -> shipped -> delivered, with
    cancelled reachable from any state before shipping.
    """

    def __init__(
        self,
        cart_service: CartService,
        inventory_service: InventoryService,
        pricing_service: PricingService,
        payment_provider: PaymentProviderInterface,
        notifications: NotificationService,
        repository: Optional[OrderRepository] = None,
        estimated_delivery_days: int = ESTIMATED_DELIVERY_DAYS,
    ):
        super().__init__()
        self.cart_service = cart_service
        self.inventory_service = inventory_service
        self.pricing_service = pricing_service
        self.payment_provider = payment_provider
        self.notifications = notifications
        self.repository = repository or OrderRepository()
        self.estimated_delivery_days = estimated_delivery_days

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @BaseService.log_performance
    def create_order(self, user, order_data: Dict[str, Any]) -> ServiceResult[OrderCreated]:
        """
        Turn the user's cart into a pending order.

        Steps:
        1. Read the cart (fails with cart_empty)
        2. Check stock for every line (fails with insufficient_stock, nothing written)
        3. Price the lines with the snapshot unit prices
        4. In one transaction: create order + items, decrement stock, clear cart
        5. Queue the confirmation email

        Args:
            user: Buyer
            order_data: shipping_address (required), billing_address, payment_method,
                notes, shipping_amount

        Returns:
            ServiceResult with OrderCreated
        """
        with tracer.start_as_current_span("order_create") as span:
            span.set_attribute("user.id", str(user.id))

            with tracer.start_as_current_span("read_cart"):
                lines = self.cart_service.get_cart_lines(user)
            if not lines:
                orders_placed_total.labels(status="failure").inc()
                return service_err(ErrorCodes.CART_EMPTY, "Cart is empty")

            with tracer.start_as_current_span("check_stock"):
                for line in lines:
                    stock_check = self.inventory_service.check_stock(
                        line.product.id, line.variant.id if line.variant else None, line.quantity
                    )
                    if not stock_check.ok or not stock_check.value:
                        orders_placed_total.labels(status="failure").inc()
                        return service_err(ErrorCodes.INSUFFICIENT_STOCK, f"Insufficient stock for {line.product.name}")

            items = [self._order_item_fields(line) for line in lines]
            with tracer.start_as_current_span("calculate_totals"):
                totals = self.pricing_service.calculate_order_totals(
                    items, shipping_rate=order_data.get("shipping_amount")
                ).value

            try:
                with transaction.atomic():
                    with tracer.start_as_current_span("save_order"):
                        order = self.repository.create_order(
                            buyer=user,
                            status=Order.STATUS_PENDING,
                            payment_status=Order.PAYMENT_PENDING,
                            subtotal=totals.subtotal,
                            shipping_amount=totals.shipping,
                            tax_amount=totals.tax,
                            total_amount=totals.total,
                            currency=self.pricing_service.currency,
                            shipping_address=order_data["shipping_address"],
                            billing_address=order_data.get("billing_address"),
                            payment_method=order_data.get("payment_method") or "card",
                            notes=order_data.get("notes") or "",
                        )
                        self.repository.create_order_items(order, items)

                    with tracer.start_as_current_span("decrement_stock"):
                        for line in lines:
                            adjusted = self.inventory_service.adjust_stock(
                                line.product.id, line.variant.id if line.variant else None, line.quantity
                            )
                            if not adjusted.ok:
                                # Another checkout took the stock after the pre-check
                                raise OrderWorkflowError(
                                    ErrorCodes.INSUFFICIENT_STOCK, f"Insufficient stock for {line.product.name}"
                                )

                    with tracer.start_as_current_span("clear_cart"):
                        self.cart_service.clear_cart(user)
            except OrderWorkflowError as e:
                self.logger.warning(f"Checkout rolled back for user {user.id}: {e.message}")
                span.set_attribute("order.rolled_back", True)
                orders_placed_total.labels(status="failure").inc()
                return service_err(e.code, e.message)

            order = self.repository.get_order(order.id)
            queued = self.notifications.send_order_confirmation(order)

            orders_placed_total.labels(status="success").inc()
            order_value.observe(float(order.total_amount))
            span.set_attribute("order.id", str(order.id))
            span.set_attribute("order.total", str(order.total_amount))

        self.logger.info(f"Order created successfully: {order.order_number}")
        return service_ok(OrderCreated(order=order, notification_queued=queued))

    @staticmethod
    def _order_item_fields(line: CartLine) -> Dict[str, Any]:
        product = line.product
        snapshot = {
            "name": product.name,
            "description": product.description,
            "image": product.primary_image_url,
            "category": product.category.name if product.category_id else None,
        }
        if line.variant:
            snapshot["variant"] = line.variant.name
            snapshot["variant_id"] = str(line.variant.id)
        return {
            "product": product,
            "variant": line.variant,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "total_price": line.unit_price * line.quantity,
            "product_snapshot": snapshot,
        }

    # ------------------------------------------------------------------
    # Payment
    # ------------------------------------------------------------------

    @BaseService.log_performance
    def process_payment(self, order_id, user) -> ServiceResult[PaymentIntentCreated]:
        """
        Create a gateway payment intent for an order and move it to confirmed.

        The intent amount is the order total in cents; its metadata carries
        order_id, order_number and user_id so webhooks can find the order.
        """
        with tracer.start_as_current_span("order_process_payment") as span:
            span.set_attribute("order.id", str(order_id))
            order = self.repository.get_order(order_id, user)
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")
            if order.payment_status == Order.PAYMENT_PAID:
                return service_err(ErrorCodes.ORDER_ALREADY_PAID, "Order already paid")
            if order.status == Order.STATUS_CANCELLED:
                return service_err(ErrorCodes.INVALID_STATUS, "Cannot pay for a cancelled order")

            try:
                intent = self.payment_provider.create_payment_intent(
                    amount=order.total_amount,
                    currency=order.currency.lower(),
                    metadata={
                        "order_id": str(order.id),
                        "order_number": order.order_number,
                        "user_id": str(user.id),
                    },
                    customer_email=user.email,
                )
            except PaymentTimeoutException as e:
                payment_intents_total.labels(status="timeout").inc()
                span.record_exception(e)
                return service_err(ErrorCodes.UPSTREAM_TIMEOUT, "Payment provider timed out, please retry")
            except PaymentException as e:
                payment_intents_total.labels(status="error").inc()
                span.record_exception(e)
                return service_err(ErrorCodes.PAYMENT_PROVIDER_ERROR, str(e))

            order.payment_intent_id = intent.intent_id
            order.status = Order.STATUS_CONFIRMED
            self.repository.save(order, ["payment_intent_id", "status"])
            payment_intents_total.labels(status="created").inc()

        self.logger.info(f"Payment intent {intent.intent_id} created for order {order.order_number}")
        return service_ok(
            PaymentIntentCreated(
                order=order,
                payment_intent_id=intent.intent_id,
                client_secret=intent.client_secret,
                amount=intent.amount,
                currency=intent.currency,
            )
        )

    @BaseService.log_performance
    def confirm_payment(self, payment_intent_id: str, user) -> ServiceResult[PaymentConfirmed]:
        """
        Confirm a payment from the client side.

        The gateway must report the intent as succeeded; the order referenced
        by the intent metadata moves to processing and a payment confirmation
        email is queued. Confirming an order that already reached processing
        is a no-op.
        """
        try:
            intent = self.payment_provider.retrieve_payment_intent(payment_intent_id)
        except PaymentTimeoutException:
            return service_err(ErrorCodes.UPSTREAM_TIMEOUT, "Payment provider timed out, please retry")
        except PaymentException as e:
            return service_err(ErrorCodes.PAYMENT_PROVIDER_ERROR, str(e))

        if intent.status != PaymentStatus.SUCCEEDED:
            return service_err(ErrorCodes.PAYMENT_NOT_SUCCESSFUL, "Payment not successful")

        order_id = intent.metadata.get("order_id")
        with transaction.atomic():
            order = self.repository.get_order_for_update(order_id, user) if order_id else None
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")

            advanced = order.status in (Order.STATUS_PENDING, Order.STATUS_CONFIRMED)
            if advanced:
                order.status = Order.STATUS_PROCESSING
                order.payment_intent_id = intent.intent_id
                self.repository.save(order, ["status", "payment_intent_id"])

        order = self.repository.get_order(order.id)
        if advanced:
            self.notifications.send_payment_confirmation(order)
            self.logger.info(f"Payment confirmed for order: {order.order_number}")
        return service_ok(PaymentConfirmed(order=order, payment_intent_id=intent.intent_id))

    # ------------------------------------------------------------------
    # Cancellation & status
    # ------------------------------------------------------------------

    @BaseService.log_performance
    def cancel_order(self, order_id, user, reason: str = DEFAULT_CANCEL_REASON) -> ServiceResult[OrderCancelled]:
        """
        Cancel an order that has not shipped yet.

        Stock for every item is put back and the order row is locked for the
        duration. Paid orders are not refunded here: the outcome carries
        ``refund_required=True`` and the admin refund endpoint does the rest.
        """
        reason = reason or DEFAULT_CANCEL_REASON
        with tracer.start_as_current_span("order_cancel") as span:
            span.set_attribute("order.id", str(order_id))
            try:
                with transaction.atomic():
                    order = self.repository.get_order_for_update(order_id, user)
                    if order is None:
                        raise OrderWorkflowError(ErrorCodes.ORDER_NOT_FOUND, "Order not found")
                    if not order.is_cancellable:
                        raise OrderWorkflowError(
                            ErrorCodes.ORDER_CANNOT_CANCEL, "Cannot cancel shipped or delivered orders"
                        )
                    if order.status == Order.STATUS_CANCELLED:
                        raise OrderWorkflowError(ErrorCodes.ORDER_CANNOT_CANCEL, "Order is already cancelled")

                    restored = self._restore_stock(order)
                    order.status = Order.STATUS_CANCELLED
                    order.cancellation_reason = reason
                    order.cancelled_at = timezone.now()
                    self.repository.save(order, ["status", "cancellation_reason", "cancelled_at"])
            except OrderWorkflowError as e:
                return service_err(e.code, e.message)

        refund_required = order.payment_status == Order.PAYMENT_PAID
        if refund_required:
            self.logger.info(f"Refund needed for cancelled order: {order.order_number}")
        orders_cancelled_total.labels(refund_required=str(refund_required).lower()).inc()

        self.logger.info(f"Order cancelled: {order.order_number} - {reason}")
        order = self.repository.get_order(order.id)
        return service_ok(
            OrderCancelled(order=order, reason=reason, refund_required=refund_required, restored_items=restored)
        )

    def _restore_stock(self, order: Order) -> int:
        """Put every item's quantity back on its stock counter. Caller holds the order lock."""
        restored = 0
        for item in order.items.all():
            if item.product_id is None:
                self.logger.warning(f"Order {order.order_number}: product of item {item.id} no longer exists")
                continue
            if item.variant_id is None and item.product_snapshot.get("variant_id"):
                # Units belong to a deleted variant, not to the product counter
                self.logger.warning(
                    f"Order {order.order_number}: variant of item {item.id} no longer exists, stock not restored"
                )
                continue
            result = self.inventory_service.adjust_stock(item.product_id, item.variant_id, -item.quantity)
            if result.ok:
                restored += 1
            else:
                self.logger.warning(f"Order {order.order_number}: could not restore stock for item {item.id}")
        return restored

    @BaseService.log_performance
    def update_order_status(self, order_id, new_status: str) -> ServiceResult[OrderStatusUpdated]:
        """Admin override of the order status. Queues a status update email."""
        if new_status not in dict(Order.STATUS_CHOICES):
            return service_err(ErrorCodes.INVALID_STATUS, f"Invalid status: {new_status}")

        with transaction.atomic():
            order = self.repository.get_order_for_update(order_id)
            if order is None:
                return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")
            previous_status = order.status
            order.status = new_status
            fields = ["status"]
            if new_status == Order.STATUS_CANCELLED and not order.cancelled_at:
                order.cancelled_at = timezone.now()
                fields.append("cancelled_at")
            self.repository.save(order, fields)

        order = self.repository.get_order(order.id)
        self.notifications.send_status_update(order)
        order_status_updates_total.labels(status=new_status).inc()

        self.logger.info(f"Order status updated: {order.order_number} {previous_status} -> {new_status}")
        return service_ok(OrderStatusUpdated(order=order, previous_status=previous_status, new_status=new_status))

    # ------------------------------------------------------------------
    # Gateway events
    # ------------------------------------------------------------------

    def _locate_for_event(self, payment_intent_id: str, order_id: Optional[str]) -> Optional[Order]:
        order = self.repository.get_by_payment_intent(payment_intent_id, for_update=True)
        if order is None and order_id:
            order = self.repository.get_order_for_update(order_id)
        return order

    @BaseService.log_performance
    def mark_payment_succeeded(self, payment_intent_id: str, order_id: Optional[str] = None) -> WebhookOutcome:
        """
        Apply a ``payment_intent.succeeded`` event.

        Idempotent: redelivery of the same event leaves the order untouched
        and does not queue a second email.
        """
        event_type = "payment_intent.succeeded"
        with transaction.atomic():
            order = self._locate_for_event(payment_intent_id, order_id)
            if order is None:
                self.logger.warning(f"No order for succeeded payment intent {payment_intent_id}")
                return WebhookOutcome(event_type=event_type, handled=False, detail="Order not found")

            if order.payment_status == Order.PAYMENT_PAID:
                return WebhookOutcome(event_type=event_type, handled=True, order=order, detail="Already processed")

            order.payment_status = Order.PAYMENT_PAID
            order.payment_intent_id = payment_intent_id
            fields = ["payment_status", "payment_intent_id"]
            advanced = order.status in (Order.STATUS_PENDING, Order.STATUS_CONFIRMED)
            if advanced:
                order.status = Order.STATUS_PROCESSING
                fields.append("status")
            elif order.status == Order.STATUS_CANCELLED:
                self.logger.warning(f"Payment received for cancelled order {order.order_number}, refund needed")
            self.repository.save(order, fields)

        order = self.repository.get_order(order.id)
        if advanced:
            self.notifications.send_payment_confirmation(order)
        self.logger.info(f"Order {order.order_number} marked as paid")
        return WebhookOutcome(event_type=event_type, handled=True, order=order, detail="Payment recorded")

    @BaseService.log_performance
    def mark_payment_failed(self, payment_intent_id: str, order_id: Optional[str] = None) -> WebhookOutcome:
        """
        Apply a ``payment_intent.payment_failed`` event.

        The order is cancelled and its stock restored exactly once; later
        deliveries only confirm the failed payment status.
        """
        event_type = "payment_intent.payment_failed"
        with transaction.atomic():
            order = self._locate_for_event(payment_intent_id, order_id)
            if order is None:
                self.logger.warning(f"No order for failed payment intent {payment_intent_id}")
                return WebhookOutcome(event_type=event_type, handled=False, detail="Order not found")

            if order.payment_status == Order.PAYMENT_PAID:
                self.logger.warning(f"Ignoring payment failure for paid order {order.order_number}")
                return WebhookOutcome(event_type=event_type, handled=False, order=order, detail="Order already paid")

            fields = ["payment_status"]
            order.payment_status = Order.PAYMENT_FAILED
            if order.is_cancellable and order.status != Order.STATUS_CANCELLED:
                self._restore_stock(order)
                order.status = Order.STATUS_CANCELLED
                order.cancellation_reason = PAYMENT_FAILED_REASON
                order.cancelled_at = timezone.now()
                fields += ["status", "cancellation_reason", "cancelled_at"]
            self.repository.save(order, fields)

        self.logger.info(f"Order {order.order_number} payment failed, status={order.status}")
        return WebhookOutcome(event_type=event_type, handled=True, order=order, detail="Payment failure recorded")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id, user) -> ServiceResult[Order]:
        order = self.repository.get_order(order_id, user)
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")
        return service_ok(order)

    def list_orders(self, user, status: Optional[str] = None, offset: int = 0, limit: int = 10):
        if status and status not in dict(Order.STATUS_CHOICES):
            return service_err(ErrorCodes.INVALID_STATUS, f"Invalid status: {status}")
        orders, total = self.repository.list_orders(user, status=status, offset=offset, limit=limit)
        return service_ok({"results": orders, "total": total})

    @BaseService.log_performance
    def get_order_summary(self, user) -> ServiceResult[Dict[str, Any]]:
        orders = list(self.repository.all_for_user(user))
        orders_by_status: Dict[str, int] = {}
        total_spent = Decimal("0")
        for order in orders:
            orders_by_status[order.status] = orders_by_status.get(order.status, 0) + 1
            total_spent += order.total_amount
        return service_ok(
            {
                "total_orders": len(orders),
                "orders_by_status": orders_by_status,
                "total_spent": total_spent.quantize(Decimal("0.01")),
                "recent_orders": orders[:RECENT_ORDERS_LIMIT],
            }
        )

    def track_order(self, order_id, user) -> ServiceResult[Dict[str, Any]]:
        order = self.repository.get_order(order_id, user)
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")

        reached = FULFILMENT_ORDER.index(order.status) if order.status in FULFILMENT_ORDER else 0
        steps: List[Dict[str, Any]] = []
        for index, (status, label) in enumerate(TRACKING_STEPS):
            completed = index == 0 or (order.status != Order.STATUS_CANCELLED and index <= reached)
            if index == 0:
                date = order.created_at
            elif status == Order.STATUS_DELIVERED:
                date = order.updated_at if completed else None
            else:
                date = order.updated_at
            steps.append({"status": status, "label": label, "completed": completed, "date": date})

        estimated_delivery = None
        if order.status == Order.STATUS_SHIPPED:
            estimated_delivery = timezone.now() + timedelta(days=self.estimated_delivery_days)

        return service_ok(
            {
                "order_number": order.order_number,
                "current_status": order.status,
                "tracking_steps": steps,
                "estimated_delivery": estimated_delivery,
            }
        )

    @BaseService.log_performance
    def reorder(self, order_id, user) -> ServiceResult[ReorderOutcome]:
        """Put the items of a past order back into the cart, skipping what is no longer available."""
        order = self.repository.get_order(order_id, user)
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")

        items = list(order.items.all())
        added = 0
        unavailable = []
        for item in items:
            name = item.product_snapshot.get("name", "")
            product = item.product
            variant_gone = item.variant_id is None and item.product_snapshot.get("variant_id")
            if product is None or variant_gone or not product.is_active or not product.in_stock:
                unavailable.append(name)
                continue

            result = self.cart_service.add_item(user, product.id, item.quantity, variant_id=item.variant_id)
            if result.ok:
                added += 1
            else:
                unavailable.append(name)

        return service_ok(ReorderOutcome(added_items=added, unavailable_items=unavailable, total_items=len(items)))
