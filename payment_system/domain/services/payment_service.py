"""
PaymentService - payment methods, payment history and admin refunds.

Intent creation and confirmation belong to the order workflow
(OrderService.process_payment / confirm_payment); this service covers the
rest of the payments API.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import transaction

from infrastructure.payments import PaymentException, PaymentProviderInterface, PaymentTimeoutException
from marketplace.ordering.domain.models import Order
from marketplace.ordering.domain.results import OrderRefunded
from marketplace.ordering.domain.services.order_repository import OrderRepository
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

PAYMENT_METHODS = [
    {
        "id": "card",
        "type": "card",
        "name": "Credit/Debit Card",
        "description": "Pay with your credit or debit card",
        "enabled": True,
    },
    {
        "id": "paypal",
        "type": "paypal",
        "name": "PayPal",
        "description": "Pay with your PayPal account",
        "enabled": False,
    },
]


class PaymentService(BaseService):
    def __init__(self, payment_provider: PaymentProviderInterface, repository: Optional[OrderRepository] = None):
        super().__init__()
        self.payment_provider = payment_provider
        self.repository = repository or OrderRepository()

    def get_payment_methods(self) -> ServiceResult[List[Dict[str, Any]]]:
        return service_ok([dict(method) for method in PAYMENT_METHODS])

    def get_payment_history(self, user) -> ServiceResult[List[Dict[str, Any]]]:
        history = [
            {
                "order_id": str(order.id),
                "order_number": order.order_number,
                "amount": order.total_amount,
                "currency": order.currency,
                "payment_method": order.payment_method,
                "payment_date": order.updated_at,
                "status": order.payment_status,
            }
            for order in self.repository.paid_orders(user)
        ]
        return service_ok(history)

    @BaseService.log_performance
    def refund_order(
        self, order_id, amount: Optional[Decimal] = None, reason: Optional[str] = None
    ) -> ServiceResult[OrderRefunded]:
        """
        Refund a paid order and cancel it.

        The gateway refund is issued when the order has a stored payment
        intent; the order is marked refunded only after the gateway accepts.
        The gateway call runs outside the row lock, so the payment status is
        checked again under the lock before the order is updated.

        Args:
            order_id: Order to refund
            amount: Partial amount, defaults to the order total
            reason: Free text kept on the refund metadata
        """
        order = self.repository.get_order(order_id)
        if order is None:
            return service_err(ErrorCodes.ORDER_NOT_FOUND, "Order not found")
        if order.payment_status != Order.PAYMENT_PAID:
            return service_err(ErrorCodes.ORDER_NOT_REFUNDABLE, "Order payment not found or not paid")

        refund_amount = amount if amount is not None else order.total_amount
        if refund_amount <= 0 or refund_amount > order.total_amount:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Refund amount must be between 0 and the order total")

        refund_id = None
        if order.payment_intent_id:
            try:
                refund = self.payment_provider.create_refund(order.payment_intent_id, amount=amount, reason=reason)
            except PaymentTimeoutException:
                return service_err(ErrorCodes.UPSTREAM_TIMEOUT, "Payment provider timed out, please retry")
            except PaymentException as e:
                return service_err(ErrorCodes.PAYMENT_PROVIDER_ERROR, str(e))
            refund_id = refund.refund_id
        else:
            self.logger.warning(f"Order {order.order_number} has no payment intent, refund recorded locally")

        with transaction.atomic():
            order = self.repository.get_order_for_update(order.id)
            if order.payment_status != Order.PAYMENT_PAID:
                self.logger.warning(
                    f"Order {order.order_number} changed to {order.payment_status} during refund {refund_id}"
                )
                return service_err(ErrorCodes.ORDER_NOT_REFUNDABLE, "Order payment status changed during refund")

            order.payment_status = Order.PAYMENT_REFUNDED
            order.status = Order.STATUS_CANCELLED
            self.repository.save(order, ["payment_status", "status"])

        self.logger.info(f"Refund processed for order {order.order_number}: amount={refund_amount}, reason={reason}")
        return service_ok(OrderRefunded(order=order, refund_amount=refund_amount, refund_id=refund_id))
