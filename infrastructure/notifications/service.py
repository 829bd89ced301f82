"""
NotificationService - Transactional Email Dispatch

Turns orders and users into notification payloads and puts them on the
outbound queue. Dispatch is best-effort: a broken queue or email sender is
logged and never fails the caller.
"""

from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from marketplace.infra.observability.metrics import notifications_failed_total, notifications_queued_total
from marketplace.services.base import BaseService

from .templates import DEFAULT_STATUS_MESSAGE, STATUS_MESSAGES, NotificationTemplate

Dispatcher = Callable[[str, str, Dict[str, Any]], Any]


def _queue_dispatch(template: str, recipient: str, context: Dict[str, Any]):
    from .tasks import send_notification_email

    return send_notification_email.delay(template, recipient, context)


def _money(value: Optional[Decimal]) -> str:
    return f"{Decimal(value or 0):.2f}"


class NotificationService(BaseService):
    """
    Notification dispatcher.

    Args:
        dispatch: Callable taking (template, recipient, context). Defaults to
            enqueueing the ``send_notification_email`` Celery task.
    """

    def __init__(self, dispatch: Optional[Dispatcher] = None):
        super().__init__()
        self.dispatch = dispatch or _queue_dispatch

    def send_order_confirmation(self, order) -> bool:
        return self._notify(NotificationTemplate.ORDER_CONFIRMATION, order.buyer.email, self._order_context(order))

    def send_payment_confirmation(self, order) -> bool:
        context = self._order_context(order)
        context["payment_intent_id"] = order.payment_intent_id
        return self._notify(NotificationTemplate.PAYMENT_CONFIRMATION, order.buyer.email, context)

    def send_status_update(self, order) -> bool:
        context = self._order_context(order)
        context["status_message"] = STATUS_MESSAGES.get(order.status, DEFAULT_STATUS_MESSAGE)
        return self._notify(NotificationTemplate.STATUS_UPDATE, order.buyer.email, context)

    def send_welcome(self, user) -> bool:
        context = {"customer_name": user.full_name or user.email, "email": user.email}
        return self._notify(NotificationTemplate.WELCOME, user.email, context)

    def _notify(self, template: NotificationTemplate, recipient: str, context: Dict[str, Any]) -> bool:
        try:
            self.dispatch(template.value, recipient, context)
        except Exception as e:
            notifications_failed_total.labels(template=template.value).inc()
            self.logger.error(f"Failed to queue '{template.value}' notification for {recipient}: {e}", exc_info=True)
            return False

        notifications_queued_total.labels(template=template.value).inc()
        self.logger.info(f"Queued '{template.value}' notification for {recipient}")
        return True

    @staticmethod
    def _order_context(order) -> Dict[str, Any]:
        items = [
            {
                "name": item.product_snapshot.get("name", ""),
                "quantity": item.quantity,
                "unit_price": _money(item.unit_price),
                "total_price": _money(item.total_price),
            }
            for item in order.items.all()
        ]
        return {
            "order_id": str(order.id),
            "order_number": order.order_number,
            "customer_name": order.buyer.full_name or order.buyer.email,
            "status": order.status,
            "payment_status": order.payment_status,
            "currency": order.currency,
            "items": items,
            "subtotal": _money(order.subtotal),
            "shipping_amount": _money(order.shipping_amount),
            "tax_amount": _money(order.tax_amount),
            "total_amount": _money(order.total_amount),
            "shipping_address": order.shipping_address or {},
        }
