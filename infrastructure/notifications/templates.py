"""
Transactional email templates.

Each notification maps to a Django template under ``templates/emails/`` and a
subject line formatted from the same context.
"""

from enum import Enum
from typing import Any, Dict

from django.conf import settings
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from infrastructure.email import EmailMessage


class NotificationTemplate(str, Enum):
    ORDER_CONFIRMATION = "order_confirmation"
    PAYMENT_CONFIRMATION = "payment_confirmation"
    STATUS_UPDATE = "status_update"
    WELCOME = "welcome"


SUBJECTS = {
    NotificationTemplate.ORDER_CONFIRMATION: "Order Confirmation - {order_number}",
    NotificationTemplate.PAYMENT_CONFIRMATION: "Payment Confirmed - {order_number}",
    NotificationTemplate.STATUS_UPDATE: "Order Update - {order_number}",
    NotificationTemplate.WELCOME: "Welcome to Minimal Store",
}

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared.",
    "processing": "Your order is currently being processed.",
    "shipped": "Great news! Your order has been shipped.",
    "delivered": "Your order has been delivered. We hope you love it!",
    "cancelled": "Your order has been cancelled. If you have any questions, please contact us.",
}
DEFAULT_STATUS_MESSAGE = "Your order status has been updated."


def render_notification(template: str, recipient: str, context: Dict[str, Any]) -> EmailMessage:
    """Render a notification into an EmailMessage ready for the sender."""
    template = NotificationTemplate(template)
    context = {"frontend_url": getattr(settings, "FRONTEND_URL", ""), **context}

    html_body = render_to_string(f"emails/{template.value}.html", context)
    return EmailMessage(
        subject=SUBJECTS[template].format(**context),
        to=[recipient],
        html_body=html_body,
        text_body=strip_tags(html_body),
        template=template.value,
    )
