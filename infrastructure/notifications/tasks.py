"""
Celery tasks for the outbound notification queue.
"""

import logging

from celery import shared_task

from infrastructure.email import EmailException, EmailTimeoutException
from marketplace.infra.observability.metrics import notifications_failed_total

from .templates import render_notification

logger = logging.getLogger(__name__)


@shared_task(
    name="send_notification_email",
    autoretry_for=(EmailTimeoutException,),
    retry_backoff=True,
    max_retries=3,
)
def send_notification_email(template: str, recipient: str, context: dict):
    """
    Render and send one transactional email.

    Delivery failures are logged and counted; they never bubble up to the
    workflow that queued the message.
    """
    from infrastructure.container import container

    message = render_notification(template, recipient, context)

    try:
        receipt = container.email().send(message)
    except EmailTimeoutException:
        raise
    except EmailException as e:
        notifications_failed_total.labels(template=template).inc()
        logger.error(f"Failed to send '{template}' email to {recipient}: {e}")
        return {"sent": False, "error": str(e)}

    logger.info(f"Sent '{template}' email to {recipient} ({receipt.message_id})")
    return {"sent": True, "message_id": receipt.message_id}
