"""
SMTP Email Service
==================

EmailServiceInterface backed by Django's email framework. Any backend set in
EMAIL_BACKEND works (SMTP, SES, SendGrid bridges, locmem in tests).
"""

import logging
import socket

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.core.mail.message import make_msgid

from .interface import EmailException, EmailMessage, EmailReceipt, EmailServiceInterface, EmailTimeoutException

logger = logging.getLogger(__name__)


class SMTPEmailService(EmailServiceInterface):
    """
    Django email backend implementation.

    Configuration (in settings.py):
        EMAIL_BACKEND: Django email backend class
        EMAIL_HOST / EMAIL_PORT / EMAIL_HOST_USER / EMAIL_HOST_PASSWORD / EMAIL_USE_TLS
        EMAIL_TIMEOUT: Seconds before an SMTP call is abandoned
        DEFAULT_FROM_EMAIL: Default sender address
    """

    def __init__(self, timeout: int | None = None):
        self.default_from = getattr(settings, "DEFAULT_FROM_EMAIL", "noreply@yourstore.com")
        self.timeout = timeout or getattr(settings, "EMAIL_TIMEOUT", 10)

    def send(self, message: EmailMessage) -> EmailReceipt:
        message_id = make_msgid(domain=self.default_from.split("@")[-1])
        headers = {"Message-ID": message_id, **message.headers}

        email = EmailMultiAlternatives(
            subject=message.subject,
            body=message.text_body,
            from_email=message.from_email or self.default_from,
            to=message.to,
            headers=headers,
            connection=get_connection(timeout=self.timeout),
        )
        email.attach_alternative(message.html_body, "text/html")

        try:
            sent = email.send(fail_silently=False)
        except socket.timeout as e:
            logger.error(f"Email to {message.to} timed out after {self.timeout}s")
            raise EmailTimeoutException(f"Email send timed out: {str(e)}") from e
        except Exception as e:
            logger.error(f"Failed to send email to {message.to}: {str(e)}")
            raise EmailException(f"Email send failed: {str(e)}") from e

        if not sent:
            raise EmailException(f"Email backend accepted no messages for {message.to}")

        logger.info(f"Email '{message.template or message.subject}' sent to {message.to}")
        return EmailReceipt(message_id=message_id, recipients=list(message.to))
