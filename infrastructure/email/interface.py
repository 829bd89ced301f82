"""
Email Service Interface
========================

Contract for the outbound email sender used by the notification dispatcher.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class EmailMessage:
    """
    A rendered transactional email.

    Attributes:
        subject: Email subject line
        to: Recipient addresses
        html_body: Rendered HTML body
        text_body: Plain text alternative
        from_email: Sender address (uses DEFAULT_FROM_EMAIL if None)
        template: Name of the template the message was rendered from
    """

    subject: str
    to: List[str]
    html_body: str
    text_body: str = ""
    from_email: Optional[str] = None
    template: str = ""
    headers: dict = field(default_factory=dict)


@dataclass
class EmailReceipt:
    """Identifier handed back by the sender for a delivered message."""

    message_id: str
    recipients: List[str]


class EmailServiceInterface(ABC):
    """
    Abstract interface for sending email.

    Concrete implementations:
        - SMTPEmailService: Django email backend (SMTP or any configured backend)
        - MockEmailService: in-memory sender for tests and local development
    """

    @abstractmethod
    def send(self, message: EmailMessage) -> EmailReceipt:
        """
        Send a single email.

        Raises:
            EmailTimeoutException: If the sender did not answer in time
            EmailException: If sending fails
        """

    def send_bulk(self, messages: List[EmailMessage]) -> int:
        """Send several messages, returning how many were accepted."""
        return sum(1 for message in messages if self.send(message))


class EmailException(Exception):
    """Base exception for email operations."""


class EmailTimeoutException(EmailException):
    """The email sender did not respond within EMAIL_TIMEOUT."""

    retryable = True
