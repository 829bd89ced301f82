"""
Mock Email Service
==================

In-memory EmailServiceInterface for tests and development.
"""

import logging
import uuid
from typing import List, Optional

from .interface import EmailException, EmailMessage, EmailReceipt, EmailServiceInterface

logger = logging.getLogger(__name__)


class MockEmailService(EmailServiceInterface):
    """
    Mock email service.

    Stores sent messages in memory instead of delivering them. Setting
    ``fail_with`` makes every send raise that exception, which is how tests
    simulate an unavailable email sender.
    """

    def __init__(self):
        self.sent_messages: List[EmailMessage] = []
        self.fail_with: Optional[Exception] = None

    def send(self, message: EmailMessage) -> EmailReceipt:
        if self.fail_with is not None:
            raise self.fail_with if isinstance(self.fail_with, EmailException) else EmailException(str(self.fail_with))

        logger.info(f"[MOCK EMAIL] To: {message.to}, Subject: {message.subject}, Template: {message.template}")
        self.sent_messages.append(message)
        return EmailReceipt(message_id=f"mock-{uuid.uuid4().hex}", recipients=list(message.to))

    def clear_sent_messages(self):
        self.sent_messages.clear()

    def get_sent_count(self) -> int:
        return len(self.sent_messages)

    def get_last_message(self) -> Optional[EmailMessage]:
        return self.sent_messages[-1] if self.sent_messages else None

    def messages_for_template(self, template: str) -> List[EmailMessage]:
        return [message for message in self.sent_messages if message.template == template]
