"""
Email Service Abstraction Layer
================================

Unified interface for sending transactional email across backends.
"""

from .factory import EmailFactory
from .interface import EmailException, EmailMessage, EmailReceipt, EmailServiceInterface, EmailTimeoutException
from .mock_service import MockEmailService
from .smtp_service import SMTPEmailService

__all__ = [
    "EmailServiceInterface",
    "EmailMessage",
    "EmailReceipt",
    "EmailException",
    "EmailTimeoutException",
    "SMTPEmailService",
    "MockEmailService",
    "EmailFactory",
]
