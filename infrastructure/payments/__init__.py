"""
Payment Service Abstraction Layer
==================================

Unified interface for payment operations across providers.
"""

from .factory import PaymentFactory
from .interface import (
    PaymentException,
    PaymentIntent,
    PaymentProviderInterface,
    PaymentStatus,
    PaymentTimeoutException,
    RefundResult,
    WebhookEvent,
    WebhookVerificationException,
    to_minor_units,
)
from .mock_provider import MockPaymentProvider
from .stripe_provider import StripeProvider

__all__ = [
    "PaymentProviderInterface",
    "PaymentIntent",
    "RefundResult",
    "WebhookEvent",
    "PaymentStatus",
    "PaymentException",
    "PaymentTimeoutException",
    "WebhookVerificationException",
    "StripeProvider",
    "MockPaymentProvider",
    "PaymentFactory",
    "to_minor_units",
]
