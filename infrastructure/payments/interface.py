"""
Payment Provider Interface
===========================

Contract for the payment gateway adapter: payment intents, refunds and
webhook signature verification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Optional


class PaymentStatus(str, Enum):
    """Payment intent status, normalized across providers."""

    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


@dataclass
class PaymentIntent:
    """
    A single payment attempt held by the gateway.

    Attributes:
        intent_id: Gateway identifier
        amount: Amount in minor currency units (cents)
        currency: Lowercase ISO currency code
        status: Normalized status
        client_secret: Secret the storefront uses to complete the payment
        metadata: Custom data, carries order_id
    """

    intent_id: str
    amount: int
    currency: str
    status: PaymentStatus
    client_secret: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RefundResult:
    refund_id: str
    payment_intent_id: str
    amount: int
    status: str


@dataclass
class WebhookEvent:
    """
    A verified webhook event.

    Attributes:
        event_id: Unique event identifier
        event_type: Type of event (e.g., 'payment_intent.succeeded')
        data: The event's data object as plain dicts
        created_at: Event creation timestamp
    """

    event_id: str
    event_type: str
    data: Dict[str, Any]
    created_at: int = 0


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to cents, rounding half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentProviderInterface(ABC):
    """
    Abstract interface for payment provider operations.

    Concrete implementations:
        - StripeProvider: Stripe payment processing
        - MockPaymentProvider: in-memory gateway for tests and development
    """

    @abstractmethod
    def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        metadata: Optional[Dict[str, Any]] = None,
        customer_email: Optional[str] = None,
    ) -> PaymentIntent:
        """
        Create a payment intent.

        Args:
            amount: Amount in major currency units (converted to cents)
            currency: ISO currency code
            metadata: Custom data; must carry order_id
            customer_email: Receipt email

        Raises:
            PaymentTimeoutException: Gateway unreachable or timed out (retryable)
            PaymentException: Any other gateway failure
        """

    @abstractmethod
    def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        """
        Retrieve payment intent details.

        Raises:
            PaymentException: If retrieval fails
        """

    @abstractmethod
    def create_refund(
        self,
        payment_intent_id: str,
        amount: Optional[Decimal] = None,
        reason: Optional[str] = None,
    ) -> RefundResult:
        """
        Refund a payment, fully when amount is None.

        Raises:
            PaymentException: If refund creation fails
        """

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str) -> WebhookEvent:
        """
        Verify the signature of a webhook payload and parse it.

        Raises:
            WebhookVerificationException: If the signature or payload is invalid
        """


class PaymentException(Exception):
    """Base exception for payment operations."""

    retryable = False


class PaymentTimeoutException(PaymentException):
    """The gateway timed out or could not be reached. Safe to retry."""

    retryable = True


class WebhookVerificationException(PaymentException):
    """Webhook signature missing, invalid or payload unparsable."""
