"""
Typed outcomes of the order workflow operations.

Each operation wraps one of these in a ServiceResult so callers get the
affected order plus whatever else the step produced.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from marketplace.ordering.domain.models import Order


@dataclass
class OrderCreated:
    order: Order
    notification_queued: bool = False


@dataclass
class PaymentIntentCreated:
    order: Order
    payment_intent_id: str
    client_secret: str
    amount: int
    currency: str


@dataclass
class PaymentConfirmed:
    order: Order
    payment_intent_id: str


@dataclass
class OrderCancelled:
    order: Order
    reason: str
    refund_required: bool = False
    restored_items: int = 0


@dataclass
class OrderStatusUpdated:
    order: Order
    previous_status: str
    new_status: str


@dataclass
class OrderRefunded:
    order: Order
    refund_amount: Decimal
    refund_id: Optional[str] = None


@dataclass
class ReorderOutcome:
    added_items: int
    unavailable_items: List[str] = field(default_factory=list)
    total_items: int = 0


@dataclass
class WebhookOutcome:
    event_type: str
    handled: bool
    order: Optional[Order] = None
    detail: str = ""
