"""
OrderRepository - persistence for orders and their line items.
"""

import secrets
import string
import time
from typing import Dict, Iterable, List, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db.models import Prefetch, QuerySet

from marketplace.ordering.domain.models import Order, OrderItem

ORDER_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


def generate_order_number() -> str:
    """
    Build a display order number: ``ORD-{epoch millis}-{5 base36 chars}``.

    Example:
        >>> generate_order_number()
        'ORD-1760870400000-K3Z9Q'
    """
    suffix = "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(5))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


class OrderRepository:
    """
    Reads and writes Order/OrderItem rows.

    Lookups scoped to a user return None for orders that belong to someone
    else, so callers cannot distinguish "missing" from "not yours".
    """

    def _queryset(self) -> QuerySet:
        return Order.objects.select_related("buyer").prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.select_related("product", "variant"))
        )

    def create_order(self, **fields) -> Order:
        fields.setdefault("order_number", generate_order_number())
        return Order.objects.create(**fields)

    def create_order_items(self, order: Order, items: Iterable[Dict]) -> List[OrderItem]:
        return OrderItem.objects.bulk_create([OrderItem(order=order, **item) for item in items])

    def get_order(self, order_id, user=None) -> Optional[Order]:
        queryset = self._queryset()
        if user is not None:
            queryset = queryset.filter(buyer=user)
        try:
            return queryset.filter(id=order_id).first()
        except (ValueError, ValidationError):
            return None

    def get_order_for_update(self, order_id, user=None) -> Optional[Order]:
        """Lock the order row until the surrounding transaction ends."""
        queryset = Order.objects.select_for_update()
        if user is not None:
            queryset = queryset.filter(buyer=user)
        try:
            return queryset.filter(id=order_id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_payment_intent(self, payment_intent_id: str, for_update: bool = False) -> Optional[Order]:
        if not payment_intent_id:
            return None
        queryset = Order.objects.select_for_update() if for_update else Order.objects.all()
        return queryset.filter(payment_intent_id=payment_intent_id).first()

    def save(self, order: Order, fields: Iterable[str]) -> Order:
        order.save(update_fields=[*fields, "updated_at"])
        return order

    def list_orders(self, user, status: Optional[str] = None, offset: int = 0, limit: int = 10) -> Tuple[List[Order], int]:
        queryset = self._queryset().filter(buyer=user)
        if status:
            queryset = queryset.filter(status=status)
        queryset = queryset.order_by("-created_at", "id")
        return list(queryset[offset : offset + limit]), queryset.count()

    def all_for_user(self, user) -> QuerySet:
        return Order.objects.filter(buyer=user).order_by("-created_at", "id")

    def paid_orders(self, user) -> QuerySet:
        return self.all_for_user(user).filter(payment_status=Order.PAYMENT_PAID)
