"""
PricingService - Price Calculations

Computes order totals from priced line items. All calculations use Decimal
and round to cents with ROUND_HALF_UP.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional

from django.conf import settings

from marketplace.services.base import BaseService, ServiceResult, service_ok

CENTS = Decimal("0.01")

DEFAULT_TAX_RATE = Decimal("0.08")
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal("100")
DEFAULT_SHIPPING_RATE = Decimal("10")
DEFAULT_CURRENCY = "USD"


def to_cents(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


def calculate_totals(
    items: Iterable[Dict],
    shipping_rate=DEFAULT_SHIPPING_RATE,
    tax_rate=DEFAULT_TAX_RATE,
    free_shipping_threshold=DEFAULT_FREE_SHIPPING_THRESHOLD,
) -> OrderTotals:
    """
    Price a list of ``{"unit_price", "quantity"}`` items.

    Shipping is waived once the subtotal exceeds ``free_shipping_threshold``.

    Example:
        >>> calculate_totals([{"unit_price": Decimal("40"), "quantity": 2}], shipping_rate=Decimal("10"))
        OrderTotals(subtotal=Decimal('80.00'), shipping=Decimal('10.00'), tax=Decimal('6.40'), total=Decimal('96.40'))
    """
    subtotal = to_cents(sum((Decimal(str(item["unit_price"])) * item["quantity"] for item in items), Decimal("0")))
    shipping = Decimal("0.00") if subtotal > Decimal(str(free_shipping_threshold)) else to_cents(shipping_rate)
    tax = to_cents(subtotal * Decimal(str(tax_rate)))
    total = to_cents(subtotal + shipping + tax)
    return OrderTotals(subtotal=subtotal, shipping=shipping, tax=tax, total=total)


class PricingService(BaseService):
    """
    Service wrapper around ``calculate_totals`` that reads the storefront
    configuration (tax rate, free shipping threshold, default shipping rate,
    currency).
    """

    def __init__(
        self,
        tax_rate: Optional[Decimal] = None,
        free_shipping_threshold: Optional[Decimal] = None,
        default_shipping_rate: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ):
        super().__init__()
        self._currency = currency
        config = getattr(settings, "STOREFRONT", {})
        self.tax_rate = Decimal(str(tax_rate if tax_rate is not None else config.get("TAX_RATE", DEFAULT_TAX_RATE)))
        self.free_shipping_threshold = Decimal(
            str(
                free_shipping_threshold
                if free_shipping_threshold is not None
                else config.get("FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD)
            )
        )
        self.default_shipping_rate = Decimal(
            str(
                default_shipping_rate
                if default_shipping_rate is not None
                else config.get("DEFAULT_SHIPPING_RATE", DEFAULT_SHIPPING_RATE)
            )
        )

    @property
    def currency(self) -> str:
        """Currency orders are priced in; read from settings unless injected."""
        if self._currency:
            return self._currency.upper()
        return str(getattr(settings, "STOREFRONT", {}).get("CURRENCY", DEFAULT_CURRENCY)).upper()

    def calculate_order_totals(self, items: Iterable[Dict], shipping_rate=None) -> ServiceResult[OrderTotals]:
        totals = calculate_totals(
            items,
            shipping_rate=self.default_shipping_rate if shipping_rate is None else shipping_rate,
            tax_rate=self.tax_rate,
            free_shipping_threshold=self.free_shipping_threshold,
        )
        return service_ok(totals)

    def calculate_cart_summary(self, lines) -> ServiceResult[Dict]:
        """
        Summarize cart lines for display, using the default shipping rate.

        Args:
            lines: CartLine objects
        """
        lines = list(lines)
        totals = calculate_totals(
            [{"unit_price": line.unit_price, "quantity": line.quantity} for line in lines],
            shipping_rate=self.default_shipping_rate,
            tax_rate=self.tax_rate,
            free_shipping_threshold=self.free_shipping_threshold,
        )
        return service_ok(
            {
                **totals.as_dict(),
                "items_count": len(lines),
                "total_quantity": sum(line.quantity for line in lines),
                "free_shipping_threshold": self.free_shipping_threshold,
            }
        )
