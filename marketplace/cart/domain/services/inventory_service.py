"""
InventoryService - Stock Ledger

Reads and adjusts per-product and per-variant stock counters. Consumption is a
single conditional UPDATE (decrement only where enough stock remains), so two
concurrent checkouts can never both take the last unit.
"""

from typing import Optional

from django.db.models import F

from marketplace.catalog.domain.models.catalog import Product, ProductVariant
from marketplace.infra.observability.metrics import stock_adjustment_failures
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


class InventoryService(BaseService):
    """
    Service for reading and mutating stock counters.

    When ``variant_id`` is given every operation targets the variant's counter,
    otherwise the product's.
    """

    @BaseService.log_performance
    def check_stock(self, product_id, variant_id=None, quantity: int = 1) -> ServiceResult[bool]:
        """
        Check whether ``quantity`` units are available.

        Bare products must also be flagged ``in_stock`` and active.

        Returns:
            ServiceResult with True if available, False otherwise
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        if variant_id:
            variant = (
                ProductVariant.objects.filter(id=variant_id, product_id=product_id)
                .only("stock_quantity", "is_active")
                .first()
            )
            if variant is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Variant {variant_id} not found")
            available = variant.is_active and variant.stock_quantity >= quantity
            stock = variant.stock_quantity
        else:
            product = Product.objects.filter(id=product_id).only("stock_quantity", "in_stock", "is_active").first()
            if product is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
            available = product.is_active and product.in_stock and product.stock_quantity >= quantity
            stock = product.stock_quantity

        self.logger.debug(
            f"Stock check product={product_id} variant={variant_id}: requested={quantity}, "
            f"available={stock}, result={available}"
        )
        return service_ok(available)

    @BaseService.log_performance
    def adjust_stock(self, product_id, variant_id=None, delta: int = 0) -> ServiceResult[int]:
        """
        Apply a stock delta. Positive consumes, negative restores.

        Consumption only succeeds when the counter holds at least ``delta``
        units at the moment of the UPDATE; the affected-row count tells whether
        it did.

        Returns:
            ServiceResult with the counter value after the adjustment
        """
        if delta == 0:
            return self._current_stock(product_id, variant_id)

        queryset = self._ledger_queryset(product_id, variant_id)

        if delta > 0:
            updated = queryset.filter(stock_quantity__gte=delta).update(stock_quantity=F("stock_quantity") - delta)
            if not updated:
                stock_adjustment_failures.inc()
                if not queryset.exists():
                    return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock for product {product_id} (requested {delta})",
                )
        else:
            updated = queryset.update(stock_quantity=F("stock_quantity") - delta)
            if not updated:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

        if not variant_id:
            self._sync_in_stock_flag(product_id, delta)

        result = self._current_stock(product_id, variant_id)
        self.logger.info(f"Stock adjusted product={product_id} variant={variant_id} delta={delta} -> {result.value}")
        return result

    def _sync_in_stock_flag(self, product_id, delta: int) -> None:
        """
        Keep ``in_stock`` in step with the product counter: a sellout clears it
        and a restore from zero sets it again.
        """
        if delta > 0:
            Product.objects.filter(id=product_id, stock_quantity=0, in_stock=True).update(in_stock=False)
        else:
            Product.objects.filter(id=product_id, stock_quantity=-delta, in_stock=False).update(in_stock=True)

    def _ledger_queryset(self, product_id, variant_id: Optional[str]):
        if variant_id:
            return ProductVariant.objects.filter(id=variant_id, product_id=product_id)
        return Product.objects.filter(id=product_id)

    def _current_stock(self, product_id, variant_id) -> ServiceResult[int]:
        stock = self._ledger_queryset(product_id, variant_id).values_list("stock_quantity", flat=True).first()
        if stock is None:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        return service_ok(stock)
