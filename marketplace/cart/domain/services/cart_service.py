"""
CartService - Shopping Cart Operations

Handles shopping cart operations including add, remove, update, and clear.
Validates stock availability through InventoryService and prices the cart
through PricingService.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import transaction

from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import Product, ProductVariant
from marketplace.infra.observability.metrics import cart_validation_duration
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .inventory_service import InventoryService
from .pricing_service import PricingService


@dataclass
class CartLine:
    """A cart item with its price resolved (variant price wins over product price)."""

    id: int
    product: Product
    variant: Optional[ProductVariant]
    quantity: int
    unit_price: Decimal
    name: str

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_item(cls, item: CartItem) -> "CartLine":
        name = item.product.name
        if item.variant_id:
            name = f"{name} ({item.variant.name})"
        return cls(
            id=item.id,
            product=item.product,
            variant=item.variant,
            quantity=item.quantity,
            unit_price=item.unit_price,
            name=name,
        )


class CartService(BaseService):
    """
    Service for managing shopping cart operations.

    Responsibilities:
    - Read the user's cart as priced lines
    - Add items to cart (with stock validation)
    - Update item quantities and remove items
    - Clear cart
    - Validate the whole cart before checkout

    Dependencies:
    - InventoryService: Check stock availability
    - PricingService: Calculate cart totals
    """

    def __init__(self, inventory_service: InventoryService, pricing_service: PricingService):
        super().__init__()
        self.inventory_service = inventory_service
        self.pricing_service = pricing_service

    def get_cart_lines(self, user) -> List[CartLine]:
        """Return the user's cart lines, oldest first. Empty list when there is no cart."""
        items = (
            CartItem.objects.filter(cart__user=user)
            .select_related("product", "product__category", "variant")
            .prefetch_related("product__images")
            .order_by("added_at", "id")
        )
        return [CartLine.from_item(item) for item in items]

    @BaseService.log_performance
    def get_cart(self, user) -> ServiceResult[Dict]:
        """
        Get user's shopping cart with lines and totals.

        Returns:
            ServiceResult with {"lines": [...], "summary": {...}}
        """
        lines = self.get_cart_lines(user)
        summary = self.pricing_service.calculate_cart_summary(lines)
        return service_ok({"lines": lines, "summary": summary.value})

    @BaseService.log_performance
    def add_item(self, user, product_id, quantity: int = 1, variant_id=None) -> ServiceResult[CartLine]:
        """
        Add a product (or one of its variants) to the cart.

        Adding an item already in the cart increases its quantity; the
        combined quantity must still be in stock.
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        product = Product.objects.filter(id=product_id, is_active=True).first()
        if product is None:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product not found")

        variant = None
        if variant_id:
            variant = ProductVariant.objects.filter(id=variant_id, product=product, is_active=True).first()
            if variant is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Variant not found")

        with transaction.atomic():
            cart = Cart.get_or_create_cart(user)
            item = CartItem.objects.select_for_update().filter(cart=cart, product=product, variant=variant).first()
            requested = quantity + (item.quantity if item else 0)

            stock_check = self.inventory_service.check_stock(product.id, variant.id if variant else None, requested)
            if not stock_check.ok:
                return stock_check
            if not stock_check.value:
                return service_err(ErrorCodes.INSUFFICIENT_STOCK, "Insufficient stock")

            if item:
                item.quantity = requested
                item.save(update_fields=["quantity"])
            else:
                item = CartItem.objects.create(cart=cart, product=product, variant=variant, quantity=quantity)

        self.logger.info(f"User {user.id} added {quantity}x {product.id} to cart (now {requested})")
        return service_ok(CartLine.from_item(item))

    @BaseService.log_performance
    def update_item(self, user, item_id, quantity: int) -> ServiceResult[Optional[CartLine]]:
        """
        Set the quantity of a cart line after checking stock for the new amount.

        A quantity of 0 removes the line and yields None.
        """
        if quantity < 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity cannot be negative")

        item = self._get_item(user, item_id)
        if item is None:
            return service_err(ErrorCodes.ITEM_NOT_IN_CART, "Cart item not found")

        if quantity == 0:
            item.delete()
            return service_ok(None)

        stock_check = self.inventory_service.check_stock(item.product_id, item.variant_id, quantity)
        if not stock_check.ok:
            return stock_check
        if not stock_check.value:
            return service_err(ErrorCodes.INSUFFICIENT_STOCK, "Insufficient stock")

        item.quantity = quantity
        item.save(update_fields=["quantity"])
        return service_ok(CartLine.from_item(item))

    @BaseService.log_performance
    def remove_item(self, user, item_id) -> ServiceResult[bool]:
        item = self._get_item(user, item_id)
        if item is None:
            return service_err(ErrorCodes.ITEM_NOT_IN_CART, "Cart item not found")
        item.delete()
        return service_ok(True)

    def clear_cart(self, user) -> ServiceResult[int]:
        """
        Delete every line of the user's cart.

        Runs inside the caller's transaction when there is one, so checkout
        rolls the clear back together with the order.

        Returns:
            ServiceResult with the number of lines removed
        """
        deleted, _ = CartItem.objects.filter(cart__user=user).delete()
        self.logger.info(f"Cleared {deleted} cart lines for user {user.id}")
        return service_ok(deleted)

    def get_item_count(self, user) -> ServiceResult[Dict]:
        lines = self.get_cart_lines(user)
        return service_ok({"items": len(lines), "quantity": sum(line.quantity for line in lines)})

    @BaseService.log_performance
    def validate_cart(self, user) -> ServiceResult[Dict]:
        """
        Check every line against current availability.

        Returns:
            ServiceResult with {"valid": bool, "issues": [...], "summary": {...}}
        """
        with cart_validation_duration.time():
            lines = self.get_cart_lines(user)
            if not lines:
                return service_err(ErrorCodes.CART_EMPTY, "Cart is empty")

            issues = []
            for line in lines:
                if not line.product.is_active:
                    issues.append({"item_id": line.id, "name": line.name, "issue": "Product no longer available"})
                    continue
                stock_check = self.inventory_service.check_stock(
                    line.product.id, line.variant.id if line.variant else None, line.quantity
                )
                if not stock_check.ok or not stock_check.value:
                    issues.append({"item_id": line.id, "name": line.name, "issue": f"Insufficient stock for {line.name}"})

            summary = self.pricing_service.calculate_cart_summary(lines).value

        return service_ok({"valid": not issues, "issues": issues, "summary": summary})

    def _get_item(self, user, item_id) -> Optional[CartItem]:
        return (
            CartItem.objects.select_related("product", "variant")
            .filter(id=item_id, cart__user=user)
            .first()
        )
