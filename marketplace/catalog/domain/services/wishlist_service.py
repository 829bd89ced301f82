"""
WishlistService - saved products per user.
"""

from typing import List

from django.core.exceptions import ValidationError
from django.db import IntegrityError

from marketplace.catalog.domain.models import Product, WishlistItem
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


class WishlistService(BaseService):
    def list_items(self, user) -> ServiceResult[List[WishlistItem]]:
        items = (
            WishlistItem.objects.filter(user=user)
            .select_related("product", "product__category")
            .prefetch_related("product__images")
        )
        return service_ok(list(items))

    def count(self, user) -> int:
        return WishlistItem.objects.filter(user=user).count()

    @BaseService.log_performance
    def add_item(self, user, product_id) -> ServiceResult[WishlistItem]:
        try:
            product = Product.objects.filter(id=product_id, is_active=True).first()
        except (ValueError, ValidationError):
            product = None
        if product is None:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Product not found")

        if WishlistItem.objects.filter(user=user, product=product).exists():
            return service_err(ErrorCodes.ALREADY_IN_WISHLIST, "Product already in wishlist")

        try:
            item = WishlistItem.objects.create(user=user, product=product)
        except IntegrityError:
            # Lost a race with a concurrent add of the same product
            return service_err(ErrorCodes.ALREADY_IN_WISHLIST, "Product already in wishlist")

        self.logger.info(f"Item added to wishlist: {product.name} (User: {user.id})")
        return service_ok(item)

    @BaseService.log_performance
    def remove_item(self, user, product_id) -> ServiceResult[bool]:
        try:
            deleted, _ = WishlistItem.objects.filter(user=user, product_id=product_id).delete()
        except (ValueError, ValidationError):
            deleted = 0
        if not deleted:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "Item not in wishlist")
        return service_ok(True)
