"""
Dependency Injection Container
================================

Composition root of the storefront. Builds infrastructure adapters (email,
payments, notifications) and every domain service, handing each service its
collaborators through the constructor. Services never reach for module-level
clients themselves.

Usage:
    from infrastructure.container import container

    order_service = container.order_service()
    result = order_service.create_order(request.user, data)
"""

import logging
from typing import Callable, Dict, Optional

from .email import EmailFactory, EmailServiceInterface
from .notifications import NotificationService
from .payments import PaymentFactory, PaymentProviderInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure and domain dependencies.

    Implements lazy initialization and caching of service instances.
    Singleton: every import sees the same container.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._email: Optional[EmailServiceInterface] = None
            self._payment: Optional[PaymentProviderInterface] = None
            self._services: Dict[str, object] = {}
            self._initialized = True
            logger.info("Service container initialized")

    def _cached(self, name: str, build: Callable[[], object]):
        if name not in self._services:
            self._services[name] = build()
            logger.debug(f"Created {type(self._services[name]).__name__}")
        return self._services[name]

    # ------------------------------------------------------------------
    # Infrastructure adapters
    # ------------------------------------------------------------------

    def email(self, backend: Optional[str] = None) -> EmailServiceInterface:
        """
        Get email service instance.

        Args:
            backend: Email backend type ('smtp' or 'mock')
                    If None, uses configuration from settings

        Returns:
            EmailServiceInterface implementation (cached)
        """
        if self._email is None or backend is not None:
            self._email = EmailFactory.create(backend)
            logger.debug(f"Created email service: {type(self._email).__name__}")

        return self._email

    def payment(self, backend: Optional[str] = None) -> PaymentProviderInterface:
        """
        Get payment provider instance.

        Args:
            backend: Payment backend type ('stripe' or 'mock')
                    If None, uses configuration from settings

        Returns:
            PaymentProviderInterface implementation (cached)
        """
        if self._payment is None or backend is not None:
            self._payment = PaymentFactory.create(backend)
            logger.debug(f"Created payment service: {type(self._payment).__name__}")

        return self._payment

    def notifications(self) -> NotificationService:
        return self._cached("notifications", NotificationService)

    # ------------------------------------------------------------------
    # Domain services
    # ------------------------------------------------------------------

    def inventory_service(self):
        from marketplace.cart.domain.services import InventoryService

        return self._cached("inventory", InventoryService)

    def pricing_service(self):
        from marketplace.cart.domain.services import PricingService

        return self._cached("pricing", PricingService)

    def cart_service(self):
        """Get CartService instance (depends on InventoryService and PricingService)."""
        from marketplace.cart.domain.services import CartService

        return self._cached(
            "cart",
            lambda: CartService(inventory_service=self.inventory_service(), pricing_service=self.pricing_service()),
        )

    def catalog_service(self):
        from marketplace.catalog.domain.services import CatalogService, get_category_matcher

        return self._cached("catalog", lambda: CatalogService(category_matcher=get_category_matcher()))

    def wishlist_service(self):
        from marketplace.catalog.domain.services import WishlistService

        return self._cached("wishlist", WishlistService)

    def order_service(self):
        """Get OrderService instance."""
        from django.conf import settings

        from marketplace.ordering.domain.services.order_service import ESTIMATED_DELIVERY_DAYS, OrderService

        return self._cached(
            "order",
            lambda: OrderService(
                cart_service=self.cart_service(),
                inventory_service=self.inventory_service(),
                pricing_service=self.pricing_service(),
                payment_provider=self.payment(),
                notifications=self.notifications(),
                estimated_delivery_days=getattr(settings, "STOREFRONT", {}).get(
                    "ESTIMATED_DELIVERY_DAYS", ESTIMATED_DELIVERY_DAYS
                ),
            ),
        )

    def payment_service(self):
        from payment_system.domain.services.payment_service import PaymentService

        return self._cached("payment", lambda: PaymentService(payment_provider=self.payment()))

    def webhook_service(self):
        from payment_system.domain.services.webhook_service import WebhookService

        return self._cached(
            "webhook", lambda: WebhookService(payment_provider=self.payment(), order_service=self.order_service())
        )

    def auth_service(self):
        from authentication.domain.services import AuthService

        return self._cached("auth", lambda: AuthService(notifications=self.notifications()))

    def profile_service(self):
        from authentication.domain.services import ProfileService

        return self._cached(
            "profile",
            lambda: ProfileService(order_service=self.order_service(), wishlist_service=self.wishlist_service()),
        )

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._email = None
        self._payment = None
        self._services = {}
        logger.info("Service container reset")

    def configure_for_testing(self):
        """
        Configure container with mock adapters for testing.

        Sets up:
            - Mock email service (instead of SMTP)
            - Mock payment provider (instead of Stripe)
        """
        self.reset()
        self._email = EmailFactory.create("mock")
        self._payment = PaymentFactory.create("mock")
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_email() -> EmailServiceInterface:
    """Get email service from global container."""
    return container.email()


def get_payment() -> PaymentProviderInterface:
    """Get payment provider from global container."""
    return container.payment()
