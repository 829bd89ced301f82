"""
Base classes and utilities for the service layer.

This module provides the ServiceResult pattern (inspired by Rust's Result type),
the BaseService class shared by every storefront service and the error code
catalogue used to map failures onto HTTP responses.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code (present if ok=False)
        error_detail: Human-readable error message (present if ok=False)

    Examples:
        >>> result = service_ok(order)
        >>> if not result.ok:
        ...     return error_response(result)

        >>> result = service_err("order_not_found", "Order not found")
        >>> result.category
        'not_found'
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None

    @property
    def category(self) -> Optional[str]:
        """Taxonomy bucket of the error code, None for successful results."""
        if self.ok:
            return None
        return ErrorCategory.for_code(self.error)

    @property
    def retryable(self) -> bool:
        """True when the failure came from a transient upstream condition."""
        return not self.ok and self.error in ErrorCodes.RETRYABLE

    def map(self, func: Callable[[T], object]) -> "ServiceResult":
        """
        Transform the success value if ok=True, otherwise pass through error.
        """
        if self.ok:
            return service_ok(func(self.value))
        return self

    def to_dict(self) -> dict:
        """
        Convert to the response envelope.

        Returns:
            Dictionary with 'success' and either 'data' or 'error'
        """
        if self.ok:
            return {"success": True, "data": self.value}
        return {"success": False, "error": self.error_detail, "code": self.error}


def service_ok(value: T) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Example:
        >>> return service_ok(OrderCreated(order=order))
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (e.g., "order_not_found", "insufficient_stock")
        error_detail: Human-readable error message

    Example:
        >>> return service_err(ErrorCodes.CART_EMPTY, "Cart is empty")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator

    Usage:
        class CatalogService(BaseService):
            def __init__(self, matcher):
                super().__init__()
                self.matcher = matcher

            @BaseService.log_performance
            def list_products(self, filters):
                self.logger.info(f"Listing products with filters: {filters}")
    """

    def __init__(self):
        """Initialize base service with logger."""
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time, failed results and any exception that escapes.
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


class ErrorCodes:
    """Standard error codes used across storefront services."""

    # Product errors
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_UNAVAILABLE = "product_unavailable"
    ALREADY_IN_WISHLIST = "already_in_wishlist"

    # Cart errors
    CART_EMPTY = "cart_empty"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_IN_CART = "item_not_in_cart"

    # Order errors
    ORDER_NOT_FOUND = "order_not_found"
    ORDER_ALREADY_PAID = "order_already_paid"
    ORDER_CANNOT_CANCEL = "order_cannot_cancel"
    ORDER_NOT_REFUNDABLE = "order_not_refundable"
    INVALID_STATUS = "invalid_status"

    # Inventory errors
    INSUFFICIENT_STOCK = "insufficient_stock"

    # Payment errors
    PAYMENT_NOT_SUCCESSFUL = "payment_not_successful"
    PAYMENT_PROVIDER_ERROR = "payment_provider_error"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    WEBHOOK_SIGNATURE_INVALID = "webhook_signature_invalid"

    # Permission errors
    AUTHENTICATION_FAILED = "authentication_failed"
    PERMISSION_DENIED = "permission_denied"

    # Validation errors
    VALIDATION_ERROR = "validation_error"

    # Internal errors
    INTERNAL_ERROR = "internal_error"

    RETRYABLE = frozenset({UPSTREAM_TIMEOUT})


class ErrorCategory:
    """Groups error codes into the validation / not-found / conflict / upstream / auth taxonomy."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    AUTH = "auth"
    INTERNAL = "internal"

    _BY_CODE = {
        ErrorCodes.VALIDATION_ERROR: VALIDATION,
        ErrorCodes.INVALID_QUANTITY: VALIDATION,
        ErrorCodes.INVALID_STATUS: VALIDATION,
        ErrorCodes.ORDER_NOT_FOUND: NOT_FOUND,
        ErrorCodes.PRODUCT_NOT_FOUND: NOT_FOUND,
        ErrorCodes.ITEM_NOT_IN_CART: NOT_FOUND,
        ErrorCodes.CART_EMPTY: CONFLICT,
        ErrorCodes.INSUFFICIENT_STOCK: CONFLICT,
        ErrorCodes.PRODUCT_UNAVAILABLE: CONFLICT,
        ErrorCodes.ALREADY_IN_WISHLIST: CONFLICT,
        ErrorCodes.ORDER_ALREADY_PAID: CONFLICT,
        ErrorCodes.ORDER_CANNOT_CANCEL: CONFLICT,
        ErrorCodes.ORDER_NOT_REFUNDABLE: CONFLICT,
        ErrorCodes.PAYMENT_NOT_SUCCESSFUL: CONFLICT,
        ErrorCodes.PAYMENT_PROVIDER_ERROR: UPSTREAM,
        ErrorCodes.UPSTREAM_TIMEOUT: UPSTREAM,
        ErrorCodes.WEBHOOK_SIGNATURE_INVALID: AUTH,
        ErrorCodes.AUTHENTICATION_FAILED: AUTH,
        ErrorCodes.PERMISSION_DENIED: AUTH,
    }

    @classmethod
    def for_code(cls, code: Optional[str]) -> str:
        return cls._BY_CODE.get(code, cls.INTERNAL)
