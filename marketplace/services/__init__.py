"""
Shared service-layer primitives.

Domain services live beside their models (``marketplace.cart``,
``marketplace.catalog``, ``marketplace.ordering``); this package holds what
they all build on.

Usage:
    from marketplace.services import ErrorCodes, service_err, service_ok

    result = order_service.create_order(user, data)
    if result.ok:
        order = result.value.order
    else:
        error = result.error
"""

from .base import BaseService, ErrorCategory, ErrorCodes, ServiceResult, service_err, service_ok

__all__ = [
    "BaseService",
    "ServiceResult",
    "service_ok",
    "service_err",
    "ErrorCodes",
    "ErrorCategory",
]
