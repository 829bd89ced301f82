"""Custom middleware helpers for the storefront backend."""

from __future__ import annotations

import logging
import time
from typing import Callable

from marketplace.infra.observability.metrics import api_request_duration

logger = logging.getLogger(__name__)


class JWTCSRFBypassMiddleware:
    """Skip CSRF enforcement for stateless JWT authenticated requests.

    The API authenticates with Authorization headers (JWT Bearer tokens), so
    requests carrying one are marked as exempt. Session based endpoints such as
    the admin keep the regular CSRF protection.
    """

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request):
        authorization = request.META.get("HTTP_AUTHORIZATION", "")
        if authorization.lower().startswith("bearer "):
            request._dont_enforce_csrf_checks = True  # type: ignore[attr-defined]
            request.META.setdefault("CSRF_SKIP_REASON", "jwt-bearer")
        return self.get_response(request)


class RequestTimingMiddleware:
    """Record API request latency and log slow requests."""

    SLOW_REQUEST_SECONDS = 2.0

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request):
        start = time.perf_counter()
        response = self.get_response(request)
        elapsed = time.perf_counter() - start

        if request.path.startswith("/api/"):
            api_request_duration.labels(method=request.method, status=str(response.status_code)).observe(elapsed)

        if elapsed > self.SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request {request.method} {request.path}: {elapsed:.2f}s")

        return response
