"""
Response envelope helpers.

Every API response is shaped as ``{success, data?, error?, meta?}``. Service
failures are translated to HTTP status codes through their error category.
"""

import logging
import math
from typing import Any, Dict, Optional, Tuple

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from marketplace.services.base import ErrorCategory, ErrorCodes, ServiceResult

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

CATEGORY_STATUS = {
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.UPSTREAM: status.HTTP_502_BAD_GATEWAY,
    ErrorCategory.AUTH: status.HTTP_403_FORBIDDEN,
    ErrorCategory.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Codes whose status differs from their category default
CODE_STATUS = {
    ErrorCodes.UPSTREAM_TIMEOUT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCodes.WEBHOOK_SIGNATURE_INVALID: status.HTTP_401_UNAUTHORIZED,
    ErrorCodes.AUTHENTICATION_FAILED: status.HTTP_401_UNAUTHORIZED,
}


def build_envelope(success: bool, data: Any = None, error: Optional[str] = None, meta: Optional[Dict] = None) -> Dict:
    body: Dict[str, Any] = {"success": success}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    if meta is not None:
        body["meta"] = meta
    return body


def success_response(data: Any = None, meta: Optional[Dict] = None, status_code: int = status.HTTP_200_OK) -> Response:
    return Response(build_envelope(True, data=data, meta=meta), status=status_code)


def failure_response(error: str, status_code: int, code: Optional[str] = None) -> Response:
    body = build_envelope(False, error=error)
    if code:
        body["code"] = code
    return Response(body, status=status_code)


def status_for_error(code: Optional[str]) -> int:
    if code in CODE_STATUS:
        return CODE_STATUS[code]
    return CATEGORY_STATUS[ErrorCategory.for_code(code)]


def error_response(result: ServiceResult) -> Response:
    """Translate a failed ServiceResult into an enveloped error response."""
    status_code = status_for_error(result.error)
    if status_code >= 500:
        logger.error(f"Service failure {result.error}: {result.error_detail}")
    return failure_response(result.error_detail, status_code, code=result.error)


def parse_pagination(query_params) -> Tuple[int, int, int]:
    """
    Read ``page`` and ``limit`` query parameters.

    Returns:
        (page, limit, offset) with page >= 1 and 1 <= limit <= 100
    """
    try:
        page = max(1, int(query_params.get("page", 1)))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(MAX_PAGE_SIZE, max(1, int(query_params.get("limit", DEFAULT_PAGE_SIZE))))
    except (TypeError, ValueError):
        limit = DEFAULT_PAGE_SIZE
    return page, limit, (page - 1) * limit


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def _first_error_message(detail: Any) -> str:
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_error_message(value)
            return message if field == "non_field_errors" else f"{field}: {message}"
        return "Invalid input"
    if isinstance(detail, list):
        return _first_error_message(detail[0]) if detail else "Invalid input"
    return str(detail)


def envelope_exception_handler(exc, context):
    """DRF exception handler wrapping framework errors in the response envelope."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        body = build_envelope(False, error=_first_error_message(exc.detail))
        body["code"] = ErrorCodes.VALIDATION_ERROR
        body["details"] = exc.detail
    else:
        detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
        body = build_envelope(False, error=_first_error_message(detail))
        if isinstance(exc, APIException):
            body["code"] = exc.default_code
    response.data = body
    return response
