# Shared API serializers

from .response_serializers import ErrorResponseSerializer, PaginationMetaSerializer, SuccessResponseSerializer


__all__ = [
    "ErrorResponseSerializer",
    "PaginationMetaSerializer",
    "SuccessResponseSerializer",
]
