"""
Response Serializers for API Documentation

These serializers define the response envelope for OpenAPI schema generation.
They are NOT used for data validation, only for documentation in Swagger/ReDoc.
"""

from rest_framework import serializers


class PaginationMetaSerializer(serializers.Serializer):
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total = serializers.IntegerField()
    totalPages = serializers.IntegerField()
    hasNext = serializers.BooleanField()
    hasPrev = serializers.BooleanField()


class SuccessResponseSerializer(serializers.Serializer):
    """Generic success envelope"""

    success = serializers.BooleanField(default=True)
    data = serializers.JSONField(required=False, help_text="Operation payload")
    meta = PaginationMetaSerializer(required=False, help_text="Present on paginated listings")


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error envelope"""

    success = serializers.BooleanField(default=False)
    error = serializers.CharField(help_text="Human-readable error message")
    code = serializers.CharField(help_text="Error code identifier", required=False)
