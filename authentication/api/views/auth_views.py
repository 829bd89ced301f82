from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenRefreshSerializer

from authentication.api.serializers import (
    LoginRequestSerializer,
    LogoutRequestSerializer,
    RegisterRequestSerializer,
    TokenPairResponseSerializer,
    UserSerializer,
)
from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, SuccessResponseSerializer
from marketplace.services.base import ErrorCodes
from utils.api_response import failure_response, success_response


def _token_payload(result):
    return {
        "access": result.access_token,
        "refresh": result.refresh_token,
        "user": UserSerializer(result.user).data,
    }


class RegisterAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_register",
        summary="Register new user account",
        description="""
        Create a new user account and log it in.

        **Flow:**
        1. User submits registration form
        2. Account created
        3. Welcome email queued
        4. JWT token pair returned
        """,
        request=RegisterRequestSerializer,
        responses={
            201: OpenApiResponse(response=TokenPairResponseSerializer, description="Registration successful"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Validation error (email exists, passwords don't match, etc.)",
            ),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = container.auth_service().register(**serializer.validated_data)
        if not result.success:
            return failure_response(result.error, status.HTTP_400_BAD_REQUEST, code=ErrorCodes.VALIDATION_ERROR)
        return success_response(_token_payload(result), status_code=status.HTTP_201_CREATED)


class LoginAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_login",
        summary="Login with email and password",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(
                response=TokenPairResponseSerializer,
                description="Login successful",
                examples=[
                    OpenApiExample(
                        "Successful Login",
                        value={
                            "success": True,
                            "data": {
                                "access": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                                "refresh": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                                "user": {
                                    "id": "123e4567-e89b-12d3-a456-426614174000",
                                    "email": "user@example.com",
                                    "role": "user",
                                },
                            },
                        },
                    )
                ],
            ),
            401: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid credentials"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        serializer = LoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = container.auth_service().login(
            serializer.validated_data["email"], serializer.validated_data["password"], request
        )
        if not result.success:
            return failure_response(result.error, status.HTTP_401_UNAUTHORIZED, code=ErrorCodes.AUTHENTICATION_FAILED)
        return success_response(_token_payload(result))


class RefreshTokenAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_refresh_token",
        summary="Exchange a refresh token for a new access token",
        request=TokenRefreshSerializer,
        responses={
            200: SuccessResponseSerializer,
            401: OpenApiResponse(response=ErrorResponseSerializer, description="Token invalid or expired"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        serializer = TokenRefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return success_response(serializer.validated_data)


class LogoutAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="auth_logout",
        summary="Blacklist the refresh token",
        request=LogoutRequestSerializer,
        responses={
            200: SuccessResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Token invalid"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        serializer = LogoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = container.auth_service().logout(serializer.validated_data["refresh"])
        if not result.success:
            return failure_response(result.error, status.HTTP_400_BAD_REQUEST, code=ErrorCodes.VALIDATION_ERROR)
        return success_response({"message": result.message})
