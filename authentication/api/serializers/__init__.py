from .auth_serializers import (
    LoginRequestSerializer,
    LogoutRequestSerializer,
    ProfileUpdateRequestSerializer,
    RegisterRequestSerializer,
    TokenPairResponseSerializer,
    UserSerializer,
)


__all__ = [
    "UserSerializer",
    "RegisterRequestSerializer",
    "LoginRequestSerializer",
    "LogoutRequestSerializer",
    "TokenPairResponseSerializer",
    "ProfileUpdateRequestSerializer",
]
