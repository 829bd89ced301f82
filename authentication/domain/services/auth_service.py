"""
AuthService - Core Authentication Business Logic.

Registration, password login and logout. Tokens are simplejwt refresh/access
pairs; logout blacklists the refresh token.
"""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from infrastructure.notifications import NotificationService

from .results import LoginResult, RegisterResult, Result


User = get_user_model()
logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service encapsulating all auth business logic.
    """

    def __init__(self, notifications: NotificationService):
        """
        Args:
            notifications: Dispatcher used for the welcome email
        """
        self.notifications = notifications

    def register(self, email: str, password: str, first_name: str = "", last_name: str = "") -> RegisterResult:
        """
        Create an account, queue the welcome email and log the user in.

        A failed welcome email never fails the registration.
        """
        email = User.objects.normalize_email(email).lower()
        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=email[:150],
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                )
        except IntegrityError:
            return RegisterResult(success=False, error="An account with this email already exists.")

        welcome_queued = self.notifications.send_welcome(user)
        refresh = RefreshToken.for_user(user)

        logger.info(f"User registered: {user.email}")
        return RegisterResult(
            success=True,
            user=user,
            access_token=str(refresh.access_token),
            refresh_token=str(refresh),
            welcome_queued=welcome_queued,
        )

    def login(self, email: str, password: str, request=None) -> LoginResult:
        """
        Authenticate user with email/password and issue a token pair.

        Unknown emails and wrong passwords get the same error.
        """
        if not email or not password:
            return LoginResult(success=False, error="Email and password are required.")

        user = authenticate(request, username=email.lower(), password=password)
        if user is None:
            logger.info(f"Failed login attempt for {email}")
            return LoginResult(success=False, error="Invalid credentials")

        refresh = RefreshToken.for_user(user)
        logger.info(f"User logged in: {user.email}")
        return LoginResult(
            success=True,
            user=user,
            access_token=str(refresh.access_token),
            refresh_token=str(refresh),
        )

    def logout(self, refresh_token: str) -> Result:
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError as e:
            return Result(success=False, message="Logout failed", error=str(e))
        return Result(success=True, message="Logged out successfully")
