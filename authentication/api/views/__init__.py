from .auth_views import LoginAPIView, LogoutAPIView, RefreshTokenAPIView, RegisterAPIView
from .profile_views import ProfileStatsView, ProfileView, WishlistItemView, WishlistView


__all__ = [
    "RegisterAPIView",
    "LoginAPIView",
    "RefreshTokenAPIView",
    "LogoutAPIView",
    "ProfileView",
    "ProfileStatsView",
    "WishlistView",
    "WishlistItemView",
]
