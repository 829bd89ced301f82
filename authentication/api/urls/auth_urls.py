from django.urls import path

from authentication.api.views import LoginAPIView, LogoutAPIView, ProfileView, RefreshTokenAPIView, RegisterAPIView


urlpatterns = [
    # Auth
    path("register/", RegisterAPIView.as_view(), name="register"),
    path("login/", LoginAPIView.as_view(), name="login"),
    path("refresh-token/", RefreshTokenAPIView.as_view(), name="token_refresh"),
    path("logout/", LogoutAPIView.as_view(), name="logout"),
    # Profile
    path("profile/", ProfileView.as_view(), name="profile"),
]
