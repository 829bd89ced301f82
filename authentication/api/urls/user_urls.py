from django.urls import path

from authentication.api.views import ProfileStatsView, ProfileView, WishlistItemView, WishlistView


urlpatterns = [
    path("profile/", ProfileView.as_view(), name="user_profile"),
    path("stats/", ProfileStatsView.as_view(), name="user_stats"),
    path("wishlist/", WishlistView.as_view(), name="wishlist"),
    path("wishlist/<uuid:product_id>/", WishlistItemView.as_view(), name="wishlist_item"),
]
