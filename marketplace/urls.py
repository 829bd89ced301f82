from django.urls import include, path
from rest_framework.routers import DefaultRouter

from marketplace.cart.api.views.cart_views import CartViewSet
from marketplace.catalog.api.views.product_views import ProductViewSet
from marketplace.ordering.api.views.order_views import OrderViewSet

# Create the main router
router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"orders", OrderViewSet, basename="order")

app_name = "marketplace"

urlpatterns = [
    # Cart routes (manual routing, the cart is a per-user singleton)
    path("cart/", CartViewSet.as_view({"get": "list", "delete": "destroy_all"}), name="cart"),
    path("cart/add/", CartViewSet.as_view({"post": "add"}), name="cart-add"),
    path("cart/count/", CartViewSet.as_view({"get": "count"}), name="cart-count"),
    path("cart/validate/", CartViewSet.as_view({"get": "validate"}), name="cart-validate"),
    path(
        "cart/<int:pk>/",
        CartViewSet.as_view({"put": "update", "delete": "destroy"}),
        name="cart-item",
    ),
    # Main API routes
    path("", include(router.urls)),
]
