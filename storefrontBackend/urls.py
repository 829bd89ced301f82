"""
URL configuration for storefrontBackend project.

Every public endpoint lives under the versioned /api/v1/ prefix.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from marketplace.api.views.prometheus_metrics import prometheus_metrics

urlpatterns = [
    path("admin/", admin.site.urls),
    # API Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # API endpoints
    path("api/v1/auth/", include("authentication.api.urls.auth_urls")),
    path("api/v1/users/", include("authentication.api.urls.user_urls")),
    path("api/v1/", include("marketplace.urls")),
    path("api/v1/payments/", include("payment_system.urls", namespace="payment_system")),
    # Prometheus metrics endpoint
    path("metrics", prometheus_metrics, name="prometheus-metrics"),
]
