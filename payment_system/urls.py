from django.urls import path

from payment_system.api.views import payment_views

app_name = "payment_system"

urlpatterns = [
    # Payment intent lifecycle
    path("create-intent/", payment_views.create_payment_intent, name="create_payment_intent"),
    path("confirm/", payment_views.confirm_payment, name="confirm_payment"),
    # Read-only endpoints
    path("methods/", payment_views.payment_methods, name="payment_methods"),
    path("history/", payment_views.payment_history, name="payment_history"),
    # Webhook endpoint (unauthenticated, signature verified)
    path("webhook/", payment_views.StripeWebhookView.as_view(), name="stripe_webhook"),
    # Admin endpoints
    path("<uuid:order_id>/refund/", payment_views.refund_payment, name="refund_payment"),
]
