from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("storefront_orders_placed_total", "Total orders placed", ["status"])
order_value = Histogram(
    "storefront_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
orders_cancelled_total = Counter("storefront_orders_cancelled_total", "Orders cancelled", ["refund_required"])
order_status_updates_total = Counter("storefront_order_status_updates_total", "Order status changes", ["status"])

# Stock Metrics
stock_adjustment_failures = Counter("storefront_stock_adjustment_failure", "Conditional stock decrements rejected")

# Payment Metrics
payment_intents_total = Counter("storefront_payment_intents_total", "Payment intents requested", ["status"])
webhook_events_total = Counter("storefront_webhook_events_total", "Gateway webhook events received", ["event_type"])

# Notification Metrics
notifications_queued_total = Counter("storefront_notifications_queued_total", "Notifications enqueued", ["template"])
notifications_failed_total = Counter("storefront_notifications_failed_total", "Notification failures", ["template"])

# Performance Metrics
cart_validation_duration = Histogram("storefront_cart_validation_seconds", "Cart validation time")
api_request_duration = Histogram("storefront_api_request_seconds", "API request latency", ["method", "status"])
