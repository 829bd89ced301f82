"""
Infrastructure Package
======================

Adapters for the storefront's external collaborators.

Modules:
    - email: Email sender abstraction (Django email backends, mock)
    - payments: Payment gateway abstraction (Stripe, mock)
    - notifications: Transactional email dispatch over the Celery queue
    - observability: OpenTelemetry tracing setup
    - container: Composition root wiring services to their collaborators
"""
