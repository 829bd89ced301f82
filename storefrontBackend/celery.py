"""
Celery Configuration for Storefront Backend

Celery carries the outbound notification queue. Checkout and payment
workflows enqueue email notifications here so the request path never waits
on the email sender.
"""

import os

from celery import Celery


# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "storefrontBackend.settings")

app = Celery("storefrontBackend")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()
app.autodiscover_tasks(["infrastructure.notifications"])

app.conf.update(
    task_routes={
        "infrastructure.notifications.tasks.*": {"queue": "notifications"},
    },
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=60 * 60 * 24,
    worker_max_tasks_per_child=1000,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
)
