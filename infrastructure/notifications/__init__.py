"""
Notification Dispatcher
=======================

Renders transactional emails and sends them through the outbound queue.
"""

from .service import NotificationService
from .templates import NotificationTemplate, render_notification

__all__ = [
    "NotificationService",
    "NotificationTemplate",
    "render_notification",
]
