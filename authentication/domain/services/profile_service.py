"""
ProfileService - Profile Management Business Logic.

Profile updates and the per-user statistics shown on the account page.
"""

import logging
from typing import Any, Dict

from .results import Result


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "phone")


class ProfileService:
    """
    Profile management service.

    Args:
        order_service: Source of the order summary
        wishlist_service: Source of the wishlist count
    """

    def __init__(self, order_service, wishlist_service):
        self.order_service = order_service
        self.wishlist_service = wishlist_service

    def update_profile(self, user, profile_data: Dict[str, Any]) -> Result:
        """Update editable profile fields; anything else in ``profile_data`` is ignored."""
        changed = [name for name in EDITABLE_FIELDS if name in profile_data]
        for name in changed:
            setattr(user, name, profile_data[name])
        if changed:
            user.save(update_fields=changed)
            logger.info(f"Profile updated for {user.email}: {changed}")
        return Result(success=True, message="Profile updated successfully", data={"updated_fields": changed})

    def get_stats(self, user) -> Result:
        summary = self.order_service.get_order_summary(user).value
        recent = summary["recent_orders"]
        return Result(
            success=True,
            message="",
            data={
                "total_orders": summary["total_orders"],
                "total_spent": summary["total_spent"],
                "orders_by_status": summary["orders_by_status"],
                "wishlist_items": self.wishlist_service.count(user),
                "last_order": recent[0] if recent else None,
            },
        )
