import logging

from django.contrib.auth import get_user_model

# Canonical role names
ROLE_USER = "user"
ROLE_ADMIN = "admin"

logger = logging.getLogger(__name__)


def _fetch_user_from_db(user):
    """Fetch a fresh copy of the user from the DB with only the fields we need.

    Returns None if the user is not authenticated.
    """
    if not getattr(user, "is_authenticated", False):
        return None
    User = get_user_model()
    # Only load minimal fields required for RBAC checks
    return User.objects.only("id", "role", "is_superuser").filter(pk=getattr(user, "pk", None)).first()


def is_admin(user) -> bool:
    """Consistent admin check across the codebase, verified against the database.

    A role demoted after the JWT was issued takes effect immediately.
    """
    db_user = _fetch_user_from_db(user)
    if not db_user:
        logger.debug(f"RBAC: anonymous or unknown user {getattr(user, 'id', None)}")
        return False
    return bool(db_user.is_superuser or db_user.role == ROLE_ADMIN)
