"""User directory services.

Admin-facing mutations over the user directory: inviting users by email,
changing roles, and deleting users that have no lending history. Views
call these so the rules live in one place.
"""

import logging
import uuid

from django.conf import settings
from django.db import transaction

from .models import User

logger = logging.getLogger("auth")


class DirectoryError(Exception):
    """Raised when a directory mutation violates a business rule."""


def build_frontend_url(path: str) -> str:
    """Construct a full frontend URL for the given path.

    Reads `FRONTEND_URL` from settings and trims trailing slashes. Returns
    an empty string when no frontend is configured.
    """
    base = getattr(settings, "FRONTEND_URL", None) or ""
    if not base:
        return ""
    return f"{base.rstrip('/')}{path}"


def default_role_for_email(email: str) -> str:
    admin_emails = {e.strip().lower() for e in getattr(settings, "ADMIN_EMAILS", []) if e.strip()}
    return User.ROLE_ADMIN if email.strip().lower() in admin_emails else User.ROLE_VIEWER


@transaction.atomic
def invite_or_update_user(
    *, email: str, display_name: str = "", phone: str = "", photo_url: str = "", role: str = ""
) -> tuple[User, bool]:
    """Create a user for ``email`` or update the existing one.

    Only non-empty fields overwrite existing values. New users get an
    unusable password and a placeholder username until they sign in.
    Returns ``(user, created)``.
    """
    email = email.strip().lower()
    try:
        user = User.objects.select_for_update().get(email=email)
    except User.DoesNotExist:
        user = User(
            username=f"invite_{uuid.uuid4().hex[:12]}",
            email=email,
            display_name=display_name or email.split("@")[0],
            phone=phone,
            photo_url=photo_url,
            role=role or default_role_for_email(email),
        )
        user.set_unusable_password()
        user.save()
        logger.info("user_invited", extra={"event": "user_invited", "user_id": user.id, "role": user.role})
        return user, True

    update_fields = []
    for name, value in (("display_name", display_name), ("phone", phone), ("photo_url", photo_url), ("role", role)):
        if value:
            setattr(user, name, value)
            update_fields.append(name)
    if update_fields:
        user.save(update_fields=update_fields)
    return user, False


def change_role(*, user: User, role: str) -> User:
    if role not in dict(User.ROLE_CHOICES):
        raise DirectoryError("Unknown role")
    prev = user.role
    user.role = role
    user.save(update_fields=["role"])
    logger.info(
        "user_role_changed",
        extra={"event": "user_role_changed", "user_id": user.id, "role_from": prev, "role_to": role},
    )
    return user


@transaction.atomic
def delete_user(*, user: User) -> None:
    """Delete a user unless they have lending history.

    Users with ledger entries must be deactivated instead so the history
    keeps its borrower reference.
    """
    from inventory.models import TransactionHistory

    if TransactionHistory.objects.filter(user=user).exists():
        raise DirectoryError("User has transaction history and cannot be deleted; deactivate the account instead.")
    user_id = user.id
    user.delete()
    logger.info("user_deleted", extra={"event": "user_deleted", "user_id": user_id})
