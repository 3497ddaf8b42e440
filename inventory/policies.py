"""Role policy for new transactions: their initial status and who may return what.

Kept apart from the workflow so the state machine does not depend on how
roles are authenticated; the API layer resolves the actor's role and passes
the resulting status to ``create_transaction``.
"""

from common.choices import TransactionStatus, UserRole


def initial_status_for(role: str, qty_change: int) -> str:
    """Admin borrows complete immediately; other borrows wait for approval.

    Returns never wait: they restore stock as soon as they are recorded.
    Non-admin returns are limited to the caller's own borrows, see ``may_return``.
    """
    if qty_change >= 0 or role == UserRole.ADMIN:
        return TransactionStatus.COMPLETED
    return TransactionStatus.PENDING


def role_of(user) -> str:
    if getattr(user, "is_inventory_admin", False):
        return UserRole.ADMIN
    return getattr(user, "role", UserRole.VIEWER)


def may_return(user, original) -> bool:
    """Admins may close any borrow; everyone else only the ones they took out."""
    return role_of(user) == UserRole.ADMIN or original.user_id == getattr(user, "id", None)
