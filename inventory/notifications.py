"""Email notifications for lending status changes.

Uses Django's email backend, with links composed from FRONTEND_URL. Views
call these after a workflow operation has committed; they never run inside
the ledger's atomic unit.
"""

from django.conf import settings
from django.core.mail import send_mail
from users.services import build_frontend_url


def _send(subject: str, body: str, to_email: str | None) -> None:
    if not to_email:
        return
    send_mail(
        subject,
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [to_email],
        fail_silently=True,
    )


def send_transaction_status_email(trx) -> None:
    """Tell the borrower their request was approved or rejected.

    Silently no-ops if the borrower has no email.
    """
    item = trx.item
    kind = "return" if trx.type == trx.TYPE_IN else "borrow"
    verb = "approved" if trx.status == trx.STATUS_COMPLETED else trx.status.lower()
    link = build_frontend_url("/transactions")
    body = (
        f"Your request to {kind} {abs(trx.qty_change)} {item.unit} of {item.name} ({item.sku}) was {verb}.\n"
        f"Status: {trx.status}\n"
    )
    if link:
        body += f"\nView your transactions here: {link}\n"
    _send(f"{kind.capitalize()} request {verb}: {item.name}", body, getattr(trx.user, "email", None))


def send_reservation_status_email(res) -> None:
    item = res.item
    body = (
        f"Your reservation of {item.name} ({item.sku}) "
        f"from {res.start_date:%Y-%m-%d} to {res.end_date:%Y-%m-%d} is {res.status}.\n"
    )
    if res.rejection_reason:
        body += f"Reason: {res.rejection_reason}\n"
    link = build_frontend_url("/reservations")
    if link:
        body += f"\nView your reservations here: {link}\n"
    _send(f"Reservation {res.status.lower()}: {item.name}", body, getattr(res.user, "email", None))
