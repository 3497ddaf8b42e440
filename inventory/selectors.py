"""Selectors for the lending domain: read-only queries and aggregates."""

from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from users.permissions import is_inventory_admin

from .models import InventoryItem, Reservation, TransactionHistory


def low_stock_threshold() -> int:
    return int(getattr(settings, "LENDING_LOW_STOCK_THRESHOLD", 5))


def overdue_days() -> int:
    return int(getattr(settings, "LENDING_OVERDUE_DAYS", 3))


def get_transaction(transaction_id: int) -> TransactionHistory | None:
    return TransactionHistory.objects.select_related("item", "user").filter(id=transaction_id).first()


def transactions_visible_to(user):
    """Admins see the whole ledger; everyone else sees their own rows."""
    qs = TransactionHistory.objects.select_related("item", "user").order_by("-timestamp", "-id")
    if is_inventory_admin(user):
        return qs
    return qs.filter(user_id=user.id)


def reservations_visible_to(user):
    qs = Reservation.objects.select_related("item", "user").order_by("-start_date", "id")
    if is_inventory_admin(user):
        return qs
    return qs.filter(user_id=user.id)


def outstanding_borrows():
    """Completed borrows whose return has not been recorded."""
    return TransactionHistory.objects.filter(
        type=TransactionHistory.TYPE_OUT,
        status=TransactionHistory.STATUS_COMPLETED,
        is_returned=False,
    )


def overdue_loans(*, now=None):
    now = now or timezone.now()
    cutoff = now - timedelta(days=overdue_days())
    return outstanding_borrows().filter(timestamp__lt=cutoff).select_related("item", "user").order_by("timestamp")


def is_overdue(trx: TransactionHistory, *, now=None) -> bool:
    if trx.type != TransactionHistory.TYPE_OUT or trx.is_returned:
        return False
    if trx.status != TransactionHistory.STATUS_COMPLETED or trx.timestamp is None:
        return False
    now = now or timezone.now()
    return trx.timestamp < now - timedelta(days=overdue_days())


def _start_of_day(dt):
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def dashboard_stats(*, now=None) -> dict:
    """Headline numbers for the dashboard.

    - items_out: units currently lent out (completed, unreturned borrows)
    - this_week_borrowed: borrow requests filed since Sunday 00:00 local time
    - chart_data: per-day IN/OUT transaction counts for the last 7 days
    - overdue_items: the three oldest overdue loans
    """
    now = now or timezone.now()
    local_now = timezone.localtime(now)

    items_out = outstanding_borrows().aggregate(total=Coalesce(Sum("qty_change"), 0))["total"]
    overdue = overdue_loans(now=now)

    days_since_sunday = (local_now.weekday() + 1) % 7
    start_of_week = _start_of_day(local_now - timedelta(days=days_since_sunday))
    this_week_borrowed = TransactionHistory.objects.filter(
        type=TransactionHistory.TYPE_OUT, timestamp__gte=start_of_week
    ).count()

    chart_data = []
    for offset in range(6, -1, -1):
        day_start = _start_of_day(local_now - timedelta(days=offset))
        day_end = day_start + timedelta(days=1)
        day_qs = TransactionHistory.objects.filter(timestamp__gte=day_start, timestamp__lt=day_end)
        chart_data.append(
            {
                "day": day_start.strftime("%a"),
                "date": day_start.date().isoformat(),
                "in": day_qs.filter(type=TransactionHistory.TYPE_IN).count(),
                "out": day_qs.filter(type=TransactionHistory.TYPE_OUT).count(),
            }
        )

    return {
        "total_items": InventoryItem.objects.count(),
        "low_stock_count": InventoryItem.objects.filter(stock_qty__lte=low_stock_threshold()).count(),
        "items_out": max(0, abs(int(items_out))),
        "overdue_count": overdue.count(),
        "this_week_borrowed": this_week_borrowed,
        "total_transactions": TransactionHistory.objects.count(),
        "chart_data": chart_data,
        "overdue_items": [
            {
                "transaction_id": trx.id,
                "name": trx.item.name,
                "sku": trx.item.sku,
                "borrower": trx.user.display_name,
                "days_out": (now - trx.timestamp).days,
                "image_url": trx.item.image_url,
            }
            for trx in overdue[:3]
        ],
    }


def category_stats() -> list[dict]:
    return list(InventoryItem.objects.values("category").annotate(count=Count("id")).order_by("category"))


def stock_trend(*, now=None, days: int = 7) -> list[dict]:
    now = now or timezone.now()
    return list(
        TransactionHistory.objects.filter(
            status=TransactionHistory.STATUS_COMPLETED,
            timestamp__gte=now - timedelta(days=days),
        )
        .order_by("timestamp", "id")
        .values("id", "timestamp", "type", "qty_change")
    )
