"""Inventory services: the stock ledger and the lending workflows.

``adjust_stock`` is the only code path that writes ``InventoryItem.stock_qty``.
Transaction services call it from inside the same atomic block that writes
the ledger entry, so a stock change and its ledger row commit together or
not at all.
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import InventoryItem, Reservation, TransactionHistory

logger = logging.getLogger("lending.inventory")
reservation_logger = logging.getLogger("lending.reservations")

# Request verb accepted by set_transaction_status; stored as COMPLETED.
APPROVE = "APPROVED"


class LendingError(Exception):
    """Base class for lending business-rule failures."""


class InsufficientStock(LendingError):
    pass


class NotFound(LendingError):
    pass


class InvalidState(LendingError):
    pass


# Ledger
@transaction.atomic
def adjust_stock(*, item_id: int, delta: int, actor=None) -> InventoryItem:
    """Apply a signed delta to an item's stock.

    The sufficiency check and the increment run as a single conditional
    UPDATE, so concurrent adjusts on the same item can never overdraw it.
    Raises ``InsufficientStock`` when the result would be negative and
    ``NotFound`` when the item does not exist.
    """
    changes = {"stock_qty": F("stock_qty") + delta, "updated_at": timezone.now()}
    if actor is not None:
        changes["last_updated_by"] = actor
    updated = InventoryItem.objects.filter(id=item_id, stock_qty__gte=-delta).update(**changes)
    if not updated:
        if InventoryItem.objects.filter(id=item_id).exists():
            raise InsufficientStock("Insufficient stock for this transaction")
        raise NotFound("Item not found")
    return InventoryItem.objects.get(id=item_id)


# Transaction workflow
@transaction.atomic
def create_transaction(
    *,
    item_id: int,
    user,
    type: str,
    qty_change: int,
    notes: str = "",
    original_transaction_id: int | None = None,
    status: str = TransactionHistory.STATUS_COMPLETED,
    actor=None,
):
    """Record a borrow or return and, when completed, apply it to stock.

    Borrows are checked against current stock even when they stay PENDING;
    that check is advisory and does not hold stock. A return that names its
    original OUT transaction marks that transaction returned.

    Returns ``(transaction, updated_item)``; ``updated_item`` is None unless
    stock was adjusted.
    """
    if status not in (TransactionHistory.STATUS_PENDING, TransactionHistory.STATUS_COMPLETED):
        raise InvalidState(f"Cannot create a transaction with status {status}")
    if qty_change == 0:
        raise InvalidState("Quantity change must be non-zero")
    if (type == TransactionHistory.TYPE_OUT) != (qty_change < 0):
        raise InvalidState("OUT transactions must be negative and IN transactions positive")

    try:
        item = InventoryItem.objects.get(id=item_id)
    except InventoryItem.DoesNotExist:
        raise NotFound("Item not found")

    if qty_change < 0 and item.stock_qty + qty_change < 0:
        raise InsufficientStock("Insufficient stock for this transaction")

    original = None
    if original_transaction_id is not None and type == TransactionHistory.TYPE_IN:
        original = _mark_original_returned(
            original_transaction_id=original_transaction_id, item_id=item.id, qty_change=qty_change
        )

    trx = TransactionHistory.objects.create(
        item=item,
        user=user,
        type=type,
        qty_change=qty_change,
        status=status,
        is_returned=type == TransactionHistory.TYPE_IN,
        original_transaction=original,
        notes=notes,
    )

    updated_item = None
    if status == TransactionHistory.STATUS_COMPLETED:
        updated_item = adjust_stock(item_id=item.id, delta=qty_change, actor=actor or user)

    logger.info(
        "transaction_created",
        extra={
            "event": "transaction_created",
            "transaction_id": trx.id,
            "item_id": item.id,
            "user_id": getattr(user, "id", None),
            "type": type,
            "qty_change": qty_change,
            "status": status,
            "original_transaction_id": getattr(original, "id", None),
        },
    )
    return trx, updated_item


def _mark_original_returned(*, original_transaction_id: int, item_id: int, qty_change: int) -> TransactionHistory:
    try:
        original = TransactionHistory.objects.select_for_update().get(id=original_transaction_id)
    except TransactionHistory.DoesNotExist:
        raise NotFound("Original transaction not found")
    if original.type != TransactionHistory.TYPE_OUT or original.item_id != item_id:
        raise InvalidState("Original transaction must be a borrow of the same item")
    if original.status != TransactionHistory.STATUS_COMPLETED:
        raise InvalidState("Only completed borrows can be returned")
    if original.is_returned:
        raise InvalidState("Original transaction is already returned")
    if qty_change != -original.qty_change:
        raise InvalidState("Return quantity must match the borrowed quantity")
    original.is_returned = True
    original.save(update_fields=["is_returned", "updated_at"])
    return original


@transaction.atomic
def set_transaction_status(*, transaction_id: int, status: str, actor=None) -> TransactionHistory:
    """Approve or reject a pending transaction.

    ``APPROVED`` (or ``COMPLETED``) moves a PENDING row to COMPLETED and
    applies its quantity to stock, re-validated against current stock.
    ``REJECTED`` moves it to REJECTED with no stock effect. Requesting the
    status a row already has is a no-op; any other change to a COMPLETED or
    REJECTED row raises ``InvalidState``.
    """
    try:
        trx = TransactionHistory.objects.select_for_update().get(id=transaction_id)
    except TransactionHistory.DoesNotExist:
        raise NotFound("Transaction not found")

    target = TransactionHistory.STATUS_COMPLETED if status == APPROVE else status
    if target not in dict(TransactionHistory.STATUS_CHOICES):
        raise InvalidState(f"Unknown status {status}")
    if trx.status == target:
        return trx
    if trx.status != TransactionHistory.STATUS_PENDING:
        raise InvalidState(f"Transaction is already {trx.status}")

    prev = trx.status
    if target == TransactionHistory.STATUS_COMPLETED:
        adjust_stock(item_id=trx.item_id, delta=trx.qty_change, actor=actor)
    elif trx.original_transaction_id:
        # A rejected return leaves its borrow outstanding.
        TransactionHistory.objects.filter(id=trx.original_transaction_id).update(
            is_returned=False, updated_at=timezone.now()
        )

    trx.status = target
    trx.save(update_fields=["status", "updated_at"])
    logger.info(
        "transaction_status_changed",
        extra={
            "event": "transaction_status_changed",
            "transaction_id": trx.id,
            "item_id": trx.item_id,
            "user_id": trx.user_id,
            "status_from": prev,
            "status_to": target,
            "actor_id": getattr(actor, "id", None),
        },
    )
    return trx


# Catalog
@transaction.atomic
def delete_item(*, item_id: int) -> int:
    """Delete an item together with its ledger history.

    Ledger rows are purged explicitly first (they are PROTECTed from
    cascading). Returns the number of purged ledger rows.
    """
    try:
        item = InventoryItem.objects.select_for_update().get(id=item_id)
    except InventoryItem.DoesNotExist:
        raise NotFound("Item not found")
    purged, _ = TransactionHistory.objects.filter(item=item).delete()
    sku = item.sku
    item.delete()
    logger.warning(
        "item_deleted",
        extra={"event": "item_deleted", "item_id": item_id, "sku": sku, "purged_transactions": purged},
    )
    return purged


# Reservation workflow
def _check_dates(start_date, end_date):
    if end_date < start_date:
        raise InvalidState("end_date must not precede start_date")


@transaction.atomic
def create_reservation(*, item_id: int, user, start_date, end_date, notes: str = "") -> Reservation:
    _check_dates(start_date, end_date)
    if not InventoryItem.objects.filter(id=item_id).exists():
        raise NotFound("Item not found")
    res = Reservation.objects.create(
        item_id=item_id,
        user=user,
        start_date=start_date,
        end_date=end_date,
        notes=notes,
        status=Reservation.STATUS_PENDING,
    )
    reservation_logger.info(
        "reservation_created",
        extra={"event": "reservation_created", "reservation_id": res.id, "item_id": item_id, "user_id": user.id},
    )
    return res


@transaction.atomic
def set_reservation_status(*, reservation_id: int, status: str, rejection_reason: str = "") -> Reservation:
    """Move a reservation to ``status``.

    REJECTED requires a non-blank reason; the reason is cleared for any
    other status. Reservations never touch stock.
    """
    try:
        res = Reservation.objects.select_for_update().get(id=reservation_id)
    except Reservation.DoesNotExist:
        raise NotFound("Reservation not found")
    if status not in dict(Reservation.STATUS_CHOICES):
        raise InvalidState(f"Unknown status {status}")
    reason = (rejection_reason or "").strip()
    if status == Reservation.STATUS_REJECTED and not reason:
        raise InvalidState("A rejection reason is required")

    prev = res.status
    res.status = status
    res.rejection_reason = reason if status == Reservation.STATUS_REJECTED else ""
    res.save(update_fields=["status", "rejection_reason", "updated_at"])
    reservation_logger.info(
        "reservation_status_changed",
        extra={
            "event": "reservation_status_changed",
            "reservation_id": res.id,
            "user_id": res.user_id,
            "status_from": prev,
            "status_to": status,
        },
    )
    return res


@transaction.atomic
def update_reservation(
    *,
    reservation_id: int,
    item_id: int | None = None,
    start_date=None,
    end_date=None,
    notes: str | None = None,
    status: str | None = None,
    rejection_reason: str = "",
) -> Reservation:
    """Edit reservation fields; a status change goes through the status rules."""
    try:
        res = Reservation.objects.select_for_update().get(id=reservation_id)
    except Reservation.DoesNotExist:
        raise NotFound("Reservation not found")
    if item_id is not None and item_id != res.item_id:
        if not InventoryItem.objects.filter(id=item_id).exists():
            raise NotFound("Item not found")
        res.item_id = item_id
    if start_date is not None:
        res.start_date = start_date
    if end_date is not None:
        res.end_date = end_date
    if notes is not None:
        res.notes = notes
    _check_dates(res.start_date, res.end_date)
    res.save()
    if status:
        res = set_reservation_status(reservation_id=res.id, status=status, rejection_reason=rejection_reason)
    return res


@transaction.atomic
def delete_reservation(*, reservation_id: int) -> None:
    deleted, _ = Reservation.objects.filter(id=reservation_id).delete()
    if not deleted:
        raise NotFound("Reservation not found")
