"""Inventory models (single-location lending).

Tracks lendable items, the transaction ledger that records every borrow and
return, and reservations that schedule future use without touching stock.
"""

from common.choices import ItemCondition, ReservationStatus, TransactionStatus, TransactionType
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Category(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class InventoryItem(TimeStampedModel):
    """A lendable asset.

    ``stock_qty`` is owned by the ledger (``inventory.services.adjust_stock``);
    catalog edits never write it after creation.
    """

    CONDITION_CHOICES = ItemCondition.choices

    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=64, unique=True)
    category = models.CharField(max_length=100, blank=True, db_index=True)
    stock_qty = models.IntegerField(default=0)
    unit = models.CharField(max_length=32, default="Pcs")
    condition = models.CharField(max_length=32, choices=CONDITION_CHOICES, default=ItemCondition.GOOD)
    location = models.CharField(max_length=200, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    last_updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="updated_items",
    )

    class Meta:
        ordering = ["name", "id"]
        constraints = [
            models.CheckConstraint(name="item_stock_non_negative", condition=models.Q(stock_qty__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.sku}) q={self.stock_qty}"


class TransactionHistory(models.Model):
    """A ledger entry for a single borrow (OUT) or return (IN).

    COMPLETED and REJECTED are terminal. The only later write to a terminal
    OUT row is flipping ``is_returned`` when its return is recorded.
    """

    TYPE_OUT = TransactionType.OUT
    TYPE_IN = TransactionType.IN
    TYPE_CHOICES = TransactionType.choices

    STATUS_PENDING = TransactionStatus.PENDING
    STATUS_COMPLETED = TransactionStatus.COMPLETED
    STATUS_REJECTED = TransactionStatus.REJECTED
    STATUS_CHOICES = TransactionStatus.choices

    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name="transactions")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="transactions")
    type = models.CharField(max_length=8, choices=TYPE_CHOICES)
    qty_change = models.IntegerField()  # signed: -borrow, +return
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED, db_index=True)
    is_returned = models.BooleanField(default=False)
    original_transaction = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="returns",
    )
    notes = models.TextField(blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-timestamp", "-id"]
        verbose_name_plural = "transaction history"
        constraints = [
            models.CheckConstraint(name="trx_qty_non_zero", condition=~models.Q(qty_change=0)),
            models.CheckConstraint(
                name="trx_sign_matches_type",
                condition=(models.Q(type="OUT", qty_change__lt=0) | models.Q(type="IN", qty_change__gt=0)),
            ),
        ]
        indexes = [
            models.Index(fields=["type", "status", "is_returned"], name="trx_type_status_returned_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.type} {self.qty_change} item={self.item_id} status={self.status}"


class Reservation(TimeStampedModel):
    STATUS_PENDING = ReservationStatus.PENDING
    STATUS_APPROVED = ReservationStatus.APPROVED
    STATUS_REJECTED = ReservationStatus.REJECTED
    STATUS_CHOICES = ReservationStatus.choices

    item = models.ForeignKey(InventoryItem, on_delete=models.CASCADE, related_name="reservations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="reservations")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    rejection_reason = models.TextField(blank=True)

    class Meta:
        ordering = ["-start_date", "id"]
        constraints = [
            models.CheckConstraint(
                name="reservation_dates_ordered",
                condition=models.Q(end_date__gte=models.F("start_date")),
            ),
        ]
        indexes = [
            models.Index(fields=["item", "start_date"], name="reservation_item_start_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Reservation<{self.item_id}> {self.start_date:%Y-%m-%d} status={self.status}"
