"""Shared enumerations and choices used across apps."""

from django.db import models


class UserRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    STAFF = "staff", "Staff"
    VIEWER = "viewer", "Viewer"


class TransactionType(models.TextChoices):
    OUT = "OUT", "Out (borrow)"
    IN = "IN", "In (return)"


class TransactionStatus(models.TextChoices):
    """Lifecycle statuses for ledger entries."""

    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    REJECTED = "REJECTED", "Rejected"


class ReservationStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class ItemCondition(models.TextChoices):
    GOOD = "Good", "Good"
    DAMAGED = "Damaged", "Damaged"
    UNDER_REPAIR = "Under Repair", "Under Repair"
    LOST = "Lost", "Lost"
