"""User models for authentication and the lending user directory.

This module defines the custom `User` model which extends Django's
`AbstractUser` with a unique email, a lending role that drives the
transaction approval policy, and contact details used for notifications.
"""

import re

from common.choices import UserRole
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Custom user with unique email and a lending role.

    Fields:
    - email: the primary email, unique at the database level (normalized).
    - role: admin users approve requests and manage the catalog; staff and
      viewers file borrow requests that wait for approval.
    - display_name: name shown to other users (defaults to the email local part).
    - phone: contact number used for WhatsApp contact links.
    """

    ROLE_ADMIN = UserRole.ADMIN
    ROLE_STAFF = UserRole.STAFF
    ROLE_VIEWER = UserRole.VIEWER
    ROLE_CHOICES = UserRole.choices

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_VIEWER, db_index=True)
    display_name = models.CharField(max_length=150, blank=True)
    photo_url = models.URLField(max_length=500, blank=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +6281234567890)")],
        help_text="Contact number for the account in E.164 format",
    )

    def save(self, *args, **kwargs):
        """Normalize email and display name, then persist.

        Email is stored lowercase without surrounding whitespace so uniqueness
        checks are reliable.
        """
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        if not self.display_name and self.email:
            self.display_name = self.email.split("@")[0]
        super().save(*args, **kwargs)

    @property
    def is_inventory_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN or self.is_superuser

    @property
    def whatsapp_url(self) -> str:
        digits = re.sub(r"\D", "", self.phone or "")
        return f"https://wa.me/{digits}" if digits else ""

    def __str__(self) -> str:  # pragma: no cover
        return self.display_name or self.email or self.username
