"""Shared platform-login accounts managed by admins.

Each row describes one login on an external platform that several people
use, plus the list of emails allowed to see it.
"""

from django.db import models


class SharedAccount(models.Model):
    platform = models.CharField(max_length=100)
    username = models.CharField(max_length=150, blank=True)
    email = models.EmailField(blank=True)
    password = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    authorized_emails = models.JSONField(default=list, blank=True)
    url = models.URLField(max_length=500, blank=True)
    icon_url = models.URLField(max_length=500, blank=True)
    login_method = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["platform", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.platform} ({self.username or self.email})"
