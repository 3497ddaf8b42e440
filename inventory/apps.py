"""Django app configuration for the inventory app."""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Item catalog, stock ledger, and lending workflows."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
