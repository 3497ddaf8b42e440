"""Django app configuration for shared accounts."""

from django.apps import AppConfig


class SharedAccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "shared_accounts"
