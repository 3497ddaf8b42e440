"""Django app configuration for the users app."""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Accounts, lending roles and the admin user directory."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
