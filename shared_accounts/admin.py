"""Admin registrations for shared accounts."""

from django.contrib import admin

from .models import SharedAccount


@admin.register(SharedAccount)
class SharedAccountAdmin(admin.ModelAdmin):
    list_display = ("id", "platform", "username", "email", "login_method", "is_active", "updated_at")
    list_filter = ("is_active", "login_method")
    search_fields = ("platform", "username", "email")
    exclude = ("password",)
