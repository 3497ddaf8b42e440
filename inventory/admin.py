"""Admin registrations for inventory app.

Ledger rows are read-only here: stock and status change only through the
lending services.
"""

from django.contrib import admin

from .models import Category, InventoryItem, Reservation, TransactionHistory


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "sku", "category", "stock_qty", "condition", "location", "updated_at")
    list_filter = ("category", "condition")
    search_fields = ("name", "sku", "location")
    readonly_fields = ("last_updated_by", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return self.readonly_fields + ("stock_qty",)
        return self.readonly_fields


@admin.register(TransactionHistory)
class TransactionHistoryAdmin(admin.ModelAdmin):
    list_display = ("id", "item", "user", "type", "qty_change", "status", "is_returned", "timestamp")
    list_filter = ("type", "status", "is_returned")
    search_fields = ("item__sku", "item__name", "user__email", "notes")

    def has_change_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ("id", "item", "user", "start_date", "end_date", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("item__sku", "item__name", "user__email")
