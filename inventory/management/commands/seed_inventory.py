"""Seed sample lending data for development.

Creates an admin and a staff user, a few categories and items, and one
completed borrow recorded through the ledger. Re-running is idempotent;
existing rows are reused by email/sku.
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from inventory.models import Category, InventoryItem, TransactionHistory
from inventory.services import create_transaction
from users.models import User


class Command(BaseCommand):
    help = "Seed sample users, categories, items and a borrow"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding inventory data...")

        admin = self._user("admin@inventory.com", "admin", "Administrator", User.ROLE_ADMIN)
        staff = self._user("staff@inventory.com", "staff", "Staff Member", User.ROLE_STAFF)

        for name in ("Tools", "Power Tools"):
            Category.objects.get_or_create(name=name)

        items = [
            ("Hammer Bosch", "HM-001", "Tools", 10, "Pcs", "Warehouse A - Shelf 1"),
            ("Electric Drill Makita", "ED-002", "Power Tools", 5, "Pcs", "Warehouse A - Shelf 2"),
            ("Screwdriver Set", "SS-003", "Tools", 20, "Set", "Warehouse B - Room 1"),
        ]
        for name, sku, category, qty, unit, location in items:
            InventoryItem.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category,
                    "stock_qty": qty,
                    "unit": unit,
                    "location": location,
                    "last_updated_by": admin,
                },
            )

        hammer = InventoryItem.objects.get(sku="HM-001")
        if not TransactionHistory.objects.filter(item=hammer).exists():
            create_transaction(
                item_id=hammer.id,
                user=staff,
                type=TransactionHistory.TYPE_OUT,
                qty_change=-2,
                notes="Borrowed for renovation project",
                actor=admin,
            )

        self.stdout.write(self.style.SUCCESS("Inventory data seeded."))

    def _user(self, email, username, display_name, role):
        user, created = User.objects.get_or_create(
            email=email,
            defaults={"username": username, "display_name": display_name, "role": role},
        )
        if created:
            # Seeded accounts sign in only after an admin sets a password
            user.set_unusable_password()
            user.save(update_fields=["password"])
        return user
