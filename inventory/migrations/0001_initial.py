import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, unique=True)),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("sku", models.CharField(max_length=64, unique=True)),
                ("category", models.CharField(blank=True, db_index=True, max_length=100)),
                ("stock_qty", models.IntegerField(default=0)),
                ("unit", models.CharField(default="Pcs", max_length=32)),
                (
                    "condition",
                    models.CharField(
                        choices=[
                            ("Good", "Good"),
                            ("Damaged", "Damaged"),
                            ("Under Repair", "Under Repair"),
                            ("Lost", "Lost"),
                        ],
                        default="Good",
                        max_length=32,
                    ),
                ),
                ("location", models.CharField(blank=True, max_length=200)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                (
                    "last_updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="updated_items",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name", "id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("stock_qty__gte", 0)), name="item_stock_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(choices=[("OUT", "Out (borrow)"), ("IN", "In (return)")], max_length=8),
                ),
                ("qty_change", models.IntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("COMPLETED", "Completed"), ("REJECTED", "Rejected")],
                        db_index=True,
                        default="COMPLETED",
                        max_length=16,
                    ),
                ),
                ("is_returned", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "original_transaction",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="returns",
                        to="inventory.transactionhistory",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "transaction history",
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(fields=["type", "status", "is_returned"], name="trx_type_status_returned_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("qty_change", 0), _negated=True),
                        name="trx_qty_non_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("qty_change__lt", 0), ("type", "OUT")),
                            models.Q(("qty_change__gt", 0), ("type", "IN")),
                            _connector="OR",
                        ),
                        name="trx_sign_matches_type",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("notes", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")],
                        db_index=True,
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("rejection_reason", models.TextField(blank=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-start_date", "id"],
                "indexes": [
                    models.Index(fields=["item", "start_date"], name="reservation_item_start_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="reservation_dates_ordered",
                    ),
                ],
            },
        ),
    ]
