from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone
from inventory.models import Category, InventoryItem, TransactionHistory
from inventory.services import create_transaction
from inventory.tests.factories import InventoryItemFactory
from users.models import User
from users.tests.factories import AdminFactory, UserFactory


@pytest.mark.django_db
def test_seed_inventory_is_idempotent():
    call_command("seed_inventory", stdout=StringIO())
    call_command("seed_inventory", stdout=StringIO())

    assert User.objects.filter(email__in=["admin@inventory.com", "staff@inventory.com"]).count() == 2
    assert Category.objects.count() == 2
    assert InventoryItem.objects.count() == 3
    hammer = InventoryItem.objects.get(sku="HM-001")
    assert hammer.stock_qty == 8
    assert TransactionHistory.objects.filter(item=hammer).count() == 1
    assert not User.objects.get(email="staff@inventory.com").has_usable_password()


@pytest.mark.django_db
def test_report_overdue_loans_lists_old_borrows():
    borrower = UserFactory(display_name="Budi", phone="+6281234567890")
    item = InventoryItemFactory(sku="HM-001", stock_qty=5)
    trx, _ = create_transaction(item_id=item.id, user=borrower, type="OUT", qty_change=-2, actor=AdminFactory())
    TransactionHistory.objects.filter(id=trx.id).update(timestamp=timezone.now() - timedelta(days=4))
    create_transaction(item_id=item.id, user=borrower, type="OUT", qty_change=-1, actor=AdminFactory())

    out = StringIO()
    call_command("report_overdue_loans", stdout=out)
    text = out.getvalue()
    assert f"#{trx.id} HM-001 x2 borrowed by Budi (https://wa.me/6281234567890) 4 days ago" in text
    assert "Overdue loans (>3 days): 1" in text
