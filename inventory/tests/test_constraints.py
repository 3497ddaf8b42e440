from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.utils import timezone
from inventory.models import InventoryItem, Reservation, TransactionHistory
from inventory.services import create_transaction
from inventory.tests.factories import InventoryItemFactory
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_stock_cannot_be_negative_at_db_level():
    item = InventoryItemFactory(stock_qty=1)
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            InventoryItem.objects.filter(id=item.id).update(stock_qty=-1)


@pytest.mark.django_db
def test_transaction_qty_and_sign_constraints():
    item = InventoryItemFactory()
    user = UserFactory()
    for type_, qty in (("OUT", 0), ("OUT", 3), ("IN", -3)):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                TransactionHistory.objects.create(item=item, user=user, type=type_, qty_change=qty)


@pytest.mark.django_db
def test_reservation_dates_constraint():
    now = timezone.now()
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Reservation.objects.create(
                item=InventoryItemFactory(),
                user=UserFactory(),
                start_date=now,
                end_date=now - timedelta(days=1),
            )


@pytest.mark.django_db
def test_items_with_history_are_protected_from_cascade():
    item = InventoryItemFactory(stock_qty=3)
    create_transaction(item_id=item.id, user=UserFactory(), type="OUT", qty_change=-1, status="PENDING")
    with pytest.raises(ProtectedError):
        item.delete()


def test_indexes_defined_for_ledger_and_reservations():
    trx_index_fields = [tuple(idx.fields) for idx in TransactionHistory._meta.indexes]
    assert ("type", "status", "is_returned") in trx_index_fields
    res_index_fields = [tuple(idx.fields) for idx in Reservation._meta.indexes]
    assert ("item", "start_date") in res_index_fields
