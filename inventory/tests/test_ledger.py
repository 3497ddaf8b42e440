from unittest import mock

import pytest
from inventory.models import InventoryItem, TransactionHistory
from inventory.services import InsufficientStock, NotFound, adjust_stock, create_transaction
from inventory.tests.factories import InventoryItemFactory
from users.tests.factories import AdminFactory, UserFactory


@pytest.mark.django_db
def test_adjust_stock_applies_signed_delta():
    item = InventoryItemFactory(stock_qty=10)
    updated = adjust_stock(item_id=item.id, delta=-4)
    assert updated.stock_qty == 6
    updated = adjust_stock(item_id=item.id, delta=3)
    assert updated.stock_qty == 9


@pytest.mark.django_db
def test_adjust_stock_allows_draining_to_zero():
    item = InventoryItemFactory(stock_qty=3)
    assert adjust_stock(item_id=item.id, delta=-3).stock_qty == 0


@pytest.mark.django_db
def test_adjust_stock_never_goes_negative():
    item = InventoryItemFactory(stock_qty=2)
    with pytest.raises(InsufficientStock):
        adjust_stock(item_id=item.id, delta=-3)
    item.refresh_from_db()
    assert item.stock_qty == 2


@pytest.mark.django_db
def test_adjust_stock_unknown_item():
    with pytest.raises(NotFound):
        adjust_stock(item_id=999999, delta=1)


@pytest.mark.django_db
def test_adjust_stock_records_actor():
    admin = AdminFactory()
    item = InventoryItemFactory(stock_qty=5)
    updated = adjust_stock(item_id=item.id, delta=-1, actor=admin)
    assert updated.last_updated_by_id == admin.id


@pytest.mark.django_db
def test_sequential_borrows_cannot_overdraw():
    # Two borrows of 3 against 5 units: the second must fail
    item = InventoryItemFactory(stock_qty=5)
    admin = AdminFactory()
    create_transaction(item_id=item.id, user=admin, type="OUT", qty_change=-3)
    with pytest.raises(InsufficientStock):
        create_transaction(item_id=item.id, user=admin, type="OUT", qty_change=-3)
    item.refresh_from_db()
    assert item.stock_qty == 2
    assert TransactionHistory.objects.filter(item=item).count() == 1


@pytest.mark.django_db
def test_ledger_failure_rolls_back_transaction_row():
    # Stock drops between the advisory check and the ledger write: the
    # conditional update refuses and the freshly created row is rolled back.
    item = InventoryItemFactory(stock_qty=5)
    user = UserFactory()
    InventoryItem.objects.filter(id=item.id).update(stock_qty=1)
    stale = InventoryItem(id=item.id, name=item.name, sku=item.sku, stock_qty=5)
    with mock.patch.object(InventoryItem.objects, "get", return_value=stale):
        with pytest.raises(InsufficientStock):
            create_transaction(item_id=item.id, user=user, type="OUT", qty_change=-3)
    assert TransactionHistory.objects.filter(item_id=item.id).count() == 0
    assert InventoryItem.objects.filter(id=item.id).values_list("stock_qty", flat=True).get() == 1
