import threading
from typing import List

import pytest
from django.db import close_old_connections, connection
from inventory.models import InventoryItem, TransactionHistory
from inventory.services import APPROVE, create_transaction, set_transaction_status
from inventory.tests.factories import InventoryItemFactory
from users.tests.factories import AdminFactory, UserFactory


def _borrow_worker(barrier: threading.Barrier, user, item_id: int, qty: int, successes: List[int], errors: List):
    # Ensure this thread uses its own DB connection
    close_old_connections()
    barrier.wait()
    try:
        create_transaction(item_id=item_id, user=user, type="OUT", qty_change=qty)
        successes.append(qty)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        close_old_connections()


def _approve_worker(barrier: threading.Barrier, trx_id: int, successes: List[int], errors: List):
    close_old_connections()
    barrier.wait()
    try:
        set_transaction_status(transaction_id=trx_id, status=APPROVE)
        successes.append(trx_id)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        close_old_connections()


@pytest.mark.django_db(transaction=True)
def test_threaded_competing_borrows_never_overdraw():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks row locks; run with TEST_DATABASE_ENGINE=postgres.")
    admin1 = AdminFactory()
    admin2 = AdminFactory()
    item = InventoryItemFactory(stock_qty=5)

    barrier = threading.Barrier(2)
    successes: List[int] = []
    errors: List = []
    t1 = threading.Thread(target=_borrow_worker, args=(barrier, admin1, item.id, -3, successes, errors))
    t2 = threading.Thread(target=_borrow_worker, args=(barrier, admin2, item.id, -3, successes, errors))
    t1.start()
    t2.start()
    t1.join()
    t2.join()

    # Exactly one succeeds; stock never goes negative
    assert len(successes) == 1
    assert len(errors) == 1
    assert InventoryItem.objects.get(id=item.id).stock_qty == 2
    assert TransactionHistory.objects.filter(item_id=item.id).count() == 1


@pytest.mark.django_db(transaction=True)
def test_threaded_double_approval_applies_once():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks row locks; run with TEST_DATABASE_ENGINE=postgres.")
    item = InventoryItemFactory(stock_qty=5)
    trx, _ = create_transaction(item_id=item.id, user=UserFactory(), type="OUT", qty_change=-3, status="PENDING")

    barrier = threading.Barrier(2)
    successes: List[int] = []
    errors: List = []
    threads = [threading.Thread(target=_approve_worker, args=(barrier, trx.id, successes, errors)) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # The second approval sees COMPLETED and is a no-op
    assert len(successes) == 2
    assert InventoryItem.objects.get(id=item.id).stock_qty == 2


@pytest.mark.django_db(transaction=True)
def test_threaded_borrows_of_last_unit():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks row locks; run with TEST_DATABASE_ENGINE=postgres.")
    item = InventoryItemFactory(stock_qty=1)

    barrier = threading.Barrier(2)
    successes: List[int] = []
    errors: List = []
    threads = [
        threading.Thread(target=_borrow_worker, args=(barrier, AdminFactory(), item.id, -1, successes, errors))
        for _ in range(2)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert successes == [-1]
    assert len(errors) == 1
    assert InventoryItem.objects.get(id=item.id).stock_qty == 0
