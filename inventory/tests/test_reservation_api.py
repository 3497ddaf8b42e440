from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone
from inventory.models import Reservation
from inventory.tests.factories import InventoryItemFactory, ReservationFactory
from rest_framework.test import APIClient
from users.tests.factories import AdminFactory, UserFactory

RES_URL = "/api/v1/inventory/reservations/"


def _client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def _window(days=1):
    start = timezone.now() + timedelta(days=days)
    return start.isoformat(), (start + timedelta(days=2)).isoformat()


@pytest.mark.django_db
def test_create_reservation_endpoint():
    user = UserFactory()
    item = InventoryItemFactory(stock_qty=2)
    start, end = _window()
    resp = _client(user).post(
        RES_URL,
        {"item": item.id, "start_date": start, "end_date": end, "notes": "Workshop"},
        format="json",
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "PENDING"
    assert body["user"] == user.id
    item.refresh_from_db()
    assert item.stock_qty == 2


@pytest.mark.django_db
def test_create_reservation_rejects_inverted_dates():
    item = InventoryItemFactory()
    start, end = _window()
    resp = _client(UserFactory()).post(RES_URL, {"item": item.id, "start_date": end, "end_date": start}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_reservation_visibility():
    owner = UserFactory()
    ReservationFactory(user=owner)
    ReservationFactory()
    assert _client(owner).get(RES_URL).json()["count"] == 1
    assert _client(AdminFactory()).get(RES_URL).json()["count"] == 2


@pytest.mark.django_db
def test_owner_can_edit_but_not_change_status():
    owner = UserFactory()
    res = ReservationFactory(user=owner)
    client = _client(owner)
    resp = client.patch(f"{RES_URL}{res.id}/", {"notes": "Need it earlier"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["notes"] == "Need it earlier"

    resp = client.patch(f"{RES_URL}{res.id}/", {"status": "APPROVED"}, format="json")
    assert resp.status_code == 403
    res.refresh_from_db()
    assert res.status == Reservation.STATUS_PENDING


@pytest.mark.django_db
def test_other_users_cannot_see_reservation():
    res = ReservationFactory()
    assert _client(UserFactory()).get(f"{RES_URL}{res.id}/").status_code == 404


@pytest.mark.django_db
def test_admin_status_endpoint_requires_reason_for_rejection():
    borrower = UserFactory(email="res-owner@example.com")
    res = ReservationFactory(user=borrower)
    admin = _client(AdminFactory())

    resp = admin.put(f"{RES_URL}{res.id}/status/", {"status": "REJECTED"}, format="json")
    assert resp.status_code == 400

    resp = admin.put(
        f"{RES_URL}{res.id}/status/",
        {"status": "REJECTED", "rejection_reason": "Item is under repair"},
        format="json",
    )
    assert resp.status_code == 200
    assert resp.json()["rejection_reason"] == "Item is under repair"
    assert len(mail.outbox) == 1
    assert "Reason: Item is under repair" in mail.outbox[0].body


@pytest.mark.django_db
def test_status_endpoint_is_admin_only():
    owner = UserFactory()
    res = ReservationFactory(user=owner)
    resp = _client(owner).put(f"{RES_URL}{res.id}/status/", {"status": "APPROVED"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_delete_reservation_endpoint():
    owner = UserFactory()
    res = ReservationFactory(user=owner)
    assert _client(owner).delete(f"{RES_URL}{res.id}/").status_code == 204
    assert not Reservation.objects.filter(id=res.id).exists()
