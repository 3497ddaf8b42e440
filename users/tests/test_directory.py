import pytest
from inventory.services import create_transaction
from inventory.tests.factories import InventoryItemFactory
from rest_framework.test import APIClient
from users.models import User
from users.services import DirectoryError, change_role, delete_user, invite_or_update_user
from users.tests.factories import AdminFactory, UserFactory

USERS_URL = "/api/v1/admin/users/"


def _admin_client():
    client = APIClient()
    client.force_authenticate(user=AdminFactory())
    return client


@pytest.mark.django_db
def test_invite_creates_user_with_unusable_password():
    user, created = invite_or_update_user(email=" New.Person@Example.com", phone="+14155552671")
    assert created is True
    assert user.email == "new.person@example.com"
    assert user.display_name == "new.person"
    assert user.role == User.ROLE_VIEWER
    assert user.username.startswith("invite_")
    assert not user.has_usable_password()


@pytest.mark.django_db
def test_invite_existing_user_updates_only_provided_fields():
    existing = UserFactory(email="known@example.com", display_name="Known", phone="+14155550000")
    user, created = invite_or_update_user(email="KNOWN@example.com", display_name="Renamed")
    assert created is False
    assert user.id == existing.id
    user.refresh_from_db()
    assert user.display_name == "Renamed"
    assert user.phone == "+14155550000"


@pytest.mark.django_db
def test_invite_uses_admin_emails_for_default_role():
    user, _ = invite_or_update_user(email="boss@example.com")
    assert user.role == User.ROLE_ADMIN


@pytest.mark.django_db
def test_change_role_rejects_unknown_role():
    user = UserFactory()
    with pytest.raises(DirectoryError):
        change_role(user=user, role="owner")
    change_role(user=user, role=User.ROLE_ADMIN)
    user.refresh_from_db()
    assert user.is_inventory_admin


@pytest.mark.django_db
def test_delete_user_refused_with_history():
    user = UserFactory()
    item = InventoryItemFactory(stock_qty=5)
    create_transaction(item_id=item.id, user=user, type="OUT", qty_change=-1)
    with pytest.raises(DirectoryError):
        delete_user(user=user)
    assert User.objects.filter(id=user.id).exists()


@pytest.mark.django_db
def test_directory_requires_admin():
    client = APIClient()
    assert client.get(USERS_URL).status_code == 401
    client.force_authenticate(user=UserFactory())
    assert client.get(USERS_URL).status_code == 403


@pytest.mark.django_db
def test_directory_list_and_search():
    client = _admin_client()
    UserFactory(email="alice@example.com", display_name="Alice")
    UserFactory(email="bob@example.com", display_name="Bob")
    resp = client.get(USERS_URL, {"search": "alice"})
    assert resp.status_code == 200
    emails = [u["email"] for u in resp.json()["results"]]
    assert emails == ["alice@example.com"]


@pytest.mark.django_db
def test_directory_invite_endpoint_returns_201_then_200():
    client = _admin_client()
    r1 = client.post(USERS_URL, {"email": "invitee@example.com", "role": "staff"}, format="json")
    assert r1.status_code == 201
    assert r1.json()["role"] == "staff"
    r2 = client.post(USERS_URL, {"email": "invitee@example.com", "display_name": "Invitee"}, format="json")
    assert r2.status_code == 200
    assert r2.json()["display_name"] == "Invitee"
    assert User.objects.filter(email="invitee@example.com").count() == 1


@pytest.mark.django_db
def test_directory_role_endpoint():
    client = _admin_client()
    user = UserFactory(role=User.ROLE_VIEWER)
    resp = client.patch(f"{USERS_URL}{user.id}/role/", {"role": "admin"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"
    bad = client.patch(f"{USERS_URL}{user.id}/role/", {"role": "owner"}, format="json")
    assert bad.status_code == 400


@pytest.mark.django_db
def test_directory_delete_guard():
    client = _admin_client()
    idle = UserFactory()
    assert client.delete(f"{USERS_URL}{idle.id}/").status_code == 204

    borrower = UserFactory()
    item = InventoryItemFactory(stock_qty=5)
    create_transaction(item_id=item.id, user=borrower, type="OUT", qty_change=-1)
    resp = client.delete(f"{USERS_URL}{borrower.id}/")
    assert resp.status_code == 400
    assert "transaction history" in resp.json()["detail"]
