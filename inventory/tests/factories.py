from datetime import timedelta

import factory
from django.utils import timezone
from factory import Faker
from factory.django import DjangoModelFactory
from inventory.models import Category, InventoryItem, Reservation
from users.tests.factories import UserFactory


class CategoryFactory(DjangoModelFactory):
    class Meta:
        model = Category
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Category {n}")


class InventoryItemFactory(DjangoModelFactory):
    class Meta:
        model = InventoryItem

    name = Faker("sentence", nb_words=2)
    sku = factory.Sequence(lambda n: f"SKU-{n:04d}")
    category = "Tools"
    stock_qty = 10
    unit = "Pcs"
    location = "Warehouse A"


class ReservationFactory(DjangoModelFactory):
    class Meta:
        model = Reservation

    item = factory.SubFactory(InventoryItemFactory)
    user = factory.SubFactory(UserFactory)
    start_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=1))
    end_date = factory.LazyAttribute(lambda o: o.start_date + timedelta(days=2))
    status = Reservation.STATUS_PENDING
