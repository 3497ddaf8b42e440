import factory
from factory.django import DjangoModelFactory
from users.models import User


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User
        django_get_or_create = ("email",)

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    display_name = factory.Sequence(lambda n: f"User {n}")
    role = User.ROLE_STAFF
    password = factory.PostGenerationMethodCall("set_password", "pass")


class AdminFactory(UserFactory):
    role = User.ROLE_ADMIN
