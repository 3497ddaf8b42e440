"""Admin router for the user directory."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import UserDirectoryViewSet

router = SimpleRouter()
router.register(r"users", UserDirectoryViewSet, basename="admin-user")

urlpatterns = [path("", include(router.urls))]
