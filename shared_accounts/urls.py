"""Admin router for shared accounts."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import SharedAccountViewSet

router = SimpleRouter()
router.register(r"shared-accounts", SharedAccountViewSet, basename="admin-shared-account")

urlpatterns = [path("", include(router.urls))]
