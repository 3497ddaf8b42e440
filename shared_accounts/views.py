"""Admin viewset for shared platform-login accounts.

Endpoints are restricted to inventory admins and use scoped throttling.
"""

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from users.permissions import IsInventoryAdmin

from .models import SharedAccount
from .serializers import SharedAccountSerializer


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List shared accounts"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get shared account"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create shared account"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update shared account"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update shared account"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete shared account"),
)
class SharedAccountViewSet(viewsets.ModelViewSet):
    permission_classes = [IsInventoryAdmin]
    throttle_scope = "shared_accounts"
    queryset = SharedAccount.objects.all().order_by("platform", "id")
    serializer_class = SharedAccountSerializer
    filterset_fields = ["is_active", "platform"]
    search_fields = ["platform", "username", "email"]
