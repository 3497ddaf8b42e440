"""Users app API views.

Endpoints include:
- profile: returns or updates the current authenticated user's profile.
- signin/refresh/verify: JWT obtain and lifecycle.
- signout: blacklists refresh tokens for JWT logout.
- admin users: directory listing, invite-by-email, role changes, deletion.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from .logging import log_auth_event
from .models import User
from .permissions import IsInventoryAdmin
from .serializers import (
    EmailOrPhoneTokenObtainPairSerializer,
    InviteUserSerializer,
    RoleSerializer,
    SignOutSerializer,
    UserDirectorySerializer,
    UserMeSerializer,
)
from .services import DirectoryError, change_role, delete_user, invite_or_update_user


@extend_schema(
    operation_id="users_current_user",
    summary="Get or update current user profile",
    description=(
        "GET returns the current authenticated user's profile.\n\n"
        "PATCH updates `display_name`, `phone`, and `photo_url`.\n\n"
        "Auth: Requires JWT (Authorization: Bearer <token>) or session auth."
    ),
    tags=["User Endpoints"],
    request=UserMeSerializer,
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    """Return or update the authenticated user's profile fields."""
    if request.method == "PATCH":
        serializer = UserMeSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        log_auth_event("profile_update", request, user=request.user)
        return Response(serializer.data)
    log_auth_event("profile", request, user=request.user)
    return Response(UserMeSerializer(request.user).data)


current_user.throttle_scope = "profile"


class SignOutView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"], request=SignOutSerializer)
    def post(self, request):
        refresh = request.data.get("refresh")
        if not refresh:
            return Response({"detail": "Refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh)
            token.blacklist()
        except TokenError:
            log_auth_event("signout", request, status="invalid_token")
            return Response({"detail": "Invalid token."}, status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("signout", request, status="success")
        return Response({"detail": "Signed out."}, status=status.HTTP_205_RESET_CONTENT)


class SignInView(TokenObtainPairView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmailOrPhoneTokenObtainPairSerializer

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("signin", request, status=status_label)
        return resp


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_refresh", request, status=status_label)
        return resp


class VerifyView(TokenVerifyView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_verify"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_verify", request, status=status_label)
        return resp


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List users (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get user (admin)"),
    destroy=extend_schema(
        tags=["Admin Endpoints"],
        summary="Delete user",
        description="Refused with 400 when the user has transaction history.",
    ),
)
class UserDirectoryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Admin user directory."""

    permission_classes = [IsInventoryAdmin]
    throttle_scope = "users_admin"
    serializer_class = UserDirectorySerializer
    queryset = User.objects.all().order_by("display_name", "id")
    filterset_fields = ["role", "is_active"]
    search_fields = ["email", "display_name", "phone"]

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Invite or update user",
        description="Creates a user for the email, or updates non-empty fields of an existing one.",
        request=InviteUserSerializer,
        responses={200: UserDirectorySerializer, 201: UserDirectorySerializer},
    )
    def create(self, request, *args, **kwargs):
        serializer = InviteUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, created = invite_or_update_user(**serializer.validated_data)
        code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return Response(UserDirectorySerializer(user).data, status=code)

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Change user role",
        request=RoleSerializer,
        responses={200: UserDirectorySerializer},
    )
    @action(detail=True, methods=["put", "patch"], url_path="role")
    def role(self, request, pk=None):
        user = self.get_object()
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change_role(user=user, role=serializer.validated_data["role"])
        return Response(UserDirectorySerializer(user).data)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        try:
            delete_user(user=user)
        except DirectoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)
