"""Inventory API: catalog, transaction ledger, reservations, dashboard and reports."""

from django.http import Http404
from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view, inline_serializer
from rest_framework import mixins, permissions, status, viewsets
from rest_framework import serializers as rf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.models import User
from users.permissions import IsInventoryAdmin, IsInventoryAdminOrReadOnly, is_inventory_admin

from .models import Category, InventoryItem, TransactionHistory
from .notifications import send_reservation_status_email, send_transaction_status_email
from .policies import initial_status_for, may_return, role_of
from .selectors import (
    category_stats,
    dashboard_stats,
    get_transaction,
    reservations_visible_to,
    stock_trend,
    transactions_visible_to,
)
from .serializers import (
    CategorySerializer,
    CreateTransactionSerializer,
    InventoryItemSerializer,
    ReservationSerializer,
    ReservationStatusSerializer,
    ReservationWriteSerializer,
    TransactionSerializer,
    TransactionStatusSerializer,
)
from .services import (
    InvalidState,
    LendingError,
    NotFound,
    create_reservation,
    create_transaction,
    delete_item,
    delete_reservation,
    set_reservation_status,
    set_transaction_status,
    update_reservation,
)

ERROR_RESPONSE = inline_serializer(name="LendingError", fields={"detail": rf_serializers.CharField()})


def lending_error_response(exc: LendingError) -> Response:
    """Map a workflow failure to an HTTP response carrying its message."""
    if isinstance(exc, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidState):
        code = status.HTTP_409_CONFLICT
    else:
        # InsufficientStock and other rule violations
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)


class MethodScopedThrottleMixin:
    """Use the read scope for safe methods and the write scope otherwise."""

    read_throttle_scope = "inventory"
    write_throttle_scope = "inventory_write"

    def initial(self, request, *args, **kwargs):
        if request.method in permissions.SAFE_METHODS:
            self.throttle_scope = self.read_throttle_scope
        else:
            self.throttle_scope = self.write_throttle_scope
        super().initial(request, *args, **kwargs)


class InventoryHealthView(APIView):
    throttle_classes = []

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Inventory health",
        description="Simple healthcheck endpoint for the inventory app",
        examples=[OpenApiExample("Health OK", value={"status": "ok", "app": "inventory"})],
    )
    def get(self, request):
        return Response({"status": "ok", "app": "inventory"})


@extend_schema_view(
    list=extend_schema(tags=["Inventory Endpoints"], summary="List categories"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create category"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete category"),
)
class CategoryViewSet(
    MethodScopedThrottleMixin,
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsInventoryAdminOrReadOnly]
    serializer_class = CategorySerializer
    queryset = Category.objects.all().order_by("name")
    pagination_class = None


@extend_schema_view(
    list=extend_schema(
        tags=["Inventory Endpoints"],
        summary="List items",
        description="List catalog items. Filters: category, condition. Search: name, sku, location.",
    ),
    retrieve=extend_schema(tags=["Inventory Endpoints"], summary="Get item"),
    create=extend_schema(
        tags=["Admin Endpoints"],
        summary="Create item",
        description="`stock_qty` sets the opening stock; later changes go through transactions.",
    ),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update item"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update item"),
    destroy=extend_schema(
        tags=["Admin Endpoints"],
        summary="Delete item",
        description="Deletes the item and purges its transaction history.",
    ),
)
class InventoryItemViewSet(MethodScopedThrottleMixin, viewsets.ModelViewSet):
    permission_classes = [IsInventoryAdminOrReadOnly]
    serializer_class = InventoryItemSerializer
    queryset = InventoryItem.objects.select_related("last_updated_by").order_by("name", "id")
    filterset_fields = ["category", "condition"]
    search_fields = ["name", "sku", "location"]
    ordering_fields = ["name", "sku", "stock_qty", "updated_at"]

    def perform_create(self, serializer):
        serializer.save(last_updated_by=self.request.user)

    def perform_update(self, serializer):
        serializer.save(last_updated_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        try:
            purged = delete_item(item_id=item.id)
        except LendingError as exc:
            return lending_error_response(exc)
        return Response({"detail": "Item deleted", "purged_transactions": purged}, status=status.HTTP_200_OK)


@extend_schema_view(
    list=extend_schema(
        tags=["Transaction Endpoints"],
        summary="List transactions",
        description=(
            "Admins see every transaction, other users only their own. "
            "Filters: status, type, item, user, is_returned."
        ),
    ),
    retrieve=extend_schema(tags=["Transaction Endpoints"], summary="Get transaction"),
)
class TransactionViewSet(
    MethodScopedThrottleMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    serializer_class = TransactionSerializer
    filterset_fields = ["status", "type", "item", "user", "is_returned"]

    def get_queryset(self):
        return transactions_visible_to(self.request.user)

    @extend_schema(
        tags=["Transaction Endpoints"],
        summary="Create transaction",
        description=(
            "Records a borrow (OUT, negative qty_change) or return (IN, positive qty_change).\n\n"
            "Admin borrows complete immediately; other borrows are created PENDING and await approval. "
            "Returns complete immediately, must give back the full borrowed quantity and mark "
            "`original_transaction` as returned. Non-admins must name the original borrow and "
            "may only return their own (403)."
        ),
        request=CreateTransactionSerializer,
        responses={
            201: inline_serializer(
                name="TransactionCreatedResponse",
                fields={
                    "transaction": TransactionSerializer(),
                    "updated_item": InventoryItemSerializer(allow_null=True),
                },
            ),
            400: ERROR_RESPONSE,
            403: ERROR_RESPONSE,
            404: ERROR_RESPONSE,
            409: ERROR_RESPONSE,
        },
    )
    def create(self, request, *args, **kwargs):
        serializer = CreateTransactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        is_admin = is_inventory_admin(request.user)
        borrower = request.user
        if is_admin and data.get("user"):
            try:
                borrower = User.objects.get(id=data["user"])
            except User.DoesNotExist:
                return Response({"detail": "User not found"}, status=status.HTTP_404_NOT_FOUND)
        trx_status = initial_status_for(role_of(request.user), data["qty_change"])
        if is_admin and data.get("status"):
            trx_status = data["status"]
        if data["type"] == TransactionHistory.TYPE_IN and not is_admin:
            denied = self._check_own_return(request.user, data.get("original_transaction"))
            if denied is not None:
                return denied

        try:
            trx, updated_item = create_transaction(
                item_id=data["item"],
                user=borrower,
                type=data["type"],
                qty_change=data["qty_change"],
                notes=data.get("notes", ""),
                original_transaction_id=data.get("original_transaction"),
                status=trx_status,
                actor=request.user,
            )
        except LendingError as exc:
            return lending_error_response(exc)
        body = {
            "transaction": TransactionSerializer(trx).data,
            "updated_item": InventoryItemSerializer(updated_item).data if updated_item else None,
        }
        return Response(body, status=status.HTTP_201_CREATED)

    def _check_own_return(self, user, original_id):
        if original_id is None:
            return Response(
                {"detail": "Returns must reference the borrow being returned."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        original = get_transaction(original_id)
        if original is not None and not may_return(user, original):
            return Response({"detail": "You can only return your own borrows."}, status=status.HTTP_403_FORBIDDEN)
        return None

    @extend_schema(
        tags=["Transaction Endpoints"],
        summary="Approve or reject transaction",
        description=(
            "`APPROVED` completes a pending transaction and applies it to stock after re-checking "
            "current stock. `REJECTED` closes it without touching stock. Completed and rejected "
            "transactions cannot change status (409)."
        ),
        request=TransactionStatusSerializer,
        responses={200: TransactionSerializer, 400: ERROR_RESPONSE, 404: ERROR_RESPONSE, 409: ERROR_RESPONSE},
        examples=[OpenApiExample("Approve", value={"status": "APPROVED"}, request_only=True)],
    )
    @action(detail=True, methods=["put", "post"], url_path="status", permission_classes=[IsInventoryAdmin])
    def set_status(self, request, pk=None):
        serializer = TransactionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            trx_id = int(pk)
        except (TypeError, ValueError):
            raise Http404
        before = get_transaction(trx_id)
        try:
            trx = set_transaction_status(
                transaction_id=trx_id,
                status=serializer.validated_data["status"],
                actor=request.user,
            )
        except LendingError as exc:
            return lending_error_response(exc)
        if before is not None and before.status != trx.status:
            send_transaction_status_email(trx)
        return Response(TransactionSerializer(trx).data)


@extend_schema_view(
    list=extend_schema(
        tags=["Reservation Endpoints"],
        summary="List reservations",
        description="Admins see every reservation, other users only their own. Filters: status, item.",
    ),
    retrieve=extend_schema(tags=["Reservation Endpoints"], summary="Get reservation"),
    destroy=extend_schema(tags=["Reservation Endpoints"], summary="Delete reservation"),
)
class ReservationViewSet(
    MethodScopedThrottleMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    serializer_class = ReservationSerializer
    filterset_fields = ["status", "item"]

    def get_queryset(self):
        return reservations_visible_to(self.request.user)

    @extend_schema(
        tags=["Reservation Endpoints"],
        summary="Create reservation",
        description="Books an item for a date range. New reservations start PENDING and never affect stock.",
        request=ReservationWriteSerializer,
        responses={201: ReservationSerializer, 400: ERROR_RESPONSE, 404: ERROR_RESPONSE},
    )
    def create(self, request, *args, **kwargs):
        serializer = ReservationWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            res = create_reservation(
                item_id=data["item"].id,
                user=request.user,
                start_date=data["start_date"],
                end_date=data["end_date"],
                notes=data.get("notes", ""),
            )
        except LendingError as exc:
            return lending_error_response(exc)
        return Response(ReservationSerializer(res).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Reservation Endpoints"],
        summary="Update reservation",
        description="Owners may edit their reservation; only admins may change its status.",
        request=ReservationWriteSerializer,
        responses={200: ReservationSerializer, 400: ERROR_RESPONSE, 403: ERROR_RESPONSE, 409: ERROR_RESPONSE},
    )
    def update(self, request, *args, **kwargs):
        res = self.get_object()
        partial = kwargs.pop("partial", False)
        serializer = ReservationWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if data.get("status") and not is_inventory_admin(request.user):
            return Response({"detail": "Only admins may change reservation status."}, status=status.HTTP_403_FORBIDDEN)
        try:
            updated = update_reservation(
                reservation_id=res.id,
                item_id=data["item"].id if data.get("item") else None,
                start_date=data.get("start_date"),
                end_date=data.get("end_date"),
                notes=data.get("notes"),
                status=data.get("status"),
                rejection_reason=data.get("rejection_reason", ""),
            )
        except LendingError as exc:
            return lending_error_response(exc)
        if data.get("status") and data["status"] != res.status:
            send_reservation_status_email(updated)
        return Response(ReservationSerializer(updated).data)

    @extend_schema(
        tags=["Reservation Endpoints"],
        summary="Partial update reservation",
        request=ReservationWriteSerializer,
        responses={200: ReservationSerializer},
    )
    def partial_update(self, request, *args, **kwargs):
        kwargs["partial"] = True
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        res = self.get_object()
        try:
            delete_reservation(reservation_id=res.id)
        except LendingError as exc:
            return lending_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Reservation Endpoints"],
        summary="Approve or reject reservation",
        description="Admin-only. `REJECTED` requires `rejection_reason`.",
        request=ReservationStatusSerializer,
        responses={200: ReservationSerializer, 400: ERROR_RESPONSE, 404: ERROR_RESPONSE},
        examples=[
            OpenApiExample(
                "Reject",
                value={"status": "REJECTED", "rejection_reason": "Item is under repair"},
                request_only=True,
            )
        ],
    )
    @action(detail=True, methods=["put", "post"], url_path="status", permission_classes=[IsInventoryAdmin])
    def set_status(self, request, pk=None):
        res = self.get_object()
        serializer = ReservationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prev = res.status
        try:
            updated = set_reservation_status(
                reservation_id=res.id,
                status=serializer.validated_data["status"],
                rejection_reason=serializer.validated_data.get("rejection_reason", ""),
            )
        except LendingError as exc:
            return lending_error_response(exc)
        if updated.status != prev:
            send_reservation_status_email(updated)
        return Response(ReservationSerializer(updated).data)


class DashboardView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"

    @extend_schema(
        tags=["Report Endpoints"],
        summary="Dashboard statistics",
        description=(
            "Totals, low-stock and overdue counts, units currently lent out, this week's borrows, "
            "a 7-day IN/OUT chart, and the oldest overdue loans."
        ),
        examples=[
            OpenApiExample(
                "Dashboard",
                value={
                    "total_items": 3,
                    "low_stock_count": 1,
                    "items_out": 2,
                    "overdue_count": 1,
                    "this_week_borrowed": 4,
                    "total_transactions": 9,
                    "chart_data": [{"day": "Mon", "date": "2025-01-06", "in": 1, "out": 2}],
                    "overdue_items": [
                        {
                            "transaction_id": 7,
                            "name": "Hammer Bosch",
                            "sku": "HM-001",
                            "borrower": "staff",
                            "days_out": 5,
                            "image_url": "",
                        }
                    ],
                },
            )
        ],
    )
    def get(self, request):
        return Response(dashboard_stats())


class CategoryStatsView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"

    @extend_schema(tags=["Report Endpoints"], summary="Item count per category")
    def get(self, request):
        return Response(category_stats())


class StockTrendView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"

    @extend_schema(tags=["Report Endpoints"], summary="Completed transactions of the last 7 days")
    def get(self, request):
        return Response(stock_trend())
