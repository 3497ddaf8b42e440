"""Serializers for the lending domain.

Read serializers expose ledger rows and reservations with denormalized item
and borrower fields for list screens. Action serializers validate request
bodies before they reach the workflow services; they never write models
themselves.
"""

from common.choices import TransactionStatus
from rest_framework import serializers

from .models import Category, InventoryItem, Reservation, TransactionHistory
from .selectors import is_overdue
from .services import APPROVE


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "created_at"]
        read_only_fields = ["id", "created_at"]


class InventoryItemSerializer(serializers.ModelSerializer):
    """Catalog representation of an item.

    ``stock_qty`` sets the opening stock on create. After that the ledger
    owns it, so updates ignore any submitted value.
    """

    last_updated_by_name = serializers.CharField(source="last_updated_by.display_name", read_only=True, default=None)
    stock_qty = serializers.IntegerField(min_value=0, required=False, default=0)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "name",
            "sku",
            "category",
            "stock_qty",
            "unit",
            "condition",
            "location",
            "image_url",
            "last_updated_by",
            "last_updated_by_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "last_updated_by", "last_updated_by_name", "created_at", "updated_at"]

    def update(self, instance, validated_data):
        validated_data.pop("stock_qty", None)
        return super().update(instance, validated_data)


class TransactionSerializer(serializers.ModelSerializer):
    """Read-only representation of a ledger entry."""

    item_name = serializers.CharField(source="item.name", read_only=True)
    sku = serializers.CharField(source="item.sku", read_only=True)
    borrower = serializers.CharField(source="user.display_name", read_only=True)
    is_overdue = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = TransactionHistory
        fields = [
            "id",
            "item",
            "item_name",
            "sku",
            "user",
            "borrower",
            "type",
            "qty_change",
            "status",
            "is_returned",
            "is_overdue",
            "original_transaction",
            "notes",
            "timestamp",
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj) -> bool:
        return is_overdue(obj)


class CreateTransactionSerializer(serializers.Serializer):
    """Action serializer for borrows and returns.

    ``user`` (borrower) and ``status`` are honoured only for admins; the view
    resolves both for everyone else.
    """

    item = serializers.IntegerField()
    type = serializers.ChoiceField(choices=TransactionHistory.TYPE_CHOICES)
    qty_change = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    original_transaction = serializers.IntegerField(required=False, allow_null=True, default=None)
    user = serializers.IntegerField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(
        choices=[TransactionStatus.PENDING, TransactionStatus.COMPLETED],
        required=False,
        allow_null=True,
        default=None,
    )

    def validate(self, attrs):
        qty = attrs["qty_change"]
        if qty == 0:
            raise serializers.ValidationError({"qty_change": "Quantity change must be non-zero."})
        if attrs["type"] == TransactionHistory.TYPE_OUT and qty > 0:
            raise serializers.ValidationError({"qty_change": "Borrows (OUT) must have a negative quantity."})
        if attrs["type"] == TransactionHistory.TYPE_IN and qty < 0:
            raise serializers.ValidationError({"qty_change": "Returns (IN) must have a positive quantity."})
        return attrs


class TransactionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[APPROVE, TransactionStatus.COMPLETED, TransactionStatus.REJECTED, TransactionStatus.PENDING]
    )


class ReservationSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source="item.name", read_only=True)
    borrower = serializers.CharField(source="user.display_name", read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "item",
            "item_name",
            "user",
            "borrower",
            "start_date",
            "end_date",
            "notes",
            "status",
            "rejection_reason",
            "created_at",
        ]
        read_only_fields = fields


class ReservationWriteSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(queryset=InventoryItem.objects.all())
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Reservation.STATUS_CHOICES, required=False)
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must not precede start date."})
        if attrs.get("status") == Reservation.STATUS_REJECTED and not attrs.get("rejection_reason", "").strip():
            raise serializers.ValidationError({"rejection_reason": "A reason is required when rejecting."})
        return attrs


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Reservation.STATUS_CHOICES)
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["status"] == Reservation.STATUS_REJECTED and not attrs.get("rejection_reason", "").strip():
            raise serializers.ValidationError({"rejection_reason": "A reason is required when rejecting."})
        return attrs
