# purchases/serializers/purchase.py

from __future__ import annotations

from rest_framework import serializers

from core.services.exceptions import ERPServiceError
from inventory.models import Item, Warehouse
from purchases.models import Purchase
from purchases.services.purchase_service import record_purchase


class PurchaseSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "purchase_no",
            "item",
            "item_code",
            "warehouse",
            "warehouse_code",
            "quantity",
            "unit_cost",
            "total_cost",
            "supplier_name",
            "invoice_no",
            "purchase_date",
            "remarks",
            "is_reversed",
            "created_at",
        ]
        read_only_fields = fields


class PurchaseCommandSerializer(serializers.Serializer):
    """
    Direct purchase command.

    Validates shape + coerces decimals, then hands off to record_purchase().
    """

    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.filter(is_active=True))
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True)
    )
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    supplier_name = serializers.CharField(required=False, allow_blank=True, default="")
    invoice_no = serializers.CharField(required=False, allow_blank=True, default="")
    purchase_date = serializers.DateField(required=False, allow_null=True, default=None)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value

    def validate_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("unit_cost cannot be negative")
        return value

    def create(self, validated_data):
        try:
            return record_purchase(user=self.context.get("user"), **validated_data)
        except ERPServiceError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
