# inventory/serializers/stock.py
"""
======================================================
PATH: inventory/serializers/stock.py
======================================================
STOCK SERIALIZERS

Read:
- StockMovementSerializer / StockBalanceSerializer (ledger + balance views)

Commands (validate + coerce, then hand off to services):
- StockAdjustmentCommandSerializer -> adjust_stock()
- StockTransferCommandSerializer   -> transfer_stock()

Quantities arrive as strings or numbers and leave as Decimal.
Service errors are re-raised as serializer ValidationErrors.
"""

from __future__ import annotations

from rest_framework import serializers

from inventory.models import Item, StockBalance, StockMovement, Warehouse
from inventory.services.adjustments import adjust_stock, transfer_stock
from inventory.services.exceptions import InventoryError


class StockMovementSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "movement_no",
            "item",
            "item_code",
            "warehouse",
            "warehouse_code",
            "movement_type",
            "quantity",
            "unit_cost",
            "reference_doctype",
            "reference_docno",
            "remarks",
            "movement_date",
            "created_at",
        ]
        read_only_fields = fields


class StockBalanceSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = StockBalance
        fields = ["item", "item_code", "warehouse", "warehouse_code", "quantity", "last_updated"]
        read_only_fields = fields


class StockAdjustmentCommandSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.filter(is_active=True))
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True)
    )
    quantity_delta = serializers.DecimalField(max_digits=14, decimal_places=4)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    movement_date = serializers.DateField(required=False, allow_null=True, default=None)

    def validate_quantity_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("quantity_delta cannot be 0")
        return value

    def create(self, validated_data):
        user = self.context.get("user")
        try:
            return adjust_stock(user=user, **validated_data)
        except InventoryError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc


class StockTransferCommandSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.filter(is_active=True))
    from_warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True)
    )
    to_warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True)
    )
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    movement_date = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["from_warehouse"].pk == attrs["to_warehouse"].pk:
            raise serializers.ValidationError(
                {"to_warehouse": "Cannot transfer stock to the same warehouse"}
            )
        if attrs["quantity"] <= 0:
            raise serializers.ValidationError(
                {"quantity": "quantity must be greater than zero"}
            )
        return attrs

    def create(self, validated_data):
        user = self.context.get("user")
        try:
            return transfer_stock(user=user, **validated_data)
        except InventoryError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
