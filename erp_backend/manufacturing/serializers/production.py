# manufacturing/serializers/production.py

"""
PRODUCTION SERIALIZERS

ProductionCommandSerializer validates the header + input lines and hands
off to record_production(). Stock shortfalls come back as a 400-style
ValidationError carrying the service message.
"""

from __future__ import annotations

from rest_framework import serializers

from core.services.exceptions import ERPServiceError
from inventory.models import Item, Warehouse
from manufacturing.models import BOM, Production, ProductionInput
from manufacturing.services.production_service import record_production


class ProductionInputReadSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = ProductionInput
        fields = ["id", "item", "item_code", "quantity", "warehouse", "warehouse_code"]
        read_only_fields = fields


class ProductionSerializer(serializers.ModelSerializer):
    output_item_code = serializers.CharField(source="output_item.code", read_only=True)
    inputs = ProductionInputReadSerializer(many=True, read_only=True)

    class Meta:
        model = Production
        fields = [
            "id",
            "production_no",
            "output_item",
            "output_item_code",
            "output_quantity",
            "warehouse",
            "raw_materials_warehouse",
            "production_date",
            "bom",
            "remarks",
            "is_reversed",
            "inputs",
            "created_at",
        ]
        read_only_fields = fields


class ProductionInputSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.filter(is_active=True))
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True),
        required=False,
        allow_null=True,
        default=None,
    )

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value


class ProductionCommandSerializer(serializers.Serializer):
    output_item = serializers.PrimaryKeyRelatedField(
        queryset=Item.objects.filter(is_active=True)
    )
    output_quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True)
    )
    raw_materials_warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True),
        required=False,
        allow_null=True,
        default=None,
    )
    bom = serializers.PrimaryKeyRelatedField(
        queryset=BOM.objects.all(), required=False, allow_null=True, default=None
    )
    production_date = serializers.DateField(required=False, allow_null=True, default=None)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    inputs = ProductionInputSerializer(many=True, allow_empty=False)

    def validate_output_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("output_quantity must be greater than zero")
        return value

    def validate(self, attrs):
        output_item = attrs["output_item"]
        for line in attrs["inputs"]:
            if line["item"].pk == output_item.pk:
                raise serializers.ValidationError(
                    {"inputs": "Output item cannot be consumed as its own input"}
                )
        return attrs

    def create(self, validated_data):
        try:
            return record_production(user=self.context.get("user"), **validated_data)
        except ERPServiceError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
