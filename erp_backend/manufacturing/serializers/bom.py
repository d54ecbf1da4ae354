# manufacturing/serializers/bom.py

from __future__ import annotations

from rest_framework import serializers

from inventory.models import Item
from manufacturing.models import BOM, BOMItem
from manufacturing.services.bom_service import create_bom
from manufacturing.services.exceptions import ManufacturingError


class BOMItemSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    unit_of_measure = serializers.CharField(source="item.unit_of_measure", read_only=True)

    class Meta:
        model = BOMItem
        fields = ["id", "item", "item_code", "unit_of_measure", "quantity"]
        read_only_fields = fields


class BOMSerializer(serializers.ModelSerializer):
    finished_item_code = serializers.CharField(source="finished_item.code", read_only=True)
    items = BOMItemSerializer(many=True, read_only=True)

    class Meta:
        model = BOM
        fields = [
            "id",
            "bom_no",
            "name",
            "finished_item",
            "finished_item_code",
            "quantity",
            "description",
            "is_active",
            "items",
            "created_at",
        ]
        read_only_fields = fields


class BOMItemInputSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.filter(is_active=True))
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value


class BOMCommandSerializer(serializers.Serializer):
    finished_item = serializers.PrimaryKeyRelatedField(
        queryset=Item.objects.filter(is_active=True)
    )
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    name = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(required=False, default=True)
    items = BOMItemInputSerializer(many=True, allow_empty=False)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value

    def create(self, validated_data):
        try:
            return create_bom(user=self.context.get("user"), **validated_data)
        except ManufacturingError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
