# sales/serializers/sale.py

from rest_framework import serializers

from core.services.exceptions import ERPServiceError
from inventory.models import Item, Warehouse
from sales.models import Sale
from sales.services.sale_service import record_sale


class SaleSerializer(serializers.ModelSerializer):
    """
    Sale header (read-only).
    Designed for history + UI display.
    """

    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "sale_no",
            "item",
            "item_code",
            "item_name",
            "warehouse",
            "warehouse_code",
            "quantity",
            "unit_price",
            "total_amount",
            "customer_name",
            "invoice_no",
            "sale_date",
            "remarks",
            "is_reversed",
            "created_at",
        ]
        read_only_fields = fields


class SaleCommandSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.filter(is_active=True))
    warehouse = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.filter(is_active=True)
    )
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    invoice_no = serializers.CharField(required=False, allow_blank=True, default="")
    sale_date = serializers.DateField(required=False, allow_null=True, default=None)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value

    def validate_unit_price(self, value):
        if value < 0:
            raise serializers.ValidationError("unit_price cannot be negative")
        return value

    def create(self, validated_data):
        # insufficient stock surfaces here as InsufficientStockError
        try:
            return record_sale(user=self.context.get("user"), **validated_data)
        except ERPServiceError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
