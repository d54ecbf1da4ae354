# receivables/serializers/invoice.py

from __future__ import annotations

from rest_framework import serializers

from inventory.models import Item
from receivables.models import Customer, Invoice, InvoiceItem
from receivables.services.exceptions import ReceivablesError
from receivables.services.invoice_service import CREATABLE_STATUSES, create_invoice


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = ["id", "item", "description", "quantity", "unit_price", "amount"]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    customer_code = serializers.CharField(source="customer.customer_code", read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_no",
            "customer",
            "customer_code",
            "invoice_date",
            "due_date",
            "status",
            "total_amount",
            "paid_amount",
            "balance_amount",
            "notes",
            "terms",
            "items",
        ]
        read_only_fields = fields


class InvoiceLineInputSerializer(serializers.Serializer):
    item = serializers.PrimaryKeyRelatedField(
        queryset=Item.objects.all(), required=False, allow_null=True, default=None
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)

    def validate(self, attrs):
        if attrs["quantity"] <= 0:
            raise serializers.ValidationError({"quantity": "quantity must be greater than zero"})
        if attrs.get("item") is None and not attrs.get("description", "").strip():
            raise serializers.ValidationError(
                {"description": "description is required when no item is given"}
            )
        return attrs


class InvoiceCommandSerializer(serializers.Serializer):
    customer = serializers.PrimaryKeyRelatedField(
        queryset=Customer.objects.filter(is_active=True)
    )
    invoice_no = serializers.CharField(required=False, allow_blank=True, default="")
    invoice_date = serializers.DateField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(
        choices=CREATABLE_STATUSES, required=False, default=Invoice.STATUS_UNPAID
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    terms = serializers.CharField(required=False, allow_blank=True, default="")
    items = InvoiceLineInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        due_date = attrs.get("due_date")
        if due_date and due_date < attrs["invoice_date"]:
            raise serializers.ValidationError(
                {"due_date": "due_date cannot be before invoice_date"}
            )
        return attrs

    def create(self, validated_data):
        try:
            return create_invoice(user=self.context.get("user"), **validated_data)
        except ReceivablesError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
