# receivables/serializers/payment.py

"""
======================================================
PATH: receivables/serializers/payment.py
======================================================
PAYMENT SERIALIZERS

PaymentCommandSerializer:
- validates shape only (amount > 0, allocations present, no duplicates)
- allocation sum, ownership and invoice state are enforced by
  create_payment() so the rules live in one place
"""

from __future__ import annotations

from rest_framework import serializers

from receivables.models import Customer, Invoice, Payment, PaymentAllocation
from receivables.services.exceptions import ReceivablesError
from receivables.services.payment_service import create_payment


class PaymentAllocationSerializer(serializers.ModelSerializer):
    invoice_no = serializers.CharField(source="invoice.invoice_no", read_only=True)

    class Meta:
        model = PaymentAllocation
        fields = ["id", "invoice", "invoice_no", "amount"]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    customer_code = serializers.CharField(source="customer.customer_code", read_only=True)
    allocations = PaymentAllocationSerializer(many=True, read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "payment_no",
            "customer",
            "customer_code",
            "payment_date",
            "amount",
            "payment_method",
            "reference_no",
            "notes",
            "allocations",
        ]
        read_only_fields = fields


class PaymentAllocationInputSerializer(serializers.Serializer):
    invoice = serializers.PrimaryKeyRelatedField(queryset=Invoice.objects.all())
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount must be greater than zero")
        return value


class PaymentCommandSerializer(serializers.Serializer):
    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())
    payment_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="Cash")
    reference_no = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    allocations = PaymentAllocationInputSerializer(many=True, allow_empty=False)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount must be greater than zero")
        return value

    def validate_allocations(self, value):
        invoice_ids = [row["invoice"].pk for row in value]
        if len(invoice_ids) != len(set(invoice_ids)):
            raise serializers.ValidationError("Each invoice can be allocated only once")
        return value

    def create(self, validated_data):
        validated_data["payment_method"] = validated_data.get("payment_method") or "Cash"
        try:
            return create_payment(user=self.context.get("user"), **validated_data)
        except ReceivablesError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
