# receivables/serializers/customer.py

from __future__ import annotations

from rest_framework import serializers

from receivables.models import Customer, CustomerLedgerEntry
from receivables.services.customer_service import create_customer
from receivables.services.exceptions import ReceivablesError


class CustomerSerializer(serializers.ModelSerializer):
    available_credit = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = Customer
        fields = [
            "id",
            "customer_code",
            "name",
            "contact_person",
            "email",
            "phone",
            "billing_address",
            "shipping_address",
            "payment_terms_days",
            "credit_limit",
            "opening_balance",
            "current_balance",
            "available_credit",
            "is_active",
        ]
        read_only_fields = fields


class CustomerLedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerLedgerEntry
        fields = [
            "id",
            "transaction_date",
            "transaction_type",
            "reference_no",
            "debit",
            "credit",
            "balance",
            "description",
            "created_at",
        ]
        read_only_fields = fields


class CustomerCommandSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    contact_person = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    billing_address = serializers.CharField(required=False, allow_blank=True, default="")
    shipping_address = serializers.CharField(required=False, allow_blank=True, default="")
    payment_terms_days = serializers.IntegerField(
        min_value=0, required=False, default=Customer.DEFAULT_PAYMENT_TERMS_DAYS
    )
    credit_limit = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=0, required=False, default=0
    )
    opening_balance = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, default=0
    )
    opening_date = serializers.DateField(required=False, allow_null=True, default=None)

    def create(self, validated_data):
        try:
            return create_customer(user=self.context.get("user"), **validated_data)
        except ReceivablesError as exc:
            raise serializers.ValidationError({"detail": str(exc)}) from exc
