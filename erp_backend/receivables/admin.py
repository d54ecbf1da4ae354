"""
=====================================================
PATH: receivables/admin.py
=====================================================

Admin rules (audit-safe receivables):

- Customers are editable masters, except the derived current_balance.
- Invoices, payments and the customer ledger are read-only here; they
  change only through the receivables services.
"""

from django.contrib import admin

from core.admin import ReadOnlyAdminMixin
from receivables.models import (
    Customer,
    CustomerLedgerEntry,
    Invoice,
    InvoiceItem,
    Payment,
    PaymentAllocation,
)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "customer_code",
        "name",
        "current_balance",
        "credit_limit",
        "payment_terms_days",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("customer_code", "name", "email")
    readonly_fields = (
        "customer_code",
        "opening_balance",
        "current_balance",
        "created_by",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class InvoiceItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "invoice_no",
        "customer",
        "invoice_date",
        "due_date",
        "status",
        "total_amount",
        "paid_amount",
        "balance_amount",
    )
    list_filter = ("status",)
    search_fields = ("invoice_no", "customer__customer_code", "customer__name")
    inlines = [InvoiceItemInline]


class PaymentAllocationInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = PaymentAllocation
    extra = 0


@admin.register(Payment)
class PaymentAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("payment_no", "customer", "payment_date", "amount", "payment_method")
    search_fields = ("payment_no", "reference_no", "customer__customer_code")
    inlines = [PaymentAllocationInline]


@admin.register(CustomerLedgerEntry)
class CustomerLedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "transaction_date",
        "customer",
        "transaction_type",
        "reference_no",
        "debit",
        "credit",
        "balance",
    )
    list_filter = ("transaction_type",)
    search_fields = ("reference_no", "customer__customer_code")
