# receivables/models/ledger.py

"""
======================================================
PATH: receivables/models/ledger.py
======================================================
CUSTOMER LEDGER ENTRY

Append-only running-balance log per customer.

Guarantees:
- Immutable once created (no updates, no deletes)
- debit and credit are non-negative; at least one is > 0
- balance = previous entry's balance (by insertion id) + debit - credit
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .customer import Customer


class CustomerLedgerEntry(models.Model):
    INVOICE = "INVOICE"
    PAYMENT = "PAYMENT"
    ADJUSTMENT = "ADJUSTMENT"
    OPENING_BALANCE = "OPENING_BALANCE"

    TRANSACTION_TYPES = [
        (INVOICE, "Invoice"),
        (PAYMENT, "Payment"),
        (ADJUSTMENT, "Adjustment"),
        (OPENING_BALANCE, "Opening Balance"),
    ]

    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="ledger_entries"
    )
    transaction_date = models.DateField()
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    reference_no = models.CharField(max_length=64, blank=True, default="")

    debit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    credit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    balance = models.DecimalField(max_digits=14, decimal_places=2)

    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Customer Ledger Entry"
        verbose_name_plural = "Customer Ledger Entries"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["customer", "id"], name="ar_ledger_customer_idx"),
            models.Index(fields=["reference_no"], name="ar_ledger_reference_idx"),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.reference_no} D{self.debit} C{self.credit} = {self.balance}"

    def clean(self):
        if (self.debit or 0) == 0 and (self.credit or 0) == 0:
            raise ValidationError("Ledger entry needs a debit or a credit amount")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("CustomerLedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("CustomerLedgerEntry records are immutable and cannot be deleted")
