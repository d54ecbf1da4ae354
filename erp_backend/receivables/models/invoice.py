# receivables/models/invoice.py

"""
CUSTOMER INVOICE

GUARANTEES:
- paid_amount == sum of PaymentAllocation.amount for this invoice
- balance_amount == total_amount - paid_amount
- status is derived from (balance_amount, total_amount, due_date);
  Draft and Cancelled are set explicitly and never derived away
- All three are written only by receivables services
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from inventory.models import Item

from .customer import Customer


class Invoice(models.Model):
    STATUS_DRAFT = "Draft"
    STATUS_UNPAID = "Unpaid"
    STATUS_PARTIALLY_PAID = "Partially Paid"
    STATUS_PAID = "Paid"
    STATUS_OVERDUE = "Overdue"
    STATUS_CANCELLED = "Cancelled"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PARTIALLY_PAID, "Partially Paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_OVERDUE, "Overdue"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    OPEN_STATUSES = (STATUS_UNPAID, STATUS_PARTIALLY_PAID, STATUS_OVERDUE)
    FIXED_STATUSES = (STATUS_DRAFT, STATUS_CANCELLED)

    invoice_no = models.CharField(max_length=32, unique=True)

    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="invoices"
    )

    invoice_date = models.DateField()
    due_date = models.DateField()

    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=STATUS_UNPAID
    )

    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    paid_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    balance_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    notes = models.TextField(blank=True, default="")
    terms = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-invoice_date", "-id"]
        indexes = [
            models.Index(fields=["customer", "status"], name="ar_inv_customer_status_idx"),
            models.Index(fields=["due_date"], name="ar_inv_due_date_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_no} | {self.status} | {self.balance_amount}"

    @property
    def is_open(self) -> bool:
        return self.status in self.OPEN_STATUSES


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    item = models.ForeignKey(
        Item,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoice_lines",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    amount = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.invoice_id}: {self.description or self.item_id} = {self.amount}"
