# receivables/models/payment.py

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .customer import Customer
from .invoice import Invoice


class Payment(models.Model):
    """
    One cash receipt from a customer.

    GUARANTEES:
    - payment_no is unique (PAY<NNN>)
    - sum of allocations == amount (enforced by create_payment)
    """

    payment_no = models.CharField(max_length=16, unique=True, editable=False)

    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="payments"
    )
    payment_date = models.DateField()
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    payment_method = models.CharField(max_length=32, default="Cash")
    reference_no = models.CharField(max_length=64, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="customer_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]

    def __str__(self):
        return f"{self.payment_no} | {self.amount}"


class PaymentAllocation(models.Model):
    """
    Part (or all) of a payment applied to one invoice.
    """

    payment = models.ForeignKey(
        Payment, on_delete=models.CASCADE, related_name="allocations"
    )
    invoice = models.ForeignKey(
        Invoice, on_delete=models.PROTECT, related_name="allocations"
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["payment", "invoice"], name="uniq_payment_invoice_allocation"
            ),
        ]

    def __str__(self):
        return f"{self.payment_id} -> {self.invoice_id}: {self.amount}"
