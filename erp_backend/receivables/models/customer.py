# receivables/models/customer.py

from decimal import Decimal

from django.conf import settings
from django.db import models


class Customer(models.Model):
    """
    Customer master.

    GUARANTEES:
    - customer_code is unique (CUST<NNN>)
    - current_balance is derived: sum of balance_amount over the
      customer's open invoices (Unpaid, Partially Paid, Overdue)
    """

    DEFAULT_PAYMENT_TERMS_DAYS = 14

    customer_code = models.CharField(max_length=16, unique=True, editable=False)
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    billing_address = models.TextField(blank=True, default="")
    shipping_address = models.TextField(blank=True, default="")

    payment_terms_days = models.PositiveIntegerField(default=DEFAULT_PAYMENT_TERMS_DAYS)
    credit_limit = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    opening_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    current_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        editable=False,
        help_text="Sum of open invoice balances (service-managed).",
    )

    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="customers_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["customer_code"]

    def __str__(self):
        return f"{self.customer_code} - {self.name}"

    @property
    def available_credit(self) -> Decimal:
        return self.credit_limit - self.current_balance
