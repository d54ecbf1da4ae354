# sales/models/sale.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from inventory.models import Item, Warehouse

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Direct single-item sale out of one warehouse.

    GUARANTEES:
    - sale_no is unique (SALE-<YYYY>-<NNNN>)
    - total_amount == quantity * unit_price (money-rounded)
    - Stock leaves ONLY via a negative SALE StockMovement referencing
      this sale, after a sufficiency check
    - Deleting the header keeps the movement (detach header, keep ledger)
    """

    sale_no = models.CharField(max_length=32, unique=True, editable=False)

    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name="sales")
    warehouse = models.ForeignKey(Warehouse, on_delete=models.PROTECT, related_name="sales")

    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    customer_name = models.CharField(max_length=255, blank=True, default="")
    invoice_no = models.CharField(max_length=64, blank=True, default="")
    sale_date = models.DateField(default=timezone.localdate)
    remarks = models.TextField(blank=True, default="")

    is_reversed = models.BooleanField(default=False)
    reversed_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sale_date", "-id"]
        indexes = [
            models.Index(fields=["sale_date"], name="sale_date_idx"),
        ]

    def __str__(self):
        return f"{self.sale_no} | {self.item_id} x {self.quantity}"
