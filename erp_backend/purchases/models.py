# purchases/models.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from inventory.models import Item, Warehouse

User = settings.AUTH_USER_MODEL


class Purchase(models.Model):
    """
    Direct single-item purchase (goods received into one warehouse).

    GUARANTEES:
    - purchase_no is unique (PURCH-<YYYY>-<NNNN>)
    - total_cost == quantity * unit_cost (money-rounded)
    - Stock is moved ONLY via a PURCHASE StockMovement referencing this
      purchase; deleting the header keeps the movement
    """

    purchase_no = models.CharField(max_length=32, unique=True, editable=False)

    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name="purchases")
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="purchases"
    )

    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_cost = models.DecimalField(max_digits=14, decimal_places=2)
    total_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    supplier_name = models.CharField(max_length=255, blank=True, default="")
    invoice_no = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Supplier invoice reference.",
    )
    purchase_date = models.DateField(default=timezone.localdate)
    remarks = models.TextField(blank=True, default="")

    is_reversed = models.BooleanField(default=False)
    reversed_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-purchase_date", "-id"]
        indexes = [
            models.Index(fields=["purchase_date"], name="purch_date_idx"),
            models.Index(fields=["supplier_name"], name="purch_supplier_idx"),
        ]

    def __str__(self):
        return f"{self.purchase_no} | {self.item_id} x {self.quantity}"
