# inventory/models/item.py

from decimal import Decimal

from django.conf import settings
from django.db import models


class Item(models.Model):
    """
    Stock-keeping item master.

    GUARANTEES:
    - code is unique
    - current_stock is a derived cache: always equal to the sum of the
      item's StockBalance rows (written only by inventory services)
    """

    DEFAULT_UNIT = "Nos"

    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    unit_of_measure = models.CharField(max_length=20, default=DEFAULT_UNIT)

    is_raw_material = models.BooleanField(default=False)
    is_finished_good = models.BooleanField(default=False)
    is_purchased = models.BooleanField(default=True)
    is_manufactured = models.BooleanField(default=False)

    reorder_level = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    standard_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    standard_selling_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    current_stock = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0"),
        editable=False,
        help_text="Sum of all warehouse balances (service-managed).",
    )

    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_low_stock(self) -> bool:
        return self.reorder_level > 0 and self.current_stock <= self.reorder_level
