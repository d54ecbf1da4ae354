# manufacturing/models/production.py

"""
PRODUCTION RECORD

Header + input rows for one manufacturing event.

GUARANTEES:
- Created atomically with its inputs and every PRODUCTION movement
  (negative per input at its source warehouse, one positive for the
  output at the destination warehouse)
- production_no is unique (PROD-<YYYY>-<NNNN>)
- Never edited after creation; reversal posts compensating movements and
  sets is_reversed, deletion removes header + inputs only
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from inventory.models import Item, Warehouse

from .bom import BOM


class Production(models.Model):
    production_no = models.CharField(max_length=32, unique=True, editable=False)

    output_item = models.ForeignKey(
        Item, on_delete=models.PROTECT, related_name="productions"
    )
    output_quantity = models.DecimalField(max_digits=14, decimal_places=4)

    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="productions",
        help_text="Destination warehouse for the finished good.",
    )
    raw_materials_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="raw_material_productions",
        help_text="Default source warehouse for consumed inputs.",
    )

    production_date = models.DateField(default=timezone.localdate)

    bom = models.ForeignKey(
        BOM,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="productions",
    )

    remarks = models.TextField(blank=True, default="")

    is_reversed = models.BooleanField(default=False)
    reversed_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="productions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-production_date", "-id"]
        indexes = [
            models.Index(fields=["output_item", "production_date"], name="prod_item_date_idx"),
        ]

    def __str__(self):
        return f"{self.production_no} | {self.output_item_id} x {self.output_quantity}"


class ProductionInput(models.Model):
    production = models.ForeignKey(
        Production, on_delete=models.CASCADE, related_name="inputs"
    )
    item = models.ForeignKey(
        Item, on_delete=models.PROTECT, related_name="production_inputs"
    )
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="production_inputs",
        help_text="Source warehouse the input was consumed from.",
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.production_id}: {self.item_id} x {self.quantity}"
