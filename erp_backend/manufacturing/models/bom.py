# manufacturing/models/bom.py

"""
BILL OF MATERIALS

A declarative recipe: `quantity` units of finished_item need the listed
BOMItem quantities. A BOM never moves stock itself; productions may
reference one to pre-fill (scaled) input quantities.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from inventory.models import Item


class BOM(models.Model):
    bom_no = models.CharField(max_length=32, unique=True, editable=False)
    name = models.CharField(max_length=255)

    finished_item = models.ForeignKey(
        Item, on_delete=models.PROTECT, related_name="boms"
    )
    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.0001"))],
        help_text="Base output quantity the item lines are expressed for.",
    )

    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="boms_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "BOM"
        verbose_name_plural = "BOMs"
        ordering = ["-id"]

    def __str__(self):
        return f"{self.bom_no} - {self.name}"


class BOMItem(models.Model):
    bom = models.ForeignKey(BOM, on_delete=models.CASCADE, related_name="items")
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name="bom_lines")
    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0.0001"))],
    )

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["bom", "item"], name="uniq_bom_item"),
        ]

    def __str__(self):
        return f"{self.bom_id}: {self.item_id} x {self.quantity}"
