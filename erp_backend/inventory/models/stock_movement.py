# inventory/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable, signed stock movement.

GUARANTEES:
- Append-only (no updates, no deletes through the model)
- quantity is signed: positive = into the warehouse, negative = out
- quantity is never zero
- movement_no is unique (STK-<YYYY>-<NNNN>)
- reference_doctype / reference_docno point back at the originating
  document (Purchase, Sale, Production, ...)

The only deletion path is inventory.services.movements.purge_movement,
an explicit audit action that leaves balances for reconciliation to heal.
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .item import Item
from .warehouse import Warehouse


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        PURCHASE = "PURCHASE", "Purchase"
        SALE = "SALE", "Sale"
        PRODUCTION = "PRODUCTION", "Production"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"
        TRANSFER = "TRANSFER", "Transfer"

    movement_no = models.CharField(max_length=32, unique=True, editable=False)

    item = models.ForeignKey(
        Item, on_delete=models.PROTECT, related_name="stock_movements"
    )
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)

    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        help_text="Signed quantity (positive = in, negative = out).",
    )

    unit_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        default=None,
    )

    reference_doctype = models.CharField(max_length=32, blank=True, default="")
    reference_docno = models.CharField(max_length=64, blank=True, default="")
    remarks = models.TextField(blank=True, default="")

    movement_date = models.DateField(default=timezone.localdate)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["item", "warehouse"], name="inv_move_item_wh_idx"),
            models.Index(fields=["movement_type"], name="inv_move_type_idx"),
            models.Index(fields=["movement_date"], name="inv_move_date_idx"),
            models.Index(
                fields=["reference_doctype", "reference_docno"],
                name="inv_move_reference_idx",
            ),
        ]

    def clean(self):
        if self.quantity is None or self.quantity == 0:
            raise ValidationError("quantity must be non-zero")

        if self.unit_cost is not None and self.unit_cost < 0:
            raise ValidationError("unit_cost cannot be negative")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def direction(self) -> str:
        return "IN" if self.quantity > 0 else "OUT"

    @property
    def total_cost(self) -> Decimal:
        unit_cost = self.unit_cost if self.unit_cost is not None else Decimal("0.00")
        return (unit_cost * abs(self.quantity)).quantize(Decimal("0.01"))

    def __str__(self):
        return f"{self.movement_no} | {self.movement_type} | {self.quantity}"
