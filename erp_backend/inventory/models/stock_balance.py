# inventory/models/stock_balance.py

"""
STOCK BALANCE (item x warehouse)

GUARANTEES:
- One row per (item, warehouse)
- quantity == sum of StockMovement.quantity for the pair
- Created lazily on the first movement, never deleted by normal writes
  (only reconciliation prunes orphans with no movements)
"""

from decimal import Decimal

from django.db import models

from .item import Item
from .warehouse import Warehouse


class StockBalance(models.Model):
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name="balances")
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="balances"
    )

    quantity = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["item_id", "warehouse_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "warehouse"],
                name="uniq_stock_balance_item_warehouse",
            ),
        ]

    def __str__(self):
        return f"{self.item_id}@{self.warehouse_id}: {self.quantity}"
