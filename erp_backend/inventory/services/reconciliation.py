# inventory/services/reconciliation.py

"""
STOCK RECONCILIATION

Rebuilds the derived stock projections from the movement log:
1) StockBalance(item, warehouse) := sum of movements for the pair
   (row created when missing)
2) balance rows with no movements at all are deleted (orphans)
3) Item.current_stock := sum of the item's balance rows

Only values that differ are written, so a second run changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import Sum

from core.services.amounts import ZERO_QTY
from inventory.models import Item, StockBalance, StockMovement

logger = logging.getLogger("reconciliation")


@dataclass
class StockReconciliationResult:
    balances_corrected: int = 0
    balances_created: int = 0
    orphans_removed: int = 0
    items_synced: int = 0

    @property
    def changed(self) -> bool:
        return bool(
            self.balances_corrected
            or self.balances_created
            or self.orphans_removed
            or self.items_synced
        )


@transaction.atomic
def reconcile_stock() -> StockReconciliationResult:
    result = StockReconciliationResult()

    sums = (
        StockMovement.objects.values("item_id", "warehouse_id")
        .annotate(total=Sum("quantity"))
        .order_by("item_id", "warehouse_id")
    )
    existing = {
        (b.item_id, b.warehouse_id): b
        for b in StockBalance.objects.select_for_update().order_by("id")
    }

    # Step 1: balances from movements
    seen = set()
    for row in sums:
        key = (row["item_id"], row["warehouse_id"])
        total = row["total"] if row["total"] is not None else ZERO_QTY
        seen.add(key)

        balance = existing.get(key)
        if balance is None:
            StockBalance.objects.create(
                item_id=key[0], warehouse_id=key[1], quantity=total
            )
            result.balances_created += 1
            logger.info(
                "Created missing stock balance",
                extra={"item_id": key[0], "warehouse_id": key[1], "quantity": str(total)},
            )
        elif balance.quantity != total:
            logger.info(
                "Fixing item %s in warehouse %s: %s -> %s",
                key[0],
                key[1],
                balance.quantity,
                total,
                extra={"item_id": key[0], "warehouse_id": key[1]},
            )
            balance.quantity = total
            balance.save(update_fields=["quantity", "last_updated"])
            result.balances_corrected += 1

    # Step 2: orphans
    for key, balance in existing.items():
        if key in seen:
            continue
        logger.info(
            "Removing orphan stock balance",
            extra={
                "item_id": key[0],
                "warehouse_id": key[1],
                "quantity": str(balance.quantity),
            },
        )
        balance.delete()
        result.orphans_removed += 1

    # Step 3: item aggregate stock
    totals = dict(
        StockBalance.objects.values_list("item_id")
        .annotate(total=Sum("quantity"))
        .order_by("item_id")
    )
    for item in Item.objects.only("id", "code", "current_stock").order_by("id"):
        expected = totals.get(item.pk) or ZERO_QTY
        if item.current_stock != expected:
            logger.info(
                "Syncing current_stock for %s: %s -> %s",
                item.code,
                item.current_stock,
                expected,
                extra={"item_id": item.pk},
            )
            Item.objects.filter(pk=item.pk).update(current_stock=expected)
            result.items_synced += 1

    return result
