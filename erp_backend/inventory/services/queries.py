# inventory/services/queries.py

"""
Read-side helpers over the movement log and balance store.
"""

from __future__ import annotations

from django.db.models import F, Q

from core.services.amounts import ZERO_QTY
from inventory.models import Item, StockBalance, StockMovement, Warehouse


def get_stock_by_warehouse(item: Item) -> list[dict]:
    """Quantity per active warehouse (0 where no balance row exists)."""
    balances = dict(
        StockBalance.objects.filter(item_id=item.pk).values_list(
            "warehouse_id", "quantity"
        )
    )
    return [
        {"warehouse": warehouse, "quantity": balances.get(warehouse.pk, ZERO_QTY)}
        for warehouse in Warehouse.objects.filter(is_active=True).order_by("code")
    ]


def get_item_ledger(item: Item, warehouse: Warehouse | None = None):
    qs = StockMovement.objects.filter(item_id=item.pk).select_related("warehouse")
    if warehouse is not None:
        qs = qs.filter(warehouse_id=warehouse.pk)
    return qs.order_by("-movement_date", "-id")


def get_movements_for_document(doctype: str, docno: str):
    return StockMovement.objects.filter(
        reference_doctype=doctype, reference_docno=docno
    ).order_by("id")


def get_low_stock_items():
    return (
        Item.objects.filter(is_active=True, reorder_level__gt=0)
        .filter(Q(current_stock__lte=F("reorder_level")))
        .order_by("code")
    )
