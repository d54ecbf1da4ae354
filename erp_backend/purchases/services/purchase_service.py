# purchases/services/purchase_service.py

"""
======================================================
PATH: purchases/services/purchase_service.py
======================================================
DIRECT PURCHASE SERVICE

record_purchase() (atomic):
1) validate quantity > 0, unit_cost >= 0, active item + warehouse
2) generate PURCH-<YYYY>-<NNNN>
3) insert Purchase (total_cost = quantity * unit_cost)
4) post a positive PURCHASE movement referencing the purchase
5) append activity log

delete_purchase() detaches the header and keeps the movement.
reverse_purchase() posts the compensating negative PURCHASE movement
instead, so the ledger stays append-only.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_MONEY, positive_quantity, to_money
from core.services.exceptions import InvalidAmountError
from core.services.numbering import PREFIX_PURCHASE, next_document_number
from inventory.models import Item, StockMovement, Warehouse
from inventory.services.movements import record_movement, require_available
from purchases.models import Purchase
from purchases.services.exceptions import PurchaseReversalError, PurchaseValidationError

logger = logging.getLogger("purchases")

DOCTYPE = "Purchase"


def _validate_locations(item: Item | None, warehouse: Warehouse | None) -> None:
    if item is None or not item.is_active:
        raise PurchaseValidationError("Active item is required")
    if warehouse is None or not warehouse.is_active:
        raise PurchaseValidationError("Active warehouse is required")


@transaction.atomic
def record_purchase(
    *,
    item: Item,
    warehouse: Warehouse,
    quantity,
    unit_cost,
    supplier_name: str = "",
    purchase_date=None,
    invoice_no: str = "",
    remarks: str = "",
    user=None,
) -> Purchase:
    _validate_locations(item, warehouse)

    try:
        qty = positive_quantity(quantity)
        cost = to_money(unit_cost, field="unit_cost")
    except InvalidAmountError as exc:
        raise PurchaseValidationError(str(exc)) from exc

    if cost < ZERO_MONEY:
        raise PurchaseValidationError("unit_cost cannot be negative")

    purchase = Purchase.objects.create(
        purchase_no=next_document_number(PREFIX_PURCHASE),
        item=item,
        warehouse=warehouse,
        quantity=qty,
        unit_cost=cost,
        total_cost=to_money(qty * cost, field="total_cost"),
        supplier_name=(supplier_name or "").strip(),
        invoice_no=(invoice_no or "").strip(),
        purchase_date=purchase_date or timezone.localdate(),
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    supplier = purchase.supplier_name or "supplier"
    record_movement(
        item=item,
        warehouse=warehouse,
        quantity=qty,
        movement_type=StockMovement.MovementType.PURCHASE,
        reference_doctype=DOCTYPE,
        reference_docno=purchase.purchase_no,
        remarks=f"Purchase: {purchase.purchase_no} from {supplier}",
        movement_date=purchase.purchase_date,
        unit_cost=cost,
        user=user,
    )

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type=DOCTYPE,
        entity_id=purchase.purchase_no,
        description=f"Purchased {qty} {item.unit_of_measure} of {item.code}",
    )

    logger.info(
        "Purchase recorded",
        extra={
            "purchase_no": purchase.purchase_no,
            "item_id": item.pk,
            "quantity": str(qty),
            "total_cost": str(purchase.total_cost),
        },
    )
    return purchase


@transaction.atomic
def delete_purchase(purchase: Purchase, *, user=None) -> None:
    """
    Remove the purchase header. The PURCHASE movement stays in the ledger.
    """
    purchase_no = purchase.purchase_no
    Purchase.objects.filter(pk=purchase.pk).delete()

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type=DOCTYPE,
        entity_id=purchase_no,
        description=f"Deleted purchase {purchase_no} (stock movements preserved)",
    )
    logger.warning(
        "Purchase header deleted; stock movements preserved",
        extra={"purchase_no": purchase_no},
    )


@transaction.atomic
def reverse_purchase(purchase: Purchase, *, user=None, remarks: str = "") -> StockMovement:
    locked = Purchase.objects.select_for_update().get(pk=purchase.pk)
    if locked.is_reversed:
        raise PurchaseReversalError(f"Purchase {locked.purchase_no} is already reversed")

    require_available(locked.item, locked.warehouse, locked.quantity)

    movement = record_movement(
        item=locked.item,
        warehouse=locked.warehouse,
        quantity=-locked.quantity,
        movement_type=StockMovement.MovementType.PURCHASE,
        reference_doctype=DOCTYPE,
        reference_docno=locked.purchase_no,
        remarks=remarks or f"Reversal of purchase: {locked.purchase_no}",
        unit_cost=locked.unit_cost,
        user=user,
    )

    locked.is_reversed = True
    locked.reversed_at = timezone.now()
    locked.save(update_fields=["is_reversed", "reversed_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type=DOCTYPE,
        entity_id=locked.purchase_no,
        description=f"Reversed purchase {locked.purchase_no}",
    )
    return movement


def get_top_suppliers(*, limit: int = 5, date_from=None, date_to=None) -> list[dict]:
    qs = Purchase.objects.filter(is_reversed=False).exclude(supplier_name="")
    if date_from:
        qs = qs.filter(purchase_date__gte=date_from)
    if date_to:
        qs = qs.filter(purchase_date__lte=date_to)

    rows = (
        qs.values("supplier_name")
        .annotate(purchase_count=Count("id"), total_cost=Sum("total_cost"))
        .order_by("-total_cost", "supplier_name")[:limit]
    )
    return [
        {
            "supplier_name": r["supplier_name"],
            "purchase_count": r["purchase_count"],
            "total_cost": r["total_cost"] or ZERO_MONEY,
        }
        for r in rows
    ]
