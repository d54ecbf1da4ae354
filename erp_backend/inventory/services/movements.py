# inventory/services/movements.py

"""
MOVEMENT LOG & BALANCE STORE

record_movement() is the only write path into stock. In one transaction it:
1) inserts the immutable StockMovement (STK-<YYYY>-<NNNN>)
2) adds the signed quantity to the (item, warehouse) StockBalance,
   creating the row on first use
3) overwrites Item.current_stock with the sum of the item's balances

Sufficiency is NOT checked here. Callers that consume stock call
require_available() first, under the same transaction.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_QTY, to_money, to_quantity
from core.services.exceptions import InvalidAmountError
from core.services.numbering import PREFIX_STOCK, next_document_number
from inventory.models import Item, StockBalance, StockMovement, Warehouse
from inventory.services.exceptions import (
    InsufficientStockError,
    StockReferenceError,
    StockValidationError,
)

logger = logging.getLogger("inventory")


def _signed_quantity(value) -> Decimal:
    try:
        qty = to_quantity(value)
    except InvalidAmountError as exc:
        raise StockValidationError(str(exc)) from exc

    if qty == ZERO_QTY:
        raise StockValidationError("quantity cannot be 0")
    return qty


def _unit_cost(value) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        cost = to_money(value, field="unit_cost")
    except InvalidAmountError as exc:
        raise StockValidationError(str(exc)) from exc
    if cost < 0:
        raise StockValidationError("unit_cost cannot be negative")
    return cost


def sync_item_stock(item: Item) -> Decimal:
    """Overwrite item.current_stock with the sum of its balance rows."""
    total = (
        StockBalance.objects.filter(item_id=item.pk)
        .aggregate(total=Sum("quantity"))
        .get("total")
        or ZERO_QTY
    )
    Item.objects.filter(pk=item.pk).update(current_stock=total)
    item.current_stock = total
    return total


def _locked_balance(item: Item, warehouse: Warehouse) -> StockBalance:
    balance, _ = StockBalance.objects.select_for_update().get_or_create(
        item_id=item.pk,
        warehouse_id=warehouse.pk,
        defaults={"quantity": ZERO_QTY},
    )
    return balance


@transaction.atomic
def record_movement(
    *,
    item: Item,
    warehouse: Warehouse,
    quantity,
    movement_type: str,
    reference_doctype: str = "",
    reference_docno: str = "",
    remarks: str = "",
    movement_date=None,
    unit_cost=None,
    user=None,
) -> StockMovement:
    """
    Post one signed movement and update derived balances (atomic).
    """
    if item is None or warehouse is None:
        raise StockReferenceError("item and warehouse are required")

    if movement_type not in StockMovement.MovementType.values:
        raise StockValidationError(f"Invalid movement_type: {movement_type}")

    qty = _signed_quantity(quantity)

    movement = StockMovement(
        movement_no=next_document_number(PREFIX_STOCK),
        item=item,
        warehouse=warehouse,
        movement_type=movement_type,
        quantity=qty,
        unit_cost=_unit_cost(unit_cost),
        reference_doctype=reference_doctype or "",
        reference_docno=reference_docno or "",
        remarks=remarks or "",
        movement_date=movement_date or timezone.localdate(),
        performed_by=user if getattr(user, "is_authenticated", False) else None,
    )
    movement.save()

    balance = _locked_balance(item, warehouse)
    balance.quantity = balance.quantity + qty
    balance.save(update_fields=["quantity", "last_updated"])

    sync_item_stock(item)

    logger.info(
        "Stock movement recorded",
        extra={
            "movement_no": movement.movement_no,
            "item_id": item.pk,
            "warehouse_id": warehouse.pk,
            "quantity": str(qty),
            "movement_type": movement_type,
            "reference": f"{movement.reference_doctype}:{movement.reference_docno}",
        },
    )
    return movement


def get_balance(item: Item, warehouse: Warehouse, *, for_update: bool = False) -> Decimal:
    qs = StockBalance.objects.filter(item_id=item.pk, warehouse_id=warehouse.pk)
    if for_update:
        qs = qs.select_for_update()
    value = qs.values_list("quantity", flat=True).first()
    return value if value is not None else ZERO_QTY


def require_available(item: Item, warehouse: Warehouse, quantity) -> Decimal:
    """
    Raise InsufficientStockError unless (item, warehouse) holds `quantity`.

    Locks the balance row when called inside a transaction.
    Returns the available amount.
    """
    required = to_quantity(quantity)
    available = get_balance(
        item, warehouse, for_update=transaction.get_connection().in_atomic_block
    )
    if available < required:
        raise InsufficientStockError(
            item=item,
            warehouse=warehouse,
            available=available,
            required=required,
        )
    return available


@transaction.atomic
def purge_movement(*, movement: StockMovement, user=None, reason: str = "") -> None:
    """
    Explicit audit/admin deletion of a movement row.

    Balances and current_stock are deliberately left as they are; the
    reconciliation job rebuilds them from the remaining movements.
    """
    reason = (reason or "").strip()
    if not reason:
        raise StockValidationError("A reason is required to purge a movement")

    movement_no = movement.movement_no
    deleted, _ = StockMovement.objects.filter(pk=movement.pk).delete()
    if not deleted:
        raise StockReferenceError(f"Stock movement {movement_no} not found")

    log_activity(
        user=user,
        action=ActivityLog.ACTION_PURGE,
        entity_type="StockMovement",
        entity_id=movement_no,
        description=(
            f"Purged {movement_no} ({movement.movement_type} {movement.quantity} "
            f"of item {movement.item_id} at warehouse {movement.warehouse_id}): {reason}"
        ),
    )

    logger.warning(
        "Stock movement purged; balances left for reconciliation",
        extra={"movement_no": movement_no, "reason": reason},
    )
