# inventory/services/adjustments.py

"""
STOCK ADJUSTMENTS & TRANSFERS

Rules:
- quantity_delta must be non-zero
- a negative adjustment cannot take the (item, warehouse) balance below zero
- a transfer posts two TRANSFER movements (out of source, into destination)
  in one transaction, after checking the source holds enough
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from core.services.amounts import ZERO_QTY, to_quantity
from core.services.exceptions import InvalidAmountError
from inventory.models import Item, StockMovement, Warehouse
from inventory.services.exceptions import StockReferenceError, StockValidationError
from inventory.services.movements import get_balance, record_movement, require_available


@dataclass(frozen=True)
class AdjustmentResult:
    movement: StockMovement
    quantity_delta: Decimal
    balance: Decimal


@dataclass(frozen=True)
class TransferResult:
    outbound: StockMovement
    inbound: StockMovement
    quantity: Decimal


def _require_active(item: Item | None, *warehouses: Warehouse | None) -> None:
    if item is None or not item.is_active:
        raise StockReferenceError("Active item is required")
    for warehouse in warehouses:
        if warehouse is None or not warehouse.is_active:
            raise StockReferenceError("Active warehouse is required")


@transaction.atomic
def adjust_stock(
    *,
    item: Item,
    warehouse: Warehouse,
    quantity_delta,
    user=None,
    remarks: str = "",
    movement_date=None,
) -> AdjustmentResult:
    """
    Adjust an (item, warehouse) balance up or down.

    quantity_delta:
      +N -> stock found / counted in
      -N -> stock written off (cannot go below zero)
    """
    _require_active(item, warehouse)

    try:
        delta = to_quantity(quantity_delta, field="quantity_delta")
    except InvalidAmountError as exc:
        raise StockValidationError(str(exc)) from exc
    if delta == ZERO_QTY:
        raise StockValidationError("quantity_delta cannot be 0")

    if delta < 0:
        require_available(item, warehouse, -delta)

    movement = record_movement(
        item=item,
        warehouse=warehouse,
        quantity=delta,
        movement_type=StockMovement.MovementType.ADJUSTMENT,
        reference_doctype="Adjustment",
        remarks=remarks or "Manual stock adjustment",
        movement_date=movement_date,
        user=user,
    )

    return AdjustmentResult(
        movement=movement,
        quantity_delta=delta,
        balance=get_balance(item, warehouse),
    )


@transaction.atomic
def transfer_stock(
    *,
    item: Item,
    from_warehouse: Warehouse,
    to_warehouse: Warehouse,
    quantity,
    user=None,
    remarks: str = "",
    movement_date=None,
) -> TransferResult:
    _require_active(item, from_warehouse, to_warehouse)

    if from_warehouse.pk == to_warehouse.pk:
        raise StockValidationError("Cannot transfer stock to the same warehouse")

    try:
        qty = to_quantity(quantity)
    except InvalidAmountError as exc:
        raise StockValidationError(str(exc)) from exc
    if qty <= ZERO_QTY:
        raise StockValidationError("quantity must be greater than zero")

    require_available(item, from_warehouse, qty)

    note = remarks or f"Transfer {from_warehouse.code} -> {to_warehouse.code}"

    outbound = record_movement(
        item=item,
        warehouse=from_warehouse,
        quantity=-qty,
        movement_type=StockMovement.MovementType.TRANSFER,
        reference_doctype="Transfer",
        reference_docno=to_warehouse.code,
        remarks=note,
        movement_date=movement_date,
        user=user,
    )
    inbound = record_movement(
        item=item,
        warehouse=to_warehouse,
        quantity=qty,
        movement_type=StockMovement.MovementType.TRANSFER,
        reference_doctype="Transfer",
        reference_docno=outbound.movement_no,
        remarks=note,
        movement_date=movement_date,
        user=user,
    )

    return TransferResult(outbound=outbound, inbound=inbound, quantity=qty)
