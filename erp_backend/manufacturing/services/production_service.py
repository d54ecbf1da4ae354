# manufacturing/services/production_service.py

"""
======================================================
PATH: manufacturing/services/production_service.py
======================================================
PRODUCTION RECORDER

record_production() (atomic, all-or-nothing):
1) validate output quantity > 0, at least one input, every input > 0
2) check every input against its source warehouse balance
   (same-item lines are summed); first shortfall raises
   InsufficientStockError and nothing is written
3) generate PROD-<YYYY>-<NNNN>, insert header + ProductionInput rows
4) one negative PRODUCTION movement per input at its source warehouse
5) one positive PRODUCTION movement for the output at the destination
6) append activity log

The raw-materials (source) warehouse defaults to the destination
warehouse; an input line may name its own source warehouse.

delete_production() removes header + inputs and leaves every movement in
place. reverse_production() is the compensating alternative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Max, Min, Sum
from django.utils import timezone

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_QTY, positive_quantity
from core.services.exceptions import InvalidAmountError
from core.services.lines import line_value
from core.services.numbering import PREFIX_PRODUCTION, next_document_number
from inventory.models import Item, StockMovement, Warehouse
from inventory.services.movements import record_movement, require_available
from manufacturing.models import BOM, Production, ProductionInput
from manufacturing.services.bom_service import scale_bom
from manufacturing.services.exceptions import (
    ProductionReversalError,
    ProductionValidationError,
)

logger = logging.getLogger("manufacturing")

DOCTYPE = "Production"


@dataclass(frozen=True)
class ProductionLine:
    item: Item
    quantity: Decimal
    warehouse: Warehouse


def _clean_inputs(inputs, *, default_warehouse: Warehouse) -> list[ProductionLine]:
    if not inputs:
        raise ProductionValidationError("At least one raw material input is required")

    lines = []
    for index, raw in enumerate(inputs, start=1):
        item = line_value(raw, "item")
        if item is None:
            raise ProductionValidationError(f"Input {index}: item is required")

        try:
            qty = positive_quantity(line_value(raw, "quantity"))
        except InvalidAmountError as exc:
            raise ProductionValidationError(f"Input {index}: {exc}") from exc

        warehouse = line_value(raw, "warehouse") or default_warehouse
        if not warehouse.is_active:
            raise ProductionValidationError(
                f"Input {index}: warehouse {warehouse.code} is inactive"
            )

        lines.append(ProductionLine(item=item, quantity=qty, warehouse=warehouse))
    return lines


def _check_sufficiency(lines: list[ProductionLine]) -> None:
    required: dict[tuple, Decimal] = {}
    first_line: dict[tuple, ProductionLine] = {}
    for line in lines:
        key = (line.item.pk, line.warehouse.pk)
        required[key] = required.get(key, ZERO_QTY) + line.quantity
        first_line.setdefault(key, line)

    for key, qty in required.items():
        line = first_line[key]
        require_available(line.item, line.warehouse, qty)


@transaction.atomic
def record_production(
    *,
    output_item: Item,
    output_quantity,
    warehouse: Warehouse,
    inputs,
    production_date=None,
    raw_materials_warehouse: Warehouse | None = None,
    bom: BOM | None = None,
    remarks: str = "",
    user=None,
) -> Production:
    if output_item is None or not output_item.is_active:
        raise ProductionValidationError("Active output item is required")
    if warehouse is None or not warehouse.is_active:
        raise ProductionValidationError("Active destination warehouse is required")

    source = raw_materials_warehouse or warehouse
    if not source.is_active:
        raise ProductionValidationError("Raw materials warehouse is inactive")

    try:
        out_qty = positive_quantity(output_quantity, field="output_quantity")
    except InvalidAmountError as exc:
        raise ProductionValidationError(str(exc)) from exc

    lines = _clean_inputs(inputs, default_warehouse=source)
    if any(line.item.pk == output_item.pk for line in lines):
        raise ProductionValidationError("Output item cannot be consumed as its own input")

    if bom is not None and bom.finished_item_id != output_item.pk:
        raise ProductionValidationError(f"{bom.bom_no} does not produce {output_item.code}")

    # raises InsufficientStockError before any write
    _check_sufficiency(lines)

    production_date = production_date or timezone.localdate()

    production = Production.objects.create(
        production_no=next_document_number(PREFIX_PRODUCTION),
        output_item=output_item,
        output_quantity=out_qty,
        warehouse=warehouse,
        raw_materials_warehouse=source,
        production_date=production_date,
        bom=bom,
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    ProductionInput.objects.bulk_create(
        [
            ProductionInput(
                production=production,
                item=line.item,
                quantity=line.quantity,
                warehouse=line.warehouse,
            )
            for line in lines
        ]
    )

    for line in lines:
        record_movement(
            item=line.item,
            warehouse=line.warehouse,
            quantity=-line.quantity,
            movement_type=StockMovement.MovementType.PRODUCTION,
            reference_doctype=DOCTYPE,
            reference_docno=production.production_no,
            remarks=f"Consumed for production: {production.production_no}",
            movement_date=production_date,
            user=user,
        )

    record_movement(
        item=output_item,
        warehouse=warehouse,
        quantity=out_qty,
        movement_type=StockMovement.MovementType.PRODUCTION,
        reference_doctype=DOCTYPE,
        reference_docno=production.production_no,
        remarks=f"Produced from: {production.production_no}",
        movement_date=production_date,
        user=user,
    )

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type=DOCTYPE,
        entity_id=production.production_no,
        description=(
            f"Produced {out_qty} {output_item.unit_of_measure} of {output_item.code} "
            f"from {len(lines)} input(s)"
        ),
    )

    logger.info(
        "Production recorded",
        extra={
            "production_no": production.production_no,
            "output_item_id": output_item.pk,
            "output_quantity": str(out_qty),
            "warehouse_id": warehouse.pk,
            "source_warehouse_id": source.pk,
        },
    )
    return production


def record_production_from_bom(
    *,
    bom: BOM,
    output_quantity,
    warehouse: Warehouse,
    production_date=None,
    raw_materials_warehouse: Warehouse | None = None,
    remarks: str = "",
    user=None,
) -> Production:
    """Scale the BOM to `output_quantity` and record it as one production."""
    if not bom.is_active:
        raise ProductionValidationError(f"{bom.bom_no} is inactive")

    requirements = scale_bom(bom, output_quantity)
    return record_production(
        output_item=bom.finished_item,
        output_quantity=output_quantity,
        warehouse=warehouse,
        inputs=requirements,
        production_date=production_date,
        raw_materials_warehouse=raw_materials_warehouse,
        bom=bom,
        remarks=remarks,
        user=user,
    )


@transaction.atomic
def delete_production(production: Production, *, user=None) -> None:
    """
    Remove the production header and its input rows.

    The PRODUCTION movements it posted are NOT reversed; balances keep
    reflecting the consumed inputs and produced output.
    """
    production_no = production.production_no
    ProductionInput.objects.filter(production_id=production.pk).delete()
    Production.objects.filter(pk=production.pk).delete()

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type=DOCTYPE,
        entity_id=production_no,
        description=f"Deleted production {production_no} (stock movements preserved)",
    )
    logger.warning(
        "Production header deleted; stock movements preserved",
        extra={"production_no": production_no},
    )


@transaction.atomic
def reverse_production(production: Production, *, user=None, remarks: str = "") -> Production:
    """
    Undo a production with compensating PRODUCTION movements:
    output leaves the destination, inputs return to their source.
    """
    locked = Production.objects.select_for_update().get(pk=production.pk)
    if locked.is_reversed:
        raise ProductionReversalError(f"{locked.production_no} is already reversed")

    # raises InsufficientStockError when the output was already consumed
    require_available(locked.output_item, locked.warehouse, locked.output_quantity)

    note = remarks or f"Reversal of production: {locked.production_no}"

    record_movement(
        item=locked.output_item,
        warehouse=locked.warehouse,
        quantity=-locked.output_quantity,
        movement_type=StockMovement.MovementType.PRODUCTION,
        reference_doctype=DOCTYPE,
        reference_docno=locked.production_no,
        remarks=note,
        user=user,
    )
    for line in locked.inputs.select_related("item", "warehouse").order_by("id"):
        record_movement(
            item=line.item,
            warehouse=line.warehouse,
            quantity=line.quantity,
            movement_type=StockMovement.MovementType.PRODUCTION,
            reference_doctype=DOCTYPE,
            reference_docno=locked.production_no,
            remarks=note,
            user=user,
        )

    locked.is_reversed = True
    locked.reversed_at = timezone.now()
    locked.save(update_fields=["is_reversed", "reversed_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type=DOCTYPE,
        entity_id=locked.production_no,
        description=f"Reversed production {locked.production_no}",
    )
    return locked


def get_production_summary(item: Item) -> dict:
    row = Production.objects.filter(output_item_id=item.pk, is_reversed=False).aggregate(
        production_count=Count("id"),
        total_produced=Sum("output_quantity"),
        first_production=Min("production_date"),
        last_production=Max("production_date"),
    )
    row["total_produced"] = row["total_produced"] or ZERO_QTY
    return row
