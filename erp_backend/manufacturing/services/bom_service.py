# manufacturing/services/bom_service.py

"""
======================================================
PATH: manufacturing/services/bom_service.py
======================================================
BOM SERVICE

Rules:
- base output quantity > 0
- at least one line, each line quantity > 0
- one line per raw material (no duplicates)
- the finished item cannot be one of its own inputs
- a BOM used by any production cannot be deleted (deactivate instead)

scale_bom() is pure: it reads the BOM and returns scaled requirements,
without touching stock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import FOURPLACES, positive_quantity
from core.services.exceptions import InvalidAmountError
from core.services.lines import line_value
from core.services.numbering import PREFIX_BOM, next_document_number
from inventory.models import Item
from manufacturing.models import BOM, BOMItem
from manufacturing.services.exceptions import BOMInUseError, BOMValidationError

logger = logging.getLogger("manufacturing")


@dataclass(frozen=True)
class ScaledRequirement:
    item: Item
    quantity: Decimal


def _clean_lines(finished_item: Item, items) -> list[tuple[Item, Decimal]]:
    if not items:
        raise BOMValidationError("BOM needs at least one raw material")

    cleaned = []
    seen = set()
    for index, line in enumerate(items, start=1):
        item = line_value(line, "item")
        if item is None:
            raise BOMValidationError(f"Line {index}: item is required")
        if item.pk == finished_item.pk:
            raise BOMValidationError("Finished item cannot be its own raw material")
        if item.pk in seen:
            raise BOMValidationError(f"Line {index}: {item.code} is listed twice")
        seen.add(item.pk)

        try:
            qty = positive_quantity(line_value(line, "quantity"))
        except InvalidAmountError as exc:
            raise BOMValidationError(f"Line {index}: {exc}") from exc

        cleaned.append((item, qty))
    return cleaned


def _base_quantity(value) -> Decimal:
    try:
        return positive_quantity(value, field="quantity")
    except InvalidAmountError as exc:
        raise BOMValidationError(str(exc)) from exc


@transaction.atomic
def create_bom(
    *,
    finished_item: Item,
    quantity,
    items,
    name: str = "",
    description: str = "",
    is_active: bool = True,
    user=None,
) -> BOM:
    if finished_item is None:
        raise BOMValidationError("finished_item is required")

    base = _base_quantity(quantity)
    lines = _clean_lines(finished_item, items)

    bom = BOM.objects.create(
        bom_no=next_document_number(PREFIX_BOM),
        name=(name or "").strip() or f"BOM for {finished_item.name}",
        finished_item=finished_item,
        quantity=base,
        description=description or "",
        is_active=bool(is_active),
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    BOMItem.objects.bulk_create(
        [BOMItem(bom=bom, item=item, quantity=qty) for item, qty in lines]
    )

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type="BOM",
        entity_id=bom.bom_no,
        description=f"Created {bom.bom_no} for {finished_item.code} ({len(lines)} lines)",
    )
    return bom


@transaction.atomic
def update_bom(
    bom: BOM,
    *,
    name: str | None = None,
    quantity=None,
    description: str | None = None,
    is_active: bool | None = None,
    items=None,
    user=None,
) -> BOM:
    """
    Update header fields. When `items` is given, all lines are replaced.
    """
    locked = BOM.objects.select_for_update().get(pk=bom.pk)

    if name is not None:
        locked.name = name.strip() or locked.name
    if quantity is not None:
        locked.quantity = _base_quantity(quantity)
    if description is not None:
        locked.description = description
    if is_active is not None:
        locked.is_active = bool(is_active)

    if items is not None:
        lines = _clean_lines(locked.finished_item, items)
        locked.items.all().delete()
        BOMItem.objects.bulk_create(
            [BOMItem(bom=locked, item=item, quantity=qty) for item, qty in lines]
        )

    locked.save()

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="BOM",
        entity_id=locked.bom_no,
        description=f"Updated {locked.bom_no}",
    )
    return locked


@transaction.atomic
def toggle_bom_active(bom: BOM, *, user=None) -> bool:
    locked = BOM.objects.select_for_update().get(pk=bom.pk)
    locked.is_active = not locked.is_active
    locked.save(update_fields=["is_active", "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="BOM",
        entity_id=locked.bom_no,
        description=f"{'Activated' if locked.is_active else 'Deactivated'} {locked.bom_no}",
    )
    bom.is_active = locked.is_active
    return locked.is_active


@transaction.atomic
def delete_bom(bom: BOM, *, user=None) -> None:
    if bom.productions.exists():
        raise BOMInUseError("Cannot delete BOM: It has been used in production records")

    bom_no = bom.bom_no
    bom.delete()

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type="BOM",
        entity_id=bom_no,
        description=f"Deleted {bom_no}",
    )


def get_active_boms_for_item(item: Item):
    return BOM.objects.filter(finished_item_id=item.pk, is_active=True).order_by("-id")


def scale_bom(bom: BOM, requested_output_quantity) -> list[ScaledRequirement]:
    """
    scaled = line.quantity * (requested / bom.quantity), rounded to 4 dp.
    """
    try:
        requested = positive_quantity(
            requested_output_quantity, field="requested_output_quantity"
        )
    except InvalidAmountError as exc:
        raise BOMValidationError(str(exc)) from exc

    if not bom.quantity or bom.quantity <= 0:
        raise BOMValidationError(f"{bom.bom_no} has no base output quantity")

    ratio = requested / bom.quantity
    return [
        ScaledRequirement(
            item=line.item,
            quantity=(line.quantity * ratio).quantize(FOURPLACES, rounding=ROUND_HALF_UP),
        )
        for line in bom.items.select_related("item").order_by("id")
    ]
