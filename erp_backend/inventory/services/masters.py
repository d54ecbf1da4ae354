# inventory/services/masters.py

"""
ITEM & WAREHOUSE MASTERS

Rules:
- item / warehouse codes are unique (case-insensitive check)
- current_stock is never writable here (movements only)
- an item holding stock cannot be deactivated
"""

from __future__ import annotations

import logging

from django.db import transaction

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import to_money, to_quantity
from core.services.exceptions import InvalidAmountError
from inventory.models import Item, Warehouse
from inventory.services.exceptions import StockValidationError

logger = logging.getLogger("inventory")

ITEM_EDITABLE_FIELDS = {
    "name",
    "description",
    "category",
    "unit_of_measure",
    "is_raw_material",
    "is_finished_good",
    "is_purchased",
    "is_manufactured",
    "reorder_level",
    "standard_cost",
    "standard_selling_price",
    "is_active",
}

WAREHOUSE_EDITABLE_FIELDS = {"name", "location", "is_active"}


def _required_text(value, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise StockValidationError(f"{field} is required")
    return text


def _clean_item_numbers(fields: dict) -> dict:
    try:
        if "reorder_level" in fields:
            fields["reorder_level"] = to_quantity(
                fields["reorder_level"], field="reorder_level"
            )
        for key in ("standard_cost", "standard_selling_price"):
            if key in fields:
                fields[key] = to_money(fields[key], field=key)
    except InvalidAmountError as exc:
        raise StockValidationError(str(exc)) from exc

    for key in ("reorder_level", "standard_cost", "standard_selling_price"):
        if key in fields and fields[key] < 0:
            raise StockValidationError(f"{key} cannot be negative")
    return fields


@transaction.atomic
def create_item(
    *,
    code: str,
    name: str,
    unit_of_measure: str = Item.DEFAULT_UNIT,
    description: str = "",
    category: str = "",
    is_raw_material: bool = False,
    is_finished_good: bool = False,
    is_purchased: bool = True,
    is_manufactured: bool = False,
    reorder_level=0,
    standard_cost=0,
    standard_selling_price=0,
    user=None,
) -> Item:
    code = _required_text(code, "code")
    name = _required_text(name, "name")

    if Item.objects.filter(code__iexact=code).exists():
        raise StockValidationError(f"Item code {code} already exists")

    numbers = _clean_item_numbers(
        {
            "reorder_level": reorder_level,
            "standard_cost": standard_cost,
            "standard_selling_price": standard_selling_price,
        }
    )

    item = Item.objects.create(
        code=code,
        name=name,
        unit_of_measure=(unit_of_measure or Item.DEFAULT_UNIT).strip(),
        description=description or "",
        category=category or "",
        is_raw_material=bool(is_raw_material),
        is_finished_good=bool(is_finished_good),
        is_purchased=bool(is_purchased),
        is_manufactured=bool(is_manufactured),
        created_by=user if getattr(user, "is_authenticated", False) else None,
        **numbers,
    )

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type="Item",
        entity_id=item.code,
        description=f"Created item {item.code} ({item.name})",
    )
    return item


@transaction.atomic
def update_item(item: Item, *, user=None, **fields) -> Item:
    unknown = set(fields) - ITEM_EDITABLE_FIELDS
    if unknown:
        raise StockValidationError(
            f"Cannot update item fields: {', '.join(sorted(unknown))}"
        )

    if "name" in fields:
        fields["name"] = _required_text(fields["name"], "name")

    fields = _clean_item_numbers(fields)

    locked = Item.objects.select_for_update().get(pk=item.pk)
    for key, value in fields.items():
        setattr(locked, key, value)
    locked.save(update_fields=[*fields.keys(), "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="Item",
        entity_id=locked.code,
        description=f"Updated item {locked.code}: {', '.join(sorted(fields))}",
    )
    return locked


@transaction.atomic
def deactivate_item(item: Item, *, user=None) -> Item:
    locked = Item.objects.select_for_update().get(pk=item.pk)
    if locked.current_stock > 0:
        raise StockValidationError(
            f"Cannot delete item {locked.code} with existing stock"
        )

    locked.is_active = False
    locked.save(update_fields=["is_active", "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type="Item",
        entity_id=locked.code,
        description=f"Deactivated item {locked.code}",
    )
    return locked


@transaction.atomic
def create_warehouse(*, code: str, name: str, location: str = "", user=None) -> Warehouse:
    code = _required_text(code, "code")
    name = _required_text(name, "name")

    if Warehouse.objects.filter(code__iexact=code).exists():
        raise StockValidationError(f"Warehouse code {code} already exists")

    warehouse = Warehouse.objects.create(code=code, name=name, location=location or "")

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type="Warehouse",
        entity_id=warehouse.code,
        description=f"Created warehouse {warehouse.code} ({warehouse.name})",
    )
    return warehouse


@transaction.atomic
def update_warehouse(warehouse: Warehouse, *, user=None, **fields) -> Warehouse:
    unknown = set(fields) - WAREHOUSE_EDITABLE_FIELDS
    if unknown:
        raise StockValidationError(
            f"Cannot update warehouse fields: {', '.join(sorted(unknown))}"
        )
    if "name" in fields:
        fields["name"] = _required_text(fields["name"], "name")

    locked = Warehouse.objects.select_for_update().get(pk=warehouse.pk)
    for key, value in fields.items():
        setattr(locked, key, value)
    locked.save(update_fields=[*fields.keys(), "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="Warehouse",
        entity_id=locked.code,
        description=f"Updated warehouse {locked.code}: {', '.join(sorted(fields))}",
    )
    return locked


@transaction.atomic
def deactivate_warehouse(warehouse: Warehouse, *, user=None) -> Warehouse:
    locked = Warehouse.objects.select_for_update().get(pk=warehouse.pk)
    locked.is_active = False
    locked.save(update_fields=["is_active", "updated_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type="Warehouse",
        entity_id=locked.code,
        description=f"Deactivated warehouse {locked.code}",
    )
    return locked


def get_default_warehouse() -> Warehouse | None:
    return Warehouse.objects.filter(code=Warehouse.DEFAULT_CODE, is_active=True).first()
