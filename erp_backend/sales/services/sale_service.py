# sales/services/sale_service.py

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_MONEY, positive_quantity, to_money
from core.services.exceptions import InvalidAmountError
from core.services.numbering import PREFIX_SALE, next_document_number
from inventory.models import Item, StockMovement, Warehouse
from inventory.services.movements import record_movement, require_available
from sales.models import Sale
from sales.services.exceptions import SaleReversalError, SaleValidationError

logger = logging.getLogger("sales")

DOCTYPE = "Sale"


@transaction.atomic
def record_sale(
    *,
    item: Item,
    warehouse: Warehouse,
    quantity,
    unit_price,
    customer_name: str = "",
    sale_date=None,
    invoice_no: str = "",
    remarks: str = "",
    user=None,
) -> Sale:
    """
    CORE DIRECT-SALE SERVICE

    GUARANTEES:
    - Sufficiency checked at (item, warehouse) before any write
    - Sale header + negative SALE movement commit together or not at all
    """
    if item is None or not item.is_active:
        raise SaleValidationError("Active item is required")
    if warehouse is None or not warehouse.is_active:
        raise SaleValidationError("Active warehouse is required")

    try:
        qty = positive_quantity(quantity)
        price = to_money(unit_price, field="unit_price")
    except InvalidAmountError as exc:
        raise SaleValidationError(str(exc)) from exc

    if price < ZERO_MONEY:
        raise SaleValidationError("unit_price cannot be negative")

    # raises InsufficientStockError
    require_available(item, warehouse, qty)

    sale = Sale.objects.create(
        sale_no=next_document_number(PREFIX_SALE),
        item=item,
        warehouse=warehouse,
        quantity=qty,
        unit_price=price,
        total_amount=to_money(qty * price, field="total_amount"),
        customer_name=(customer_name or "").strip(),
        invoice_no=(invoice_no or "").strip(),
        sale_date=sale_date or timezone.localdate(),
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    record_movement(
        item=item,
        warehouse=warehouse,
        quantity=-qty,
        movement_type=StockMovement.MovementType.SALE,
        reference_doctype=DOCTYPE,
        reference_docno=sale.sale_no,
        remarks=f"Sale: {sale.sale_no}" + (f" to {sale.customer_name}" if sale.customer_name else ""),
        movement_date=sale.sale_date,
        user=user,
    )

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type=DOCTYPE,
        entity_id=sale.sale_no,
        description=f"Sold {qty} {item.unit_of_measure} of {item.code}",
    )

    logger.info(
        "Sale recorded",
        extra={
            "sale_no": sale.sale_no,
            "item_id": item.pk,
            "quantity": str(qty),
            "total_amount": str(sale.total_amount),
        },
    )
    return sale


@transaction.atomic
def delete_sale(sale: Sale, *, user=None) -> None:
    """
    Remove the sale header. The SALE movement stays in the ledger.
    """
    sale_no = sale.sale_no
    Sale.objects.filter(pk=sale.pk).delete()

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type=DOCTYPE,
        entity_id=sale_no,
        description=f"Deleted sale {sale_no} (stock movements preserved)",
    )
    logger.warning(
        "Sale header deleted; stock movements preserved",
        extra={"sale_no": sale_no},
    )


@transaction.atomic
def reverse_sale(sale: Sale, *, user=None, remarks: str = "") -> StockMovement:
    """Return the sold quantity to stock with a compensating SALE movement."""
    locked = Sale.objects.select_for_update().get(pk=sale.pk)
    if locked.is_reversed:
        raise SaleReversalError(f"Sale {locked.sale_no} is already reversed")

    movement = record_movement(
        item=locked.item,
        warehouse=locked.warehouse,
        quantity=locked.quantity,
        movement_type=StockMovement.MovementType.SALE,
        reference_doctype=DOCTYPE,
        reference_docno=locked.sale_no,
        remarks=remarks or f"Reversal of sale: {locked.sale_no}",
        user=user,
    )

    locked.is_reversed = True
    locked.reversed_at = timezone.now()
    locked.save(update_fields=["is_reversed", "reversed_at"])

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type=DOCTYPE,
        entity_id=locked.sale_no,
        description=f"Reversed sale {locked.sale_no}",
    )
    return movement
