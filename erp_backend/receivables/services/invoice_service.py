# receivables/services/invoice_service.py

"""
======================================================
PATH: receivables/services/invoice_service.py
======================================================
INVOICE SERVICE

Canonical flow (create_invoice, atomic):
1) validate lines (quantity > 0, unit_price >= 0) and dates
2) invoice_no = caller value, or INV-<YYYY>-<NNNN> when blank
3) insert Invoice + InvoiceItem rows (total = sum of line amounts)
4) non-draft invoices post an INVOICE debit to the customer ledger
5) recompute invoice paid/balance/status and the customer balance

Edits to an issued invoice's total post an ADJUSTMENT ledger row for the
difference; cancelling posts an ADJUSTMENT credit for the open balance.
The ledger is never rewritten.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.db import transaction

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_MONEY, positive_quantity, to_money
from core.services.exceptions import InvalidAmountError
from core.services.lines import line_value
from core.services.numbering import PREFIX_INVOICE, next_document_number
from receivables.models import Customer, CustomerLedgerEntry, Invoice, InvoiceItem
from receivables.services.exceptions import InvoiceStateError, ReceivablesValidationError
from receivables.services.ledger_service import (
    create_ledger_entry,
    recalculate_customer_balance,
    recalculate_invoice,
)

logger = logging.getLogger("receivables")

CREATABLE_STATUSES = (Invoice.STATUS_DRAFT, Invoice.STATUS_UNPAID)


def _build_lines(items) -> list[InvoiceItem]:
    if not items:
        raise ReceivablesValidationError("Invoice needs at least one line")

    lines = []
    for index, raw in enumerate(items, start=1):
        try:
            qty = positive_quantity(line_value(raw, "quantity"))
            price = to_money(line_value(raw, "unit_price"), field="unit_price")
        except InvalidAmountError as exc:
            raise ReceivablesValidationError(f"Line {index}: {exc}") from exc
        if price < ZERO_MONEY:
            raise ReceivablesValidationError(f"Line {index}: unit_price cannot be negative")

        item = line_value(raw, "item")
        description = (line_value(raw, "description") or "").strip()
        if not description and item is not None:
            description = item.name

        lines.append(
            InvoiceItem(
                item=item,
                description=description,
                quantity=qty,
                unit_price=price,
                amount=to_money(qty * price, field="amount"),
            )
        )
    return lines


def _total(lines: list[InvoiceItem]) -> Decimal:
    return to_money(sum((line.amount for line in lines), ZERO_MONEY), field="total_amount")


def _post_invoice_debit(invoice: Invoice) -> None:
    create_ledger_entry(
        customer=invoice.customer,
        transaction_type=CustomerLedgerEntry.INVOICE,
        reference_no=invoice.invoice_no,
        debit=invoice.total_amount,
        description=f"Invoice {invoice.invoice_no}",
        transaction_date=invoice.invoice_date,
    )


@transaction.atomic
def create_invoice(
    *,
    customer: Customer,
    invoice_date,
    items,
    due_date=None,
    invoice_no: str | None = None,
    status: str = Invoice.STATUS_UNPAID,
    notes: str = "",
    terms: str = "",
    user=None,
    today=None,
) -> Invoice:
    if customer is None or not customer.is_active:
        raise ReceivablesValidationError("Active customer is required")
    if invoice_date is None:
        raise ReceivablesValidationError("invoice_date is required")
    if status not in CREATABLE_STATUSES:
        raise ReceivablesValidationError(
            f"New invoices must be {' or '.join(CREATABLE_STATUSES)}"
        )

    due_date = due_date or (invoice_date + timedelta(days=customer.payment_terms_days))
    if due_date < invoice_date:
        raise ReceivablesValidationError("due_date cannot be before invoice_date")

    lines = _build_lines(items)
    total = _total(lines)
    if total <= ZERO_MONEY:
        raise ReceivablesValidationError("Invoice total must be greater than zero")

    invoice_no = (invoice_no or "").strip()
    if invoice_no:
        if Invoice.objects.filter(invoice_no=invoice_no).exists():
            raise ReceivablesValidationError(f"Invoice number {invoice_no} already exists")
    else:
        invoice_no = next_document_number(PREFIX_INVOICE)

    invoice = Invoice.objects.create(
        invoice_no=invoice_no,
        customer=customer,
        invoice_date=invoice_date,
        due_date=due_date,
        status=status,
        total_amount=total,
        paid_amount=ZERO_MONEY,
        balance_amount=total,
        notes=notes or "",
        terms=terms or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    for line in lines:
        line.invoice = invoice
    InvoiceItem.objects.bulk_create(lines)

    if invoice.status != Invoice.STATUS_DRAFT:
        _post_invoice_debit(invoice)

    recalculate_invoice(invoice, today=today)
    recalculate_customer_balance(customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type="Invoice",
        entity_id=invoice.invoice_no,
        description=f"Created invoice {invoice.invoice_no} for {customer.customer_code}: {total}",
    )
    logger.info(
        "Invoice created",
        extra={
            "invoice_no": invoice.invoice_no,
            "customer_code": customer.customer_code,
            "total_amount": str(total),
            "status": invoice.status,
        },
    )
    return invoice


@transaction.atomic
def issue_invoice(invoice: Invoice, *, user=None, today=None) -> Invoice:
    """Move a Draft invoice into the receivable (posts its INVOICE debit)."""
    locked = Invoice.objects.select_for_update().select_related("customer").get(pk=invoice.pk)
    if locked.status != Invoice.STATUS_DRAFT:
        raise InvoiceStateError(f"Invoice {locked.invoice_no} is not a draft")

    locked.status = Invoice.STATUS_UNPAID
    locked.save(update_fields=["status", "updated_at"])

    _post_invoice_debit(locked)
    recalculate_invoice(locked, today=today)
    recalculate_customer_balance(locked.customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="Invoice",
        entity_id=locked.invoice_no,
        description=f"Issued invoice {locked.invoice_no}",
    )
    return locked


@transaction.atomic
def update_invoice(
    invoice: Invoice,
    *,
    items=None,
    due_date=None,
    notes: str | None = None,
    terms: str | None = None,
    user=None,
    today=None,
) -> Invoice:
    """
    Edit an invoice. Replacing `items` recomputes the total; on an issued
    invoice the difference is posted as an ADJUSTMENT ledger row.
    """
    locked = Invoice.objects.select_for_update().select_related("customer").get(pk=invoice.pk)
    if locked.status == Invoice.STATUS_CANCELLED:
        raise InvoiceStateError(f"Invoice {locked.invoice_no} is cancelled")

    update_fields = ["updated_at"]

    if due_date is not None:
        if due_date < locked.invoice_date:
            raise ReceivablesValidationError("due_date cannot be before invoice_date")
        locked.due_date = due_date
        update_fields.append("due_date")
    if notes is not None:
        locked.notes = notes
        update_fields.append("notes")
    if terms is not None:
        locked.terms = terms
        update_fields.append("terms")

    old_total = locked.total_amount
    if items is not None:
        lines = _build_lines(items)
        new_total = _total(lines)
        if new_total <= ZERO_MONEY:
            raise ReceivablesValidationError("Invoice total must be greater than zero")
        if new_total < locked.paid_amount:
            raise ReceivablesValidationError(
                f"Invoice total {new_total} cannot be below the amount already paid "
                f"({locked.paid_amount})"
            )

        locked.items.all().delete()
        for line in lines:
            line.invoice = locked
        InvoiceItem.objects.bulk_create(lines)

        locked.total_amount = new_total
        update_fields.append("total_amount")

    locked.save(update_fields=update_fields)

    difference = locked.total_amount - old_total
    if difference != 0 and locked.status != Invoice.STATUS_DRAFT:
        create_ledger_entry(
            customer=locked.customer,
            transaction_type=CustomerLedgerEntry.ADJUSTMENT,
            reference_no=locked.invoice_no,
            debit=difference if difference > 0 else ZERO_MONEY,
            credit=-difference if difference < 0 else ZERO_MONEY,
            description=f"Invoice {locked.invoice_no} amended: {old_total} -> {locked.total_amount}",
        )

    recalculate_invoice(locked, today=today)
    recalculate_customer_balance(locked.customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="Invoice",
        entity_id=locked.invoice_no,
        description=f"Updated invoice {locked.invoice_no}",
    )
    return locked


@transaction.atomic
def cancel_invoice(invoice: Invoice, *, user=None, reason: str = "") -> Invoice:
    locked = Invoice.objects.select_for_update().select_related("customer").get(pk=invoice.pk)
    if locked.status == Invoice.STATUS_CANCELLED:
        raise InvoiceStateError(f"Invoice {locked.invoice_no} is already cancelled")
    if locked.allocations.exists():
        raise InvoiceStateError(
            f"Invoice {locked.invoice_no} has payments allocated; delete them first"
        )

    was_issued = locked.status != Invoice.STATUS_DRAFT

    locked.status = Invoice.STATUS_CANCELLED
    locked.save(update_fields=["status", "updated_at"])

    if was_issued:
        create_ledger_entry(
            customer=locked.customer,
            transaction_type=CustomerLedgerEntry.ADJUSTMENT,
            reference_no=locked.invoice_no,
            credit=locked.balance_amount,
            description=f"Invoice {locked.invoice_no} cancelled" + (f": {reason}" if reason else ""),
        )

    recalculate_customer_balance(locked.customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_UPDATE,
        entity_type="Invoice",
        entity_id=locked.invoice_no,
        description=f"Cancelled invoice {locked.invoice_no}",
    )
    return locked
