# receivables/services/ledger_service.py

"""
======================================================
PATH: receivables/services/ledger_service.py
======================================================
AR LEDGER & DERIVATIONS

- create_ledger_entry(): running balance is computed from the customer's
  immediately preceding entry by insertion order (id), not by
  transaction_date. Backdated entries therefore do not re-thread the chain.
- derive_invoice_status(): pure function of (balance, total, due_date).
- recalculate_invoice() / recalculate_customer_balance(): full
  recomputation from allocations / open invoices, never incremental.
  Both return True only when a stored value actually changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.services.amounts import ZERO_MONEY, to_money
from core.services.exceptions import InvalidAmountError
from receivables.models import Customer, CustomerLedgerEntry, Invoice
from receivables.services.exceptions import ReceivablesValidationError

logger = logging.getLogger("receivables")


def derive_invoice_status(
    *,
    balance: Decimal,
    total: Decimal,
    due_date=None,
    today=None,
    current_status: str | None = None,
) -> str:
    """
    Paid            balance == 0 and total > 0
    Partially Paid  0 < balance < total
    Unpaid          otherwise
    Overdue         overrides any non-Paid result when due_date < today
                    and balance > 0
    Draft / Cancelled are explicit states and are returned unchanged.
    """
    if current_status in Invoice.FIXED_STATUSES:
        return current_status

    if balance == 0 and total > 0:
        status = Invoice.STATUS_PAID
    elif 0 < balance < total:
        status = Invoice.STATUS_PARTIALLY_PAID
    else:
        status = Invoice.STATUS_UNPAID

    today = today or timezone.localdate()
    if status != Invoice.STATUS_PAID and due_date and due_date < today and balance > 0:
        status = Invoice.STATUS_OVERDUE

    return status


@transaction.atomic
def create_ledger_entry(
    *,
    customer: Customer,
    transaction_type: str,
    reference_no: str = "",
    debit=0,
    credit=0,
    description: str = "",
    transaction_date=None,
) -> CustomerLedgerEntry:
    try:
        debit = to_money(debit, field="debit")
        credit = to_money(credit, field="credit")
    except InvalidAmountError as exc:
        raise ReceivablesValidationError(str(exc)) from exc

    if debit < 0 or credit < 0:
        raise ReceivablesValidationError("debit and credit cannot be negative")
    if debit == 0 and credit == 0:
        raise ReceivablesValidationError("Ledger entry needs a debit or a credit amount")

    # serialize writers per customer so the chain has no gaps
    Customer.objects.select_for_update().filter(pk=customer.pk).first()

    last_balance = (
        CustomerLedgerEntry.objects.filter(customer_id=customer.pk)
        .order_by("-id")
        .values_list("balance", flat=True)
        .first()
    )
    previous = last_balance if last_balance is not None else ZERO_MONEY

    entry = CustomerLedgerEntry(
        customer=customer,
        transaction_date=transaction_date or timezone.localdate(),
        transaction_type=transaction_type,
        reference_no=reference_no or "",
        debit=debit,
        credit=credit,
        balance=to_money(previous + debit - credit, field="balance"),
        description=description or "",
    )
    entry.save()
    return entry


def recalculate_invoice(invoice: Invoice, *, today=None) -> bool:
    paid = to_money(
        invoice.allocations.aggregate(total=Sum("amount")).get("total") or ZERO_MONEY,
        field="paid_amount",
    )
    balance = to_money(invoice.total_amount - paid, field="balance_amount")
    status = derive_invoice_status(
        balance=balance,
        total=invoice.total_amount,
        due_date=invoice.due_date,
        today=today,
        current_status=invoice.status,
    )

    if (
        invoice.paid_amount == paid
        and invoice.balance_amount == balance
        and invoice.status == status
    ):
        return False

    logger.debug(
        "Invoice recalculated",
        extra={
            "invoice_no": invoice.invoice_no,
            "paid_amount": str(paid),
            "balance_amount": str(balance),
            "status": status,
        },
    )
    invoice.paid_amount = paid
    invoice.balance_amount = balance
    invoice.status = status
    invoice.save(update_fields=["paid_amount", "balance_amount", "status", "updated_at"])
    return True


def open_invoice_balance(customer: Customer) -> Decimal:
    total = (
        Invoice.objects.filter(customer_id=customer.pk, status__in=Invoice.OPEN_STATUSES)
        .aggregate(total=Sum("balance_amount"))
        .get("total")
    )
    return to_money(total or ZERO_MONEY, field="current_balance")


def recalculate_customer_balance(customer: Customer) -> bool:
    expected = open_invoice_balance(customer)
    # compare against the stored row; callers may hold a stale instance
    updated = (
        Customer.objects.filter(pk=customer.pk)
        .exclude(current_balance=expected)
        .update(current_balance=expected)
    )
    customer.current_balance = expected
    return bool(updated)


def get_customer_ledger(customer: Customer):
    return CustomerLedgerEntry.objects.filter(customer_id=customer.pk).order_by("id")


@dataclass
class CustomerStatement:
    customer: Customer
    opening_balance: Decimal
    closing_balance: Decimal
    entries: list = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return sum((e.debit for e in self.entries), ZERO_MONEY)

    @property
    def total_credit(self) -> Decimal:
        return sum((e.credit for e in self.entries), ZERO_MONEY)


def get_customer_statement(customer: Customer, *, date_from=None, date_to=None) -> CustomerStatement:
    """
    Ledger rows in [date_from, date_to], in insertion order.

    opening_balance is the running balance of the last row dated before
    date_from; closing_balance is the running balance of the last row in
    the window (or the opening balance when the window is empty).
    """
    ledger = get_customer_ledger(customer)

    opening = ZERO_MONEY
    if date_from:
        before = (
            ledger.filter(transaction_date__lt=date_from)
            .order_by("-id")
            .values_list("balance", flat=True)
            .first()
        )
        opening = before if before is not None else ZERO_MONEY
        ledger = ledger.filter(transaction_date__gte=date_from)
    if date_to:
        ledger = ledger.filter(transaction_date__lte=date_to)

    entries = list(ledger)
    closing = entries[-1].balance if entries else opening
    return CustomerStatement(
        customer=customer,
        opening_balance=opening,
        closing_balance=closing,
        entries=entries,
    )
