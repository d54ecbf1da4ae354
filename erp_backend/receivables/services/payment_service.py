# receivables/services/payment_service.py

"""
======================================================
PATH: receivables/services/payment_service.py
======================================================
CUSTOMER PAYMENT SERVICE

create_payment() (atomic):
1) validate amount > 0, at least one allocation, each allocation > 0
2) every invoice exists, belongs to the paying customer, is open and
   can absorb its allocation
3) sum(allocations) == amount (fixed-point, ALLOCATION_TOLERANCE)
4) insert Payment (PAY<NNN>) + PaymentAllocation rows
5) recompute every touched invoice from its full allocation sum
6) one PAYMENT credit on the customer ledger for the full amount
7) recompute the customer's current_balance from open invoices

delete_payment() removes the payment and its allocations, posts an
ADJUSTMENT debit that reverses the PAYMENT credit, then recomputes.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction

from core.models import ActivityLog
from core.services.activity import log_activity
from core.services.amounts import ZERO_MONEY, positive_money, to_money
from core.services.exceptions import InvalidAmountError
from core.services.numbering import PREFIX_PAYMENT, next_sequence_code
from receivables.models import (
    Customer,
    CustomerLedgerEntry,
    Invoice,
    Payment,
    PaymentAllocation,
)
from receivables.services.exceptions import (
    AllocationMismatchError,
    InvoiceOwnershipError,
    InvoiceStateError,
    ReceivablesValidationError,
)
from receivables.services.ledger_service import (
    create_ledger_entry,
    recalculate_customer_balance,
    recalculate_invoice,
)

logger = logging.getLogger("payments")

# Money is fixed-point, so allocations must match the payment exactly.
ALLOCATION_TOLERANCE = Decimal("0.00")


def _resolve_invoice(raw, index: int, customer: Customer) -> Invoice:
    ref = raw.get("invoice") if isinstance(raw, dict) else getattr(raw, "invoice", None)
    if ref is None:
        raise ReceivablesValidationError(f"Allocation {index}: invoice is required")

    invoice_id = ref.pk if isinstance(ref, Invoice) else ref
    try:
        invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
    except (Invoice.DoesNotExist, ValueError, TypeError) as exc:
        logger.error(
            "Allocated invoice not found",
            extra={"invoice_id": str(invoice_id), "customer_code": customer.customer_code},
        )
        raise InvoiceOwnershipError(f"Allocation {index}: invoice not found") from exc

    if invoice.customer_id != customer.pk:
        logger.error(
            "Allocated invoice belongs to another customer",
            extra={"invoice_no": invoice.invoice_no, "customer_code": customer.customer_code},
        )
        raise InvoiceOwnershipError(
            f"Invoice {invoice.invoice_no} does not belong to customer {customer.customer_code}"
        )

    if invoice.status in Invoice.FIXED_STATUSES:
        raise InvoiceStateError(
            f"Invoice {invoice.invoice_no} is {invoice.status} and cannot take payments"
        )
    return invoice


def _allocation_amount(raw, index: int) -> Decimal:
    value = raw.get("amount") if isinstance(raw, dict) else getattr(raw, "amount", None)
    try:
        return positive_money(value, field=f"Allocation {index} amount")
    except InvalidAmountError as exc:
        raise ReceivablesValidationError(str(exc)) from exc


@transaction.atomic
def create_payment(
    *,
    customer: Customer,
    payment_date,
    amount,
    allocations,
    payment_method: str = "Cash",
    reference_no: str = "",
    notes: str = "",
    user=None,
    today=None,
) -> Payment:
    """
    CREATE CUSTOMER PAYMENT (atomic)
    """
    logger.info(
        "Initiating customer payment",
        extra={
            "customer_id": getattr(customer, "pk", None),
            "amount": str(amount),
            "allocation_count": len(allocations or []),
        },
    )

    if customer is None:
        raise ReceivablesValidationError("customer is required")
    if payment_date is None:
        raise ReceivablesValidationError("payment_date is required")

    try:
        amt = positive_money(amount)
    except InvalidAmountError as exc:
        logger.error("Invalid payment amount", extra={"amount": str(amount)})
        raise ReceivablesValidationError(str(exc)) from exc

    if not allocations:
        raise ReceivablesValidationError("At least one invoice allocation is required")

    resolved: list[tuple[Invoice, Decimal]] = []
    seen = set()
    for index, raw in enumerate(allocations, start=1):
        alloc_amount = _allocation_amount(raw, index)
        invoice = _resolve_invoice(raw, index, customer)
        if invoice.pk in seen:
            raise ReceivablesValidationError(
                f"Invoice {invoice.invoice_no} is allocated more than once"
            )
        seen.add(invoice.pk)

        if alloc_amount > invoice.balance_amount:
            raise ReceivablesValidationError(
                f"Allocation {alloc_amount} exceeds balance {invoice.balance_amount} "
                f"of invoice {invoice.invoice_no}"
            )
        resolved.append((invoice, alloc_amount))

    allocated = to_money(sum((a for _, a in resolved), ZERO_MONEY))
    if abs(allocated - amt) > ALLOCATION_TOLERANCE:
        logger.error(
            "Allocation total does not match payment amount",
            extra={"amount": str(amt), "allocated": str(allocated)},
        )
        raise AllocationMismatchError(
            f"Allocated total {allocated} does not match payment amount {amt}"
        )

    payment = Payment.objects.create(
        payment_no=next_sequence_code(PREFIX_PAYMENT),
        customer=customer,
        payment_date=payment_date,
        amount=amt,
        payment_method=(payment_method or "Cash").strip(),
        reference_no=(reference_no or "").strip(),
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    PaymentAllocation.objects.bulk_create(
        [
            PaymentAllocation(payment=payment, invoice=invoice, amount=alloc_amount)
            for invoice, alloc_amount in resolved
        ]
    )

    for invoice, _ in resolved:
        recalculate_invoice(invoice, today=today)

    invoice_numbers = ", ".join(invoice.invoice_no for invoice, _ in resolved)
    create_ledger_entry(
        customer=customer,
        transaction_type=CustomerLedgerEntry.PAYMENT,
        reference_no=payment.payment_no,
        credit=amt,
        description=f"Payment against {invoice_numbers}",
        transaction_date=payment_date,
    )

    recalculate_customer_balance(customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_CREATE,
        entity_type="Payment",
        entity_id=payment.payment_no,
        description=f"Received {amt} from {customer.customer_code} against {invoice_numbers}",
    )
    logger.info(
        "Customer payment recorded",
        extra={
            "payment_no": payment.payment_no,
            "customer_code": customer.customer_code,
            "amount": str(amt),
            "invoices": invoice_numbers,
        },
    )
    return payment


@transaction.atomic
def delete_payment(payment: Payment, *, user=None, today=None) -> None:
    locked = Payment.objects.select_for_update().select_related("customer").get(pk=payment.pk)
    customer = locked.customer
    payment_no = locked.payment_no
    amount = locked.amount

    invoice_ids = list(locked.allocations.values_list("invoice_id", flat=True))
    locked.allocations.all().delete()
    locked.delete()

    for invoice in Invoice.objects.select_for_update().filter(pk__in=invoice_ids).order_by("id"):
        recalculate_invoice(invoice, today=today)

    create_ledger_entry(
        customer=customer,
        transaction_type=CustomerLedgerEntry.ADJUSTMENT,
        reference_no=payment_no,
        debit=amount,
        description=f"Reversal of payment {payment_no}",
    )

    recalculate_customer_balance(customer)

    log_activity(
        user=user,
        action=ActivityLog.ACTION_DELETE,
        entity_type="Payment",
        entity_id=payment_no,
        description=f"Deleted payment {payment_no} ({amount})",
    )
    logger.warning(
        "Customer payment deleted",
        extra={"payment_no": payment_no, "customer_code": customer.customer_code},
    )
