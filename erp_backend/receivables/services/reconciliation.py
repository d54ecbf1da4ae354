# receivables/services/reconciliation.py

"""
RECEIVABLES RECONCILIATION

Same pattern as stock reconciliation, for money:
- every invoice: paid := sum(allocations), balance := total - paid,
  status := derived (Overdue evaluated against `today`)
- every customer: current_balance := sum of open invoice balances

Only rows whose stored values differ are written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from receivables.models import Customer, Invoice
from receivables.services.ledger_service import (
    recalculate_customer_balance,
    recalculate_invoice,
)

logger = logging.getLogger("reconciliation")


@dataclass
class ReceivablesReconciliationResult:
    invoices_corrected: int = 0
    customers_corrected: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.invoices_corrected or self.customers_corrected)


@transaction.atomic
def reconcile_receivables(*, today=None) -> ReceivablesReconciliationResult:
    result = ReceivablesReconciliationResult()

    for invoice in Invoice.objects.select_for_update().order_by("id"):
        before = (invoice.paid_amount, invoice.balance_amount, invoice.status)
        if recalculate_invoice(invoice, today=today):
            result.invoices_corrected += 1
            logger.info(
                "Fixing invoice %s: %s -> %s",
                invoice.invoice_no,
                before,
                (invoice.paid_amount, invoice.balance_amount, invoice.status),
                extra={"invoice_no": invoice.invoice_no},
            )

    for customer in Customer.objects.select_for_update().order_by("id"):
        before = customer.current_balance
        if recalculate_customer_balance(customer):
            result.customers_corrected += 1
            logger.info(
                "Fixing customer %s balance: %s -> %s",
                customer.customer_code,
                before,
                customer.current_balance,
                extra={"customer_code": customer.customer_code},
            )

    return result
