# core/services/reconciliation.py

"""
======================================================
PATH: core/services/reconciliation.py
======================================================
LEDGER RECONCILIATION JOB

Rebuilds every derived projection from its source log in one transaction:
- stock:       balances / current_stock from StockMovement
- receivables: invoice paid/balance/status from allocations,
               customer current_balance from open invoices

Idempotent: running it on a consistent database writes nothing, and a
second run right after a first one reports no changes.

Runs once at process start (backend.wsgi / backend.asgi) when
RECONCILE_ON_STARTUP is enabled, and on demand via
`python manage.py reconcile_ledgers`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction

from inventory.services.reconciliation import (
    StockReconciliationResult,
    reconcile_stock,
)
from receivables.services.reconciliation import (
    ReceivablesReconciliationResult,
    reconcile_receivables,
)

logger = logging.getLogger("reconciliation")


@dataclass(frozen=True)
class ReconciliationReport:
    stock: StockReconciliationResult
    receivables: ReceivablesReconciliationResult
    dry_run: bool = False

    @property
    def changed(self) -> bool:
        return self.stock.changed or self.receivables.changed

    def as_dict(self) -> dict:
        return {
            "balances_corrected": self.stock.balances_corrected,
            "balances_created": self.stock.balances_created,
            "orphans_removed": self.stock.orphans_removed,
            "items_synced": self.stock.items_synced,
            "invoices_corrected": self.receivables.invoices_corrected,
            "customers_corrected": self.receivables.customers_corrected,
        }


def run_reconciliation(*, today=None, dry_run: bool = False) -> ReconciliationReport:
    with transaction.atomic():
        stock = reconcile_stock()
        receivables = reconcile_receivables(today=today)
        report = ReconciliationReport(stock=stock, receivables=receivables, dry_run=dry_run)

        if dry_run:
            transaction.set_rollback(True)

    if report.changed:
        logger.warning(
            "Ledger reconciliation corrected drift" + (" (dry run)" if dry_run else ""),
            extra=report.as_dict(),
        )
    else:
        logger.info("Ledger reconciliation found no drift", extra=report.as_dict())
    return report


def run_startup_reconciliation() -> ReconciliationReport | None:
    if not getattr(settings, "RECONCILE_ON_STARTUP", False):
        logger.debug("Startup reconciliation disabled")
        return None

    logger.info("Running startup ledger reconciliation")
    return run_reconciliation()
