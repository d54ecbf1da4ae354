# core/tests/test_reconcile_ledgers.py

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from core.services.reconciliation import run_reconciliation, run_startup_reconciliation
from inventory.models import StockBalance
from inventory.services.adjustments import adjust_stock
from inventory.services.masters import create_item, get_default_warehouse
from inventory.services.movements import get_balance
from receivables.models import Customer
from receivables.services.customer_service import create_customer
from receivables.services.invoice_service import create_invoice


class ReconciliationJobTests(TestCase):
    """
    Tests for the combined stock + receivables reconciliation job.

    GUARANTEES:
    - Drift in either ledger is reported and corrected
    - Dry runs report but commit nothing
    - The job is idempotent
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="RM-001", name="Resin")
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=10)

        self.customer = create_customer(name="Acme Ltd")
        create_invoice(
            customer=self.customer,
            invoice_date=timezone.localdate(),
            items=[{"description": "Work", "quantity": "1", "unit_price": "100.00"}],
        )

    def _drift(self):
        StockBalance.objects.filter(item=self.item).update(quantity=Decimal("3"))
        Customer.objects.filter(pk=self.customer.pk).update(current_balance=Decimal("0"))

    def test_clean_run_reports_nothing(self):
        report = run_reconciliation()
        self.assertFalse(report.changed)

    def test_drift_is_corrected_once(self):
        self._drift()

        report = run_reconciliation()

        self.assertTrue(report.changed)
        self.assertEqual(report.as_dict()["balances_corrected"], 1)
        self.assertEqual(report.as_dict()["customers_corrected"], 1)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("10"))
        self.assertFalse(run_reconciliation().changed)

    def test_dry_run_commits_nothing(self):
        self._drift()

        report = run_reconciliation(dry_run=True)

        self.assertTrue(report.changed)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("3"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

    @override_settings(RECONCILE_ON_STARTUP=False)
    def test_startup_hook_respects_setting(self):
        self.assertIsNone(run_startup_reconciliation())

    @override_settings(RECONCILE_ON_STARTUP=True)
    def test_startup_hook_runs_when_enabled(self):
        self._drift()
        report = run_startup_reconciliation()
        self.assertTrue(report.changed)


class ReconcileLedgersCommandTests(TestCase):
    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="RM-001", name="Resin")
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=5)

    def test_consistent_ledgers(self):
        out = StringIO()
        call_command("reconcile_ledgers", stdout=out)
        self.assertIn("Ledgers are consistent", out.getvalue())

    def test_strict_fails_on_drift(self):
        StockBalance.objects.filter(item=self.item).update(quantity=Decimal("0"))
        out = StringIO()

        with self.assertRaises(SystemExit) as ctx:
            call_command("reconcile_ledgers", "--strict", stdout=out)

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Drift found and corrected", out.getvalue())
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("5"))

    def test_dry_run_leaves_drift(self):
        StockBalance.objects.filter(item=self.item).update(quantity=Decimal("0"))
        out = StringIO()

        call_command("reconcile_ledgers", "--dry-run", stdout=out)

        self.assertIn("would be corrected", out.getvalue())
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("0"))

    def test_invalid_today(self):
        err = StringIO()
        with self.assertRaises(SystemExit):
            call_command("reconcile_ledgers", "--today", "01/02/2025", stderr=err, stdout=StringIO())
        self.assertIn("Invalid --today", err.getvalue())
