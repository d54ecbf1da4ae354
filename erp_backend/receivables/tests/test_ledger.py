# receivables/tests/test_ledger.py

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from receivables.models import Customer, CustomerLedgerEntry, Invoice
from receivables.serializers import CustomerCommandSerializer, InvoiceCommandSerializer
from receivables.services.customer_service import (
    create_customer,
    deactivate_customer,
    update_customer,
)
from receivables.services.exceptions import (
    CustomerInUseError,
    InvoiceStateError,
    ReceivablesValidationError,
)
from receivables.services.invoice_service import (
    cancel_invoice,
    create_invoice,
    issue_invoice,
    update_invoice,
)
from receivables.services.ledger_service import (
    create_ledger_entry,
    derive_invoice_status,
    get_customer_statement,
)
from receivables.services.reconciliation import reconcile_receivables


class InvoiceStatusDerivationTests(SimpleTestCase):
    """
    GUARANTEES:
    - Paid / Partially Paid / Unpaid follow balance vs total
    - Overdue overrides anything but Paid once due_date has passed
    - Draft and Cancelled are never re-derived
    """

    today = date(2025, 6, 1)

    def _derive(self, balance, total="100.00", due=date(2025, 6, 30), status=None):
        return derive_invoice_status(
            balance=Decimal(balance),
            total=Decimal(total),
            due_date=due,
            today=self.today,
            current_status=status,
        )

    def test_paid(self):
        self.assertEqual(self._derive("0.00"), Invoice.STATUS_PAID)

    def test_partially_paid(self):
        self.assertEqual(self._derive("40.00"), Invoice.STATUS_PARTIALLY_PAID)

    def test_unpaid(self):
        self.assertEqual(self._derive("100.00"), Invoice.STATUS_UNPAID)

    def test_overdue(self):
        self.assertEqual(self._derive("40.00", due=date(2025, 5, 1)), Invoice.STATUS_OVERDUE)

    def test_paid_is_never_overdue(self):
        self.assertEqual(self._derive("0.00", due=date(2025, 5, 1)), Invoice.STATUS_PAID)

    def test_fixed_statuses_kept(self):
        self.assertEqual(
            self._derive("100.00", status=Invoice.STATUS_DRAFT), Invoice.STATUS_DRAFT
        )
        self.assertEqual(
            self._derive("100.00", status=Invoice.STATUS_CANCELLED), Invoice.STATUS_CANCELLED
        )


class CustomerLedgerTests(TestCase):
    """
    Tests for the running-balance customer ledger.

    GUARANTEES:
    - Running balance = previous balance + debit - credit, by insertion order
    - Ledger rows are immutable
    - Opening balances land on the ledger, not in current_balance
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.customer = create_customer(name="Acme Ltd")

    def test_running_balance_chain(self):
        create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.INVOICE,
            reference_no="INV-A",
            debit="500",
        )
        create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.PAYMENT,
            reference_no="PAY-A",
            credit="200",
        )
        # backdated row still chains from the latest inserted row
        last = create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.ADJUSTMENT,
            reference_no="ADJ-A",
            debit="50",
            transaction_date=date(2000, 1, 1),
        )
        self.assertEqual(last.balance, Decimal("350.00"))

    def test_entry_needs_an_amount(self):
        with self.assertRaises(ReceivablesValidationError):
            create_ledger_entry(
                customer=self.customer,
                transaction_type=CustomerLedgerEntry.ADJUSTMENT,
            )

    def test_ledger_rows_are_immutable(self):
        entry = create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.INVOICE,
            debit="10",
        )
        entry.debit = Decimal("20")
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_opening_balance_entry(self):
        customer = create_customer(name="Legacy Co", opening_balance="250.00")

        entry = CustomerLedgerEntry.objects.get(customer=customer)
        self.assertEqual(entry.transaction_type, CustomerLedgerEntry.OPENING_BALANCE)
        self.assertEqual(entry.reference_no, f"OPEN-{customer.customer_code}")
        self.assertEqual(entry.balance, Decimal("250.00"))
        customer.refresh_from_db()
        self.assertEqual(customer.current_balance, Decimal("0.00"))

    def test_statement_window(self):
        create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.INVOICE,
            debit="100",
            transaction_date=date(2025, 1, 10),
        )
        create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.INVOICE,
            debit="40",
            transaction_date=date(2025, 2, 10),
        )
        create_ledger_entry(
            customer=self.customer,
            transaction_type=CustomerLedgerEntry.PAYMENT,
            credit="30",
            transaction_date=date(2025, 2, 20),
        )

        statement = get_customer_statement(
            self.customer, date_from=date(2025, 2, 1), date_to=date(2025, 2, 28)
        )

        self.assertEqual(statement.opening_balance, Decimal("100.00"))
        self.assertEqual(statement.closing_balance, Decimal("110.00"))
        self.assertEqual(statement.total_debit, Decimal("40.00"))
        self.assertEqual(statement.total_credit, Decimal("30.00"))


class InvoiceLifecycleTests(TestCase):
    """
    GUARANTEES:
    - Issued invoices debit the ledger, drafts do not
    - Amendments post the difference as an ADJUSTMENT
    - Cancelling credits the open balance back
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.customer = create_customer(name="Acme Ltd", payment_terms_days=30)

    def _invoice(self, **kwargs):
        return create_invoice(
            customer=self.customer,
            invoice_date=self.today,
            items=[{"description": "Work", "quantity": "2", "unit_price": "50.00"}],
            **kwargs,
        )

    def test_due_date_defaults_to_payment_terms(self):
        invoice = self._invoice()
        self.assertTrue(invoice.invoice_no.startswith("INV-"))
        self.assertEqual((invoice.due_date - invoice.invoice_date).days, 30)

    def test_invoice_debits_ledger(self):
        invoice = self._invoice()
        entry = CustomerLedgerEntry.objects.get(reference_no=invoice.invoice_no)
        self.assertEqual(entry.transaction_type, CustomerLedgerEntry.INVOICE)
        self.assertEqual(entry.debit, Decimal("100.00"))

    def test_duplicate_invoice_no_rejected(self):
        self._invoice(invoice_no="INV-X")
        with self.assertRaises(ReceivablesValidationError):
            self._invoice(invoice_no="INV-X")

    def test_draft_then_issue(self):
        invoice = self._invoice(status=Invoice.STATUS_DRAFT)
        self.assertFalse(CustomerLedgerEntry.objects.filter(reference_no=invoice.invoice_no).exists())
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

        issue_invoice(invoice)

        invoice.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(invoice.status, Invoice.STATUS_UNPAID)
        self.assertEqual(self.customer.current_balance, Decimal("100.00"))
        with self.assertRaises(InvoiceStateError):
            issue_invoice(invoice)

    def test_amendment_posts_difference(self):
        invoice = self._invoice()

        update_invoice(
            invoice,
            items=[{"description": "Work", "quantity": "3", "unit_price": "50.00"}],
        )

        adjustment = CustomerLedgerEntry.objects.order_by("-id").first()
        self.assertEqual(adjustment.transaction_type, CustomerLedgerEntry.ADJUSTMENT)
        self.assertEqual(adjustment.debit, Decimal("50.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("150.00"))

    def test_cancel_credits_balance(self):
        invoice = self._invoice()

        cancel_invoice(invoice, reason="Raised in error")

        invoice.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(invoice.status, Invoice.STATUS_CANCELLED)
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        last = CustomerLedgerEntry.objects.order_by("-id").first()
        self.assertEqual(last.credit, Decimal("100.00"))
        self.assertEqual(last.balance, Decimal("0.00"))

    def test_customer_with_invoices_cannot_be_deactivated(self):
        self._invoice()
        with self.assertRaises(CustomerInUseError):
            deactivate_customer(self.customer)

    def test_update_customer_rejects_balance_edits(self):
        with self.assertRaises(ReceivablesValidationError):
            update_customer(self.customer, current_balance=Decimal("1"))
        updated = update_customer(self.customer, credit_limit="5000")
        self.assertEqual(updated.available_credit, Decimal("5000.00"))


class ReceivablesReconciliationTests(TestCase):
    """
    GUARANTEES:
    - Drifted invoice and customer figures are rebuilt from allocations
    - A consistent database is left untouched
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.customer = create_customer(name="Acme Ltd")
        self.invoice = create_invoice(
            customer=self.customer,
            invoice_date=self.today,
            items=[{"description": "Work", "quantity": "1", "unit_price": "100.00"}],
        )

    def test_consistent_database_is_untouched(self):
        self.assertFalse(reconcile_receivables(today=self.today).changed)

    def test_drift_is_corrected(self):
        Invoice.objects.filter(pk=self.invoice.pk).update(
            paid_amount=Decimal("70.00"),
            balance_amount=Decimal("30.00"),
            status=Invoice.STATUS_PARTIALLY_PAID,
        )
        Customer.objects.filter(pk=self.customer.pk).update(current_balance=Decimal("5.00"))

        result = reconcile_receivables(today=self.today)

        self.assertEqual(result.invoices_corrected, 1)
        self.assertEqual(result.customers_corrected, 1)
        self.invoice.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.invoice.balance_amount, Decimal("100.00"))
        self.assertEqual(self.invoice.status, Invoice.STATUS_UNPAID)
        self.assertEqual(self.customer.current_balance, Decimal("100.00"))
        self.assertFalse(reconcile_receivables(today=self.today).changed)


class ReceivablesCommandSerializerTests(TestCase):
    def test_customer_and_invoice_commands(self):
        customer_serializer = CustomerCommandSerializer(
            data={"name": "Acme Ltd", "payment_terms_days": 7, "credit_limit": "1000.00"}
        )
        self.assertTrue(customer_serializer.is_valid(), customer_serializer.errors)
        customer = customer_serializer.save()
        self.assertEqual(customer.customer_code, "CUST001")

        invoice_serializer = InvoiceCommandSerializer(
            data={
                "customer": customer.pk,
                "invoice_date": "2025-03-01",
                "items": [{"description": "Work", "quantity": "1", "unit_price": "10.00"}],
            }
        )
        self.assertTrue(invoice_serializer.is_valid(), invoice_serializer.errors)
        invoice = invoice_serializer.save()
        self.assertEqual(invoice.due_date, date(2025, 3, 8))

    def test_invoice_line_requires_description_or_item(self):
        customer = create_customer(name="Acme Ltd")
        serializer = InvoiceCommandSerializer(
            data={
                "customer": customer.pk,
                "invoice_date": "2025-03-01",
                "items": [{"quantity": "1", "unit_price": "10.00"}],
            }
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("items", serializer.errors)
