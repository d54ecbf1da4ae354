# core/tests/test_numbering.py

from django.test import TestCase

from core.models import DocumentCounter
from core.services.numbering import (
    PREFIX_CUSTOMER,
    PREFIX_PAYMENT,
    PREFIX_STOCK,
    counter_key,
    next_counter_value,
    next_document_number,
    next_sequence_code,
)


class DocumentNumberingTests(TestCase):
    """
    GUARANTEES:
    - Year-scoped numbers are PREFIX-YYYY-NNNN and restart per year
    - Global codes are PREFIXNNN
    - Counters never hand out the same value twice
    """

    def test_year_scoped_format(self):
        """First number of a year is 0001."""
        self.assertEqual(next_document_number(PREFIX_STOCK, year=2025), "STK-2025-0001")
        self.assertEqual(next_document_number(PREFIX_STOCK, year=2025), "STK-2025-0002")

    def test_year_scoped_counters_are_independent(self):
        """A new year starts its own sequence."""
        next_document_number(PREFIX_STOCK, year=2025)
        next_document_number(PREFIX_STOCK, year=2025)
        self.assertEqual(next_document_number(PREFIX_STOCK, year=2026), "STK-2026-0001")

    def test_global_sequence_code(self):
        """PAY / CUST codes are zero-padded to three digits."""
        self.assertEqual(next_sequence_code(PREFIX_PAYMENT), "PAY001")
        self.assertEqual(next_sequence_code(PREFIX_PAYMENT), "PAY002")
        self.assertEqual(next_sequence_code(PREFIX_CUSTOMER), "CUST001")

    def test_sequence_code_grows_past_padding(self):
        """Codes beyond 999 keep counting instead of wrapping."""
        DocumentCounter.objects.create(key=counter_key(PREFIX_PAYMENT), value=999)
        self.assertEqual(next_sequence_code(PREFIX_PAYMENT), "PAY1000")

    def test_counter_row_created_on_first_use(self):
        """next_counter_value() creates the counter row lazily."""
        self.assertFalse(DocumentCounter.objects.filter(key="X_last_no").exists())
        self.assertEqual(next_counter_value("X_last_no"), 1)
        self.assertEqual(DocumentCounter.objects.get(key="X_last_no").value, 1)
