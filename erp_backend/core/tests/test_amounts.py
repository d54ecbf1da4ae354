# core/tests/test_amounts.py

from decimal import Decimal

from django.test import SimpleTestCase

from core.services.amounts import (
    format_quantity,
    positive_money,
    positive_quantity,
    to_money,
    to_quantity,
)
from core.services.exceptions import InvalidAmountError


class AmountCoercionTests(SimpleTestCase):
    """
    GUARANTEES:
    - Money rounds half-up to 2 dp, quantities to 4 dp
    - Non-numeric, empty, boolean and non-finite input is rejected
    """

    def test_money_rounds_half_up(self):
        self.assertEqual(to_money("10.005"), Decimal("10.01"))
        self.assertEqual(to_money(Decimal("2.344")), Decimal("2.34"))

    def test_quantity_rounds_to_four_places(self):
        self.assertEqual(to_quantity("1.23456"), Decimal("1.2346"))
        self.assertEqual(to_quantity(3), Decimal("3.0000"))

    def test_rejects_garbage(self):
        for bad in (None, "", "abc", True, "NaN", "Infinity"):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidAmountError):
                    to_money(bad)

    def test_positive_helpers_reject_zero_and_negative(self):
        with self.assertRaises(InvalidAmountError):
            positive_quantity("0")
        with self.assertRaises(InvalidAmountError):
            positive_money("-1.00")

    def test_format_quantity_drops_trailing_zeros(self):
        self.assertEqual(format_quantity(Decimal("70.0000")), "70")
        self.assertEqual(format_quantity(Decimal("2.5000")), "2.5")
