# sales/tests/test_sales.py

from decimal import Decimal

from django.test import TestCase
from rest_framework import serializers

from inventory.models import StockMovement
from inventory.services.adjustments import adjust_stock
from inventory.services.exceptions import InsufficientStockError
from inventory.services.masters import create_item, get_default_warehouse
from inventory.services.movements import get_balance
from inventory.services.queries import get_movements_for_document
from sales.models import Sale
from sales.serializers import SaleCommandSerializer
from sales.services.exceptions import SaleReversalError, SaleValidationError
from sales.services.sale_service import delete_sale, record_sale, reverse_sale


class SaleServiceTests(TestCase):
    """
    Tests for direct sales against stock.

    GUARANTEES:
    - Sufficiency is checked before any write
    - A sale posts exactly one negative SALE movement
    - Reversal returns the stock once; delete keeps the movement
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="FG-001", name="Widget")
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=10)

    def test_sale_deducts_stock(self):
        sale = record_sale(
            item=self.item,
            warehouse=self.warehouse,
            quantity="4",
            unit_price="12.50",
            customer_name="Walk-in",
        )

        self.assertTrue(sale.sale_no.startswith("SALE-"))
        self.assertEqual(sale.total_amount, Decimal("50.00"))
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("6"))

        movement = get_movements_for_document("Sale", sale.sale_no).get()
        self.assertEqual(movement.movement_type, StockMovement.MovementType.SALE)
        self.assertEqual(movement.quantity, Decimal("-4"))

    def test_insufficient_stock_writes_nothing(self):
        with self.assertRaises(InsufficientStockError):
            record_sale(item=self.item, warehouse=self.warehouse, quantity="11", unit_price="1")

        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("10"))

    def test_negative_price_rejected(self):
        with self.assertRaises(SaleValidationError):
            record_sale(item=self.item, warehouse=self.warehouse, quantity="1", unit_price="-1")

    def test_reverse_returns_stock_once(self):
        sale = record_sale(item=self.item, warehouse=self.warehouse, quantity="4", unit_price="1")

        movement = reverse_sale(sale)

        self.assertEqual(movement.quantity, Decimal("4"))
        self.assertEqual(movement.movement_type, StockMovement.MovementType.SALE)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("10"))
        with self.assertRaises(SaleReversalError):
            reverse_sale(sale)

    def test_delete_keeps_movement(self):
        sale = record_sale(item=self.item, warehouse=self.warehouse, quantity="4", unit_price="1")
        sale_no = sale.sale_no

        delete_sale(sale)

        self.assertFalse(Sale.objects.filter(sale_no=sale_no).exists())
        self.assertEqual(get_movements_for_document("Sale", sale_no).count(), 1)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("6"))


class SaleCommandSerializerTests(TestCase):
    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="FG-001", name="Widget")

    def test_shortfall_is_a_validation_error(self):
        serializer = SaleCommandSerializer(
            data={
                "item": self.item.pk,
                "warehouse": self.warehouse.pk,
                "quantity": "1",
                "unit_price": "10.00",
            }
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        with self.assertRaisesMessage(serializers.ValidationError, "Insufficient stock for Widget"):
            serializer.save()
