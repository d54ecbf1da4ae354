# purchases/tests/test_purchases.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.models import ActivityLog
from inventory.models import StockMovement
from inventory.services.exceptions import InsufficientStockError
from inventory.services.masters import create_item, get_default_warehouse
from inventory.services.movements import get_balance
from inventory.services.queries import get_movements_for_document
from purchases.models import Purchase
from purchases.serializers import PurchaseCommandSerializer
from purchases.services.exceptions import PurchaseReversalError, PurchaseValidationError
from purchases.services.purchase_service import (
    delete_purchase,
    get_top_suppliers,
    record_purchase,
    reverse_purchase,
)
from sales.services.sale_service import record_sale

User = get_user_model()


class PurchaseServiceTests(TestCase):
    """
    Tests for direct purchases.

    GUARANTEES:
    - A purchase posts exactly one positive PURCHASE movement
    - Deleting the header keeps the movement (and the stock)
    - Reversal posts the compensating movement once
    """

    def setUp(self):
        self.user = User.objects.create_user(username="buyer", password="pass")
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="RM-001", name="Resin", unit_of_measure="Kg")

    def _purchase(self, qty="100", cost="2.50", supplier="Acme"):
        return record_purchase(
            item=self.item,
            warehouse=self.warehouse,
            quantity=qty,
            unit_cost=cost,
            supplier_name=supplier,
            user=self.user,
        )

    def test_purchase_posts_movement(self):
        purchase = self._purchase()

        self.assertTrue(purchase.purchase_no.startswith("PURCH-"))
        self.assertEqual(purchase.total_cost, Decimal("250.00"))

        movements = list(get_movements_for_document("Purchase", purchase.purchase_no))
        self.assertEqual(len(movements), 1)
        self.assertEqual(movements[0].movement_type, StockMovement.MovementType.PURCHASE)
        self.assertEqual(movements[0].quantity, Decimal("100"))
        self.assertEqual(movements[0].remarks, f"Purchase: {purchase.purchase_no} from Acme")
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("100"))

    def test_invalid_quantity_writes_nothing(self):
        with self.assertRaises(PurchaseValidationError):
            self._purchase(qty="0")
        self.assertEqual(Purchase.objects.count(), 0)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_negative_cost_rejected(self):
        with self.assertRaises(PurchaseValidationError):
            self._purchase(cost="-1")

    def test_delete_keeps_movement(self):
        purchase = self._purchase()
        purchase_no = purchase.purchase_no

        delete_purchase(purchase, user=self.user)

        self.assertFalse(Purchase.objects.filter(purchase_no=purchase_no).exists())
        self.assertEqual(get_movements_for_document("Purchase", purchase_no).count(), 1)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("100"))
        self.assertTrue(
            ActivityLog.objects.filter(
                action=ActivityLog.ACTION_DELETE, entity_id=purchase_no
            ).exists()
        )

    def test_reverse_posts_negative_purchase_movement(self):
        purchase = self._purchase()

        movement = reverse_purchase(purchase, user=self.user)

        self.assertEqual(movement.quantity, Decimal("-100"))
        self.assertEqual(movement.movement_type, StockMovement.MovementType.PURCHASE)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("0"))
        purchase.refresh_from_db()
        self.assertTrue(purchase.is_reversed)

        with self.assertRaises(PurchaseReversalError):
            reverse_purchase(purchase, user=self.user)

    def test_reverse_blocked_when_stock_already_used(self):
        purchase = self._purchase(qty="10")
        record_sale(item=self.item, warehouse=self.warehouse, quantity="6", unit_price="5")

        with self.assertRaises(InsufficientStockError):
            reverse_purchase(purchase)

        purchase.refresh_from_db()
        self.assertFalse(purchase.is_reversed)

    def test_top_suppliers(self):
        self._purchase(qty="10", cost="1.00", supplier="Small Co")
        self._purchase(qty="10", cost="5.00", supplier="Big Co")
        self._purchase(qty="10", cost="5.00", supplier="Big Co")

        rows = get_top_suppliers(limit=1)

        self.assertEqual(rows[0]["supplier_name"], "Big Co")
        self.assertEqual(rows[0]["purchase_count"], 2)
        self.assertEqual(rows[0]["total_cost"], Decimal("100.00"))


class PurchaseCommandSerializerTests(TestCase):
    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="RM-001", name="Resin")

    def test_creates_purchase(self):
        serializer = PurchaseCommandSerializer(
            data={
                "item": self.item.pk,
                "warehouse": self.warehouse.pk,
                "quantity": "4",
                "unit_cost": "3.25",
                "supplier_name": "Acme",
            }
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        purchase = serializer.save()
        self.assertEqual(purchase.total_cost, Decimal("13.00"))

    def test_rejects_zero_quantity(self):
        serializer = PurchaseCommandSerializer(
            data={
                "item": self.item.pk,
                "warehouse": self.warehouse.pk,
                "quantity": "0",
                "unit_cost": "3.25",
            }
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("quantity", serializer.errors)
