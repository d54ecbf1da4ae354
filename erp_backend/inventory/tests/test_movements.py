# inventory/tests/test_movements.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.test import TestCase

from core.models import ActivityLog
from inventory.models import StockBalance, StockMovement
from inventory.services.adjustments import adjust_stock, transfer_stock
from inventory.services.exceptions import (
    InsufficientStockError,
    StockValidationError,
)
from inventory.services.masters import (
    create_item,
    create_warehouse,
    deactivate_item,
    get_default_warehouse,
    update_item,
)
from inventory.services.movements import get_balance, record_movement, require_available
from inventory.services.queries import (
    get_item_ledger,
    get_low_stock_items,
    get_stock_by_warehouse,
)

User = get_user_model()


class StockConservationMixin:
    def assertConserved(self, item):
        """movements == balances == current_stock for one item."""
        item.refresh_from_db()
        movements = StockMovement.objects.filter(item=item).aggregate(
            total=Sum("quantity")
        )["total"] or Decimal("0")
        balances = StockBalance.objects.filter(item=item).aggregate(
            total=Sum("quantity")
        )["total"] or Decimal("0")
        self.assertEqual(movements, balances)
        self.assertEqual(balances, item.current_stock)


class RecordMovementTests(StockConservationMixin, TestCase):
    """
    Tests for the movement log and its derived balances.

    GUARANTEES:
    - Every movement updates (item, warehouse) balance and current_stock
    - Movements are immutable and never zero
    - Balances never go negative through the guarded services
    """

    def setUp(self):
        self.user = User.objects.create_user(username="storekeeper", password="pass")
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="RM-001", name="Resin", unit_of_measure="Kg")

    def test_default_warehouse_is_seeded(self):
        """WH-001 exists after migrations."""
        self.assertIsNotNone(self.warehouse)
        self.assertEqual(self.warehouse.code, "WH-001")

    def test_positive_movement_updates_balances(self):
        """A receipt raises the balance and the item aggregate."""
        movement = record_movement(
            item=self.item,
            warehouse=self.warehouse,
            quantity="25",
            movement_type=StockMovement.MovementType.PURCHASE,
            reference_doctype="Purchase",
            reference_docno="PURCH-2025-0001",
            user=self.user,
        )

        self.assertTrue(movement.movement_no.startswith("STK-"))
        self.assertEqual(movement.direction, "IN")
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("25"))
        self.assertConserved(self.item)

    def test_zero_quantity_rejected(self):
        """Zero-quantity movements are never stored."""
        with self.assertRaises(StockValidationError):
            record_movement(
                item=self.item,
                warehouse=self.warehouse,
                quantity=0,
                movement_type=StockMovement.MovementType.ADJUSTMENT,
            )
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_unknown_movement_type_rejected(self):
        with self.assertRaises(StockValidationError):
            record_movement(
                item=self.item,
                warehouse=self.warehouse,
                quantity=1,
                movement_type="GIFT",
            )

    def test_movements_are_immutable(self):
        """Saved movements cannot be edited or deleted through the model."""
        movement = record_movement(
            item=self.item,
            warehouse=self.warehouse,
            quantity=5,
            movement_type=StockMovement.MovementType.ADJUSTMENT,
        )
        movement.remarks = "edited"
        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()

    def test_require_available_reports_shortfall(self):
        """Insufficient stock message carries available and required."""
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=3)

        with self.assertRaises(InsufficientStockError) as ctx:
            require_available(self.item, self.warehouse, 10)

        self.assertEqual(
            str(ctx.exception),
            "Insufficient stock for Resin. Available: 3, Required: 10",
        )

    def test_negative_adjustment_cannot_go_below_zero(self):
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=2)
        with self.assertRaises(InsufficientStockError):
            adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=-5)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("2"))
        self.assertConserved(self.item)

    def test_transfer_moves_stock_between_warehouses(self):
        """Transfer is one TRANSFER out + one TRANSFER in."""
        annex = create_warehouse(code="WH-002", name="Annex")
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=10)

        result = transfer_stock(
            item=self.item,
            from_warehouse=self.warehouse,
            to_warehouse=annex,
            quantity=4,
        )

        self.assertEqual(result.outbound.quantity, Decimal("-4"))
        self.assertEqual(result.inbound.quantity, Decimal("4"))
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("6"))
        self.assertEqual(get_balance(self.item, annex), Decimal("4"))
        self.assertConserved(self.item)

    def test_transfer_to_same_warehouse_rejected(self):
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=10)
        with self.assertRaises(StockValidationError):
            transfer_stock(
                item=self.item,
                from_warehouse=self.warehouse,
                to_warehouse=self.warehouse,
                quantity=1,
            )

    def test_stock_by_warehouse_and_ledger(self):
        annex = create_warehouse(code="WH-002", name="Annex")
        adjust_stock(item=self.item, warehouse=annex, quantity_delta=7)

        rows = {row["warehouse"].code: row["quantity"] for row in get_stock_by_warehouse(self.item)}
        self.assertEqual(rows["WH-001"], Decimal("0"))
        self.assertEqual(rows["WH-002"], Decimal("7"))
        self.assertEqual(get_item_ledger(self.item, annex).count(), 1)


class ItemMasterTests(TestCase):
    """
    GUARANTEES:
    - Item codes are unique (case-insensitive)
    - current_stock is not editable through update_item()
    - Items holding stock cannot be deactivated
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="FG-001", name="Widget", reorder_level=5)

    def test_duplicate_code_rejected(self):
        with self.assertRaises(StockValidationError):
            create_item(code="fg-001", name="Other")

    def test_current_stock_not_updatable(self):
        with self.assertRaises(StockValidationError):
            update_item(self.item, current_stock=100)

    def test_update_logs_activity(self):
        update_item(self.item, name="Blue Widget")
        self.item.refresh_from_db()
        self.assertEqual(self.item.name, "Blue Widget")
        self.assertTrue(
            ActivityLog.objects.filter(
                entity_type="Item", entity_id="FG-001", action=ActivityLog.ACTION_UPDATE
            ).exists()
        )

    def test_item_with_stock_cannot_be_deactivated(self):
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=1)
        with self.assertRaises(StockValidationError):
            deactivate_item(self.item)

    def test_low_stock_listing(self):
        """Items at or below reorder level are flagged."""
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=5)
        self.assertIn(self.item, list(get_low_stock_items()))

        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=1)
        self.assertNotIn(self.item, list(get_low_stock_items()))
