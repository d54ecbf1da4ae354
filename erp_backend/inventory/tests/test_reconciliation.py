# inventory/tests/test_reconciliation.py

from decimal import Decimal

from django.test import TestCase

from core.models import ActivityLog
from inventory.models import Item, StockBalance, StockMovement
from inventory.services.adjustments import adjust_stock
from inventory.services.exceptions import StockValidationError
from inventory.services.masters import create_item, create_warehouse, get_default_warehouse
from inventory.services.movements import get_balance, purge_movement
from inventory.services.reconciliation import reconcile_stock


class StockReconciliationTests(TestCase):
    """
    Tests for rebuilding balances from the movement log.

    GUARANTEES:
    - Drifted balances are corrected, missing ones created, orphans removed
    - current_stock follows the rebuilt balances
    - A second run on a healed database changes nothing
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.annex = create_warehouse(code="WH-002", name="Annex")
        self.item = create_item(code="RM-001", name="Resin")
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=10)
        adjust_stock(item=self.item, warehouse=self.annex, quantity_delta=4)

    def test_consistent_database_is_untouched(self):
        result = reconcile_stock()
        self.assertFalse(result.changed)

    def test_drifted_balance_is_corrected(self):
        StockBalance.objects.filter(item=self.item, warehouse=self.warehouse).update(
            quantity=Decimal("99")
        )

        result = reconcile_stock()

        self.assertEqual(result.balances_corrected, 1)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("10"))

    def test_missing_balance_is_created(self):
        StockBalance.objects.filter(item=self.item, warehouse=self.annex).delete()

        result = reconcile_stock()

        self.assertEqual(result.balances_created, 1)
        self.assertEqual(get_balance(self.item, self.annex), Decimal("4"))

    def test_orphan_balance_is_removed(self):
        other = create_item(code="RM-002", name="Hardener")
        StockBalance.objects.create(item=other, warehouse=self.warehouse, quantity=Decimal("3"))
        Item.objects.filter(pk=other.pk).update(current_stock=Decimal("3"))

        result = reconcile_stock()

        self.assertEqual(result.orphans_removed, 1)
        self.assertFalse(StockBalance.objects.filter(item=other).exists())
        other.refresh_from_db()
        self.assertEqual(other.current_stock, Decimal("0"))

    def test_item_aggregate_is_synced(self):
        Item.objects.filter(pk=self.item.pk).update(current_stock=Decimal("1"))

        result = reconcile_stock()

        self.assertEqual(result.items_synced, 1)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("14"))

    def test_second_run_is_a_no_op(self):
        StockBalance.objects.filter(item=self.item).update(quantity=Decimal("0"))
        self.assertTrue(reconcile_stock().changed)
        self.assertFalse(reconcile_stock().changed)


class PurgeMovementTests(TestCase):
    """
    GUARANTEES:
    - Purge needs a reason and leaves an audit entry
    - Balances are left stale until reconciliation heals them
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.item = create_item(code="RM-001", name="Resin")
        adjust_stock(item=self.item, warehouse=self.warehouse, quantity_delta=10)
        self.movement = adjust_stock(
            item=self.item, warehouse=self.warehouse, quantity_delta=5
        ).movement

    def test_reason_is_required(self):
        with self.assertRaises(StockValidationError):
            purge_movement(movement=self.movement, reason="  ")
        self.assertTrue(StockMovement.objects.filter(pk=self.movement.pk).exists())

    def test_purge_then_reconcile(self):
        """Purged movement drops out of the balance only after reconciliation."""
        purge_movement(movement=self.movement, reason="Duplicate entry")

        self.assertFalse(StockMovement.objects.filter(pk=self.movement.pk).exists())
        self.assertTrue(
            ActivityLog.objects.filter(
                action=ActivityLog.ACTION_PURGE, entity_id=self.movement.movement_no
            ).exists()
        )
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("15"))

        result = reconcile_stock()

        self.assertEqual(result.balances_corrected, 1)
        self.assertEqual(get_balance(self.item, self.warehouse), Decimal("10"))
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, Decimal("10"))
