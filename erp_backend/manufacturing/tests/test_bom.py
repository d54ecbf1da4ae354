# manufacturing/tests/test_bom.py

from decimal import Decimal

from django.test import TestCase

from inventory.services.adjustments import adjust_stock
from inventory.services.masters import create_item, get_default_warehouse
from manufacturing.models import BOM
from manufacturing.serializers import BOMCommandSerializer
from manufacturing.services.bom_service import (
    create_bom,
    delete_bom,
    get_active_boms_for_item,
    scale_bom,
    toggle_bom_active,
    update_bom,
)
from manufacturing.services.exceptions import BOMInUseError, BOMValidationError
from manufacturing.services.production_service import record_production_from_bom


class BOMServiceTests(TestCase):
    """
    Tests for bill-of-materials definitions.

    GUARANTEES:
    - A BOM needs a positive base quantity and at least one positive line
    - Scaling is proportional and rounded to 4 dp
    - A BOM used in production cannot be deleted
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.resin = create_item(code="RM-001", name="Resin", unit_of_measure="Kg")
        self.hardener = create_item(code="RM-002", name="Hardener", unit_of_measure="Kg")
        self.panel = create_item(code="FG-001", name="Panel", is_finished_good=True)
        self.bom = create_bom(
            finished_item=self.panel,
            quantity="10",
            items=[
                {"item": self.resin, "quantity": "3"},
                {"item": self.hardener, "quantity": "1"},
            ],
        )

    def test_create_assigns_number_and_lines(self):
        self.assertTrue(self.bom.bom_no.startswith("BOM-"))
        self.assertEqual(self.bom.items.count(), 2)
        self.assertEqual(self.bom.name, "BOM for Panel")

    def test_empty_lines_rejected(self):
        with self.assertRaises(BOMValidationError):
            create_bom(finished_item=self.panel, quantity="1", items=[])

    def test_zero_line_quantity_rejected(self):
        with self.assertRaises(BOMValidationError):
            create_bom(
                finished_item=self.panel,
                quantity="1",
                items=[{"item": self.resin, "quantity": "0"}],
            )

    def test_finished_item_cannot_be_an_input(self):
        with self.assertRaises(BOMValidationError):
            create_bom(
                finished_item=self.panel,
                quantity="1",
                items=[{"item": self.panel, "quantity": "1"}],
            )

    def test_scale_bom(self):
        """25 panels from a 10-panel BOM needs 2.5x every line."""
        scaled = {req.item.code: req.quantity for req in scale_bom(self.bom, "25")}
        self.assertEqual(scaled, {"RM-001": Decimal("7.5000"), "RM-002": Decimal("2.5000")})

    def test_scale_bom_rounds_to_four_places(self):
        scaled = {req.item.code: req.quantity for req in scale_bom(self.bom, "1")}
        self.assertEqual(scaled["RM-001"], Decimal("0.3000"))

        bom = create_bom(
            finished_item=self.panel,
            quantity="3",
            items=[{"item": self.resin, "quantity": "1"}],
        )
        self.assertEqual(scale_bom(bom, "1")[0].quantity, Decimal("0.3333"))

    def test_update_replaces_lines(self):
        update_bom(self.bom, items=[{"item": self.resin, "quantity": "4"}])
        self.assertEqual(list(self.bom.items.values_list("item__code", flat=True)), ["RM-001"])

    def test_toggle_and_active_listing(self):
        self.assertIn(self.bom, list(get_active_boms_for_item(self.panel)))
        self.assertFalse(toggle_bom_active(self.bom))
        self.assertNotIn(self.bom, list(get_active_boms_for_item(self.panel)))

    def test_unused_bom_can_be_deleted(self):
        delete_bom(self.bom)
        self.assertFalse(BOM.objects.filter(pk=self.bom.pk).exists())

    def test_used_bom_cannot_be_deleted(self):
        adjust_stock(item=self.resin, warehouse=self.warehouse, quantity_delta=30)
        adjust_stock(item=self.hardener, warehouse=self.warehouse, quantity_delta=10)
        record_production_from_bom(bom=self.bom, output_quantity="10", warehouse=self.warehouse)

        with self.assertRaisesMessage(
            BOMInUseError, "Cannot delete BOM: It has been used in production records"
        ):
            delete_bom(self.bom)
        self.assertTrue(BOM.objects.filter(pk=self.bom.pk).exists())


class BOMCommandSerializerTests(TestCase):
    def setUp(self):
        self.resin = create_item(code="RM-001", name="Resin")
        self.panel = create_item(code="FG-001", name="Panel")

    def test_creates_bom(self):
        serializer = BOMCommandSerializer(
            data={
                "finished_item": self.panel.pk,
                "quantity": "5",
                "name": "Panel mix",
                "items": [{"item": self.resin.pk, "quantity": "2"}],
            }
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        bom = serializer.save()
        self.assertEqual(bom.name, "Panel mix")
        self.assertEqual(bom.items.get().quantity, Decimal("2"))

    def test_requires_lines(self):
        serializer = BOMCommandSerializer(
            data={"finished_item": self.panel.pk, "quantity": "5", "items": []}
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("items", serializer.errors)
