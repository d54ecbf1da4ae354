# inventory/tests/test_serializers.py

from decimal import Decimal

from django.test import TestCase
from rest_framework import serializers

from inventory.serializers import (
    StockAdjustmentCommandSerializer,
    StockMovementSerializer,
    StockTransferCommandSerializer,
)
from inventory.services.masters import create_item, create_warehouse, get_default_warehouse
from inventory.services.movements import get_balance


class StockCommandSerializerTests(TestCase):
    """
    GUARANTEES:
    - Commands coerce string quantities to Decimal
    - Service errors come back as serializer ValidationErrors
    """

    def setUp(self):
        self.warehouse = get_default_warehouse()
        self.annex = create_warehouse(code="WH-002", name="Annex")
        self.item = create_item(code="RM-001", name="Resin")

    def test_adjustment_command(self):
        serializer = StockAdjustmentCommandSerializer(
            data={"item": self.item.pk, "warehouse": self.warehouse.pk, "quantity_delta": "12.5"}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        result = serializer.save()

        self.assertEqual(result.quantity_delta, Decimal("12.5"))
        data = StockMovementSerializer(result.movement).data
        self.assertEqual(data["item_code"], "RM-001")
        self.assertEqual(data["movement_type"], "ADJUSTMENT")

    def test_zero_delta_rejected(self):
        serializer = StockAdjustmentCommandSerializer(
            data={"item": self.item.pk, "warehouse": self.warehouse.pk, "quantity_delta": "0"}
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("quantity_delta", serializer.errors)

    def test_transfer_shortfall_becomes_validation_error(self):
        serializer = StockTransferCommandSerializer(
            data={
                "item": self.item.pk,
                "from_warehouse": self.warehouse.pk,
                "to_warehouse": self.annex.pk,
                "quantity": "1",
            }
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        with self.assertRaisesMessage(serializers.ValidationError, "Insufficient stock"):
            serializer.save()
        self.assertEqual(get_balance(self.item, self.annex), Decimal("0"))
