"""
MIGRATION: SEED DEFAULT WAREHOUSE

Every installation starts with WH-001 "Main Warehouse".
"""

from __future__ import annotations

from django.db import migrations

DEFAULT_CODE = "WH-001"
DEFAULT_NAME = "Main Warehouse"


def seed_default_warehouse(apps, schema_editor):
    Warehouse = apps.get_model("inventory", "Warehouse")
    Warehouse.objects.get_or_create(
        code=DEFAULT_CODE,
        defaults={"name": DEFAULT_NAME, "is_active": True},
    )


def unseed_default_warehouse(apps, schema_editor):
    Warehouse = apps.get_model("inventory", "Warehouse")
    Warehouse.objects.filter(code=DEFAULT_CODE, stock_movements__isnull=True).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_default_warehouse, unseed_default_warehouse),
    ]
