"""
PATH: manufacturing/admin.py

BOMs are reviewed here; productions are read-only because they are
written together with their stock movements.
"""

from django.contrib import admin

from core.admin import ReadOnlyAdminMixin
from manufacturing.models import BOM, BOMItem, Production, ProductionInput


class BOMItemInline(admin.TabularInline):
    model = BOMItem
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(BOM)
class BOMAdmin(admin.ModelAdmin):
    list_display = ("bom_no", "name", "finished_item", "quantity", "is_active")
    list_filter = ("is_active",)
    search_fields = ("bom_no", "name", "finished_item__code")
    readonly_fields = ("bom_no", "finished_item", "quantity", "created_by", "created_at")
    inlines = [BOMItemInline]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ProductionInputInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ProductionInput
    extra = 0


@admin.register(Production)
class ProductionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "production_no",
        "production_date",
        "output_item",
        "output_quantity",
        "warehouse",
        "is_reversed",
    )
    list_filter = ("is_reversed", "warehouse")
    search_fields = ("production_no", "output_item__code")
    inlines = [ProductionInputInline]
