"""
=====================================================
PATH: inventory/admin.py
=====================================================

Admin rules (audit-safe inventory):

- Items and warehouses are editable masters, except current_stock.
- StockMovement and StockBalance are read-only.
- The only way to remove a movement is the "purge" action, which routes
  through purge_movement() so the deletion is logged. Balances are left
  for reconciliation to rebuild.
"""

from __future__ import annotations

from django.contrib import admin, messages

from core.admin import ReadOnlyAdminMixin
from inventory.models import Item, StockBalance, StockMovement, Warehouse
from inventory.services.exceptions import InventoryError
from inventory.services.movements import purge_movement


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "unit_of_measure",
        "current_stock",
        "reorder_level",
        "is_active",
    )
    list_filter = ("is_active", "is_raw_material", "is_finished_good", "category")
    search_fields = ("code", "name")
    readonly_fields = ("current_stock", "created_by", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "location", "is_active")
    search_fields = ("code", "name")

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "movement_no",
        "item",
        "warehouse",
        "movement_type",
        "quantity",
        "reference_doctype",
        "reference_docno",
        "movement_date",
    )
    list_filter = ("movement_type", "warehouse")
    search_fields = ("movement_no", "reference_docno", "item__code")
    actions = ["purge_selected"]

    def get_actions(self, request):
        actions = super().get_actions(request)
        if not request.user.is_superuser:
            actions.pop("purge_selected", None)
        return actions

    @admin.action(description="Purge selected movements (balances healed by reconciliation)")
    def purge_selected(self, request, queryset):
        purged = 0
        for movement in queryset:
            try:
                purge_movement(
                    movement=movement,
                    user=request.user,
                    reason="Purged from admin",
                )
            except InventoryError as exc:
                self.message_user(request, str(exc), level=messages.ERROR)
                continue
            purged += 1
        self.message_user(request, f"Purged {purged} movement(s).")


@admin.register(StockBalance)
class StockBalanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("item", "warehouse", "quantity", "last_updated")
    list_filter = ("warehouse",)
    search_fields = ("item__code", "item__name")
