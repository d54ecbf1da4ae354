# purchases/admin.py

from django.contrib import admin, messages

from inventory.services.exceptions import InventoryError
from purchases.models import Purchase
from purchases.services.exceptions import PurchaseError
from purchases.services.purchase_service import reverse_purchase


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = (
        "purchase_no",
        "purchase_date",
        "item",
        "warehouse",
        "quantity",
        "total_cost",
        "supplier_name",
        "is_reversed",
    )
    list_filter = ("is_reversed", "warehouse", "purchase_date")
    search_fields = ("purchase_no", "supplier_name", "invoice_no", "item__code")
    actions = ["reverse_selected"]

    # purchases are recorded through record_purchase(); admin is for review
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Reverse selected purchases")
    def reverse_selected(self, request, queryset):
        for purchase in queryset:
            try:
                reverse_purchase(purchase, user=request.user)
            except (PurchaseError, InventoryError) as exc:
                self.message_user(request, str(exc), level=messages.ERROR)
