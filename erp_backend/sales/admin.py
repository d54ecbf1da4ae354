# sales/admin.py

from django.contrib import admin, messages

from core.admin import ReadOnlyAdminMixin
from sales.models import Sale
from sales.services.exceptions import SaleError
from sales.services.sale_service import reverse_sale


# ======================================================
# SALE ADMIN
# ======================================================


@admin.register(Sale)
class SaleAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "sale_no",
        "sale_date",
        "item",
        "warehouse",
        "quantity",
        "total_amount",
        "customer_name",
        "is_reversed",
    )
    search_fields = ("sale_no", "customer_name", "invoice_no")
    list_filter = ("is_reversed", "sale_date")
    actions = ["reverse_selected"]

    @admin.action(description="Reverse selected sales (returns stock)")
    def reverse_selected(self, request, queryset):
        for sale in queryset:
            try:
                reverse_sale(sale, user=request.user)
            except SaleError as exc:
                self.message_user(request, str(exc), level=messages.ERROR)
