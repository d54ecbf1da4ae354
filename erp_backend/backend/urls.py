# backend/urls.py
"""
PATH: backend/urls.py

Root URL configuration.

The ledgers are operated through the service layer and the Django admin;
no public business endpoints are mounted here.

Operational hardening:
- Admin path is configurable (ADMIN_PATH) so it is not always /admin/
- /health/ reports liveness plus a cheap ledger snapshot
"""

from django.conf import settings
from django.contrib import admin
from django.urls import path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from inventory.models import StockMovement
from receivables.models import CustomerLedgerEntry


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    return Response(
        {
            "status": "ok",
            "stock_movements": StockMovement.objects.count(),
            "customer_ledger_entries": CustomerLedgerEntry.objects.count(),
        }
    )


def _normalize_admin_path(raw: str) -> str:
    value = (raw or "admin/").strip().lstrip("/")
    return value if value.endswith("/") else f"{value}/"


ADMIN_PATH = _normalize_admin_path(getattr(settings, "ADMIN_PATH", "admin/"))

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("health/", health_check, name="health-check"),
]
