# core/services/numbering.py

"""
DOCUMENT NUMBERING

Atomic increment-and-return counters for generated document numbers.

Formats:
- Year-scoped:  <PREFIX>-<YYYY>-<NNNN>   (STK, PROD, PURCH, SALE, BOM, INV)
- Global:       <PREFIX><NNN>            (PAY, CUST)

Counters are keyed "<PREFIX>_last_no_<YYYY>" (year-scoped) or
"<PREFIX>_last_no" (global), so year-scoped sequences restart at 1
every calendar year.
"""

from __future__ import annotations

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from core.models import DocumentCounter

PREFIX_STOCK = "STK"
PREFIX_PRODUCTION = "PROD"
PREFIX_PURCHASE = "PURCH"
PREFIX_SALE = "SALE"
PREFIX_BOM = "BOM"
PREFIX_INVOICE = "INV"
PREFIX_PAYMENT = "PAY"
PREFIX_CUSTOMER = "CUST"


def _bump(key: str) -> int:
    return DocumentCounter.objects.filter(key=key).update(
        value=F("value") + 1,
        updated_at=timezone.now(),
    )


@transaction.atomic
def next_counter_value(key: str) -> int:
    """
    Increment the counter for `key` and return the new value.

    The increment is a single UPDATE ... SET value = value + 1, so two
    writers can never read the same value.
    """
    if not _bump(key):
        try:
            with transaction.atomic():
                DocumentCounter.objects.create(key=key, value=1)
            return 1
        except IntegrityError:
            # another writer created the row first
            _bump(key)

    return DocumentCounter.objects.filter(key=key).values_list("value", flat=True).get()


def counter_key(prefix: str, year: int | None = None) -> str:
    if year is None:
        return f"{prefix}_last_no"
    return f"{prefix}_last_no_{year}"


def next_document_number(prefix: str, *, year: int | None = None) -> str:
    year = year or timezone.localdate().year
    value = next_counter_value(counter_key(prefix, year))
    return f"{prefix}-{year}-{value:04d}"


def next_sequence_code(prefix: str) -> str:
    value = next_counter_value(counter_key(prefix))
    return f"{prefix}{value:03d}"
