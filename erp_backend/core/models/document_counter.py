# core/models/document_counter.py

"""
DOCUMENT COUNTER

Monotonic counter rows backing every generated document number.

GUARANTEES:
- One row per key ("STK_last_no_2025", "PAY_last_no", ...)
- value only ever grows (incremented atomically in the database)
- Rows are created lazily on first use
"""

from django.db import models


class DocumentCounter(models.Model):
    key = models.CharField(max_length=64, unique=True)
    value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}={self.value}"
