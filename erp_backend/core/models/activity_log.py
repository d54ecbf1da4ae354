# core/models/activity_log.py

"""
ACTIVITY LOG

Write-only audit trail appended after each successful mutation.

GUARANTEES:
- Immutable once created (no updates, no deletes)
- Actor is optional (system jobs write with user=None)
- Never read by posting or reconciliation logic
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class ActivityLog(models.Model):
    ACTION_CREATE = "CREATE"
    ACTION_UPDATE = "UPDATE"
    ACTION_DELETE = "DELETE"
    ACTION_PURGE = "PURGE"

    ACTION_CHOICES = [
        (ACTION_CREATE, "Create"),
        (ACTION_UPDATE, "Update"),
        (ACTION_DELETE, "Delete"),
        (ACTION_PURGE, "Purge"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
    )

    action = models.CharField(max_length=16, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64, blank=True, default="")
    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="core_activity_entity_idx"),
            models.Index(fields=["created_at"], name="core_activity_created_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type} {self.entity_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("ActivityLog records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ActivityLog records are immutable and cannot be deleted")
