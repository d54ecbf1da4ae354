# core/services/activity.py

from __future__ import annotations

import logging

from core.models import ActivityLog

logger = logging.getLogger("activity")


def _actor(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user


def log_activity(
    *,
    user,
    action: str,
    entity_type: str,
    entity_id="",
    description: str = "",
) -> ActivityLog:
    """
    Append an audit row. Call inside the mutation's transaction so the
    row commits (or rolls back) together with the change it describes.
    """
    entry = ActivityLog.objects.create(
        user=_actor(user),
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id or ""),
        description=description or "",
    )

    logger.debug(
        "Activity recorded",
        extra={
            "action": action,
            "entity_type": entity_type,
            "entity_id": entry.entity_id,
        },
    )
    return entry
