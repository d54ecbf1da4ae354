"""
PATH: core/models/__init__.py

Core models export surface.
"""

from .activity_log import ActivityLog
from .document_counter import DocumentCounter

__all__ = [
    "ActivityLog",
    "DocumentCounter",
]
