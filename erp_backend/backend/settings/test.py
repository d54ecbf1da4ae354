# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- in-memory SQLite
- no startup reconciliation
- fast password hashing
"""

from __future__ import annotations

from .base import *  # noqa: F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

RECONCILE_ON_STARTUP = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
