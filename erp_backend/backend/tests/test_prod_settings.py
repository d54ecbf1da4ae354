# backend/tests/test_prod_settings.py

import importlib
import os
import sys
from unittest import mock

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase

from backend.settings import base

PROD_MODULE = "backend.settings.prod"

PROD_ENV = {
    "SECRET_KEY": "a-long-random-production-secret",
    "ALLOWED_HOSTS": "erp.example.com",
    "CSRF_TRUSTED_ORIGINS": "https://erp.example.com",
}


class ProdSettingsTests(SimpleTestCase):
    """
    Tests for the fail-closed production settings module.

    GUARANTEES:
    - A SQLite DATABASE_URL is accepted
    - A missing DATABASE_URL or SECRET_KEY is refused
    """

    def _load(self, **overrides):
        env = {**PROD_ENV, **overrides}
        middleware = list(base.MIDDLEWARE)
        sys.modules.pop(PROD_MODULE, None)
        try:
            with mock.patch.dict(os.environ, {k: v for k, v in env.items() if v is not None}):
                for key in [k for k, v in env.items() if v is None]:
                    os.environ.pop(key, None)
                return importlib.import_module(PROD_MODULE)
        finally:
            sys.modules.pop(PROD_MODULE, None)
            base.MIDDLEWARE[:] = middleware

    def test_sqlite_database_url_accepted(self):
        """The embedded SQLite store runs under production settings."""
        prod = self._load(DATABASE_URL="sqlite:////var/lib/erp/db.sqlite3")

        self.assertEqual(prod.DATABASES["default"]["ENGINE"], "django.db.backends.sqlite3")
        self.assertEqual(prod.DATABASES["default"]["NAME"], "/var/lib/erp/db.sqlite3")
        self.assertFalse(prod.DEBUG)

    def test_missing_database_url_refused(self):
        with self.assertRaisesMessage(ImproperlyConfigured, "DATABASE_URL must be set"):
            self._load(DATABASE_URL=None)

    def test_default_secret_key_refused(self):
        with self.assertRaisesMessage(ImproperlyConfigured, "SECRET_KEY"):
            self._load(
                DATABASE_URL="sqlite:////var/lib/erp/db.sqlite3",
                SECRET_KEY="dev-insecure-change-me",
            )
