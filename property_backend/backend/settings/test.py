# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite (select_for_update is a no-op there; locking is
  exercised on Postgres)
- Fast password hashing, no throttling
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False
SECRET_KEY = "test-only-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

ACCOUNTING_DEFAULT_BASE_CURRENCY = "CAD"
ACCOUNTING_JOURNAL_NUMBER_PREFIX = "JE-"

LOGGING = {
    **LOGGING,
    "loggers": {
        "accounting": {"handlers": ["console"], "level": "CRITICAL", "propagate": False},
    },
}
