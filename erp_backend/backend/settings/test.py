# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (fast, isolated)
- Signal-driven dispatch OFF: tests call the dispatcher explicitly
- Deterministic, quiet logging
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import AUTOMATION, LOGGING

DEBUG = False
TESTING = True

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

AUTOMATION = {
    **AUTOMATION,
    "DISPATCH_ON_SAVE": False,
    "STRICT_BALANCE": False,
    "TRANSACTION_BACKOFF_SECONDS": 0.0,
    "WEBHOOK_SECRET": "test-webhook-secret",
}

LOGGING = {
    **LOGGING,
    "root": {"handlers": ["console"], "level": "CRITICAL"},
    "loggers": {},
}
