"""Test settings - uses SQLite for fast local testing."""
import os

os.environ.setdefault("SECRET_KEY", "test-only-secret-key-for-the-marketplace-settlement-suite-0123456789")
os.environ.setdefault("DEBUG", "True")

from .base import *  # noqa: E402,F401,F403

DEBUG = True

# Use SQLite for tests (no PostgreSQL dependency)
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Disable Redis cache in tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Disable Celery in tests
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"

# Disable logging noise during tests
LOGGING["handlers"].pop("file")  # noqa: F405
LOGGING["root"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["marketplace"]["handlers"] = ["console"]  # noqa: F405
LOGGING["loggers"]["marketplace"]["level"] = "WARNING"  # noqa: F405
