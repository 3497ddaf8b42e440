from decouple import config

from .base import *  # noqa
from .base import BASE_DIR
from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK

# Test settings: SQLite by default so the suite runs without a database server.
# TEST_DATABASE_ENGINE=postgres runs it against the DATABASE_* server instead,
# which is what the threaded row-locking tests in inventory/tests/test_concurrency.py need.
DEBUG = False

if config("TEST_DATABASE_ENGINE", default="sqlite").lower() == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": config("DATABASE_NAME", default="postgres"),
            "USER": config("DATABASE_USER", default="postgres"),
            "PASSWORD": config("DATABASE_PASSWORD", default=""),
            "HOST": config("DATABASE_HOST", default="localhost"),
            "PORT": config("DATABASE_PORT", default="5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test_db.sqlite3",
        }
    }

# Capture notification emails in django.core.mail.outbox
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORAGES = {
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

FRONTEND_URL = "https://app.example.com"
ADMIN_EMAILS = ["boss@example.com"]
LENDING_LOW_STOCK_THRESHOLD = 5
LENDING_OVERDUE_DAYS = 3

# Relax throttling for tests to reduce flakiness
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    **BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {}),
    "user": "10000/min",
    "anon": "10000/min",
    "signin": "10000/min",
    "profile": "10000/min",
    "inventory": "10000/min",
    "inventory_write": "10000/min",
    "users_admin": "10000/min",
    "shared_accounts": "10000/min",
}
