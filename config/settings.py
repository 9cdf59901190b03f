"""
Till - Django Settings (Infrastructure Only)
==============================================
Django hosts the HTTP boundary and the DB-backed key-value store.
The ledger core does not import Django; it reads TILL_LEDGER
through core.config.LedgerSettings.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("TILL_SECRET_KEY", "till-dev-key-replace-before-deployment")

DEBUG = os.environ.get("TILL_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "core.kv_store",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
# The business day follows the host's local calendar; Django's own
# timezone only affects the kv_store audit columns.
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Ledger ────────────────────────────────────────────────────
TILL_LEDGER = {
    "STORAGE_KEY": os.environ.get("TILL_STORAGE_KEY", "clothshop_state_v1"),
    "STORAGE_BACKEND": os.environ.get("TILL_STORAGE_BACKEND", "django"),
    "STATE_DIR": os.environ.get("TILL_STATE_DIR", str(BASE_DIR / ".till")),
    "ROLLOVER_SKEW_MS": int(os.environ.get("TILL_ROLLOVER_SKEW_MS", "1000")),
    "POLL_INTERVAL_SECONDS": float(os.environ.get("TILL_POLL_INTERVAL_SECONDS", "60")),
    "SEED_ON_FRESH": os.environ.get("TILL_SEED_ON_FRESH", "1") == "1",
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "till": {
            "handlers": ["console"],
            "level": os.environ.get("TILL_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
