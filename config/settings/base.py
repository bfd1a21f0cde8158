"""Base settings shared by all environments."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")

DEBUG = False

ALLOWED_HOSTS = [
    h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost").split(",") if h.strip()
]

INSTALLED_APPS = [
    "apps.core",
    "apps.dxf",
    "apps.export",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "apps.core.middleware.RequestLoggingMiddleware",
]

ROOT_URLCONF = "config.urls"

# No models: analysis state lives in the cache, sessions too.
DATABASES = {}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "geb-dxf-extractor",
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.cache"


USE_TZ = True
TIME_ZONE = "UTC"

# GEB/GEBERIT extraction
_MAX_UPLOAD_MB = int(os.environ.get("DXF_MAX_UPLOAD_MB", "200"))

GEB_EXTRACTOR = {
    "PATTERN_TOKENS": tuple(
        t.strip() for t in os.environ.get("GEB_PATTERN_TOKENS", "GEBERIT,GEB").split(",") if t.strip()
    ),
    "MAX_UPLOAD_SIZE": _MAX_UPLOAD_MB * 1024 * 1024,
    "SESSION_TIMEOUT": int(os.environ.get("DXF_SESSION_TIMEOUT", "3600")),
}

# Uploads above this go to a temp file instead of memory
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

LOG_LEVEL = os.environ.get("DJANGO_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
