"""Test settings — small upload limit, quiet logging."""
from .base import *  # noqa: F401, F403

ALLOWED_HOSTS = ["testserver", "localhost"]

GEB_EXTRACTOR = {
    **GEB_EXTRACTOR,  # noqa: F405
    "PATTERN_TOKENS": ("GEBERIT", "GEB"),
    "MAX_UPLOAD_SIZE": 1024 * 1024,
}

LOGGING["loggers"]["apps"]["level"] = "WARNING"  # noqa: F405
