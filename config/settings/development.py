"""Development settings — DEBUG=True, verbose app logging."""
from .base import *  # noqa: F401, F403

DEBUG = True

ALLOWED_HOSTS = ["*"]

LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
