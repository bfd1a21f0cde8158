"""Request logging middleware."""
import logging
import time

from django.http import HttpRequest, HttpResponse

from .healthz import HEALTH_PATHS

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Logs method, path, status and duration. Excludes health paths."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path in HEALTH_PATHS:
            return self.get_response(request)

        start = time.monotonic()
        response = self.get_response(request)
        elapsed = (time.monotonic() - start) * 1000

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s -> %s (%.1fms)",
            request.method,
            request.path,
            response.status_code,
            elapsed,
        )
        return response
