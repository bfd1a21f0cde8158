"""
Health endpoints for container orchestration.

These endpoints are exempt from authentication and session handling.

Registration in config/urls.py:
    urlpatterns = [
        path("livez/", liveness, name="health-liveness"),
        path("healthz/", readiness, name="health-readiness"),
    ]
"""
import logging

from django.core.cache import cache
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET

logger = logging.getLogger(__name__)

HEALTH_PATHS = frozenset({"/livez/", "/healthz/", "/health/"})
CACHE_PROBE_KEY = "healthz:probe"


@csrf_exempt
@require_GET
def liveness(request):
    """Liveness probe: Is the process alive?"""
    return JsonResponse({"status": "alive"})


@csrf_exempt
@require_GET
def readiness(request):
    """Readiness probe: session cache and DXF parser available?"""
    checks = {}

    try:
        cache.set(CACHE_PROBE_KEY, "ok", 5)
        if cache.get(CACHE_PROBE_KEY) != "ok":
            raise RuntimeError("cache round-trip failed")
        checks["cache"] = "ok"
    except Exception as e:
        logger.warning("Readiness cache check failed: %s", e)
        checks["cache"] = str(e)
        return JsonResponse(
            {"status": "unhealthy", "checks": checks},
            status=503,
        )

    import ezdxf

    checks["ezdxf"] = ezdxf.__version__
    return JsonResponse({"status": "healthy", "checks": checks})
