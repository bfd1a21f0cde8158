"""Root URL configuration for the GEB/GEBERIT DXF extractor."""
from django.urls import include, path

from apps.core.healthz import liveness, readiness

urlpatterns = [
    # Health endpoints (no session)
    path("livez/", liveness, name="health-liveness"),
    path("healthz/", readiness, name="health-readiness"),
    path("health/", liveness, name="health-compat"),

    # App URLs
    path("dxf/", include("apps.dxf.urls", namespace="dxf")),
    path("export/", include("apps.export.urls", namespace="export")),
]
