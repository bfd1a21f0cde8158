"""DXF URL configuration."""
from django.urls import path

from . import views

app_name = "dxf"

urlpatterns = [
    path(
        "upload/",
        views.DXFUploadView.as_view(),
        name="dxf_upload",
    ),
    path(
        "reset/",
        views.DXFResetView.as_view(),
        name="dxf_reset",
    ),
    path(
        "api/status/",
        views.DXFStatusView.as_view(),
        name="dxf_api_status",
    ),
    path(
        "api/analysis/",
        views.DXFAnalysisAPIView.as_view(),
        name="dxf_api_analysis",
    ),
    path(
        "api/elements/",
        views.DXFElementsAPIView.as_view(),
        name="dxf_api_elements",
    ),
    path(
        "api/statistics/",
        views.DXFStatisticsAPIView.as_view(),
        name="dxf_api_statistics",
    ),
]
