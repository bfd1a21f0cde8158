"""Export URL configuration."""
from django.urls import path

from . import views

app_name = "export"

urlpatterns = [
    path(
        "",
        views.ExportCatalogView.as_view(),
        name="export_catalog",
    ),
    path(
        "<slug:artifact>/",
        views.ExportArtifactView.as_view(),
        name="export_artifact",
    ),
]
