"""Export app configuration."""
from django.apps import AppConfig


class ExportConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.export"
    verbose_name = "Export (JSON / Excel / CSV)"
