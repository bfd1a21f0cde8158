"""
Export Views

Downloads for the drawing loaded in the current session.
"""
import logging

from django.http import HttpResponse, JsonResponse
from django.views.generic import View

from apps.dxf.services import (
    AnalysisSessionStore,
    NoDocumentLoadedError,
    PatternClassifier,
)

from .services import GebExportService

logger = logging.getLogger(__name__)


class ExportArtifactView(View):
    """Download one export artifact (JSON, Excel or CSV)."""

    def get(self, request, artifact):
        if artifact not in GebExportService.ARTIFACTS:
            return JsonResponse({"error": f"Unknown export: {artifact}"}, status=404)

        store = AnalysisSessionStore.for_request(request)
        session = store.load()
        try:
            subset = session.classified(PatternClassifier.from_settings())
        except NoDocumentLoadedError as e:
            return JsonResponse({"error": e.message}, status=409)
        store.save(session)

        options = {}
        if artifact == "document-csv":
            options["scope"] = request.GET.get("scope", "entities")

        service = GebExportService(session.document, subset)
        output = service.build(artifact, **options)

        response = HttpResponse(output.content, content_type=output.content_type)
        response["Content-Disposition"] = f'attachment; filename="{output.filename}"'
        return response


class ExportCatalogView(View):
    """List the available export artifacts."""

    def get(self, request):
        return JsonResponse({"artifacts": GebExportService.artifact_names()})
