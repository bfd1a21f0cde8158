"""
DXF Upload and Analysis Views
"""
import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .handlers import run_geb_analysis
from .services import (
    AnalysisSessionStore,
    DXFParseError,
    DXFReadError,
    DXFUploadLoader,
    DXFValidationError,
    NoDocumentLoadedError,
    PatternClassifier,
    aggregate_entity_types,
)

logger = logging.getLogger(__name__)


class SessionDocumentMixin:
    """Access to the caller's AnalysisSession."""

    def get_store(self, request) -> AnalysisSessionStore:
        return AnalysisSessionStore.for_request(request)

    def get_classifier(self) -> PatternClassifier:
        return PatternClassifier.from_settings()

    def no_document_response(self, error: NoDocumentLoadedError) -> JsonResponse:
        return JsonResponse({"error": error.message}, status=409)


@method_decorator(csrf_exempt, name="dispatch")
class DXFUploadView(SessionDocumentMixin, View):
    """Validate, read and parse an uploaded DXF file into the session."""

    def post(self, request):
        store = self.get_store(request)
        loader = DXFUploadLoader(store)

        try:
            session = loader.load(request.FILES.get("file"))
        except DXFValidationError as e:
            return JsonResponse({"error": e.message}, status=400)
        except (DXFReadError, DXFParseError) as e:
            logger.error(f"DXF upload failed: {e.message}")
            return JsonResponse({"error": e.message}, status=400)

        response = session.to_dict()
        if session.document is not None:
            subset = session.classified(self.get_classifier())
            store.save(session)
            response["geb_counts"] = {
                "entities": len(subset.entities),
                "blocks": len(subset.blocks),
                "layers": len(subset.layers),
                "article_codes": len(subset.article_codes),
            }
        return JsonResponse(response)


@method_decorator(csrf_exempt, name="dispatch")
class DXFResetView(SessionDocumentMixin, View):
    """Discard the loaded document and all derived results."""

    def post(self, request):
        self.get_store(request).clear()
        return JsonResponse({"success": True})


class DXFStatusView(SessionDocumentMixin, View):
    def get(self, request):
        return JsonResponse(self.get_store(request).load().to_dict())


class DXFAnalysisAPIView(SessionDocumentMixin, View):
    """API: run the GEB/GEBERIT handler pipeline on the loaded document."""

    def get(self, request):
        session = self.get_store(request).load()
        try:
            document = session.require_document()
        except NoDocumentLoadedError as e:
            return self.no_document_response(e)

        result = run_geb_analysis(document, self.get_classifier())
        status = 200 if result["success"] else 500
        return JsonResponse(result, status=status)


class DXFElementsAPIView(SessionDocumentMixin, View):
    """API: GEB/GEBERIT entities, blocks, layers and article codes."""

    def get(self, request):
        store = self.get_store(request)
        session = store.load()
        try:
            subset = session.classified(self.get_classifier())
        except NoDocumentLoadedError as e:
            return self.no_document_response(e)
        store.save(session)

        return JsonResponse({
            "success": True,
            **subset.to_dict(),
            "article_codes": subset.article_codes,
        })


class DXFStatisticsAPIView(SessionDocumentMixin, View):
    """API: entity counts per type."""

    def get(self, request):
        session = self.get_store(request).load()
        try:
            document = session.require_document()
        except NoDocumentLoadedError as e:
            return self.no_document_response(e)

        rows = aggregate_entity_types(document.entities)
        return JsonResponse({
            "success": True,
            "statistics": [row.to_dict() for row in rows],
        })
