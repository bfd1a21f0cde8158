"""
GEB/GEBERIT analysis handlers.

Three handlers over a ParsedDocument, chained by CADHandlerPipeline:
- GebElementsHandler: matching entities, blocks and layers
- ArticleCodeHandler: normalized article codes from matching layers
- EntityStatisticsHandler: entity type counts over the whole drawing
"""
import logging

from apps.core.handlers.base import (
    BaseCADHandler,
    CADHandlerPipeline,
    CADHandlerResult,
    HandlerStatus,
)

from ..services.classifier import PatternClassifier
from ..services.extractor import extract_elements, harvest_article_codes
from ..services.models import ParsedDocument
from ..services.statistics import aggregate_entity_types

logger = logging.getLogger(__name__)


class GebElementsHandler(BaseCADHandler):
    """
    Classifies the elements of a parsed drawing.

    Input:
        document: ParsedDocument
        classifier: PatternClassifier
    Output:
        elements: {entities, blocks, layers}
        element_counts: per collection
        _subset: ClassifiedSubset for later handlers
    """

    name = "GebElementsHandler"
    required_inputs = ["document", "classifier"]

    def execute(self, input_data: dict) -> CADHandlerResult:
        result = self.start_result()
        document: ParsedDocument = input_data["document"]
        classifier: PatternClassifier = input_data["classifier"]

        subset = extract_elements(document, classifier, with_codes=False)
        if subset.is_empty:
            result.add_warning("No GEB/GEBERIT elements found")

        result.data["_subset"] = subset
        result.data["elements"] = subset.to_dict()
        result.data["element_counts"] = {
            "entities": len(subset.entities),
            "blocks": len(subset.blocks),
            "layers": len(subset.layers),
        }
        result.status = HandlerStatus.SUCCESS
        return result


class ArticleCodeHandler(BaseCADHandler):
    """Harvests article codes and attaches them to the classified subset."""

    name = "ArticleCodeHandler"
    required_inputs = ["document", "classifier"]

    def execute(self, input_data: dict) -> CADHandlerResult:
        result = self.start_result()
        codes = harvest_article_codes(input_data["document"], input_data["classifier"])

        subset = input_data.get("_subset")
        if subset is not None:
            subset.article_codes = codes

        result.data["article_codes"] = codes
        result.status = HandlerStatus.SUCCESS
        logger.info(f"[{self.name}] {len(codes)} unique article codes")
        return result


class EntityStatisticsHandler(BaseCADHandler):
    name = "EntityStatisticsHandler"
    required_inputs = ["document"]

    def execute(self, input_data: dict) -> CADHandlerResult:
        result = self.start_result()
        rows = aggregate_entity_types(input_data["document"].entities)
        result.data["statistics"] = [row.to_dict() for row in rows]
        result.status = HandlerStatus.SUCCESS
        return result


def build_geb_pipeline(classifier: PatternClassifier) -> CADHandlerPipeline:
    pipeline = CADHandlerPipeline(context={"classifier": classifier})
    pipeline.add(GebElementsHandler())
    pipeline.add(ArticleCodeHandler())
    pipeline.add(EntityStatisticsHandler())
    return pipeline


def run_geb_analysis(document: ParsedDocument, classifier: PatternClassifier) -> dict:
    """Run all handlers and return the combined, JSON-serializable result."""
    pipeline = build_geb_pipeline(classifier)
    pipeline.run({"document": document})
    return pipeline.get_final_result()
