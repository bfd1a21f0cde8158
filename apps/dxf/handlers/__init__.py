# DXF handlers: GEB/GEBERIT elements, article codes, entity statistics.
from .geb_analysis import (
    ArticleCodeHandler,
    EntityStatisticsHandler,
    GebElementsHandler,
    build_geb_pipeline,
    run_geb_analysis,
)

__all__ = [
    "ArticleCodeHandler",
    "EntityStatisticsHandler",
    "GebElementsHandler",
    "build_geb_pipeline",
    "run_geb_analysis",
]
