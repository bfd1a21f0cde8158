"""DXF services: parser, classifier, extractor, statistics, session."""
from .classifier import DEFAULT_PATTERN_TOKENS, PatternClassifier
from .dxf_parser import DXFParserService, parse_dxf, read_dxf_version
from .errors import (
    DXFParseError,
    DXFReadError,
    DXFValidationError,
    NoDocumentLoadedError,
)
from .extractor import extract_elements, harvest_article_codes
from .models import (
    Block,
    ClassifiedSubset,
    Entity,
    Layer,
    ParsedDocument,
    StatRow,
)
from .session import (
    AnalysisSession,
    AnalysisSessionStore,
    DXFUploadLoader,
    validate_dxf_upload,
)
from .statistics import aggregate_entity_types
from .text_normalizer import clean_dxf_text

__all__ = [
    "AnalysisSession",
    "AnalysisSessionStore",
    "Block",
    "ClassifiedSubset",
    "DEFAULT_PATTERN_TOKENS",
    "DXFParseError",
    "DXFParserService",
    "DXFReadError",
    "DXFUploadLoader",
    "DXFValidationError",
    "Entity",
    "Layer",
    "NoDocumentLoadedError",
    "ParsedDocument",
    "PatternClassifier",
    "StatRow",
    "aggregate_entity_types",
    "clean_dxf_text",
    "extract_elements",
    "harvest_article_codes",
    "parse_dxf",
    "read_dxf_version",
    "validate_dxf_upload",
]
