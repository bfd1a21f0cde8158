"""Export services: flattener, JSON/Excel/CSV encoders."""
from .export_service import (
    ExportArtifact,
    GebExportService,
    WorkbookExportService,
    encode_json,
    prepare_geb_sheets,
)
from .flattener import collect_columns, flatten_collection, flatten_record, rows_to_csv

__all__ = [
    "ExportArtifact",
    "GebExportService",
    "WorkbookExportService",
    "collect_columns",
    "encode_json",
    "flatten_collection",
    "flatten_record",
    "prepare_geb_sheets",
    "rows_to_csv",
]
