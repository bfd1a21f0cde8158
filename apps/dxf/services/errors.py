"""Errors raised while loading and analysing a DXF upload."""
from apps.core.handlers.base import CADHandlerError


class DXFValidationError(CADHandlerError):
    """Upload rejected before reading (missing file, extension, size)."""


class DXFReadError(CADHandlerError):
    """The uploaded file could not be read."""


class DXFParseError(CADHandlerError):
    """The parser failed or returned no document."""


class NoDocumentLoadedError(CADHandlerError):
    """An analysis or export was requested before a file was loaded."""

    def __init__(self, message: str = "No DXF file loaded", **kwargs):
        super().__init__(message, **kwargs)
