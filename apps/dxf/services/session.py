"""
Analysis session state and DXF upload loading.

One AnalysisSession per browser session holds the loaded document and
the results derived from it. Sessions live in the Django cache; a load
is tagged with a generation number so a slower, older upload can never
overwrite a newer one.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from django.conf import settings
from django.core.cache import cache

from apps.core.handlers.base import CADFormat

from .classifier import PatternClassifier
from .dxf_parser import DXFParserService, read_dxf_version
from .errors import (
    DXFParseError,
    DXFReadError,
    DXFValidationError,
    NoDocumentLoadedError,
)
from .extractor import extract_elements
from .models import ClassifiedSubset, ParsedDocument

logger = logging.getLogger(__name__)

MB = 1024 * 1024
DEFAULT_MAX_UPLOAD_SIZE = 200 * MB


def _config(name: str, default=None):
    return getattr(settings, "GEB_EXTRACTOR", {}).get(name, default)


@dataclass
class AnalysisSession:
    """State of one user's analysis, replaced on every new file."""

    file_name: Optional[str] = None
    document: Optional[ParsedDocument] = None
    dxf_version: Optional[str] = None
    error: Optional[str] = None
    success: bool = False
    loading: bool = False
    load_id: int = 0
    _subset: Optional[ClassifiedSubset] = field(default=None, repr=False)
    _subset_pattern: Optional[str] = field(default=None, repr=False)

    def begin_load(self, file_name: str) -> int:
        self.file_name = file_name
        self.document = None
        self.dxf_version = None
        self.error = None
        self.success = False
        self.loading = True
        self._discard_derived()
        self.load_id += 1
        return self.load_id

    def complete_load(
        self,
        load_id: int,
        document: ParsedDocument,
        dxf_version: Optional[str] = None,
    ) -> bool:
        if load_id != self.load_id:
            logger.info(f"Ignoring superseded load #{load_id} (current #{self.load_id})")
            return False
        self.document = document
        self.dxf_version = dxf_version
        self.error = None
        self.success = True
        self.loading = False
        self._discard_derived()
        return True

    def fail_load(self, load_id: int, message: str) -> bool:
        if load_id != self.load_id:
            logger.info(f"Ignoring failure of superseded load #{load_id}")
            return False
        self.document = None
        self.error = message
        self.success = False
        self.loading = False
        self._discard_derived()
        return True

    def reset(self):
        self.file_name = None
        self.document = None
        self.dxf_version = None
        self.error = None
        self.success = False
        self.loading = False
        self._discard_derived()
        # keep load_id so in-flight loads stay stale
        self.load_id += 1

    def require_document(self) -> ParsedDocument:
        if self.document is None:
            raise NoDocumentLoadedError()
        return self.document

    def classified(self, classifier: PatternClassifier) -> ClassifiedSubset:
        """Classified subset of the current document, computed once per pattern."""
        document = self.require_document()
        pattern = classifier.pattern.pattern
        if self._subset is None or self._subset_pattern != pattern:
            self._subset = extract_elements(document, classifier)
            self._subset_pattern = pattern
        return self._subset

    def _discard_derived(self):
        self._subset = None
        self._subset_pattern = None

    def to_dict(self) -> dict:
        document = self.document
        return {
            "filename": self.file_name,
            "dxf_version": self.dxf_version,
            "success": self.success,
            "loading": self.loading,
            "error": self.error,
            "has_document": document is not None,
            "counts": {
                "entities": len(document.entities),
                "blocks": len(document.blocks),
                "layers": len(document.layers),
            } if document is not None else None,
        }


class AnalysisSessionStore:
    """Keeps AnalysisSession objects in the Django cache, keyed by session."""

    KEY_PREFIX = "dxf-analysis"

    def __init__(self, session_key: str, timeout: Optional[int] = None):
        self.session_key = session_key
        self.timeout = timeout if timeout is not None else _config("SESSION_TIMEOUT", 3600)

    @classmethod
    def for_request(cls, request) -> "AnalysisSessionStore":
        session = request.session
        # empty sessions never get a cookie
        session.setdefault(cls.KEY_PREFIX, True)
        if not session.session_key:
            session.save()
        return cls(session.session_key)

    @property
    def cache_key(self) -> str:
        return f"{self.KEY_PREFIX}:{self.session_key}"

    def load(self) -> AnalysisSession:
        return cache.get(self.cache_key) or AnalysisSession()

    def save(self, session: AnalysisSession):
        cache.set(self.cache_key, session, self.timeout)

    def clear(self):
        session = self.load()
        session.reset()
        self.save(session)


def validate_dxf_upload(
    file_name: Optional[str], size: Optional[int], max_size: Optional[int] = None
):
    """Raise DXFValidationError unless the upload is an acceptable .dxf file."""
    if not file_name:
        raise DXFValidationError("No file selected")

    if CADFormat.from_extension(file_name) != CADFormat.DXF:
        raise DXFValidationError(
            "Please select a valid DXF file (.dxf extension required)",
            details={"filename": file_name},
        )

    max_size = max_size or _config("MAX_UPLOAD_SIZE", DEFAULT_MAX_UPLOAD_SIZE)
    if size is not None and size > max_size:
        raise DXFValidationError(
            "File size too large. Please select a file smaller than "
            f"{max_size // MB}MB.",
            details={"size": size, "max_size": max_size},
        )


class DXFUploadLoader:
    """
    Validate, read and parse an upload into the session store.

    Usage:
        loader = DXFUploadLoader(AnalysisSessionStore.for_request(request))
        session = loader.load(request.FILES.get("file"))
    """

    def __init__(
        self,
        store: AnalysisSessionStore,
        parser: Optional[DXFParserService] = None,
        max_upload_size: Optional[int] = None,
    ):
        self.store = store
        self.parser = parser or DXFParserService()
        self.max_upload_size = max_upload_size

    def load(self, uploaded_file) -> AnalysisSession:
        if uploaded_file is None:
            raise DXFValidationError("No file selected")

        file_name = getattr(uploaded_file, "name", None)
        validate_dxf_upload(
            file_name, getattr(uploaded_file, "size", None), self.max_upload_size
        )

        session = self.store.load()
        load_id = session.begin_load(file_name)
        self.store.save(session)
        logger.info(f"Loading {file_name} (load #{load_id})")

        try:
            content = uploaded_file.read()
        except OSError as e:
            self._fail(load_id, "Failed to read file")
            raise DXFReadError("Failed to read file", details={"reason": str(e)}) from e

        try:
            if isinstance(content, bytes):
                document = self.parser.parse_bytes(content)
                # version codes are ASCII
                dxf_version = read_dxf_version(content.decode("latin-1"))
            else:
                document = self.parser.parse_text(content)
                dxf_version = read_dxf_version(content)
        except DXFParseError as e:
            self._fail(load_id, e.message)
            raise

        session = self.store.load()
        if session.complete_load(load_id, document, dxf_version):
            self.store.save(session)
            logger.info(
                f"Loaded {file_name}: {len(document.entities)} entities, "
                f"{len(document.blocks)} blocks, {len(document.layers)} layers"
            )
        return session

    def _fail(self, load_id: int, message: str):
        session = self.store.load()
        if session.fail_load(load_id, message):
            self.store.save(session)
