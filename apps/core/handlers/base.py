"""
Base handler classes for the DXF analysis pipeline.

Provides BaseCADHandler, CADHandlerResult, CADHandlerError,
and CADHandlerPipeline — used by the dxf analysis handlers.
"""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class CADFormat(Enum):
    """Upload formats recognised by extension."""

    DXF = "dxf"
    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, filepath: Union[str, Path]) -> "CADFormat":
        if Path(filepath).suffix.lower() == ".dxf":
            return cls.DXF
        return cls.UNKNOWN


class HandlerStatus(Enum):
    """Handler execution status."""

    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


def public_data(data: dict) -> dict:
    """Drop ``_``-prefixed keys (live objects passed between handlers)."""
    return {k: v for k, v in data.items() if not k.startswith("_")}


@dataclass
class CADHandlerResult:
    """Result of a single handler run."""

    success: bool
    handler_name: str
    status: HandlerStatus = HandlerStatus.SUCCESS
    data: dict = field(default_factory=dict)
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)
    execution_time_ms: float = 0.0
    timestamp: str = field(
        default_factory=lambda: datetime.now().isoformat()
    )

    @classmethod
    def failed(cls, handler_name: str, errors: list) -> "CADHandlerResult":
        return cls(
            success=False,
            handler_name=handler_name,
            status=HandlerStatus.ERROR,
            errors=errors,
        )

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "handler": self.handler_name,
            "status": self.status.value,
            "data": public_data(self.data),
            "errors": self.errors,
            "warnings": self.warnings,
            "execution_time_ms": self.execution_time_ms,
            "timestamp": self.timestamp,
        }

    def add_warning(self, message: str):
        self.warnings.append(message)


class CADHandlerError(Exception):
    """Base exception for loading, parsing and analysis errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class BaseCADHandler(ABC):
    """
    Base class for the analysis handlers.

    ``execute`` receives the pipeline context merged with the outputs of
    earlier handlers. Keys starting with ``_`` in ``data`` carry live
    objects between handlers and are left out of ``to_dict()``.
    """

    name: str = "BaseHandler"
    required_inputs: list = []

    def __init__(self, context: dict = None):
        self.context = context or {}

    @abstractmethod
    def execute(self, input_data: dict) -> CADHandlerResult:
        pass

    def start_result(self) -> CADHandlerResult:
        return CADHandlerResult(
            success=True,
            handler_name=self.name,
            status=HandlerStatus.RUNNING,
        )

    def missing_inputs(self, input_data: dict) -> list[str]:
        return [
            f"Missing required input: {required}"
            for required in self.required_inputs
            if required not in input_data
        ]

    def run(self, input_data: dict) -> CADHandlerResult:
        merged_input = {**self.context, **input_data}

        errors = self.missing_inputs(merged_input)
        if errors:
            return CADHandlerResult.failed(self.name, errors)

        start = time.monotonic()
        try:
            logger.debug("[%s] Starting execution...", self.name)
            result = self.execute(merged_input)
        except CADHandlerError as e:
            logger.error("[%s] Handler error: %s", self.name, e.message)
            return CADHandlerResult.failed(self.name, [e.message])
        except Exception as e:
            logger.exception("[%s] Unexpected error: %s", self.name, e)
            return CADHandlerResult.failed(self.name, [f"Unexpected error: {e!s}"])

        result.execution_time_ms = (time.monotonic() - start) * 1000
        logger.info("[%s] Completed in %.1fms", self.name, result.execution_time_ms)
        return result


class CADHandlerPipeline:
    """Runs handlers in order, feeding each one the previous results."""

    def __init__(self, context: dict = None):
        self.handlers: list[BaseCADHandler] = []
        self.context = context or {}
        self.results: list[CADHandlerResult] = []

    def add(self, handler: BaseCADHandler) -> "CADHandlerPipeline":
        self.handlers.append(handler)
        return self

    def run(self, input_data: dict) -> list[CADHandlerResult]:
        self.results = []
        current_data = {**self.context, **input_data}

        for handler in self.handlers:
            result = handler.run(current_data)
            self.results.append(result)

            if not result.success:
                logger.warning("Pipeline stopped at %s: %s", handler.name, result.errors)
                break

            current_data.update(result.data)

        return self.results

    def get_final_result(self) -> dict:
        """Combined outcome; ``data`` merges the public data of every handler."""
        combined = {
            "success": all(r.success for r in self.results),
            "handlers": [r.to_dict() for r in self.results],
            "data": {},
            "errors": [],
            "warnings": [],
        }

        for result in self.results:
            combined["data"].update(public_data(result.data))
            combined["errors"].extend(result.errors)
            combined["warnings"].extend(result.warnings)

        return combined
