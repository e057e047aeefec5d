"""
Exception hierarchy for the allocation engine.

The analysis core itself raises nothing for well-typed input; these
exceptions cover the edges around it: reading holdings files, validating
policy tables and writing reports.
"""

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ErrorSeverity(Enum):
    CRITICAL = "critical"   # the holdings file is unusable
    WARNING = "warning"     # a row was skipped, the load continues
    INFO = "info"           # noted only, e.g. a dust balance


@dataclass
class ProcessingError:
    """A problem recorded while loading holdings instead of raised."""

    file_name: str
    error_type: str                     # e.g. "ROW_PARSE_ERROR"
    message: str
    severity: ErrorSeverity
    traceback_str: Optional[str] = None
    context: dict = field(default_factory=dict)  # row index, symbol

    @classmethod
    def from_exception(
        cls,
        file_name: str,
        error_type: str,
        exception: Exception,
        severity: ErrorSeverity,
        context: Optional[dict] = None,
    ) -> "ProcessingError":
        """Record a caught exception; INFO entries carry no traceback."""
        return cls(
            file_name=file_name,
            error_type=error_type,
            message=str(exception),
            severity=severity,
            traceback_str=None if severity is ErrorSeverity.INFO else traceback.format_exc(),
            context=dict(context or {}),
        )

    def to_dict(self) -> dict:
        return {
            "file_name": self.file_name,
            "error_type": self.error_type,
            "message": self.message,
            "severity": self.severity.value,
            "traceback": self.traceback_str,
            "context": self.context,
        }


# ============================================================================
# BASE EXCEPTION CLASSES
# ============================================================================

class AllocationEngineException(Exception):
    """Root of the engine's errors; error_code defaults to the class name."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class DataProcessingError(AllocationEngineException):
    """Base class for errors during holdings extraction."""
    pass


class ValidationError(AllocationEngineException):
    """Base class for data validation failures."""
    pass


class ConfigurationError(AllocationEngineException):
    """Base class for policy/configuration issues."""
    pass


class PipelineError(AllocationEngineException):
    """Base class for analysis run errors."""
    pass


# ============================================================================
# HOLDINGS INPUT
# ============================================================================

class HoldingsReadError(DataProcessingError):
    """
    Raised when a holdings file cannot be found, opened or parsed.

    Example:
        raise HoldingsReadError("Unsupported holdings format '.pdf'")
    """
    pass


class HoldingValidationError(ValidationError):
    """
    Raised when a holdings row cannot be turned into a Holding.

    Example:
        raise HoldingValidationError("Row 4: value_usd 'abc' is not numeric")
    """
    pass


# ============================================================================
# POLICY TABLES
# ============================================================================

class TargetTableError(ConfigurationError):
    """
    Raised when a target allocation row is incomplete or does not sum to 100.

    Example:
        raise TargetTableError("AGGRESSIVE targets sum to 95, expected 100")
    """
    pass


# ============================================================================
# OUTPUT
# ============================================================================

class OutputWriteError(PipelineError):
    """
    Raised when the JSON snapshot or Excel report cannot be written.

    Example:
        raise OutputWriteError("Cannot write allocation_2026-10-16.xlsx: Permission denied")
    """
    pass
