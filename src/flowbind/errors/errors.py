"""Template error types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    PARSE = "PARSE"
    EVALUATION = "EVALUATION"
    FUNCTION = "FUNCTION"
    DATA = "DATA"
    SYSTEM = "SYSTEM"


@dataclass
class TemplateError(Exception):
    """Structured error with context. Base exception for all flowbind errors."""

    # Identity
    code: str  # e.g., "DATA_NOT_FOUND"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Underlying reason, without the summary prefix
    suggestion: str | None = None  # Actionable fix

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for diagnostics and API responses.

        Subclass-specific fields (path, position, ...) are included.

        Returns:
            Dictionary representation of the error
        """
        data: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "timestamp": self.timestamp.isoformat(),
        }
        for extra in fields(self):
            if extra.name not in _BASE_FIELDS:
                data[extra.name] = getattr(self, extra.name)
        return data


_BASE_FIELDS = frozenset(f.name for f in fields(TemplateError))


@dataclass
class ParseError(TemplateError):
    """Malformed template syntax. Raised only while parsing."""

    position: int = 0  # UTF-8 byte offset into the template source
    template: str = ""  # Full template source


@dataclass
class EvaluationError(TemplateError):
    """Invalid or unimplemented runtime operation."""

    context: str | None = None


@dataclass
class FunctionError(TemplateError):
    """Missing function or function-reported failure."""

    function: str = ""
    arguments: list[str] = field(default_factory=list)  # Rendered argument values


@dataclass
class TypeConversionError(TemplateError):
    """Value could not be coerced to the requested type."""

    from_type: str = ""
    to_type: str = ""
    context: str | None = None


@dataclass
class DataNotFoundError(TemplateError):
    """Unresolved data-source reference."""

    path: str = ""
    available: list[str] = field(default_factory=list)  # Suggested alternatives


@dataclass
class SignatureError(TemplateError):
    """Function called with arguments that do not fit its signature."""

    function: str = ""


@dataclass
class MathError(TemplateError):
    """Division by zero and similar arithmetic failures."""


@dataclass
class IndexOutOfRangeError(TemplateError):
    """Array index outside the collection bounds."""

    index: int = 0
    size: int = 0


@dataclass
class WrappedError(TemplateError):
    """Failure passed through from a supporting library (re, json, datetime, I/O)."""

    source_type: str | None = None  # Name of the original exception type


@dataclass
class CustomError(TemplateError):
    """Error raised by user-supplied functions with an optional code of their own."""

    error_code: str | None = None


@dataclass
class ConfigError(TemplateError):
    """Invalid engine configuration."""


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Data not found: {path}"
    error_type: type[TemplateError] = TemplateError
    detail_template: str | None = None
    suggestion_template: str | None = None


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Check if this matcher handles the error.

        Args:
            error: Exception to check

        Returns:
            True if this matcher can handle the error
        """

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Extract error code and context from the exception.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with error code and context
        """
