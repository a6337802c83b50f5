"""flowbind error handling - structured errors with context."""

from .errors import (
    ConfigError,
    CustomError,
    DataNotFoundError,
    ErrorCategory,
    ErrorMatcher,
    ErrorTemplate,
    EvaluationError,
    FunctionError,
    IndexOutOfRangeError,
    MatchResult,
    MathError,
    ParseError,
    SignatureError,
    TemplateError,
    TypeConversionError,
    WrappedError,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "TemplateError",
    "ErrorCategory",
    "ErrorTemplate",
    "MatchResult",
    "ParseError",
    "EvaluationError",
    "FunctionError",
    "TypeConversionError",
    "DataNotFoundError",
    "SignatureError",
    "MathError",
    "IndexOutOfRangeError",
    "WrappedError",
    "CustomError",
    "ConfigError",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    "ErrorMatcherChain",
    "ErrorMatcher",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
