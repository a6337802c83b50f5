"""Shared types for flowbind.

Import from here rather than submodules:
    from flowbind.types import LogLevel, ValueKind, ValidationResult
"""

from .enums import DataSourceKind, LogFormat, LogLevel, ValueKind
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "ValueKind",
    "DataSourceKind",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
