"""Dynamic value model."""

from .value import I64_MAX, I64_MIN, Value, format_float

__all__ = ["Value", "format_float", "I64_MIN", "I64_MAX"]
