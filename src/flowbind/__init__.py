"""flowbind - expression templates for workflow data binding."""

from flowbind.context import Context, ContextBuilder, DataSource
from flowbind.errors import (
    DataNotFoundError,
    EvaluationError,
    FunctionError,
    MathError,
    ParseError,
    TemplateError,
    TypeConversionError,
)
from flowbind.functions import FunctionRegistry
from flowbind.template import Dependencies, Template, TemplateEngine, parse
from flowbind.value import Value

__version__ = "0.3.0"

__all__ = [
    "Value",
    "Context",
    "ContextBuilder",
    "DataSource",
    "Template",
    "TemplateEngine",
    "Dependencies",
    "FunctionRegistry",
    "parse",
    "TemplateError",
    "ParseError",
    "EvaluationError",
    "FunctionError",
    "TypeConversionError",
    "DataNotFoundError",
    "MathError",
]
