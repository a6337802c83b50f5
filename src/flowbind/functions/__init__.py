"""Template functions and the registry that resolves them."""

from .builtins import BUILTIN_FUNCTIONS
from .registry import (
    Function,
    FunctionLookup,
    FunctionRegistry,
    FunctionSignature,
    Parameter,
    TemplateFunction,
)

__all__ = [
    "Function",
    "FunctionLookup",
    "FunctionRegistry",
    "FunctionSignature",
    "Parameter",
    "TemplateFunction",
    "BUILTIN_FUNCTIONS",
]
