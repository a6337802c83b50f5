"""Template elements: literal text and parsed expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from flowbind.context import Context
from flowbind.functions import FunctionLookup
from flowbind.value import Value

from .ast import DataAccess, ExpressionAst, Literal
from .evaluator import collect_dependencies, evaluate
from .types import Dependencies


@dataclass(frozen=True)
class Text:
    """Literal text copied verbatim into output."""

    text: str


@dataclass(frozen=True)
class Expression:
    """One ``{{ ... }}`` segment: its trimmed source and parsed AST."""

    source: str
    ast: ExpressionAst

    def evaluate(self, context: Context, functions: FunctionLookup) -> Value:
        return evaluate(self.ast, context, functions)

    def is_simple_access(self) -> bool:
        """True for a bare data reference such as ``$input.name``."""
        return isinstance(self.ast, DataAccess)

    def is_literal(self) -> bool:
        return isinstance(self.ast, Literal)

    def dependencies(self) -> Dependencies:
        deps = Dependencies()
        collect_dependencies(self.ast, deps)
        return deps


Element = Union[Text, Expression]
