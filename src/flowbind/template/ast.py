"""Expression AST node types.

The node set is closed; ``ExpressionAst`` is the union of all of them.
Nodes are frozen and own their children as tuples.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from flowbind.context import DataSource
from flowbind.value import Value


class BinaryOperator(str, Enum):
    """Binary operators, valued by their template spelling."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    AND = "&&"
    OR = "||"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"

    @property
    def label(self) -> str:
        """CamelCase operator name used in error messages (``StartsWith``)."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class UnaryOperator(str, Enum):
    NOT = "!"
    MINUS = "-"


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class DataAccess:
    """Reference to a data source plus a dotted path inside it."""

    source: DataSource
    path: str = ""


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: tuple[ExpressionAst, ...] = ()


@dataclass(frozen=True)
class PipelineStage:
    """One ``| name(args)`` stage; the running value is passed first."""

    name: str
    args: tuple[ExpressionAst, ...] = ()


@dataclass(frozen=True)
class Pipeline:
    input: ExpressionAst
    stages: tuple[PipelineStage, ...]


@dataclass(frozen=True)
class BinaryOp:
    left: ExpressionAst
    op: BinaryOperator
    right: ExpressionAst


@dataclass(frozen=True)
class UnaryOp:
    op: UnaryOperator
    operand: ExpressionAst


@dataclass(frozen=True)
class Ternary:
    condition: ExpressionAst
    then_branch: ExpressionAst
    else_branch: ExpressionAst


@dataclass(frozen=True)
class IfFunction:
    """``if(cond, then[, else])``; a missing else yields null."""

    condition: ExpressionAst
    then_branch: ExpressionAst
    else_branch: ExpressionAst | None = None


ExpressionAst = Union[
    Literal,
    DataAccess,
    FunctionCall,
    Pipeline,
    BinaryOp,
    UnaryOp,
    Ternary,
    IfFunction,
]
