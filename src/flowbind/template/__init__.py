"""Template language: parsing, evaluation and rendering."""

from .ast import (
    BinaryOp,
    BinaryOperator,
    DataAccess,
    ExpressionAst,
    FunctionCall,
    IfFunction,
    Literal,
    Pipeline,
    PipelineStage,
    Ternary,
    UnaryOp,
    UnaryOperator,
)
from .elements import Element, Expression, Text
from .engine import TemplateEngine
from .evaluator import collect_dependencies, evaluate
from .parser import parse_expression
from .template import Template, parse
from .types import Dependencies, RenderResult

__all__ = [
    # Templates
    "Template",
    "TemplateEngine",
    "parse",
    "parse_expression",
    "Element",
    "Text",
    "Expression",
    "Dependencies",
    "RenderResult",
    # AST
    "ExpressionAst",
    "Literal",
    "DataAccess",
    "FunctionCall",
    "Pipeline",
    "PipelineStage",
    "BinaryOp",
    "BinaryOperator",
    "UnaryOp",
    "UnaryOperator",
    "Ternary",
    "IfFunction",
    # Evaluation
    "evaluate",
    "collect_dependencies",
]
