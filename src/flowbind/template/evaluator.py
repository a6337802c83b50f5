"""Expression evaluation and static dependency extraction."""

from __future__ import annotations

from flowbind.context import Context
from flowbind.errors import create_error
from flowbind.functions import FunctionLookup, TemplateFunction
from flowbind.types import DataSourceKind
from flowbind.value import Value

from .ast import (
    BinaryOp,
    BinaryOperator,
    DataAccess,
    ExpressionAst,
    FunctionCall,
    IfFunction,
    Literal,
    Pipeline,
    Ternary,
    UnaryOp,
    UnaryOperator,
)
from .types import Dependencies


def evaluate(node: ExpressionAst, context: Context, functions: FunctionLookup) -> Value:
    """Evaluate an expression tree.

    Children are evaluated depth-first, left to right. The first error
    aborts evaluation.

    Args:
        node: Expression to evaluate
        context: Data sources
        functions: Function lookup for calls and pipeline stages

    Returns:
        Resulting value

    Raises:
        TemplateError: DataNotFoundError, FunctionError, MathError,
            TypeConversionError or EvaluationError
    """
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, DataAccess):
        return context.resolve_data_source(node.source, node.path)

    if isinstance(node, FunctionCall):
        function = _lookup(functions, node.name)
        args = [evaluate(arg, context, functions) for arg in node.args]
        return function.execute(args)

    if isinstance(node, Pipeline):
        current = evaluate(node.input, context, functions)
        for stage in node.stages:
            function = _lookup(functions, stage.name)
            args = [current, *(evaluate(arg, context, functions) for arg in stage.args)]
            current = function.execute(args)
        return current

    if isinstance(node, BinaryOp):
        left = evaluate(node.left, context, functions)
        right = evaluate(node.right, context, functions)
        return apply_binary(node.op, left, right)

    if isinstance(node, UnaryOp):
        operand = evaluate(node.operand, context, functions)
        if node.op is UnaryOperator.NOT:
            return Value.from_bool(not operand.is_truthy())
        return Value.from_float(-operand.as_float())

    if isinstance(node, Ternary):
        condition = evaluate(node.condition, context, functions)
        branch = node.then_branch if condition.is_truthy() else node.else_branch
        return evaluate(branch, context, functions)

    if isinstance(node, IfFunction):
        condition = evaluate(node.condition, context, functions)
        if condition.is_truthy():
            return evaluate(node.then_branch, context, functions)
        if node.else_branch is None:
            return Value.null()
        return evaluate(node.else_branch, context, functions)

    raise create_error(
        "EVALUATION_ERROR",
        detail=f"Unsupported expression node {type(node).__name__}",
    )


def _lookup(functions: FunctionLookup, name: str) -> TemplateFunction:
    function = functions.get(name)
    if function is None:
        raise create_error(
            "FUNCTION_ERROR", function=name, detail="Function not found", arguments=[]
        )
    return function


def _arithmetic(op: BinaryOperator, left: Value, right: Value) -> Value:
    if op is BinaryOperator.DIVIDE:
        dividend = left.as_float()
        divisor = right.as_float()
        if divisor == 0.0:
            raise create_error("MATH_ERROR", detail="Division by zero")
        return Value.from_float(dividend / divisor)

    a, b = left.as_float(), right.as_float()
    if op is BinaryOperator.ADD:
        return Value.from_float(a + b)
    if op is BinaryOperator.SUBTRACT:
        return Value.from_float(a - b)
    return Value.from_float(a * b)


def apply_binary(op: BinaryOperator, left: Value, right: Value) -> Value:
    """Apply a binary operator to already-evaluated operands.

    Raises:
        MathError: Division by zero
        TypeConversionError: Operand not coercible to a number
        EvaluationError: Operator that is parsed but not evaluated
    """
    if op is BinaryOperator.ADD:
        if left.is_number() and right.is_number():
            return _arithmetic(op, left, right)
        return Value.from_str(left.as_string() + right.as_string())

    if op in (BinaryOperator.SUBTRACT, BinaryOperator.MULTIPLY, BinaryOperator.DIVIDE):
        return _arithmetic(op, left, right)

    if op is BinaryOperator.EQUAL:
        return Value.from_bool(left == right)

    if op is BinaryOperator.NOT_EQUAL:
        return Value.from_bool(left != right)

    if op is BinaryOperator.LESS_THAN:
        return Value.from_bool(left.as_float() < right.as_float())

    if op is BinaryOperator.AND:
        return Value.from_bool(left.is_truthy() and right.is_truthy())

    if op is BinaryOperator.OR:
        return Value.from_bool(left.is_truthy() or right.is_truthy())

    # TODO: evaluate Modulo, the remaining comparisons and the string
    # operators once their coercion rules are settled.
    raise create_error("EVALUATION_ERROR", detail=f"Operator {op.label} not implemented")


def collect_dependencies(node: ExpressionAst, deps: Dependencies) -> None:
    """Record every data source and function ``node`` could touch.

    Both branches of conditionals are visited. Calling this twice on the same
    record leaves it unchanged.

    Args:
        node: Expression to traverse
        deps: Record to add to
    """
    if isinstance(node, Literal):
        return

    if isinstance(node, DataAccess):
        kind = node.source.kind
        if kind is DataSourceKind.INPUT:
            deps.input_paths.add(node.path)
        elif kind is DataSourceKind.NODE:
            deps.node_ids.add(node.source.node_id or "")
        elif kind is DataSourceKind.ENVIRONMENT:
            deps.env_vars.add(node.path)
        elif kind is DataSourceKind.SYSTEM:
            deps.uses_system = True
        elif kind is DataSourceKind.EXECUTION:
            deps.uses_execution = True
        elif kind is DataSourceKind.WORKFLOW:
            deps.uses_workflow = True
        return

    if isinstance(node, FunctionCall):
        deps.functions.add(node.name)
        for arg in node.args:
            collect_dependencies(arg, deps)
        return

    if isinstance(node, Pipeline):
        collect_dependencies(node.input, deps)
        for stage in node.stages:
            deps.functions.add(stage.name)
            for arg in stage.args:
                collect_dependencies(arg, deps)
        return

    if isinstance(node, BinaryOp):
        collect_dependencies(node.left, deps)
        collect_dependencies(node.right, deps)
        return

    if isinstance(node, UnaryOp):
        collect_dependencies(node.operand, deps)
        return

    if isinstance(node, (Ternary, IfFunction)):
        collect_dependencies(node.condition, deps)
        collect_dependencies(node.then_branch, deps)
        if node.else_branch is not None:
            collect_dependencies(node.else_branch, deps)
        return

    raise create_error(
        "EVALUATION_ERROR",
        detail=f"Unsupported expression node {type(node).__name__}",
    )
