"""Template scanning and expression parsing.

A template is split into literal text and ``{{ ... }}`` expressions. Each
expression is tokenized and parsed by precedence climbing, loosest first:

    |  (pipeline)
    ? :  (ternary)
    ||
    &&
    == !=
    < <= > >= contains startsWith endsWith
    + -
    * / %
    ! -  (unary)
"""

from __future__ import annotations

from flowbind.context import DataSource
from flowbind.errors import ParseError
from flowbind.value import I64_MAX, I64_MIN, Value

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
from .lexer import Token, TokenType, parse_error, tokenize

OPEN = "{{"
CLOSE = "}}"

BINARY_PRECEDENCE: dict[BinaryOperator, int] = {
    BinaryOperator.OR: 1,
    BinaryOperator.AND: 2,
    BinaryOperator.EQUAL: 3,
    BinaryOperator.NOT_EQUAL: 3,
    BinaryOperator.LESS_THAN: 4,
    BinaryOperator.LESS_EQUAL: 4,
    BinaryOperator.GREATER_THAN: 4,
    BinaryOperator.GREATER_EQUAL: 4,
    BinaryOperator.CONTAINS: 4,
    BinaryOperator.STARTS_WITH: 4,
    BinaryOperator.ENDS_WITH: 4,
    BinaryOperator.ADD: 5,
    BinaryOperator.SUBTRACT: 5,
    BinaryOperator.MULTIPLY: 6,
    BinaryOperator.DIVIDE: 6,
    BinaryOperator.MODULO: 6,
}

_WORD_OPERATORS = {
    BinaryOperator.CONTAINS.value,
    BinaryOperator.STARTS_WITH.value,
    BinaryOperator.ENDS_WITH.value,
}

_KEYWORD_LITERALS = {
    "null": Value.null,
    "true": lambda: Value.from_bool(True),
    "false": lambda: Value.from_bool(False),
}

_PATH_SOURCES = {
    "$input": DataSource.input,
    "$system": DataSource.system,
    "$execution": DataSource.execution,
    "$workflow": DataSource.workflow,
}


def number_literal(number: int | float) -> Literal:
    """Literal for a lexed number; integers outside i64 become floats."""
    if isinstance(number, int):
        if I64_MIN <= number <= I64_MAX:
            return Literal(Value.from_int(number))
        return Literal(Value.from_float(float(number)))
    return Literal(Value.from_float(number))


def find_closing(source: str, start: int) -> int:
    """Find the ``}}`` closing an expression that starts at ``start``.

    Quoted strings are skipped so they may contain ``}}``. If a quote is never
    closed, falls back to the first ``}}`` after ``start``.

    Returns:
        Offset of the closing braces, or -1 if there are none
    """
    index = start
    while index < len(source) - 1:
        char = source[index]
        if char in ("'", '"'):
            end = _skip_string(source, index)
            if end == -1:
                return source.find(CLOSE, start)
            index = end
            continue
        if source.startswith(CLOSE, index):
            return index
        index += 1
    return -1


def _skip_string(source: str, start: int) -> int:
    quote = source[start]
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    return -1


def scan(source: str) -> list[Element]:
    """Split a template into Text and Expression elements.

    Args:
        source: Template source

    Returns:
        Elements in source order (empty for an empty source)

    Raises:
        ParseError: On unclosed, empty or malformed expressions
    """
    elements: list[Element] = []
    position = 0

    while True:
        start = source.find(OPEN, position)
        if start == -1:
            break
        if start > position:
            elements.append(Text(source[position:start]))

        content_start = start + len(OPEN)
        end = find_closing(source, content_start)
        if end == -1:
            raise parse_error("Unclosed expression", start, source)

        raw = source[content_start:end]
        expression = raw.strip()
        if not expression:
            raise parse_error("Empty expression", start, source)

        offset = content_start + (len(raw) - len(raw.lstrip()))
        ast = ExpressionParser(expression, offset, source).parse()
        elements.append(Expression(expression, ast))
        position = end + len(CLOSE)

    if position < len(source):
        elements.append(Text(source[position:]))
    return elements


class ExpressionParser:
    """Recursive-descent parser for a single expression."""

    def __init__(self, text: str, offset: int = 0, template: str = ""):
        """Initialize parser.

        Args:
            text: Trimmed expression text
            offset: Position of ``text[0]`` within the template source
            template: Full template source, attached to parse errors
        """
        self.template = template or text
        self.tokens = tokenize(text, offset, self.template)
        self.index = 0

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def peek(self, distance: int = 1) -> Token:
        return self.tokens[min(self.index + distance, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.current
        if token.type is not TokenType.EOF:
            self.index += 1
        return token

    def error(self, detail: str, token: Token | None = None) -> ParseError:
        token = token or self.current
        return parse_error(detail, token.position, self.template)

    def expect(self, symbol: str) -> Token:
        if not self.current.is_op(symbol):
            raise self.error(f"Expected '{symbol}'")
        return self.advance()

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def parse(self) -> ExpressionAst:
        """Parse the whole expression.

        Raises:
            ParseError: On malformed input or trailing tokens
        """
        node = self.parse_expression()
        if self.current.type is not TokenType.EOF:
            raise self.error(f"Unexpected token '{self.current.text}'")
        return node

    def parse_expression(self) -> ExpressionAst:
        return self._pipeline()

    def _pipeline(self) -> ExpressionAst:
        node = self._ternary()
        stages: list[PipelineStage] = []

        while self.current.is_op("|"):
            self.advance()
            name_token = self.current
            if name_token.type is not TokenType.NAME:
                raise self.error("Expected function name after '|'")
            self.advance()
            args: tuple[ExpressionAst, ...] = ()
            if self.current.is_op("("):
                args = self._arguments()
            stages.append(PipelineStage(name_token.text, args))

        if stages:
            return Pipeline(node, tuple(stages))
        return node

    def _ternary(self) -> ExpressionAst:
        condition = self._binary(1)
        if not self.current.is_op("?"):
            return condition

        self.advance()
        then_branch = self._ternary()
        self.expect(":")
        else_branch = self._ternary()
        return Ternary(condition, then_branch, else_branch)

    def _binary_operator(self) -> BinaryOperator | None:
        token = self.current
        if token.type is TokenType.OPERATOR:
            try:
                return BinaryOperator(token.text)
            except ValueError:
                return None
        if token.type is TokenType.NAME and token.text in _WORD_OPERATORS:
            return BinaryOperator(token.text)
        return None

    def _binary(self, min_precedence: int) -> ExpressionAst:
        left = self._unary()

        while True:
            op = self._binary_operator()
            if op is None or BINARY_PRECEDENCE[op] < min_precedence:
                return left
            self.advance()
            right = self._binary(BINARY_PRECEDENCE[op] + 1)
            left = BinaryOp(left, op, right)

    def _unary(self) -> ExpressionAst:
        token = self.current

        if token.is_op("!"):
            self.advance()
            return UnaryOp(UnaryOperator.NOT, self._unary())

        if token.is_op("-"):
            self.advance()
            if self.current.type is TokenType.NUMBER:
                return number_literal(-self.advance().value)
            return UnaryOp(UnaryOperator.MINUS, self._unary())

        return self._primary()

    def _primary(self) -> ExpressionAst:
        token = self.current

        if token.type is TokenType.NUMBER:
            self.advance()
            return number_literal(token.value)

        if token.type is TokenType.STRING:
            self.advance()
            return Literal(Value.from_str(token.text))

        if token.type is TokenType.VARIABLE:
            return self._data_access()

        if token.type is TokenType.NAME:
            if self.peek().is_op("("):
                return self._call()
            if token.text in _KEYWORD_LITERALS:
                self.advance()
                return Literal(_KEYWORD_LITERALS[token.text]())

        if token.is_op("("):
            self.advance()
            node = self.parse_expression()
            self.expect(")")
            return node

        raise self.error("Unknown literal type")

    def _arguments(self) -> tuple[ExpressionAst, ...]:
        self.expect("(")
        args: list[ExpressionAst] = []
        if not self.current.is_op(")"):
            args.append(self.parse_expression())
            while self.current.is_op(","):
                self.advance()
                args.append(self.parse_expression())
        self.expect(")")
        return tuple(args)

    def _call(self) -> ExpressionAst:
        name_token = self.advance()
        args = self._arguments()

        if name_token.text == "if":
            if len(args) not in (2, 3):
                raise self.error("If function requires 2 or 3 arguments", name_token)
            return IfFunction(args[0], args[1], args[2] if len(args) == 3 else None)

        return FunctionCall(name_token.text, args)

    def _data_access(self) -> ExpressionAst:
        token = self.advance()
        name = token.text

        if name in _PATH_SOURCES:
            return DataAccess(_PATH_SOURCES[name](), self._path())

        if name == "$node":
            self.expect("(")
            id_token = self.current
            if id_token.type is not TokenType.STRING:
                raise self.error("Expected quoted node id")
            self.advance()
            self.expect(")")
            path = self._path()
            # $node('a').json.x is the same as $node('a').x
            if path.startswith("json."):
                path = path[len("json.") :]
            return DataAccess(DataSource.node(id_token.text), path)

        if name == "$env":
            self.expect(".")
            var_token = self.current
            if var_token.type is not TokenType.SEGMENT:
                raise self.error("Expected environment variable name")
            self.advance()
            return DataAccess(DataSource.environment(), var_token.text)

        raise self.error("Unknown data source", token)

    def _path(self) -> str:
        parts: list[str] = []

        while True:
            if self.current.is_op("."):
                self.advance()
                segment = self.current
                if segment.type is not TokenType.SEGMENT:
                    raise self.error("Expected property name after '.'")
                parts.append(self.advance().text)
            elif self.current.is_op("["):
                self.advance()
                key = self.current
                if key.type is TokenType.NUMBER and isinstance(key.value, int):
                    parts.append(str(key.value))
                else:
                    raise self.error("Expected integer index inside '[ ]'")
                self.advance()
                self.expect("]")
            else:
                return ".".join(parts)


def parse_expression(text: str, offset: int = 0, template: str = "") -> ExpressionAst:
    """Parse a single expression (without braces)."""
    return ExpressionParser(text, offset, template).parse()
