"""Tokenizer for the expression language inside ``{{ ... }}``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from flowbind.errors import ParseError, create_error


class TokenType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    NAME = "name"
    VARIABLE = "variable"  # $input, $node, ...
    SEGMENT = "segment"  # path segment following a '.'
    OPERATOR = "operator"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str  # Raw or operator text; decoded contents for strings
    position: int  # Character offset into the template source
    value: Any = None  # int/float for numbers

    def is_op(self, *symbols: str) -> bool:
        return self.type is TokenType.OPERATOR and self.text in symbols


# Longest first so "||" wins over "|"
OPERATORS = (
    "||", "&&", "==", "!=", "<=", ">=",
    "|", "<", ">", "+", "-", "*", "/", "%", "!", "?", ":", ",", ".",
    "(", ")", "[", "]",
)  # fmt: skip

_DIGITS = frozenset("0123456789")

_ESCAPES = {"\\": "\\", "'": "'", '"': '"', "n": "\n", "t": "\t", "r": "\r"}


def parse_error(detail: str, index: int, template: str) -> ParseError:
    """Build a ParseError for a character index into ``template``.

    The reported position is the UTF-8 byte offset of that character.
    """
    position = len(template[:index].encode("utf-8", "surrogatepass"))
    return create_error(  # type: ignore[return-value]
        "PARSE_ERROR", detail=detail, position=position, template=template
    )


class Lexer:
    """Converts expression text into tokens.

    Positions are reported relative to the full template source, so the
    caller passes the offset at which the expression text starts.
    """

    def __init__(self, text: str, offset: int = 0, template: str = ""):
        """Initialize lexer.

        Args:
            text: Expression text (without the surrounding braces)
            offset: Position of ``text[0]`` within the template source
            template: Full template source, attached to parse errors
        """
        self.text = text
        self.offset = offset
        self.template = template or text
        self.index = 0

    def error(self, detail: str, index: int) -> ParseError:
        return parse_error(detail, self.offset + index, self.template)

    def tokenize(self) -> list[Token]:
        """Tokenize the whole expression.

        Returns:
            Tokens, terminated by an EOF token

        Raises:
            ParseError: On unterminated strings or unexpected characters
        """
        tokens: list[Token] = []
        text = self.text
        after_dot = False

        while True:
            while self.index < len(text) and text[self.index].isspace():
                self.index += 1
            if self.index >= len(text):
                break

            start = self.index
            char = text[start]

            if after_dot and (char.isalnum() or char == "_"):
                tokens.append(self._read_segment())
            elif char in _DIGITS or (
                char == "." and start + 1 < len(text) and text[start + 1] in _DIGITS
            ):
                tokens.append(self._read_number())
            elif char in ("'", '"'):
                tokens.append(self._read_string())
            elif char == "$":
                tokens.append(self._read_variable())
            elif char.isalpha() or char == "_":
                tokens.append(self._read_name())
            else:
                tokens.append(self._read_operator())

            after_dot = tokens[-1].is_op(".")

        tokens.append(Token(TokenType.EOF, "", self.offset + len(text)))
        return tokens

    def _read_while(self, predicate: Any) -> str:
        start = self.index
        while self.index < len(self.text) and predicate(self.text[self.index]):
            self.index += 1
        return self.text[start : self.index]

    def _read_segment(self) -> Token:
        start = self.index
        segment = self._read_while(lambda c: c.isalnum() or c == "_")
        return Token(TokenType.SEGMENT, segment, self.offset + start)

    def _read_name(self) -> Token:
        start = self.index
        name = self._read_while(lambda c: c.isalnum() or c == "_")
        return Token(TokenType.NAME, name, self.offset + start)

    def _read_variable(self) -> Token:
        start = self.index
        self.index += 1
        name = self._read_while(lambda c: c.isalnum() or c == "_")
        if not name:
            raise self.error("Unknown data source", start)
        return Token(TokenType.VARIABLE, "$" + name, self.offset + start)

    def _read_number(self) -> Token:
        start = self.index
        text = self.text
        self._read_while(_DIGITS.__contains__)
        is_float = False

        if self.index < len(text) and text[self.index] == ".":
            # "1.5" and "1." are floats; "1.foo" is 1 followed by ".foo"
            follower = text[self.index + 1] if self.index + 1 < len(text) else ""
            if follower in _DIGITS or not (follower.isalpha() or follower == "_"):
                is_float = True
                self.index += 1
                self._read_while(_DIGITS.__contains__)

        if self.index < len(text) and text[self.index] in "eE":
            mark = self.index
            self.index += 1
            if self.index < len(text) and text[self.index] in "+-":
                self.index += 1
            if self.index < len(text) and text[self.index] in _DIGITS:
                self._read_while(_DIGITS.__contains__)
                is_float = True
            else:
                self.index = mark

        raw = text[start : self.index]
        value: int | float = float(raw) if is_float else int(raw)
        return Token(TokenType.NUMBER, raw, self.offset + start, value)

    def _read_string(self) -> Token:
        start = self.index
        quote = self.text[start]
        self.index += 1
        chars: list[str] = []

        while self.index < len(self.text):
            char = self.text[self.index]
            if char == quote:
                self.index += 1
                return Token(TokenType.STRING, "".join(chars), self.offset + start)
            if char == "\\" and self.index + 1 < len(self.text):
                escaped = self.text[self.index + 1]
                # Unknown escapes are kept verbatim
                chars.append(_ESCAPES.get(escaped, "\\" + escaped))
                self.index += 2
                continue
            chars.append(char)
            self.index += 1

        raise self.error("Unterminated string literal", start)

    def _read_operator(self) -> Token:
        start = self.index
        for symbol in OPERATORS:
            if self.text.startswith(symbol, start):
                self.index += len(symbol)
                return Token(TokenType.OPERATOR, symbol, self.offset + start)
        raise self.error(f"Unexpected character '{self.text[start]}'", start)


def tokenize(text: str, offset: int = 0, template: str = "") -> list[Token]:
    """Tokenize expression text. See Lexer."""
    return Lexer(text, offset, template).tokenize()
