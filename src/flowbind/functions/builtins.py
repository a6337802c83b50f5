"""Standard template functions."""

import json
import math
import re
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from flowbind.errors import create_error
from flowbind.types import ValueKind
from flowbind.value import Value, format_float

from .registry import Function, FunctionSignature, Parameter


def fn_length(args: list[Value]) -> int:
    """Return length of string, array, or object.

    Args:
        args: [value]

    Returns:
        Length of value

    Raises:
        TypeConversionError: If value has no length
    """
    return args[0].length()


def fn_default(args: list[Value]) -> Value:
    """Return fallback if value is null.

    Args:
        args: [value, fallback]

    Returns:
        value if not null, else fallback
    """
    value, fallback = args
    return value if not value.is_null() else fallback


def fn_json(args: list[Value]) -> str:
    """Serialize value to JSON string.

    Args:
        args: [value]

    Returns:
        JSON string representation
    """
    return args[0].to_json()


def fn_uppercase(args: list[Value]) -> str:
    return args[0].as_string().upper()


def fn_lowercase(args: list[Value]) -> str:
    return args[0].as_string().lower()


def fn_trim(args: list[Value]) -> str:
    return args[0].as_string().strip()


def fn_join(args: list[Value]) -> str:
    """Join array items as strings.

    Args:
        args: [items, separator]

    Returns:
        Joined string
    """
    items, separator = args
    return separator.as_string().join(item.as_string() for item in items.as_array())


def fn_replace(args: list[Value]) -> str:
    text, old, new = (arg.as_string() for arg in args)
    return text.replace(old, new)


def fn_matches(args: list[Value]) -> bool:
    """Check whether a regular expression matches anywhere in text.

    Args:
        args: [text, pattern]

    Returns:
        True if the pattern is found
    """
    text, pattern = (arg.as_string() for arg in args)
    return re.search(pattern, text) is not None


def fn_pluck(args: list[Value]) -> list[Value | None]:
    """Collect one field from every item of an array.

    Args:
        args: [items, key]

    Returns:
        Field values in item order; null where an item lacks the field
    """
    items, key = args
    name = key.as_string()
    return [item.get(name) for item in items.as_array()]


def fn_multiply(args: list[Value]) -> float:
    value, factor = args
    return value.as_float() * factor.as_float()


def round_half_up(value: float, digits: int) -> float:
    """Round to ``digits`` decimal places, halves away from zero.

    Works on the shortest decimal form of the float, so ``2.675`` rounds to
    ``2.68``. Negative digits round to tens, hundreds, and so on.
    """
    if not math.isfinite(value):
        return value
    digits = max(-400, min(400, digits))
    with localcontext() as ctx:
        ctx.prec = 800
        quantum = Decimal(1).scaleb(-digits)
        rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def fn_round(args: list[Value]) -> float:
    """Round a number.

    Args:
        args: [value, digits]

    Returns:
        Value rounded to digits decimal places (default 0)
    """
    value, digits = args
    return round_half_up(value.as_float(), digits.as_integer())


def fn_currency(args: list[Value]) -> str:
    """Format a number as a currency amount.

    Two decimal places with thousands separators; the sign goes before the
    symbol (``-$1,234.50``).

    Args:
        args: [value, symbol]

    Returns:
        Formatted amount

    Raises:
        MathError: For NaN or infinite amounts
    """
    value, symbol = args
    amount = round_half_up(value.as_float(), 2)
    if not math.isfinite(amount):
        raise create_error(
            "MATH_ERROR", detail=f"Cannot format {format_float(amount)} as currency"
        )
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol.as_string()}{abs(amount):,.2f}"


def fn_parse_date(args: list[Value]) -> str:
    """Parse an ISO-8601 date or datetime into RFC 3339.

    Naive values are taken as UTC.

    Args:
        args: [text]

    Returns:
        RFC 3339 timestamp string

    Raises:
        WrappedError: DATETIME_ERROR if the text is not ISO-8601
    """
    text = args[0].as_string()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise create_error(
            "DATETIME_ERROR", detail=f"invalid ISO-8601 value '{text}'", source_type="ValueError"
        ) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.isoformat()


def _function(name: str, func: Any, *params: Parameter, description: str = "") -> Function:
    return Function(
        name=name,
        func=func,
        signature=FunctionSignature(parameters=list(params)),
        description=description,
    )


_TEXT = Parameter("text", ValueKind.STRING)
_NUMBER = Parameter("value", ValueKind.FLOAT)

# Registry of available functions
BUILTIN_FUNCTIONS: dict[str, Function] = {
    function.name: function
    for function in [
        _function("length", fn_length, Parameter("value"), description="Length of a value"),
        _function(
            "default",
            fn_default,
            Parameter("value"),
            Parameter("fallback"),
            description="Fallback for null values",
        ),
        _function("json", fn_json, Parameter("value"), description="Serialize to JSON"),
        _function("uppercase", fn_uppercase, _TEXT, description="Upper-case text"),
        _function("lowercase", fn_lowercase, _TEXT, description="Lower-case text"),
        _function("trim", fn_trim, _TEXT, description="Strip surrounding whitespace"),
        _function(
            "join",
            fn_join,
            Parameter("items", ValueKind.ARRAY),
            Parameter("separator", ValueKind.STRING, required=False, default=","),
            description="Join array items",
        ),
        _function(
            "replace",
            fn_replace,
            _TEXT,
            Parameter("old", ValueKind.STRING),
            Parameter("new", ValueKind.STRING),
            description="Replace every occurrence of a substring",
        ),
        _function(
            "matches",
            fn_matches,
            _TEXT,
            Parameter("pattern", ValueKind.STRING),
            description="Regular expression search",
        ),
        _function(
            "pluck",
            fn_pluck,
            Parameter("items", ValueKind.ARRAY),
            Parameter("key", ValueKind.STRING),
            description="Field of every array item",
        ),
        _function(
            "multiply",
            fn_multiply,
            _NUMBER,
            Parameter("factor", ValueKind.FLOAT),
            description="Multiply by a factor",
        ),
        _function(
            "round",
            fn_round,
            _NUMBER,
            Parameter("digits", ValueKind.INTEGER, required=False, default=0),
            description="Round half away from zero",
        ),
        _function(
            "currency",
            fn_currency,
            _NUMBER,
            Parameter("symbol", ValueKind.STRING, required=False, default="$"),
            description="Format as a currency amount",
        ),
        _function(
            "parse_date",
            fn_parse_date,
            _TEXT,
            description="Parse an ISO-8601 date into RFC 3339",
        ),
    ]
}
