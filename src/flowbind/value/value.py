"""Dynamic value model for template expressions.

A ``Value`` is a tagged union over the JSON-like types a template can see:
null, boolean, integer, float, string, array and object. Values are
immutable; arrays are stored as tuples and objects as read-only mappings.

Equality is structural and type-sensitive, so ``Value.from_int(1)`` is not
equal to ``Value.from_float(1.0)`` and ``Value.from_bool(True)`` is not equal
to ``Value.from_int(1)``.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from flowbind.errors import create_error, get_error_factory
from flowbind.types import ValueKind

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)
_INDEX_PATTERN = re.compile(r"[0-9]+")

_TRUE_STRINGS = frozenset({"true", "yes", "1", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "0", "off", ""})


def format_float(value: float) -> str:
    """Render a float the way templates display numbers.

    Integral floats drop the fractional part (``3.0`` -> ``"3"``) and no
    exponent notation is used.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class Value:
    """Immutable dynamic value."""

    __slots__ = ("_kind", "_data")

    def __init__(self, kind: ValueKind, data: Any = None) -> None:
        # Use the from_* constructors; they normalize the payload.
        self._kind = kind
        self._data = data

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL)

    @classmethod
    def from_bool(cls, value: bool) -> Value:
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def from_int(cls, value: int) -> Value:
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def from_float(cls, value: float) -> Value:
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def from_str(cls, value: str) -> Value:
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def from_list(cls, items: Iterable[Any]) -> Value:
        """Build an array; items that are not Values are converted with ``of``."""
        return cls(ValueKind.ARRAY, tuple(cls.of(item) for item in items))

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> Value:
        """Build an object; values that are not Values are converted with ``of``."""
        data = {str(key): cls.of(item) for key, item in mapping.items()}
        return cls(ValueKind.OBJECT, MappingProxyType(data))

    @classmethod
    def of(cls, obj: Any) -> Value:
        """Convert plain Python data into a Value.

        Args:
            obj: None, bool, int, float, str, list/tuple, mapping or Value

        Returns:
            Equivalent Value

        Raises:
            TypeConversionError: If obj has no Value equivalent
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return cls.from_bool(obj)
        if isinstance(obj, int):
            return cls.from_int(obj)
        if isinstance(obj, float):
            return cls.from_float(obj)
        if isinstance(obj, str):
            return cls.from_str(obj)
        if isinstance(obj, Mapping):
            return cls.from_dict(obj)
        if isinstance(obj, (list, tuple)):
            return cls.from_list(obj)
        raise create_error("TYPE_ERROR", from_type=type(obj).__name__, to_type="value")

    @classmethod
    def from_json(cls, text: str) -> Value:
        """Decode JSON text into a Value.

        Raises:
            WrappedError: JSON_ERROR if the text is not valid JSON
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise get_error_factory().from_exception(e) from e
        return cls.of(data)

    # ------------------------------------------------------------------
    # Conversion back to Python
    # ------------------------------------------------------------------

    def to_python(self) -> Any:
        """Convert to plain Python data (None, bool, int, float, str, list, dict)."""
        if self._kind is ValueKind.ARRAY:
            return [item.to_python() for item in self._data]
        if self._kind is ValueKind.OBJECT:
            return {key: item.to_python() for key, item in self._data.items()}
        return self._data

    def to_json(self) -> str:
        """Serialize to JSON text."""
        return json.dumps(self.to_python())

    # ------------------------------------------------------------------
    # Type inspection
    # ------------------------------------------------------------------

    @property
    def kind(self) -> ValueKind:
        return self._kind

    def type_name(self) -> str:
        return self._kind.value

    def is_null(self) -> bool:
        return self._kind is ValueKind.NULL

    def is_bool(self) -> bool:
        return self._kind is ValueKind.BOOL

    def is_integer(self) -> bool:
        return self._kind is ValueKind.INTEGER

    def is_float(self) -> bool:
        return self._kind is ValueKind.FLOAT

    def is_number(self) -> bool:
        return self._kind in (ValueKind.INTEGER, ValueKind.FLOAT)

    def is_string(self) -> bool:
        return self._kind is ValueKind.STRING

    def is_array(self) -> bool:
        return self._kind is ValueKind.ARRAY

    def is_object(self) -> bool:
        return self._kind is ValueKind.OBJECT

    def is_empty(self) -> bool:
        """Null, empty string, empty array and empty object are empty."""
        if self._kind is ValueKind.NULL:
            return True
        if self._kind in (ValueKind.STRING, ValueKind.ARRAY, ValueKind.OBJECT):
            return len(self._data) == 0
        return False

    def is_truthy(self) -> bool:
        """Truthiness used by conditionals and logical operators."""
        kind = self._kind
        if kind is ValueKind.NULL:
            return False
        if kind in (ValueKind.BOOL, ValueKind.INTEGER):
            return bool(self._data)
        if kind is ValueKind.FLOAT:
            return self._data != 0.0 and not math.isnan(self._data)
        return len(self._data) > 0

    # ------------------------------------------------------------------
    # Coercions
    # ------------------------------------------------------------------

    def _type_error(self, to_type: str) -> Exception:
        return create_error("TYPE_ERROR", from_type=self.type_name(), to_type=to_type)

    def as_bool(self) -> bool:
        """Coerce to bool.

        Strings accept true/yes/1/on and false/no/0/off/"" (case-insensitive);
        any other string fails. Arrays and objects use truthiness.

        Raises:
            TypeConversionError: For unrecognized strings
        """
        if self._kind is ValueKind.STRING:
            lowered = self._data.lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise self._type_error("boolean")
        return self.is_truthy()

    def as_integer(self) -> int:
        """Coerce to a 64-bit integer; floats truncate toward zero.

        Finite floats outside the i64 range saturate at its bounds.

        Raises:
            TypeConversionError: For null, arrays, objects, non-finite floats
                and strings that are not decimal integers in range
        """
        kind = self._kind
        if kind is ValueKind.INTEGER:
            return self._data
        if kind is ValueKind.BOOL:
            return 1 if self._data else 0
        if kind is ValueKind.FLOAT:
            if math.isnan(self._data) or math.isinf(self._data):
                raise self._type_error("integer")
            return max(I64_MIN, min(I64_MAX, int(self._data)))
        if kind is ValueKind.STRING and _INTEGER_PATTERN.fullmatch(self._data):
            number = int(self._data)
            if I64_MIN <= number <= I64_MAX:
                return number
        raise self._type_error("integer")

    def as_float(self) -> float:
        """Coerce to float.

        Raises:
            TypeConversionError: For null, arrays, objects and strings that
                are not float literals
        """
        kind = self._kind
        if kind is ValueKind.FLOAT:
            return self._data
        if kind in (ValueKind.INTEGER, ValueKind.BOOL):
            return float(self._data)
        if kind is ValueKind.STRING and _FLOAT_PATTERN.fullmatch(self._data):
            return float(self._data)
        raise self._type_error("float")

    def as_string(self) -> str:
        """Coerce to the text rendered into template output.

        Raises:
            TypeConversionError: For arrays and objects
        """
        kind = self._kind
        if kind is ValueKind.STRING:
            return self._data
        if kind is ValueKind.NULL:
            return "null"
        if kind is ValueKind.BOOL:
            return "true" if self._data else "false"
        if kind is ValueKind.INTEGER:
            return str(self._data)
        if kind is ValueKind.FLOAT:
            return format_float(self._data)
        raise self._type_error("string")

    def as_array(self) -> tuple[Value, ...]:
        if self._kind is not ValueKind.ARRAY:
            raise self._type_error("array")
        return self._data

    def as_object(self) -> Mapping[str, Value]:
        if self._kind is not ValueKind.OBJECT:
            raise self._type_error("object")
        return self._data

    def length(self) -> int:
        """Length of a string, array or object."""
        if self._kind in (ValueKind.STRING, ValueKind.ARRAY, ValueKind.OBJECT):
            return len(self._data)
        raise self._type_error("string, array, or object")

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str) -> Value | None:
        """Object field, or array element when key is a non-negative integer."""
        if self._kind is ValueKind.OBJECT:
            return self._data.get(key)
        if self._kind is ValueKind.ARRAY and _INDEX_PATTERN.fullmatch(key):
            return self.get_index(int(key))
        return None

    def get_index(self, index: int) -> Value | None:
        if self._kind is ValueKind.ARRAY and 0 <= index < len(self._data):
            return self._data[index]
        return None

    def navigate(self, path: str) -> Value | None:
        """Follow a dotted path (``user.profile.name``, ``items.0``).

        An empty path returns the value itself; the first missing segment
        returns None.
        """
        if not path:
            return self

        current: Value | None = self
        for part in path.split("."):
            current = current.get(part)
            if current is None:
                return None
        return current

    def set(self, key: str, value: Any) -> Value:
        """Return a copy with ``key`` set to ``value``.

        Objects insert or replace the field. Arrays replace the element at a
        numeric, in-bounds index.

        Raises:
            IndexOutOfRangeError: Array index past the end
            TypeConversionError: Non-numeric array key, or a receiver that is
                neither array nor object
        """
        new_item = Value.of(value)
        if self._kind is ValueKind.OBJECT:
            data = dict(self._data)
            data[key] = new_item
            return Value(ValueKind.OBJECT, MappingProxyType(data))
        if self._kind is ValueKind.ARRAY:
            if not _INDEX_PATTERN.fullmatch(key):
                raise create_error("TYPE_ERROR", from_type="string", to_type="array index")
            index = int(key)
            if index >= len(self._data):
                raise create_error("INDEX_ERROR", index=index, size=len(self._data))
            items = list(self._data)
            items[index] = new_item
            return Value(ValueKind.ARRAY, tuple(items))
        raise self._type_error("object or array")

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self._kind is not other._kind:
            return False
        if self._kind is ValueKind.OBJECT:
            return dict(self._data) == dict(other._data)
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._kind is ValueKind.NULL:
            return "Value.null()"
        return f"Value({self._kind.value}, {self.to_python()!r})"

    def __str__(self) -> str:
        if self._kind is ValueKind.ARRAY:
            return "[" + ", ".join(str(item) for item in self._data) + "]"
        if self._kind is ValueKind.OBJECT:
            pairs = (f"{key}: {item}" for key, item in self._data.items())
            return "{" + ", ".join(pairs) + "}"
        return self.as_string()
