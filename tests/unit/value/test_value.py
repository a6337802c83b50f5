"""Tests for the dynamic Value model."""

import math

import pytest

from flowbind.errors import IndexOutOfRangeError, TypeConversionError, WrappedError
from flowbind.types import ValueKind
from flowbind.value import I64_MAX, I64_MIN, Value, format_float


class TestConstruction:
    """Tests for Value constructors and Python conversion."""

    def test_of_maps_python_types(self):
        """Test Value.of picks the matching variant."""
        assert Value.of(None).is_null()
        assert Value.of(True).kind is ValueKind.BOOL
        assert Value.of(3).kind is ValueKind.INTEGER
        assert Value.of(3.5).kind is ValueKind.FLOAT
        assert Value.of("x").kind is ValueKind.STRING
        assert Value.of([1, 2]).kind is ValueKind.ARRAY
        assert Value.of((1, 2)).kind is ValueKind.ARRAY
        assert Value.of({"a": 1}).kind is ValueKind.OBJECT

    def test_of_checks_bool_before_int(self):
        """Test True becomes a boolean, not the integer 1."""
        assert Value.of(True) == Value.from_bool(True)
        assert Value.of(True) != Value.from_int(1)

    def test_of_passes_values_through(self):
        """Test an existing Value is returned unchanged."""
        value = Value.from_str("x")
        assert Value.of(value) is value

    def test_of_rejects_unknown_objects(self):
        """Test unsupported Python objects raise a type error."""
        with pytest.raises(TypeConversionError) as exc_info:
            Value.of(object())
        assert exc_info.value.code == "TYPE_ERROR"
        assert exc_info.value.to_type == "value"

    def test_to_python_round_trips_nested_data(self):
        """Test nested structures convert back to plain Python data."""
        data = {"a": [1, 2.5, None, True], "b": {"c": "d"}}
        assert Value.of(data).to_python() == data

    def test_from_json(self):
        """Test JSON text decodes into a Value."""
        value = Value.from_json('{"items": [1, 2], "ok": true}')
        assert value.navigate("items.1") == Value.from_int(2)
        assert value.get("ok") == Value.from_bool(True)

    def test_from_json_invalid(self):
        """Test invalid JSON raises a wrapped JSON error."""
        with pytest.raises(WrappedError) as exc_info:
            Value.from_json("{not json")
        assert exc_info.value.code == "JSON_ERROR"
        assert exc_info.value.source_type == "json.JSONDecodeError"

    def test_to_json(self):
        """Test serialization to JSON text."""
        assert Value.of({"a": [1, "x"]}).to_json() == '{"a": [1, "x"]}'

    def test_containers_are_immutable(self):
        """Test arrays and objects cannot be modified in place."""
        obj = Value.of({"a": 1})
        with pytest.raises(TypeError):
            obj.as_object()["b"] = Value.from_int(2)  # type: ignore[index]
        assert isinstance(Value.of([1]).as_array(), tuple)


class TestEquality:
    """Tests for structural, type-sensitive equality."""

    def test_integer_and_float_differ(self):
        """Test Integer(1) is not equal to Float(1.0)."""
        assert Value.from_int(1) != Value.from_float(1.0)

    def test_structural_equality(self):
        """Test containers compare by content."""
        assert Value.of({"a": [1, {"b": None}]}) == Value.of({"a": [1, {"b": None}]})
        assert Value.of([1, 2]) != Value.of([2, 1])

    def test_not_equal_to_python_objects(self):
        """Test comparing with a non-Value is not equality."""
        assert Value.from_int(1) != 1

    def test_unhashable(self):
        """Test values cannot be used as dict keys."""
        with pytest.raises(TypeError):
            hash(Value.from_int(1))


class TestPredicates:
    """Tests for type predicates, emptiness and truthiness."""

    def test_type_names(self):
        """Test type_name for every variant."""
        assert [Value.of(v).type_name() for v in (None, False, 1, 1.0, "", [], {})] == [
            "null",
            "boolean",
            "integer",
            "float",
            "string",
            "array",
            "object",
        ]

    def test_is_number(self):
        """Test integers and floats are numbers."""
        assert Value.from_int(1).is_number()
        assert Value.from_float(1.0).is_number()
        assert not Value.from_str("1").is_number()

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, True),
            ("", True),
            ([], True),
            ({}, True),
            (0, False),
            (False, False),
            ("x", False),
        ],
    )
    def test_is_empty(self, raw, expected):
        """Test emptiness rules."""
        assert Value.of(raw).is_empty() is expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, False),
            (True, True),
            (False, False),
            (0, False),
            (-3, True),
            (0.0, False),
            (float("nan"), False),
            (0.1, True),
            ("", False),
            ("false", True),
            ([], False),
            ([0], True),
            ({}, False),
            ({"a": None}, True),
        ],
    )
    def test_truthiness(self, raw, expected):
        """Test truthiness rules for every variant."""
        assert Value.of(raw).is_truthy() is expected


class TestCoercion:
    """Tests for as_bool, as_integer, as_float and as_string."""

    @pytest.mark.parametrize("text", ["true", "YES", "1", "On"])
    def test_as_bool_true_strings(self, text):
        """Test strings accepted as true."""
        assert Value.from_str(text).as_bool() is True

    @pytest.mark.parametrize("text", ["false", "No", "0", "OFF", ""])
    def test_as_bool_false_strings(self, text):
        """Test strings accepted as false."""
        assert Value.from_str(text).as_bool() is False

    def test_as_bool_rejects_other_strings(self):
        """Test unrecognized strings fail."""
        with pytest.raises(TypeConversionError) as exc_info:
            Value.from_str("maybe").as_bool()
        assert exc_info.value.from_type == "string"
        assert exc_info.value.to_type == "boolean"

    def test_as_bool_non_strings(self):
        """Test non-string variants use truthiness."""
        assert Value.null().as_bool() is False
        assert Value.from_int(2).as_bool() is True
        assert Value.from_float(float("nan")).as_bool() is False
        assert Value.of([1]).as_bool() is True

    def test_as_integer(self):
        """Test integer coercion of each variant."""
        assert Value.from_int(7).as_integer() == 7
        assert Value.from_float(2.9).as_integer() == 2
        assert Value.from_float(-2.9).as_integer() == -2
        assert Value.from_bool(True).as_integer() == 1
        assert Value.from_str("+42").as_integer() == 42
        assert Value.from_str("-42").as_integer() == -42

    def test_as_integer_saturates(self):
        """Test finite floats beyond i64 clamp to its bounds."""
        assert Value.from_float(1e300).as_integer() == I64_MAX
        assert Value.from_float(-1e300).as_integer() == I64_MIN
        assert Value.from_float(2.0**63).as_integer() == I64_MAX

    @pytest.mark.parametrize(
        "raw",
        [None, [], {}, float("nan"), float("inf"), "4.5", " 4", "abc", "", str(I64_MAX + 1)],
    )
    def test_as_integer_failures(self, raw):
        """Test values that cannot become integers."""
        with pytest.raises(TypeConversionError):
            Value.of(raw).as_integer()

    def test_as_float(self):
        """Test float coercion of each variant."""
        assert Value.from_float(1.5).as_float() == 1.5
        assert Value.from_int(2).as_float() == 2.0
        assert Value.from_bool(False).as_float() == 0.0
        assert Value.from_str("1e3").as_float() == 1000.0
        assert Value.from_str("-.5").as_float() == -0.5
        assert Value.from_str("inf").as_float() == math.inf
        assert Value.from_str("-Infinity").as_float() == -math.inf
        assert math.isnan(Value.from_str("NaN").as_float())

    @pytest.mark.parametrize("raw", [None, [], {}, "1_000", " 1.5", "abc", "", "."])
    def test_as_float_failures(self, raw):
        """Test values that cannot become floats."""
        with pytest.raises(TypeConversionError):
            Value.of(raw).as_float()

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (42, "42"),
            (-7, "-7"),
            (3.0, "3"),
            (2.5, "2.5"),
            (0.1, "0.1"),
            (-0.0, "-0"),
            (1e23, "100000000000000000000000"),
            (float("nan"), "NaN"),
            (float("inf"), "inf"),
            (float("-inf"), "-inf"),
            ("text", "text"),
        ],
    )
    def test_as_string(self, raw, expected):
        """Test string rendering of scalar variants."""
        assert Value.of(raw).as_string() == expected

    @pytest.mark.parametrize("raw", [[1], {"a": 1}])
    def test_as_string_rejects_containers(self, raw):
        """Test arrays and objects cannot be rendered as strings."""
        with pytest.raises(TypeConversionError) as exc_info:
            Value.of(raw).as_string()
        assert exc_info.value.to_type == "string"

    def test_format_float_small_values(self):
        """Test no exponent notation for small floats."""
        assert format_float(1.5e-7) == "0.00000015"

    def test_length(self):
        """Test length of containers and strings."""
        assert Value.from_str("abc").length() == 3
        assert Value.of([1, 2]).length() == 2
        assert Value.of({"a": 1}).length() == 1
        with pytest.raises(TypeConversionError):
            Value.from_int(3).length()

    def test_as_array_and_object(self):
        """Test container accessors check the variant."""
        assert Value.of([1]).as_array() == (Value.from_int(1),)
        assert dict(Value.of({"a": 1}).as_object()) == {"a": Value.from_int(1)}
        with pytest.raises(TypeConversionError):
            Value.from_str("x").as_array()
        with pytest.raises(TypeConversionError):
            Value.of([]).as_object()


class TestAccess:
    """Tests for get, navigate and set."""

    @pytest.fixture
    def data(self) -> Value:
        return Value.of({"user": {"name": "Ann", "roles": ["a", "b"]}, "n": 1})

    def test_get_object_field(self, data):
        """Test object lookup by key."""
        assert data.get("n") == Value.from_int(1)
        assert data.get("missing") is None

    def test_get_array_index(self):
        """Test numeric keys index arrays."""
        items = Value.of(["x", "y"])
        assert items.get("1") == Value.from_str("y")
        assert items.get("2") is None
        assert items.get("-1") is None
        assert items.get("first") is None

    def test_get_on_scalar(self):
        """Test scalars have no fields."""
        assert Value.from_str("abc").get("0") is None

    def test_navigate(self, data):
        """Test dotted path navigation through objects and arrays."""
        assert data.navigate("user.name") == Value.from_str("Ann")
        assert data.navigate("user.roles.1") == Value.from_str("b")

    def test_navigate_empty_path_returns_self(self, data):
        """Test empty path returns the value itself."""
        assert data.navigate("") is data

    def test_navigate_miss(self, data):
        """Test first missing segment returns None."""
        assert data.navigate("user.email") is None
        assert data.navigate("user.roles.5") is None
        assert data.navigate("n.deeper") is None

    def test_set_object_returns_copy(self, data):
        """Test set on an object leaves the original untouched."""
        updated = data.set("n", 2)
        assert updated.get("n") == Value.from_int(2)
        assert data.get("n") == Value.from_int(1)

    def test_set_array_index(self):
        """Test set replaces an in-bounds element."""
        updated = Value.of([1, 2]).set("0", "x")
        assert updated.to_python() == ["x", 2]

    def test_set_array_out_of_bounds(self):
        """Test out-of-bounds index raises an index error."""
        with pytest.raises(IndexOutOfRangeError) as exc_info:
            Value.of([1, 2]).set("5", 0)
        assert exc_info.value.index == 5
        assert exc_info.value.size == 2
        assert str(exc_info.value) == "Index 5 out of bounds for collection of size 2"

    def test_set_array_non_numeric_key(self):
        """Test non-numeric array keys raise a type error."""
        with pytest.raises(TypeConversionError) as exc_info:
            Value.of([1]).set("name", 0)
        assert exc_info.value.from_type == "string"
        assert exc_info.value.to_type == "array index"

    def test_set_on_scalar(self):
        """Test set on a scalar raises a type error."""
        with pytest.raises(TypeConversionError) as exc_info:
            Value.from_int(1).set("a", 0)
        assert exc_info.value.from_type == "integer"
        assert exc_info.value.to_type == "object or array"


class TestDisplay:
    """Tests for str and repr."""

    def test_str_of_containers(self):
        """Test containers render recursively."""
        assert str(Value.of([1, "a", None])) == "[1, a, null]"
        assert str(Value.of({"k": 2.0})) == "{k: 2}"

    def test_repr(self):
        """Test repr shows variant and payload."""
        assert repr(Value.from_int(42)) == "Value(integer, 42)"
        assert repr(Value.null()) == "Value.null()"
