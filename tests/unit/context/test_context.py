"""Tests for Context data-source resolution."""

from datetime import datetime, timedelta, timezone

import pytest

from flowbind.context import Context, DataSource, SystemData
from flowbind.errors import DataNotFoundError
from flowbind.types import DataSourceKind
from flowbind.value import Value


class TestDataSource:
    """Tests for DataSource selectors."""

    def test_as_str(self):
        """Test template prefixes for each source."""
        assert DataSource.input().as_str() == "$input"
        assert DataSource.node("a").as_str() == "$node"
        assert DataSource.system().as_str() == "$system"
        assert DataSource.execution().as_str() == "$execution"
        assert DataSource.environment().as_str() == "$env"
        assert DataSource.workflow().as_str() == "$workflow"

    def test_reference_includes_node_id(self):
        """Test node references carry their id."""
        assert DataSource.node("fetch").reference() == "$node('fetch')"
        assert str(DataSource.input()) == "$input"

    def test_equality(self):
        """Test selectors compare by value."""
        assert DataSource.node("a") == DataSource(DataSourceKind.NODE, "a")
        assert DataSource.node("a") != DataSource.node("b")


class TestSystemData:
    """Tests for the system block."""

    def test_datetime_fields_from_clock(self, fixed_clock):
        """Test datetime block is seeded from the clock."""
        system = SystemData(fixed_clock)
        assert system.get("datetime.iso") == Value.from_str("2024-03-15T14:30:45Z")
        assert system.get("datetime.date") == Value.from_str("2024-03-15")
        assert system.get("datetime.time") == Value.from_str("14:30:45")
        assert system.get("datetime.now") == Value.from_str("2024-03-15T14:30:45+00:00")
        assert system.get("datetime.timestamp") == Value.from_int(1710513045)

    def test_iso_is_always_utc(self):
        """Test iso is in UTC even when the clock is not."""
        tz = timezone(timedelta(hours=2))
        system = SystemData(lambda: datetime(2024, 3, 15, 16, 0, 0, tzinfo=tz))
        assert system.get("datetime.iso") == Value.from_str("2024-03-15T14:00:00Z")
        assert system.get("datetime.time") == Value.from_str("16:00:00")

    def test_set_adds_keys(self, fixed_clock):
        """Test extra system keys can be added."""
        system = SystemData(fixed_clock)
        system.set("host", "worker-1")
        assert system.get("host") == Value.from_str("worker-1")
        assert sorted(system.keys()) == ["datetime", "host"]


class TestContextAccessors:
    """Tests for the getters and setters."""

    def test_input_unset_by_default(self, empty_context):
        """Test input is absent until set."""
        assert empty_context.get_input() is None
        empty_context.set_input({"a": 1})
        assert empty_context.get_input() == Value.of({"a": 1})

    def test_node_output_replaced(self, empty_context):
        """Test adding a node twice keeps the latest output."""
        empty_context.add_node_output("n", 1)
        empty_context.add_node_output("n", 2)
        assert empty_context.get_node_output("n") == Value.from_int(2)
        assert empty_context.node_ids() == ["n"]

    def test_env_values_are_strings(self, empty_context):
        """Test environment values are stored as text."""
        empty_context.set_env("PORT", 8080)  # type: ignore[arg-type]
        assert empty_context.get_env("PORT") == "8080"
        assert empty_context.get_env("MISSING") is None

    def test_execution_and_workflow_data(self, context):
        """Test metadata getters."""
        assert context.get_execution_data("id") == Value.from_str("exec-1")
        assert context.get_workflow_data("name") == Value.from_str("Nightly sync")
        assert context.get_workflow_data("missing") is None

    def test_system_data_view_is_read_only(self, context):
        """Test the system view cannot be mutated."""
        view = context.get_system_data()
        assert "datetime" in view
        with pytest.raises(TypeError):
            view["x"] = Value.null()  # type: ignore[index]

    def test_set_system_data(self, context):
        """Test system keys can be added through the context."""
        context.set_system_data("region", "eu")
        assert context.resolve_data_source(DataSource.system(), "region") == Value.from_str("eu")


class TestResolveInput:
    """Tests for $input resolution."""

    def test_missing_input(self, empty_context):
        """Test error when no input is set."""
        with pytest.raises(DataNotFoundError) as exc_info:
            empty_context.resolve_data_source(DataSource.input(), "name")
        assert exc_info.value.path == "$input"
        assert exc_info.value.available == ["No input data available"]

    def test_whole_input(self, context):
        """Test empty path returns the whole input."""
        result = context.resolve_data_source(DataSource.input(), "")
        assert result.get("name") == Value.from_str("Alice")

    def test_nested_path(self, context):
        """Test dotted paths with array indices."""
        result = context.resolve_data_source(DataSource.input(), "items.1.name")
        assert result == Value.from_str("second")

    def test_null_field_resolves(self, context):
        """Test a present null field is not a miss."""
        assert context.resolve_data_source(DataSource.input(), "profile.zip").is_null()

    def test_path_miss(self, context):
        """Test error path for a missing field."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.input(), "profile.country")
        assert exc_info.value.path == "$input.profile.country"
        assert exc_info.value.available == ["$input"]
        assert str(exc_info.value) == "Data not found: $input.profile.country"


class TestResolveNode:
    """Tests for $node resolution."""

    def test_unknown_node_lists_known_nodes(self, context):
        """Test error lists every registered node."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.node("other"), "x")
        assert exc_info.value.path == "$node('other')"
        assert exc_info.value.available == ["$node('fetch')", "$node('empty')"]

    def test_whole_output(self, context):
        """Test empty path returns the whole node output."""
        assert context.resolve_data_source(DataSource.node("empty"), "") == Value.of({})

    def test_path(self, context):
        """Test dotted path into a node output."""
        result = context.resolve_data_source(DataSource.node("fetch"), "data.ids.2")
        assert result == Value.from_int(9)

    def test_path_miss(self, context):
        """Test error path for a missing node field."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.node("fetch"), "body")
        assert exc_info.value.path == "$node('fetch').body"
        assert exc_info.value.available == ["$node('fetch')"]


class TestResolveOtherSources:
    """Tests for $system, $execution, $workflow and $env resolution."""

    def test_system_path(self, context):
        """Test system datetime lookup."""
        result = context.resolve_data_source(DataSource.system(), "datetime.date")
        assert result == Value.from_str("2024-03-15")

    def test_system_whole_block(self, context):
        """Test empty system path returns the block."""
        assert context.resolve_data_source(DataSource.system(), "").is_object()

    def test_system_miss(self, context):
        """Test system miss suggests the datetime block."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.system(), "uptime")
        assert exc_info.value.path == "$system.uptime"
        assert exc_info.value.available == ["$system.datetime"]

    def test_execution_whole_object(self, context):
        """Test empty execution path returns all metadata."""
        result = context.resolve_data_source(DataSource.execution(), "")
        assert result.to_python() == {"id": "exec-1", "mode": "manual"}

    def test_execution_key(self, context):
        """Test execution lookup is an exact key match."""
        assert context.resolve_data_source(DataSource.execution(), "mode") == Value.from_str(
            "manual"
        )

    def test_execution_miss_lists_keys(self, context):
        """Test execution miss lists every key."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.execution(), "started")
        assert exc_info.value.path == "$execution.started"
        assert exc_info.value.available == ["$execution.id", "$execution.mode"]

    def test_workflow_miss_lists_keys(self, context):
        """Test workflow miss lists every key."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.workflow(), "owner")
        assert exc_info.value.path == "$workflow.owner"
        assert exc_info.value.available == ["$workflow.id", "$workflow.name"]

    def test_env_returns_string(self, context):
        """Test env lookup returns a string value."""
        result = context.resolve_data_source(DataSource.environment(), "API_KEY")
        assert result == Value.from_str("secret")

    def test_env_miss_lists_variables(self, context):
        """Test env miss lists every variable."""
        with pytest.raises(DataNotFoundError) as exc_info:
            context.resolve_data_source(DataSource.environment(), "HOME")
        assert exc_info.value.path == "$env.HOME"
        assert exc_info.value.available == ["$env.API_KEY", "$env.REGION"]


class TestAvailability:
    """Tests for available_data_sources and has_data_source."""

    def test_available_data_sources(self, context):
        """Test every resolvable reference is listed in order."""
        assert context.available_data_sources() == [
            "$input",
            "$node('fetch')",
            "$node('empty')",
            "$system",
            "$execution",
            "$workflow",
            "$env.API_KEY",
            "$env.REGION",
        ]

    def test_available_without_input(self, empty_context):
        """Test input is omitted when unset."""
        assert empty_context.available_data_sources() == ["$system", "$execution", "$workflow"]

    def test_has_data_source(self, empty_context):
        """Test availability rules."""
        assert not empty_context.has_data_source(DataSource.input())
        assert not empty_context.has_data_source(DataSource.node("a"))
        assert empty_context.has_data_source(DataSource.system())
        assert empty_context.has_data_source(DataSource.execution())
        assert empty_context.has_data_source(DataSource.environment())
        assert empty_context.has_data_source(DataSource.workflow())

        empty_context.set_input(None)
        empty_context.add_node_output("a", 1)
        assert empty_context.has_data_source(DataSource.input())
        assert empty_context.has_data_source(DataSource.node("a"))

    def test_default_clock(self):
        """Test the default clock seeds a current UTC timestamp."""
        ctx = Context()
        iso = ctx.resolve_data_source(DataSource.system(), "datetime.iso").as_string()
        assert iso.endswith("Z")
