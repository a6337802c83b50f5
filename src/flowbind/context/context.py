"""Evaluation context: the named data sources a template reads from."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from types import MappingProxyType
from typing import Any

from flowbind.errors import create_error
from flowbind.types import DataSourceKind
from flowbind.value import Value

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: current time in UTC."""
    return datetime.now(UTC)


def system_clock(tz: tzinfo) -> Clock:
    """Clock returning the current time in ``tz``."""

    def _now() -> datetime:
        return datetime.now(tz)

    return _now


@dataclass(frozen=True)
class DataSource:
    """Selector for a data channel. Carries no data itself."""

    kind: DataSourceKind
    node_id: str | None = None

    @classmethod
    def input(cls) -> DataSource:
        return cls(DataSourceKind.INPUT)

    @classmethod
    def node(cls, node_id: str) -> DataSource:
        return cls(DataSourceKind.NODE, node_id)

    @classmethod
    def system(cls) -> DataSource:
        return cls(DataSourceKind.SYSTEM)

    @classmethod
    def execution(cls) -> DataSource:
        return cls(DataSourceKind.EXECUTION)

    @classmethod
    def environment(cls) -> DataSource:
        return cls(DataSourceKind.ENVIRONMENT)

    @classmethod
    def workflow(cls) -> DataSource:
        return cls(DataSourceKind.WORKFLOW)

    def as_str(self) -> str:
        """Source prefix as written in templates (``$input``, ``$node``, ...)."""
        return self.kind.value

    def reference(self) -> str:
        """Full reference, including the node id for node sources."""
        if self.kind is DataSourceKind.NODE:
            return f"$node('{self.node_id}')"
        return self.kind.value

    def __str__(self) -> str:
        return self.reference()


class SystemData:
    """System-provided data, seeded from a clock when created."""

    def __init__(self, clock: Clock = utc_now) -> None:
        now = clock()
        utc = now.astimezone(UTC)
        datetime_block = Value.from_dict(
            {
                "now": now.isoformat(),
                "timestamp": int(now.timestamp()),
                "iso": utc.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "date": now.strftime("%Y-%m-%d"),
                "time": now.strftime("%H:%M:%S"),
            }
        )
        self._data: dict[str, Value] = {"datetime": datetime_block}

    def get(self, path: str) -> Value | None:
        """Navigate the system block by dotted path."""
        return self.as_value().navigate(path)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = Value.of(value)

    def as_value(self) -> Value:
        return Value.from_dict(self._data)

    def keys(self) -> list[str]:
        return list(self._data)


class Context:
    """Runtime data available to template expressions.

    Environment, execution, workflow and system sources are always
    available. Input and node sources exist only once set.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        """Initialize an empty context.

        Args:
            clock: Zero-argument callable returning an aware datetime, used to
                seed ``$system.datetime``
        """
        self._input: Value | None = None
        self._nodes: dict[str, Value] = {}
        self._env: dict[str, str] = {}
        self._execution: dict[str, Value] = {}
        self._workflow: dict[str, Value] = {}
        self._system = SystemData(clock)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_input(self, value: Any) -> None:
        self._input = Value.of(value)

    def get_input(self) -> Value | None:
        return self._input

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node_output(self, node_id: str, value: Any) -> None:
        """Record the output of an upstream node, replacing any earlier one."""
        self._nodes[node_id] = Value.of(value)

    def get_node_output(self, node_id: str) -> Value | None:
        return self._nodes.get(node_id)

    def node_ids(self) -> list[str]:
        return list(self._nodes)

    # ------------------------------------------------------------------
    # Environment / execution / workflow / system
    # ------------------------------------------------------------------

    def set_env(self, key: str, value: str) -> None:
        self._env[key] = str(value)

    def get_env(self, key: str) -> str | None:
        return self._env.get(key)

    def set_execution_data(self, key: str, value: Any) -> None:
        self._execution[key] = Value.of(value)

    def get_execution_data(self, key: str) -> Value | None:
        return self._execution.get(key)

    def set_workflow_data(self, key: str, value: Any) -> None:
        self._workflow[key] = Value.of(value)

    def get_workflow_data(self, key: str) -> Value | None:
        return self._workflow.get(key)

    def get_system_data(self) -> MappingProxyType[str, Value]:
        """Read-only view of the system block (``datetime`` and anything set)."""
        return self._system.as_value().as_object()  # type: ignore[return-value]

    def set_system_data(self, key: str, value: Any) -> None:
        self._system.set(key, value)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_data_source(self, source: DataSource, path: str = "") -> Value:
        """Resolve a data-source reference to a value.

        Args:
            source: Data source selector
            path: Dotted path inside the source ("" for the whole source)

        Returns:
            Resolved value

        Raises:
            DataNotFoundError: If the source is unavailable or the path misses
        """
        kind = source.kind

        if kind is DataSourceKind.INPUT:
            if self._input is None:
                raise create_error(
                    "DATA_NOT_FOUND", path="$input", available=["No input data available"]
                )
            result = self._input.navigate(path)
            if result is None:
                raise create_error("DATA_NOT_FOUND", path=f"$input.{path}", available=["$input"])
            return result

        if kind is DataSourceKind.NODE:
            node_id = source.node_id or ""
            reference = f"$node('{node_id}')"
            output = self._nodes.get(node_id)
            if output is None:
                raise create_error(
                    "DATA_NOT_FOUND",
                    path=reference,
                    available=[f"$node('{known}')" for known in self._nodes],
                )
            result = output.navigate(path)
            if result is None:
                raise create_error(
                    "DATA_NOT_FOUND", path=f"{reference}.{path}", available=[reference]
                )
            return result

        if kind is DataSourceKind.SYSTEM:
            result = self._system.get(path)
            if result is None:
                raise create_error(
                    "DATA_NOT_FOUND", path=f"$system.{path}", available=["$system.datetime"]
                )
            return result

        if kind is DataSourceKind.EXECUTION:
            return self._resolve_metadata("$execution", self._execution, path)

        if kind is DataSourceKind.WORKFLOW:
            return self._resolve_metadata("$workflow", self._workflow, path)

        if kind is DataSourceKind.ENVIRONMENT:
            env_value = self._env.get(path)
            if env_value is None:
                raise create_error(
                    "DATA_NOT_FOUND",
                    path=f"$env.{path}",
                    available=[f"$env.{key}" for key in self._env],
                )
            return Value.from_str(env_value)

        raise create_error("DATA_NOT_FOUND", path=source.reference(), available=[])

    @staticmethod
    def _resolve_metadata(prefix: str, data: dict[str, Value], path: str) -> Value:
        if not path:
            return Value.from_dict(data)
        found = data.get(path)
        if found is None:
            raise create_error(
                "DATA_NOT_FOUND",
                path=f"{prefix}.{path}",
                available=[f"{prefix}.{key}" for key in data],
            )
        return found

    def available_data_sources(self) -> list[str]:
        """List references that currently resolve, for error suggestions."""
        sources: list[str] = []
        if self._input is not None:
            sources.append("$input")
        sources.extend(f"$node('{node_id}')" for node_id in self._nodes)
        sources.extend(["$system", "$execution", "$workflow"])
        sources.extend(f"$env.{key}" for key in self._env)
        return sources

    def has_data_source(self, source: DataSource) -> bool:
        if source.kind is DataSourceKind.INPUT:
            return self._input is not None
        if source.kind is DataSourceKind.NODE:
            return source.node_id in self._nodes
        return True
