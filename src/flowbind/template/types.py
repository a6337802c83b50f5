"""Template Engine type definitions."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Dependencies:
    """Everything a template could read or call, found by static traversal.

    Over-approximates evaluation: both branches of conditionals are included.
    """

    input_paths: set[str] = field(default_factory=set)  # "" for whole-input access
    node_ids: set[str] = field(default_factory=set)
    env_vars: set[str] = field(default_factory=set)
    functions: set[str] = field(default_factory=set)
    uses_system: bool = False
    uses_execution: bool = False
    uses_workflow: bool = False

    @property
    def uses_input(self) -> bool:
        return bool(self.input_paths)

    def merge(self, other: "Dependencies") -> None:
        """Union another record into this one.

        Args:
            other: Dependencies to merge in
        """
        self.input_paths |= other.input_paths
        self.node_ids |= other.node_ids
        self.env_vars |= other.env_vars
        self.functions |= other.functions
        self.uses_system = self.uses_system or other.uses_system
        self.uses_execution = self.uses_execution or other.uses_execution
        self.uses_workflow = self.uses_workflow or other.uses_workflow

    def copy(self) -> "Dependencies":
        """Independent copy; the sets are not shared."""
        duplicate = Dependencies()
        duplicate.merge(self)
        return duplicate

    def is_empty(self) -> bool:
        return not (
            self.input_paths
            or self.node_ids
            or self.env_vars
            or self.functions
            or self.uses_system
            or self.uses_execution
            or self.uses_workflow
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with sorted lists, for diagnostics.

        Returns:
            Dictionary representation
        """
        return {
            "input_paths": sorted(self.input_paths),
            "node_ids": sorted(self.node_ids),
            "env_vars": sorted(self.env_vars),
            "functions": sorted(self.functions),
            "uses_system": self.uses_system,
            "uses_execution": self.uses_execution,
            "uses_workflow": self.uses_workflow,
        }


@dataclass
class RenderResult:
    """Result of template rendering."""

    value: Any  # Rendered value
    had_templates: bool  # Whether any templates were found
    templates_rendered: list[str] = field(default_factory=list)  # Template sources rendered
