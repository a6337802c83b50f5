"""Template context builder."""

from typing import Any

from .context import Clock, Context, utc_now


class ContextBuilder:
    """Build a Context incrementally during workflow execution."""

    def __init__(self, clock: Clock = utc_now):
        """Initialize context builder.

        Args:
            clock: Clock used to seed system data
        """
        self._context = Context(clock=clock)

    def with_input(self, value: Any) -> "ContextBuilder":
        """Set the workflow input.

        Args:
            value: Input data (plain Python data or Value)

        Returns:
            This builder
        """
        self._context.set_input(value)
        return self

    def with_node_output(self, node_id: str, output: Any) -> "ContextBuilder":
        """Add a completed node's output to context.

        Args:
            node_id: Node identifier
            output: Node output value

        Returns:
            This builder
        """
        self._context.add_node_output(node_id, output)
        return self

    def with_env(self, variables: dict[str, str]) -> "ContextBuilder":
        """Add environment variables.

        Args:
            variables: Variable name to value

        Returns:
            This builder
        """
        for key, value in variables.items():
            self._context.set_env(key, value)
        return self

    def with_execution(self, **data: Any) -> "ContextBuilder":
        """Add execution metadata (e.g. ``id``, ``mode``)."""
        for key, value in data.items():
            self._context.set_execution_data(key, value)
        return self

    def with_workflow(self, **data: Any) -> "ContextBuilder":
        """Add workflow metadata (e.g. ``id``, ``name``)."""
        for key, value in data.items():
            self._context.set_workflow_data(key, value)
        return self

    def build(self) -> Context:
        """Get the built context.

        Returns:
            Populated context
        """
        return self._context
