"""Parsed templates."""

from __future__ import annotations

from collections.abc import Iterator

from flowbind.context import Context, DataSource
from flowbind.errors import create_error
from flowbind.functions import FunctionLookup, FunctionRegistry
from flowbind.logging import get_logger

from .elements import Element, Expression, Text
from .parser import scan
from .types import Dependencies

logger = get_logger("template")


class Template:
    """Immutable parsed template.

    Holds the source, the ordered Text/Expression elements, the statically
    extracted dependencies and the function registry used to render it.
    A Template can be rendered any number of times against different
    contexts.
    """

    __slots__ = ("_source", "_elements", "_dependencies", "_functions")

    def __init__(
        self,
        source: str,
        elements: list[Element],
        functions: FunctionLookup,
    ):
        """Initialize template. Use ``parse`` or ``parse_with_functions``.

        Args:
            source: Template source
            elements: Parsed elements in source order
            functions: Function lookup used at render time
        """
        self._source = source
        self._elements = tuple(elements)
        self._functions = functions

        deps = Dependencies()
        for expression in self.expressions():
            deps.merge(expression.dependencies())
        self._dependencies = deps

    @classmethod
    def parse(cls, source: str) -> Template:
        """Parse with the standard function set.

        Args:
            source: Template source

        Returns:
            Parsed template

        Raises:
            ParseError: On malformed syntax
        """
        return cls.parse_with_functions(source, FunctionRegistry.with_builtins())

    @classmethod
    def parse_with_functions(cls, source: str, functions: FunctionLookup) -> Template:
        """Parse with a caller-supplied function registry.

        Args:
            source: Template source
            functions: Function lookup used at render time

        Returns:
            Parsed template

        Raises:
            ParseError: On malformed syntax
        """
        template = cls(source, scan(source), functions)
        logger.debug(
            "Template parsed",
            expressions=template.expression_count(),
            dependencies=template.dependencies.to_dict(),
        )
        return template

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def source(self) -> str:
        return self._source

    @property
    def elements(self) -> tuple[Element, ...]:
        return self._elements

    @property
    def dependencies(self) -> Dependencies:
        """Copy of the statically extracted dependencies."""
        return self._dependencies.copy()

    @property
    def functions(self) -> FunctionLookup:
        return self._functions

    def expressions(self) -> Iterator[Expression]:
        return (element for element in self._elements if isinstance(element, Expression))

    def expression_count(self) -> int:
        return sum(1 for _ in self.expressions())

    def is_static(self) -> bool:
        """True when the template has no expressions."""
        return all(isinstance(element, Text) for element in self._elements)

    def uses_function(self, name: str) -> bool:
        return name in self._dependencies.functions

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, context: Context) -> str:
        """Render against a context.

        Text is copied verbatim; each expression result is converted with
        ``Value.as_string``.

        Args:
            context: Data sources

        Returns:
            Rendered string

        Raises:
            TemplateError: First evaluation failure; nothing partial is returned
        """
        parts: list[str] = []
        for element in self._elements:
            if isinstance(element, Text):
                parts.append(element.text)
            else:
                parts.append(element.evaluate(context, self._functions).as_string())

        output = "".join(parts)
        logger.debug(
            "Template rendered",
            expressions=self.expression_count(),
            output_length=len(output),
        )
        return output

    def validate_context(self, context: Context) -> None:
        """Check that every referenced input, node and env var is present.

        Control flow is ignored: references in untaken branches count.

        Args:
            context: Context to check

        Raises:
            DataNotFoundError: For the first missing reference, checking
                input, then nodes, then env vars, each in sorted order
        """
        deps = self._dependencies

        if deps.uses_input and not context.has_data_source(DataSource.input()):
            self._missing("$input", ["Input data required but not provided"])

        for node_id in sorted(deps.node_ids):
            if not context.has_data_source(DataSource.node(node_id)):
                self._missing(f"$node('{node_id}')", context.available_data_sources())

        for var in sorted(deps.env_vars):
            if context.get_env(var) is None:
                self._missing(f"$env.{var}", ["Environment variable not set"])

    def _missing(self, path: str, available: list[str]) -> None:
        logger.info("Context validation failed", path=path)
        raise create_error("DATA_NOT_FOUND", path=path, available=available)

    def __str__(self) -> str:
        return self._source

    def __repr__(self) -> str:
        return f"Template({self._source!r})"


def parse(source: str, functions: FunctionLookup | None = None) -> Template:
    """Parse a template, with the standard functions unless a registry is given."""
    if functions is None:
        return Template.parse(source)
    return Template.parse_with_functions(source, functions)
