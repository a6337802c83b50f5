"""Template Engine implementation."""

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from flowbind.config import EngineConfig, load_config
from flowbind.context import Context, ContextBuilder, system_clock
from flowbind.context.context import Clock
from flowbind.errors import ParseError
from flowbind.functions import FunctionLookup, FunctionRegistry
from flowbind.logging import configure_logging, get_logger

from .parser import OPEN
from .template import Template
from .types import Dependencies, RenderResult

logger = get_logger("engine")


class TemplateEngine:
    """Render template expressions in workflow values.

    Supports:
    - Data access: {{ $input.url }}, {{ $node('fetch').data.items[0] }}
    - Environment and metadata: {{ $env.API_KEY }}, {{ $execution.id }}
    - Operators: {{ $input.a + 1 }}, {{ $input.ok ? 'yes' : 'no' }}
    - Functions and pipelines: {{ uppercase($input.name) }}, {{ $input.items | length }}

    Parsed templates are not cached; each call parses its input.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        functions: FunctionLookup | None = None,
    ):
        """Initialize template engine.

        Args:
            config: Engine configuration (defaults to EngineConfig())
            functions: Function lookup; built from ``config.functions`` when omitted
        """
        self.config = config or EngineConfig()
        if functions is None:
            functions = FunctionRegistry.from_config(self.config.functions)
        self._functions = functions

    @classmethod
    def from_config_file(
        cls,
        path: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> "TemplateEngine":
        """Load configuration, set up logging and build an engine.

        Args:
            path: Optional path to config file
            overrides: Values deep-merged over the file contents

        Returns:
            Configured TemplateEngine
        """
        config = load_config(path, overrides)
        configure_logging(config.logging)
        return cls(config)

    @property
    def functions(self) -> FunctionLookup:
        return self._functions

    def clock(self) -> Clock:
        """Clock in the configured system timezone."""
        return system_clock(ZoneInfo(self.config.system.timezone))

    def new_context(self) -> Context:
        """Empty context whose system time uses the configured timezone."""
        return Context(clock=self.clock())

    def context_builder(self) -> ContextBuilder:
        return ContextBuilder(clock=self.clock())

    def parse(self, source: str) -> Template:
        """Parse a template with this engine's functions.

        Raises:
            ParseError: On malformed syntax
        """
        return Template.parse_with_functions(source, self._functions)

    def render_string(self, source: str, context: Context) -> str:
        """Render a single template string.

        Args:
            source: Template source
            context: Data sources

        Returns:
            Rendered string

        Raises:
            TemplateError: On parse or evaluation errors
        """
        return self.parse(source).render(context)

    def render(self, template: Any, context: Context) -> RenderResult:
        """Render template expressions in a value.

        Args:
            template: Value that may contain {{ }} expressions.
                      Can be string, dict, list, or primitive.
            context: Data sources

        Returns:
            RenderResult with rendered value

        Raises:
            TemplateError: On the first parse or evaluation error
        """
        templates_found: list[str] = []

        def render_value(value: Any) -> Any:
            """Recursively render a value."""
            if isinstance(value, str):
                if OPEN not in value:
                    return value
                parsed = self.parse(value)
                templates_found.extend(expr.source for expr in parsed.expressions())
                return parsed.render(context)

            elif isinstance(value, dict):
                return {k: render_value(v) for k, v in value.items()}

            elif isinstance(value, list):
                return [render_value(item) for item in value]

            else:
                # Primitive types - return as-is
                return value

        rendered = render_value(template)
        logger.debug("Value rendered", templates=len(templates_found))
        return RenderResult(
            value=rendered,
            had_templates=len(templates_found) > 0,
            templates_rendered=templates_found,
        )

    def render_params(
        self,
        params: dict[str, Any],
        context: Context,
    ) -> dict[str, Any]:
        """Render all templates in a params dict.

        Recursively renders templates in nested dicts and lists.

        Args:
            params: Parameters dict
            context: Data sources

        Returns:
            Rendered params dict
        """
        result = self.render(params, context)
        return result.value  # type: ignore[no-any-return]

    def validate(self, template: Any) -> list[str]:
        """Validate template syntax without rendering.

        Returns list of errors (empty if valid).
        Does NOT check that referenced data exists.

        Args:
            template: Value to validate

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        def validate_value(value: Any) -> None:
            """Recursively validate a value."""
            if isinstance(value, str):
                try:
                    self.parse(value)
                except ParseError as e:
                    errors.append(str(e))
            elif isinstance(value, dict):
                for v in value.values():
                    validate_value(v)
            elif isinstance(value, list):
                for item in value:
                    validate_value(item)

        validate_value(template)
        return errors

    def extract_dependencies(self, template: Any) -> Dependencies:
        """Collect the dependencies of every template inside a value.

        Useful for ordering workflow nodes.

        Args:
            template: Value to extract from

        Returns:
            Merged dependencies

        Raises:
            ParseError: If any string is not a valid template
        """
        deps = Dependencies()

        def collect(value: Any) -> None:
            if isinstance(value, str):
                if OPEN in value:
                    deps.merge(self.parse(value).dependencies)
            elif isinstance(value, dict):
                for v in value.values():
                    collect(v)
            elif isinstance(value, list):
                for item in value:
                    collect(item)

        collect(template)
        return deps
