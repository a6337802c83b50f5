"""Error factory for creating TemplateErrors from any exception type."""

from typing import Any

from .errors import TemplateError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates TemplateErrors from error codes or foreign exceptions."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
            matcher_chain: Matcher chain (defaults to new ErrorMatcherChain())
        """
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(self, error: Exception, **context: Any) -> TemplateError:
        """Convert any exception to TemplateError.

        TemplateErrors pass through unchanged.

        Args:
            error: Exception to convert
            **context: Extra context (e.g. function, args) merged under the
                matcher's own context

        Returns:
            TemplateError instance
        """
        if isinstance(error, TemplateError):
            return error

        match_result = self.matcher_chain.match(error)
        merged = {**context, **match_result.context}
        return self.registry.create(code=match_result.code, context=merged)

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> TemplateError:
        """Create TemplateError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            **kwargs: Additional context variables

        Returns:
            TemplateError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context)


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton.

    Returns:
        Default ErrorFactory instance
    """
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> TemplateError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        TemplateError instance
    """
    return get_error_factory().create(code, context)
