"""Error registry for creating errors from templates."""

from dataclasses import fields
from typing import Any

from .errors import (
    _BASE_FIELDS,
    ConfigError,
    CustomError,
    DataNotFoundError,
    ErrorCategory,
    ErrorTemplate,
    EvaluationError,
    FunctionError,
    IndexOutOfRangeError,
    MathError,
    ParseError,
    SignatureError,
    TemplateError,
    TypeConversionError,
    WrappedError,
)


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes.

        Returns:
            List of error codes
        """
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Register or replace an error template.

        Args:
            template: Template to register under its code
        """
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
    ) -> TemplateError:
        """Create error instance from template + context.

        Context keys matching fields of the template's error type
        (``path``, ``position``, ...) are copied onto the instance.

        Args:
            code: Error code
            context: Context variables for template interpolation

        Returns:
            TemplateError subclass instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context, fallback=True)
        detail = self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        # Ensure message is not None
        if message is None:
            message = f"Error {code}"

        extras = {
            f.name: context[f.name]
            for f in fields(template.error_type)
            if f.name not in _BASE_FIELDS and f.name in context
        }

        return template.error_type(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            **extras,
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
        fallback: bool = False,
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables
            fallback: Return the raw template when a variable is missing

        Returns:
            Interpolated string, or None if template is None or unresolvable
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError):
            return template if fallback else None

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # PARSE Errors
        self._templates["PARSE_ERROR"] = ErrorTemplate(
            code="PARSE_ERROR",
            category=ErrorCategory.PARSE,
            message_template="Parse error at position {position}: {detail}",
            error_type=ParseError,
            detail_template="{detail}",
            suggestion_template="Check the template syntax near position {position}",
        )

        # EVALUATION Errors
        self._templates["EVALUATION_ERROR"] = ErrorTemplate(
            code="EVALUATION_ERROR",
            category=ErrorCategory.EVALUATION,
            message_template="Evaluation error: {detail}",
            error_type=EvaluationError,
            detail_template="{detail}",
        )

        self._templates["TYPE_ERROR"] = ErrorTemplate(
            code="TYPE_ERROR",
            category=ErrorCategory.EVALUATION,
            message_template="Type error: cannot convert {from_type} to {to_type}",
            error_type=TypeConversionError,
            detail_template="{context}",
            suggestion_template="Use a function to convert the {from_type} value explicitly",
        )

        self._templates["MATH_ERROR"] = ErrorTemplate(
            code="MATH_ERROR",
            category=ErrorCategory.EVALUATION,
            message_template="Math error: {detail}",
            error_type=MathError,
            detail_template="{detail}",
        )

        self._templates["INDEX_ERROR"] = ErrorTemplate(
            code="INDEX_ERROR",
            category=ErrorCategory.EVALUATION,
            message_template="Index {index} out of bounds for collection of size {size}",
            error_type=IndexOutOfRangeError,
        )

        # DATA Errors
        self._templates["DATA_NOT_FOUND"] = ErrorTemplate(
            code="DATA_NOT_FOUND",
            category=ErrorCategory.DATA,
            message_template="Data not found: {path}",
            error_type=DataNotFoundError,
            suggestion_template="Check that the data source is populated on the context",
        )

        # FUNCTION Errors
        self._templates["FUNCTION_ERROR"] = ErrorTemplate(
            code="FUNCTION_ERROR",
            category=ErrorCategory.FUNCTION,
            message_template="Function '{function}' failed: {detail}",
            error_type=FunctionError,
            detail_template="{detail}",
            suggestion_template="Check that '{function}' is registered and its arguments are valid",
        )

        self._templates["SIGNATURE_ERROR"] = ErrorTemplate(
            code="SIGNATURE_ERROR",
            category=ErrorCategory.FUNCTION,
            message_template="Invalid function signature for '{function}': {detail}",
            error_type=SignatureError,
            detail_template="{detail}",
        )

        self._templates["CUSTOM_ERROR"] = ErrorTemplate(
            code="CUSTOM_ERROR",
            category=ErrorCategory.FUNCTION,
            message_template="Custom error: {detail}",
            error_type=CustomError,
            detail_template="{detail}",
        )

        # Wrapped library errors
        self._templates["REGEX_ERROR"] = ErrorTemplate(
            code="REGEX_ERROR",
            category=ErrorCategory.FUNCTION,
            message_template="Regex error: {detail}",
            error_type=WrappedError,
            detail_template="{detail}",
            suggestion_template="Check the regular expression pattern",
        )

        self._templates["JSON_ERROR"] = ErrorTemplate(
            code="JSON_ERROR",
            category=ErrorCategory.FUNCTION,
            message_template="JSON error: {detail}",
            error_type=WrappedError,
            detail_template="{detail}",
        )

        self._templates["DATETIME_ERROR"] = ErrorTemplate(
            code="DATETIME_ERROR",
            category=ErrorCategory.FUNCTION,
            message_template="Date/time error: {detail}",
            error_type=WrappedError,
            detail_template="{detail}",
            suggestion_template="Use an ISO-8601 date, e.g. 2024-01-31T12:00:00Z",
        )

        self._templates["IO_ERROR"] = ErrorTemplate(
            code="IO_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="IO error: {detail}",
            error_type=WrappedError,
            detail_template="{detail}",
        )

        # SYSTEM Errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.SYSTEM,
            message_template="Invalid configuration: {detail}",
            error_type=ConfigError,
            detail_template="{detail}",
            suggestion_template="Check the configuration file against the documented schema",
        )
