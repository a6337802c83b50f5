"""Structured logging for template parsing and rendering.

Wraps the standard library logger under the ``flowbind.`` namespace. Keyword
fields passed to the log methods become ``extra`` attributes, rendered either
as JSON lines (with OpenTelemetry trace context) or as colored text.

Usage:
    from flowbind.logging import get_logger

    logger = get_logger("template")
    logger.debug("Template parsed", expressions=2)
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from opentelemetry import trace

from flowbind.types import LogFormat, LogLevel

from .colors import CYAN, GREEN, LIGHT_BLUE, MAGENTA, ORANGE, RED, RESET, YELLOW

ROOT_LOGGER = "flowbind"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName",
    }
)  # fmt: skip

_PYTHON_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stderr)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = {
                "template": True,
                "parser": True,
                "functions": True,
                "engine": True,
                "config": True,
            }


def _component(record: logging.LogRecord) -> str:
    prefix = f"{ROOT_LOGGER}."
    return record.name[len(prefix) :] if record.name.startswith(prefix) else record.name


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with trace context injection.

    Formats log records as JSON with:
    - timestamp (ISO 8601)
    - level
    - component (logger name without the ``flowbind.`` prefix)
    - message
    - trace_id / span_id (if a span is recording)
    - Additional fields from extra
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "component": _component(record),
            "message": record.getMessage(),
        }

        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                log_data["trace_id"] = format(ctx.trace_id, "032x")
                log_data["span_id"] = format(ctx.span_id, "016x")

        log_data.update(_extra_fields(record))
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ColoredLogFormatter(logging.Formatter):
    """Human-readable formatter: ``[COMPONENT] message {fields}``."""

    LEVEL_COLORS = {
        logging.DEBUG: LIGHT_BLUE,
        logging.INFO: CYAN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
    }

    COMPONENT_COLORS = {
        "template": MAGENTA,
        "parser": CYAN,
        "functions": GREEN,
        "engine": ORANGE,
    }

    def __init__(self, truncate_at: int = 200):
        """Initialize formatter.

        Args:
            truncate_at: Maximum length of the rendered extra fields
        """
        super().__init__()
        self.truncate_at = truncate_at

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as colored text.

        Args:
            record: Log record to format

        Returns:
            Colored log line
        """
        component = _component(record)
        color = self.LEVEL_COLORS.get(record.levelno, RESET)
        component_color = self.COMPONENT_COLORS.get(component.split(".")[0], RESET)

        output = (
            f"{component_color}[{component.upper()}]{RESET} "
            f"{color}{record.getMessage()}{RESET}"
        )

        extra = _extra_fields(record)
        if extra:
            context_str = str(extra)
            if len(context_str) > self.truncate_at:
                context_str = context_str[: self.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class _ComponentFilter(logging.Filter):
    """Drops records from components disabled in LogConfig.components."""

    def __init__(self, components: dict[str, bool]):
        super().__init__()
        self.components = components

    def filter(self, record: logging.LogRecord) -> bool:
        return self.components.get(_component(record).split(".")[0], True)


class TemplateLogger:
    """Structured logger with keyword fields.

    Wraps Python logging with:
    - Automatic trace context injection (JSON format)
    - Keyword arguments attached as ``extra`` fields
    """

    def __init__(self, name: str):
        """Initialize logger.

        Args:
            name: Component name (becomes ``flowbind.<name>``)
        """
        self.name = name
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        """Log message with extra fields.

        Args:
            level: Log level
            message: Log message
            **kwargs: Additional fields to include
        """
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra=kwargs)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.exception(message, extra=kwargs)


# Logger cache
_loggers: dict[str, TemplateLogger] = {}


def get_logger(name: str) -> TemplateLogger:
    """Get or create a component logger.

    Args:
        name: Component name

    Returns:
        TemplateLogger instance
    """
    if name not in _loggers:
        _loggers[name] = TemplateLogger(name)
    return _loggers[name]


def reset_loggers() -> None:
    """Reset logger cache (for testing)."""
    global _loggers  # noqa: PLW0603
    _loggers = {}


def configure_logging(config: LogConfig | None = None) -> logging.Handler:
    """Install a single handler on the ``flowbind`` logger.

    Replaces any handler installed by a previous call.

    Args:
        config: Logging configuration (defaults to LogConfig())

    Returns:
        The installed handler
    """
    config = config or LogConfig()
    root = logging.getLogger(ROOT_LOGGER)

    for existing in list(root.handlers):
        if getattr(existing, "_flowbind_handler", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler(config.output)
    if config.format == LogFormat.JSON:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(ColoredLogFormatter(truncate_at=config.truncate_at))
    handler.addFilter(_ComponentFilter(config.components))
    handler._flowbind_handler = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(_PYTHON_LEVELS.get(config.level, logging.INFO))
    root.propagate = False
    return handler
