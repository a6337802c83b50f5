"""flowbind logging - structured and colored component logging."""

from .colors import CYAN, GREEN, LIGHT_BLUE, MAGENTA, ORANGE, RED, RESET, YELLOW
from .logger import (
    ROOT_LOGGER,
    ColoredLogFormatter,
    LogConfig,
    StructuredLogFormatter,
    TemplateLogger,
    configure_logging,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Loggers
    "ROOT_LOGGER",
    "TemplateLogger",
    "LogConfig",
    "get_logger",
    "reset_loggers",
    "configure_logging",
    # Formatters
    "StructuredLogFormatter",
    "ColoredLogFormatter",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
