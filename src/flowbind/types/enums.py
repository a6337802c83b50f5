"""Shared enumerations for flowbind."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class ValueKind(str, Enum):
    """Variant tag of a dynamic template value.

    The enum value doubles as the user-facing type name.
    """

    NULL = "null"
    BOOL = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class DataSourceKind(str, Enum):
    """Named data channel a template can read from."""

    INPUT = "$input"
    NODE = "$node"
    SYSTEM = "$system"
    EXECUTION = "$execution"
    ENVIRONMENT = "$env"
    WORKFLOW = "$workflow"
