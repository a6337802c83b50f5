"""flowbind configuration loader."""

import os
import re
import typing
from dataclasses import fields
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from flowbind.errors import create_error
from flowbind.logging import get_logger
from flowbind.types import LogFormat, LogLevel, ValidationIssue, ValidationResult

from .models import EngineConfig

logger = get_logger("config")

CONFIG_PATH_ENV = "FLOWBIND_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "flowbind.yaml"

# Pattern: ${VAR}, ${VAR:-default}, ${VAR:?error}
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([?-])([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        ConfigError: If required var not set
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        raise create_error(
            "CONFIG_INVALID",
            detail=f"Required environment variable {var_name} not set",
        )

    return _ENV_PATTERN.sub(replacer, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    if isinstance(data, str):
        return resolve_env_vars(data)
    return data


class ConfigLoader:
    """Load and validate engine configuration."""

    VALID_KEYS = {"logging", "functions", "system"}

    def load(
        self,
        path: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
        use_defaults: bool = True,
    ) -> EngineConfig:
        """Load configuration from a YAML file.

        Resolution order if path not specified:
        1. FLOWBIND_CONFIG_PATH environment variable
        2. ./flowbind.yaml
        3. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            overrides: Values deep-merged over the file contents
            use_defaults: Use default config when no file is found

        Returns:
            Loaded EngineConfig instance

        Raises:
            ConfigError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_FILE

        config_path = Path(path)
        data: dict[str, Any] = {}

        if config_path.exists():
            try:
                with config_path.open() as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise create_error(
                    "CONFIG_INVALID",
                    detail=f"Invalid YAML in config file: {e}",
                ) from e
            if not isinstance(data, dict):
                raise create_error(
                    "CONFIG_INVALID",
                    detail=f"Config file must contain a mapping: {config_path}",
                )
            data = _resolve_env_vars_recursive(data)
        elif not use_defaults:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )
        else:
            logger.debug("No config file found, using defaults", config_path=str(config_path))

        if overrides:
            data = deep_merge(data, overrides)

        return self.load_from_dict(data)

    def load_defaults(self) -> EngineConfig:
        """Default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any]) -> EngineConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Loaded EngineConfig instance

        Raises:
            ConfigError: If configuration is invalid
        """
        validation = self.validate(data)
        for warning in validation.warnings:
            logger.warning(warning.message, config_key=warning.path)
        if not validation.valid:
            error_messages = [f"- {issue.path}: {issue.message}" for issue in validation.errors]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        return self._convert_field(EngineConfig, data)

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for key in data:
            if key not in self.VALID_KEYS:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )

        for section in self.VALID_KEYS:
            if section in data and not isinstance(data[section], dict):
                errors.append(ValidationIssue(path=section, message=f"{section} must be a mapping"))

        logging_data = data.get("logging")
        if isinstance(logging_data, dict):
            level = logging_data.get("level")
            if level is not None and level not in {lvl.value for lvl in LogLevel}:
                errors.append(
                    ValidationIssue(
                        path="logging.level",
                        message=f"level must be one of {', '.join(lvl.value for lvl in LogLevel)}",
                    )
                )
            fmt = logging_data.get("format")
            if fmt is not None and fmt not in {f.value for f in LogFormat}:
                errors.append(
                    ValidationIssue(
                        path="logging.format",
                        message=f"format must be one of {', '.join(f.value for f in LogFormat)}",
                    )
                )
            truncate_at = logging_data.get("truncate_at")
            if truncate_at is not None and (
                not isinstance(truncate_at, int) or isinstance(truncate_at, bool) or truncate_at <= 0
            ):
                errors.append(
                    ValidationIssue(
                        path="logging.truncate_at",
                        message="truncate_at must be a positive integer",
                    )
                )

        functions_data = data.get("functions")
        if isinstance(functions_data, dict):
            if "builtins" in functions_data and not isinstance(functions_data["builtins"], bool):
                errors.append(
                    ValidationIssue(path="functions.builtins", message="builtins must be a boolean")
                )
            disabled = functions_data.get("disabled")
            if disabled is not None and (
                not isinstance(disabled, list) or not all(isinstance(n, str) for n in disabled)
            ):
                errors.append(
                    ValidationIssue(
                        path="functions.disabled",
                        message="disabled must be a list of function names",
                    )
                )

        system_data = data.get("system")
        if isinstance(system_data, dict) and "timezone" in system_data:
            timezone = system_data["timezone"]
            try:
                ZoneInfo(str(timezone))
            except (ZoneInfoNotFoundError, ValueError):
                errors.append(
                    ValidationIssue(
                        path="system.timezone",
                        message=f"Unknown timezone: {timezone}",
                    )
                )

        return ValidationResult(valid=True, errors=errors, warnings=warnings)

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert field value to appropriate type.

        Args:
            field_type: Expected field type
            value: Value to convert

        Returns:
            Converted value
        """
        if value is None:
            return None

        origin = typing.get_origin(field_type)

        if origin is list:
            args = typing.get_args(field_type)
            if args and isinstance(value, list):
                return [self._convert_field(args[0], item) for item in value]
            return value

        if origin is dict:
            args = typing.get_args(field_type)
            if len(args) == 2 and isinstance(value, dict):
                return {k: self._convert_field(args[1], v) for k, v in value.items()}
            return value

        if hasattr(field_type, "__dataclass_fields__"):
            if isinstance(value, dict):
                kwargs = {
                    f.name: self._convert_field(f.type, value[f.name])
                    for f in fields(field_type)
                    if f.name in value
                }
                return field_type(**kwargs)
            return value

        if hasattr(field_type, "__mro__") and any(
            base.__name__ == "Enum" for base in field_type.__mro__
        ):
            if isinstance(value, str):
                return field_type(value)
            return value

        return value


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> EngineConfig:
    """Convenience function to load config.

    Args:
        path: Optional path to config file
        overrides: Values deep-merged over the file contents

    Returns:
        Loaded EngineConfig instance
    """
    return ConfigLoader().load(path, overrides)
