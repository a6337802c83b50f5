"""flowbind configuration data models."""

from dataclasses import dataclass, field

from flowbind.logging import LogConfig


@dataclass
class FunctionsConfig:
    """Function registry configuration."""

    builtins: bool = True  # Register the standard function set
    disabled: list[str] = field(default_factory=list)  # Names removed after registration


@dataclass
class SystemConfig:
    """System data configuration."""

    timezone: str = "UTC"  # IANA zone for $system.datetime


@dataclass
class EngineConfig:
    """Root configuration object."""

    logging: LogConfig = field(default_factory=LogConfig)
    functions: FunctionsConfig = field(default_factory=FunctionsConfig)
    system: SystemConfig = field(default_factory=SystemConfig)
