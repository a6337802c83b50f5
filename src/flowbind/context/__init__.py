"""Evaluation context and data sources."""

from .builder import ContextBuilder
from .context import Clock, Context, DataSource, SystemData, system_clock, utc_now

__all__ = [
    "Context",
    "ContextBuilder",
    "DataSource",
    "SystemData",
    "Clock",
    "utc_now",
    "system_clock",
]
