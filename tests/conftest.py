"""
Pytest configuration and shared fixtures for flowbind tests.
"""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flowbind.context import Context, ContextBuilder  # noqa: E402
from flowbind.functions import FunctionRegistry  # noqa: E402
from flowbind.logging import ROOT_LOGGER, reset_loggers  # noqa: E402

FIXED_NOW = datetime(2024, 3, 15, 14, 30, 45, tzinfo=UTC)


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def empty_context(fixed_clock) -> Context:
    """Context with no input and no nodes."""
    return Context(clock=fixed_clock)


@pytest.fixture
def context(fixed_clock) -> Context:
    """Context populated with every kind of data source."""
    return (
        ContextBuilder(clock=fixed_clock)
        .with_input(
            {
                "name": "Alice",
                "age": 30,
                "score": 2.5,
                "active": True,
                "tags": ["admin", "ops"],
                "items": [{"name": "first"}, {"name": "second"}],
                "profile": {"city": "Berlin", "zip": None},
            }
        )
        .with_node_output("fetch", {"status": 200, "data": {"ids": [7, 8, 9]}})
        .with_node_output("empty", {})
        .with_env({"API_KEY": "secret", "REGION": "eu-west-1"})
        .with_execution(id="exec-1", mode="manual")
        .with_workflow(id="wf-1", name="Nightly sync")
        .build()
    )


# =============================================================================
# Function Fixtures
# =============================================================================


@pytest.fixture
def registry() -> FunctionRegistry:
    """Registry with the standard functions."""
    return FunctionRegistry.with_builtins()


@pytest.fixture(autouse=True)
def reset_logger_state():
    """Reset logger cache and installed handlers around each test."""
    reset_loggers()
    yield
    reset_loggers()
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "template: Template language tests")
