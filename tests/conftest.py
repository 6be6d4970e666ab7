"""
Shared pytest configuration and fixtures for actions-perf-config tests.

This file contains:
- Common fixtures for writing config files and building resolvers
- Markers for different test categories
- A deterministic psutil stand-in so advisories do not depend on the host
"""

from pathlib import Path
import sys
from unittest.mock import patch

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from actions_perf_config.config import (  # noqa: E402
    ConfigResolver,
    Profile,
    SettingDefinition,
    SettingKind,
    SourceDescriptor,
)

GIB = 1024**3


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end resolution tests")
    config.addinivalue_line("markers", "concurrent: Tests that use concurrency/parallelism")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test names."""
    for item in items:
        if any(
            keyword in item.name.lower() for keyword in ["concurrent", "parallel", "thread"]
        ):
            item.add_marker(pytest.mark.concurrent)
        if "main" in str(item.fspath) or "manager" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def stable_host():
    """Report a roomy 8-core host to the resource advisor."""
    with patch("actions_perf_config.config.validation.psutil") as mock_psutil:
        mock_psutil.cpu_count.return_value = 8
        mock_psutil.virtual_memory.return_value.total = 16 * GIB
        yield mock_psutil


@pytest.fixture()
def write_file(tmp_path):
    """Write a text file under tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def resolver():
    """Resolver over the built-in catalog with default options."""
    return ConfigResolver()


@pytest.fixture()
def env_source(resolver):
    """Build an environment source limited to the resolver's namespace."""

    def _env(**values: str) -> SourceDescriptor:
        return SourceDescriptor.environment(resolver.namespace(), values)

    return _env


@pytest.fixture()
def two_settings():
    """The two-setting catalog used by the documented merge scenario."""
    return (
        SettingDefinition(
            name="MAX_PARALLEL_JOBS",
            kind=SettingKind.INTEGER,
            default=4,
            minimum=1,
            maximum=32,
        ),
        SettingDefinition(
            name="CACHE_TTL",
            kind=SettingKind.INTEGER,
            default=1800,
            minimum=60,
            maximum=86400,
        ),
    )


@pytest.fixture()
def prod_profiles():
    """PROD_BASE sets LOG_LEVEL, PROD_LARGE inherits it and adds parallelism."""
    return {
        "PROD_BASE": Profile(name="PROD_BASE", settings={"LOG_LEVEL": "WARN"}),
        "PROD_LARGE": Profile(
            name="PROD_LARGE",
            inherits=("PROD_BASE",),
            settings={"MAX_PARALLEL_JOBS": "16"},
        ),
    }
