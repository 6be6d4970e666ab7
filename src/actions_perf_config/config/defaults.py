# MIT License
#
# Copyright (c) 2025 Democratize Technology
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Default setting catalog for the performance toolset.

This module provides the built-in setting definitions, cross-field rules and
profiles that let the toolset run out-of-the-box without any configuration
file or environment variables.
"""

from collections.abc import Mapping
from pathlib import Path
import tempfile
from types import MappingProxyType

from .profiles import Profile
from .schema import DependencyRule, SettingDefinition, SettingKind

# Environment variables read by resolve_config() itself
CONFIG_FILE_ENV = "CONFIG_FILE"
PROFILES_FILE_ENV = "PERF_PROFILES_FILE"

_TMP = Path(tempfile.gettempdir())

SETTING_DEFINITIONS: tuple[SettingDefinition, ...] = (
    # Parallelism and caching
    SettingDefinition(
        name="MAX_PARALLEL_JOBS",
        kind=SettingKind.INTEGER,
        default=4,
        minimum=1,
        maximum=32,
        description="Number of parallel validation/analysis jobs",
    ),
    SettingDefinition(
        name="CACHE_TTL",
        kind=SettingKind.INTEGER,
        default=1800,
        minimum=60,
        maximum=86400,
        description="Seconds a cached analysis result stays valid",
    ),
    SettingDefinition(
        name="ENABLE_CACHE",
        kind=SettingKind.BOOLEAN,
        default=True,
        description="Cache workflow validation and analysis results",
    ),
    SettingDefinition(
        name="CACHE_DIR",
        kind=SettingKind.PATH,
        default=_TMP / "validate-workflows-cache",
        description="Directory for cached results",
    ),
    SettingDefinition(
        name="LOG_LEVEL",
        kind=SettingKind.ENUM,
        default="INFO",
        choices=("DEBUG", "INFO", "WARN", "ERROR"),
        description="Verbosity of toolset logging",
    ),
    # GitHub API client
    SettingDefinition(
        name="GITHUB_API_CACHE_TTL",
        kind=SettingKind.INTEGER,
        default=300,
        minimum=0,
        maximum=86400,
        description="Seconds GitHub API responses are cached",
    ),
    SettingDefinition(
        name="GITHUB_API_RATE_LIMIT_BUFFER",
        kind=SettingKind.INTEGER,
        default=100,
        minimum=0,
        maximum=5000,
        description="API requests kept in reserve before throttling",
    ),
    SettingDefinition(
        name="RATE_LIMIT_THRESHOLD",
        kind=SettingKind.INTEGER,
        default=4900,
        minimum=1,
        maximum=5000,
        description="Used-request count that triggers rate limit warnings",
    ),
    # Workflow analysis
    SettingDefinition(
        name="WORKFLOW_ANALYSIS_LIMIT",
        kind=SettingKind.INTEGER,
        default=50,
        minimum=1,
        maximum=1000,
        description="Maximum workflow runs analyzed per invocation",
    ),
    SettingDefinition(
        name="WORKFLOW_MIN_CACHE_PERCENTAGE",
        kind=SettingKind.INTEGER,
        default=50,
        minimum=0,
        maximum=100,
        description="Cache hit percentage below which a workflow is flagged",
    ),
    # Benchmarks and metrics
    SettingDefinition(
        name="ENABLE_BENCHMARKS",
        kind=SettingKind.BOOLEAN,
        default=False,
        description="Run micro-benchmarks alongside analysis",
    ),
    SettingDefinition(
        name="BENCHMARK_ITERATIONS",
        kind=SettingKind.INTEGER,
        default=10,
        minimum=1,
        maximum=1000,
        description="Iterations per benchmark",
    ),
    SettingDefinition(
        name="BENCHMARK_OUTPUT_DIR",
        kind=SettingKind.PATH,
        default=_TMP / "performance-benchmarks",
        description="Directory for benchmark reports",
    ),
    SettingDefinition(
        name="METRICS_RETENTION_DAYS",
        kind=SettingKind.INTEGER,
        default=30,
        minimum=1,
        maximum=365,
        description="Days performance metrics are kept",
    ),
    SettingDefinition(
        name="FEEDBACK_RETENTION_DAYS",
        kind=SettingKind.INTEGER,
        default=90,
        minimum=1,
        maximum=365,
        description="Days troubleshooting feedback is kept",
    ),
    # Load testing
    SettingDefinition(
        name="LOAD_TEST_SCENARIO",
        kind=SettingKind.ENUM,
        default="medium",
        choices=("light", "medium", "heavy", "burst", "sustained"),
        description="Named load test scenario",
    ),
    SettingDefinition(
        name="LOAD_TEST_CONCURRENT",
        kind=SettingKind.INTEGER,
        default=10,
        minimum=1,
        maximum=100,
        description="Concurrent operations during a load test",
    ),
    SettingDefinition(
        name="LOAD_TEST_TOTAL",
        kind=SettingKind.INTEGER,
        default=100,
        minimum=1,
        maximum=100000,
        description="Total operations during a load test",
    ),
    SettingDefinition(
        name="LOAD_TEST_DURATION",
        kind=SettingKind.INTEGER,
        default=60,
        minimum=1,
        maximum=86400,
        description="Load test duration in seconds",
    ),
    # Reporting
    SettingDefinition(
        name="REPORT_FORMAT",
        kind=SettingKind.ENUM,
        default="markdown",
        choices=("markdown", "json", "html"),
        description="Output format for performance reports",
    ),
    SettingDefinition(
        name="REPORT_OUTPUT_DIR",
        kind=SettingKind.PATH,
        default=_TMP / "performance-reports",
        description="Directory for generated reports",
    ),
    SettingDefinition(
        name="REPORT_TEMPLATE_VERSION",
        kind=SettingKind.STRING,
        default="1.0.0",
        pattern=r"\d+\.\d+\.\d+",
        description="Report template version (semver)",
    ),
    # Run cleanup
    SettingDefinition(
        name="CLEANUP_KEEP_DAYS",
        kind=SettingKind.INTEGER,
        default=30,
        minimum=1,
        maximum=365,
        description="Workflow runs younger than this are kept",
    ),
    SettingDefinition(
        name="CLEANUP_MAX_RUNS",
        kind=SettingKind.INTEGER,
        default=100,
        minimum=1,
        maximum=1000,
        description="Maximum workflow runs deleted per cleanup",
    ),
    SettingDefinition(
        name="DRY_RUN",
        kind=SettingKind.BOOLEAN,
        default=False,
        description="Report destructive actions without performing them",
    ),
)

DEPENDENCY_RULES: tuple[DependencyRule, ...] = (
    DependencyRule(
        keys=("BENCHMARK_ITERATIONS", "ENABLE_BENCHMARKS"),
        check=lambda v: not v["ENABLE_BENCHMARKS"] or v["BENCHMARK_ITERATIONS"] >= 3,
        message="BENCHMARK_ITERATIONS must be >= 3 when ENABLE_BENCHMARKS=true",
        hint="set BENCHMARK_ITERATIONS to 3 or more, or set ENABLE_BENCHMARKS=false",
    ),
    DependencyRule(
        keys=("LOAD_TEST_CONCURRENT", "LOAD_TEST_TOTAL"),
        check=lambda v: v["LOAD_TEST_CONCURRENT"] <= v["LOAD_TEST_TOTAL"],
        message="LOAD_TEST_CONCURRENT must not exceed LOAD_TEST_TOTAL",
        hint="lower LOAD_TEST_CONCURRENT or raise LOAD_TEST_TOTAL",
    ),
    DependencyRule(
        keys=("GITHUB_API_RATE_LIMIT_BUFFER", "RATE_LIMIT_THRESHOLD"),
        check=lambda v: v["GITHUB_API_RATE_LIMIT_BUFFER"] < v["RATE_LIMIT_THRESHOLD"],
        message="GITHUB_API_RATE_LIMIT_BUFFER must be less than RATE_LIMIT_THRESHOLD",
        hint="lower GITHUB_API_RATE_LIMIT_BUFFER below RATE_LIMIT_THRESHOLD",
    ),
)


def _load_scenario(name: str, concurrent: int, total: int) -> Profile:
    return Profile(
        name=f"load-{name}",
        settings={
            "LOAD_TEST_SCENARIO": name,
            "LOAD_TEST_CONCURRENT": str(concurrent),
            "LOAD_TEST_TOTAL": str(total),
        },
    )


_BUILTIN_PROFILES = (
    Profile(name="default"),
    Profile(
        name="development",
        settings={"LOG_LEVEL": "DEBUG", "ENABLE_CACHE": "false", "DRY_RUN": "true"},
    ),
    Profile(
        name="ci",
        settings={"MAX_PARALLEL_JOBS": "2", "LOG_LEVEL": "WARN", "CACHE_TTL": "300"},
    ),
    Profile(name="production", settings={"LOG_LEVEL": "WARN"}),
    Profile(
        name="production-large",
        inherits=("production",),
        settings={"MAX_PARALLEL_JOBS": "16", "WORKFLOW_ANALYSIS_LIMIT": "200"},
    ),
    # Scenarios from the load test runner: concurrent / total operations
    _load_scenario("light", 5, 25),
    _load_scenario("medium", 10, 100),
    _load_scenario("heavy", 20, 500),
    _load_scenario("burst", 50, 200),
    _load_scenario("sustained", 8, 1000),
)

BUILTIN_PROFILES: Mapping[str, Profile] = MappingProxyType(
    {profile.name: profile for profile in _BUILTIN_PROFILES},
)


def definitions_by_name(
    definitions: tuple[SettingDefinition, ...] = SETTING_DEFINITIONS,
) -> dict[str, SettingDefinition]:
    """Index definitions by name, rejecting duplicates."""
    index: dict[str, SettingDefinition] = {}
    for definition in definitions:
        if definition.name in index:
            raise ValueError(f"duplicate setting definition: {definition.name}")
        index[definition.name] = definition
    return index
