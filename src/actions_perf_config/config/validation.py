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

"""Configuration validation utilities.

This module provides per-setting validation with type conversion,
cross-field dependency checks, and best-effort resource advisories.
"""

from collections.abc import Iterable, Mapping
from pathlib import Path
import re
from typing import Any

import psutil  # type: ignore[import-untyped]

from ..exceptions import SettingValidationError
from .diagnostics import Diagnostic, ErrorKind
from .schema import DependencyRule, SettingDefinition, SettingKind

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _fail(
    kind: ErrorKind,
    name: str,
    raw: str,
    source: str,
    message: str,
    hint: str,
) -> SettingValidationError:
    return SettingValidationError(
        Diagnostic(kind=kind, key=name, source=source, value=raw, message=message, hint=hint),
    )


def validate_value(
    name: str,
    raw: str,
    definition: SettingDefinition,
    source: str = "unknown",
) -> Any:
    """Convert a raw source string into the typed value for ``definition``.

    Args:
        name: Setting name being validated
        raw: Untyped value as found in the source
        definition: Schema entry for the setting
        source: Origin tag used in the diagnostic on failure

    Returns:
        The typed value (int, bool, str or Path)

    Raises:
        SettingValidationError: If the value does not satisfy the definition
    """
    kind = definition.kind

    if kind is SettingKind.INTEGER:
        if not _INTEGER_RE.fullmatch(raw):
            raise _fail(
                ErrorKind.NOT_NUMERIC,
                name,
                raw,
                source,
                "must be an integer",
                f"set {name} to a whole number ({definition.describe_constraints()})",
            )
        value = int(raw)
        low, high = definition.minimum, definition.maximum
        if (low is not None and value < low) or (high is not None and value > high):
            if low is not None and high is not None:
                message = f"must be {low}-{high}"
                hint = f"set {name} between {low} and {high}"
            elif low is not None:
                message = f"must be >= {low}"
                hint = f"set {name} to {low} or more"
            else:
                message = f"must be <= {high}"
                hint = f"set {name} to {high} or less"
            raise _fail(ErrorKind.OUT_OF_RANGE, name, raw, source, message, hint)
        return value

    if kind is SettingKind.BOOLEAN:
        if raw == "true":
            return True
        if raw == "false":
            return False
        raise _fail(
            ErrorKind.INVALID_BOOLEAN,
            name,
            raw,
            source,
            "must be true or false",
            f"set {name} to exactly 'true' or 'false' (lowercase)",
        )

    if kind is SettingKind.ENUM:
        if raw in definition.choices:
            return raw
        allowed = ", ".join(definition.choices)
        raise _fail(
            ErrorKind.INVALID_ENUM,
            name,
            raw,
            source,
            f"must be one of {allowed}",
            f"set {name} to one of: {allowed}",
        )

    if definition.pattern and not re.fullmatch(definition.pattern, raw):
        raise _fail(
            ErrorKind.PATTERN_MISMATCH,
            name,
            raw,
            source,
            f"must match {definition.pattern}",
            f"set {name} to a value matching {definition.pattern}",
        )

    if kind is SettingKind.PATH:
        if not raw or "\x00" in raw:
            raise _fail(
                ErrorKind.PATTERN_MISMATCH,
                name,
                raw,
                source,
                "must be a non-empty path",
                f"set {name} to a filesystem path",
            )
        return Path(raw).expanduser()

    return raw


def check_dependencies(
    values: Mapping[str, Any],
    rules: Iterable[DependencyRule],
    provenance: Mapping[str, str] | None = None,
) -> list[Diagnostic]:
    """Evaluate cross-field rules over already validated values.

    Rules that involve a key missing from ``values`` (because it failed its own
    validation) are skipped; that key already has a diagnostic.
    """
    provenance = provenance or {}
    diagnostics = []

    for rule in rules:
        if any(key not in values for key in rule.keys):
            continue
        if rule.check(values):
            continue
        first, second = rule.keys
        diagnostics.append(
            Diagnostic(
                kind=ErrorKind.DEPENDENCY_VIOLATION,
                key=first,
                source=provenance.get(first, "unknown"),
                value=f"{values[first]} with {second}={values[second]}",
                message=rule.message,
                hint=rule.hint,
            ),
        )

    return diagnostics


class ConfigValidator:
    """Best-effort advisories that compare settings with the host machine."""

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.recommendations: list[str] = []

    def advise(self, values: Mapping[str, Any]) -> None:
        """Populate ``warnings`` and ``recommendations`` for resolved values."""
        self.warnings.clear()
        self.recommendations.clear()

        try:
            cpu_count = psutil.cpu_count()
            if not cpu_count:
                raise OSError("CPU count unavailable")
            available_memory_gb = psutil.virtual_memory().total / (1024**3)
        except (OSError, AttributeError) as e:
            # Resource checks are best-effort but never silent
            self.warnings.append(f"Could not check system resources: {e}")
            return

        parallel_jobs = values.get("MAX_PARALLEL_JOBS")
        if parallel_jobs is not None and parallel_jobs > cpu_count * 2:
            self.recommendations.append(
                f"MAX_PARALLEL_JOBS ({parallel_jobs}) exceeds 2x CPU cores ({cpu_count}). "
                f"Consider reducing for optimal performance.",
            )

        concurrent = values.get("LOAD_TEST_CONCURRENT")
        if concurrent is not None and concurrent > cpu_count * 4:
            self.recommendations.append(
                f"LOAD_TEST_CONCURRENT ({concurrent}) exceeds 4x CPU cores ({cpu_count}). "
                f"Load test results may reflect local contention.",
            )

        # Rough estimate: ~50MB per parallel analysis job
        if parallel_jobs is not None and parallel_jobs * 50 > available_memory_gb * 1024 * 0.8:
            self.warnings.append(
                f"MAX_PARALLEL_JOBS ({parallel_jobs}) may need ~{parallel_jobs * 50}MB memory "
                f"(available: {available_memory_gb:.1f}GB). Consider reducing.",
            )

        if values.get("ENABLE_CACHE") is False and values.get("ENABLE_BENCHMARKS") is True:
            self.recommendations.append(
                "Benchmarks run with ENABLE_CACHE=false will not measure cache hit rates.",
            )

