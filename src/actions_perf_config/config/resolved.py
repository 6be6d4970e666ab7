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

"""Immutable result of a successful configuration resolution."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
import hashlib
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .diagnostics import Diagnostic


def _plain(value: Any) -> Any:
    return str(value) if isinstance(value, Path) else value


@dataclass(frozen=True)
class ResolvedConfiguration(Mapping[str, Any]):
    """Validated, typed configuration shared read-only with all consumers.

    Every defined setting is present exactly once. ``provenance`` maps each
    key to the origin that supplied the winning value. Re-resolving produces a
    new instance; this one is never mutated.

    Attributes:
        profile: Name of the active profile
        warnings: Non-fatal diagnostics (unknown keys in warn-only mode)
        advisories: Resource warnings and tuning recommendations
    """

    _values: Mapping[str, Any]
    _provenance: Mapping[str, str]
    profile: str = "default"
    warnings: tuple[Diagnostic, ...] = ()
    advisories: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_values", MappingProxyType(dict(self._values)))
        object.__setattr__(self, "_provenance", MappingProxyType(dict(self._provenance)))
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "advisories", tuple(self.advisories))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        return hash(self.fingerprint())

    @property
    def provenance(self) -> Mapping[str, str]:
        return self._provenance

    def origin(self, key: str) -> str:
        """Return the origin tag that supplied ``key`` (raises KeyError if unknown)."""
        return self._provenance[key]

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible copy of the values (paths become strings)."""
        return {key: _plain(value) for key, value in self._values.items()}

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON form; equal configurations share it."""
        canonical = json.dumps(
            self.to_dict(),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def export(self, format: str = "json", include_provenance: bool = False) -> str:
        """Export the configuration as JSON or YAML."""
        data: dict[str, Any] = self.to_dict()
        if include_provenance:
            data = {
                "profile": self.profile,
                "values": data,
                "provenance": dict(self._provenance),
            }

        if format.lower() == "yaml":
            return str(yaml.safe_dump(data, default_flow_style=False, sort_keys=True, indent=2))
        if format.lower() == "json":
            return json.dumps(data, indent=2, sort_keys=True)
        raise ValueError(f"Unsupported export format: {format}")
