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

"""Schema types for setting definitions and resolver options.

This module defines the static description of every configurable key using
Pydantic models for type safety, plus the options that control how the
resolver merges sources.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

SETTING_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class SettingKind(str, Enum):
    """Value types a setting can declare."""

    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    STRING = "string"
    PATH = "path"


class SettingDefinition(BaseModel):
    """Static schema entry for one configuration key."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=SETTING_NAME_PATTERN, description="Unique key, also the env var name")
    kind: SettingKind
    default: Any = Field(description="Typed default used when no source sets the key")
    minimum: int | None = Field(default=None, description="Inclusive lower bound for integers")
    maximum: int | None = Field(default=None, description="Inclusive upper bound for integers")
    choices: tuple[str, ...] = Field(default=(), description="Permitted literals for enums")
    pattern: str | None = Field(default=None, description="Full-match regex for strings and paths")
    description: str = ""

    @model_validator(mode="after")
    def check_constraints(self) -> "SettingDefinition":
        """Reject constraint combinations that do not fit the declared kind."""
        if self.kind is SettingKind.ENUM and not self.choices:
            raise ValueError(f"enum setting {self.name} must declare choices")
        if self.kind is not SettingKind.ENUM and self.choices:
            raise ValueError(f"only enum settings may declare choices ({self.name})")
        if self.kind is not SettingKind.INTEGER and (
            self.minimum is not None or self.maximum is not None
        ):
            raise ValueError(f"only integer settings may declare bounds ({self.name})")
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError(
                f"minimum ({self.minimum}) exceeds maximum ({self.maximum}) for {self.name}",
            )
        return self

    @property
    def raw_default(self) -> str:
        """Default rendered the way it would appear in a config file."""
        return render_raw(self.default)

    def describe_constraints(self) -> str:
        """Human-readable summary of the accepted values."""
        if self.kind is SettingKind.INTEGER:
            if self.minimum is not None and self.maximum is not None:
                return f"integer {self.minimum}-{self.maximum}"
            if self.minimum is not None:
                return f"integer >= {self.minimum}"
            if self.maximum is not None:
                return f"integer <= {self.maximum}"
            return "integer"
        if self.kind is SettingKind.BOOLEAN:
            return "true or false"
        if self.kind is SettingKind.ENUM:
            return "one of " + ", ".join(self.choices)
        if self.pattern:
            return f"{self.kind.value} matching {self.pattern}"
        return self.kind.value


@dataclass(frozen=True)
class DependencyRule:
    """Cross-field constraint evaluated after every involved key validated.

    ``check`` receives the typed values and returns True when satisfied.
    """

    keys: tuple[str, str]
    check: Callable[[Mapping[str, Any]], bool]
    message: str
    hint: str


class PrecedencePolicy(str, Enum):
    """Relative order of the file and environment layers."""

    ENV_OVER_FILE = "env_over_file"
    FILE_OVER_ENV = "file_over_env"


class UnknownKeyPolicy(str, Enum):
    """How keys without a definition are treated."""

    ERROR = "error"
    WARN = "warn"


class ResolverOptions(BaseModel):
    """Options controlling a ConfigResolver."""

    model_config = ConfigDict(frozen=True)

    precedence: PrecedencePolicy = Field(
        default=PrecedencePolicy.ENV_OVER_FILE,
        description="Whether environment variables beat the config file",
    )
    unknown_keys: UnknownKeyPolicy = Field(
        default=UnknownKeyPolicy.ERROR,
        description="Fail on undefined keys, or only warn (forward compatibility)",
    )
    read_concurrently: bool = Field(
        default=False,
        description="Read independent sources in a thread pool",
    )
    profile_selector: str = Field(
        default="PERF_PROFILE",
        pattern=SETTING_NAME_PATTERN,
        description="Reserved key naming the active profile",
    )
    baseline_profile: str = Field(
        default="default",
        min_length=1,
        description="Profile used when no selector is present",
    )


def render_raw(value: Any) -> str:
    """Render a typed value as an untyped source string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
