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

"""Named, inheritable bundles of setting assignments.

A profile lists parent profiles to apply first and its own assignments to
apply last. Profiles are declarative data loaded from YAML or JSON, never
executable code.

Example profile table (YAML):

    profiles:
      production:
        settings:
          LOG_LEVEL: WARN
      production-large:
        inherits: [production]
        settings:
          MAX_PARALLEL_JOBS: 16
"""

from collections.abc import Mapping
import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from ..exceptions import CircularProfileError, SourceError, UnknownProfileError
from .diagnostics import Diagnostic, ErrorKind
from .schema import render_raw
from .sources import RawSource

logger = logging.getLogger(__name__)

ProfileTable = Mapping[str, "Profile"]


class Profile(BaseModel):
    """A named set of assignments with optional parents."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    inherits: tuple[str, ...] = Field(default=(), description="Parents, applied in order")
    settings: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("settings", mode="before")
    @classmethod
    def render_settings(cls, v: Any) -> Any:
        """Accept typed scalars from YAML/JSON and keep them as raw strings."""
        if isinstance(v, Mapping):
            return {
                str(key): render_raw(value) if isinstance(value, bool | int | float) else value
                for key, value in v.items()
            }
        return v

    @field_validator("inherits", mode="before")
    @classmethod
    def single_parent(cls, v: Any) -> Any:
        """Allow ``inherits: base`` as shorthand for ``inherits: [base]``."""
        if isinstance(v, str):
            return (v,)
        return v

    @field_validator("settings", mode="after")
    @classmethod
    def freeze_settings(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))


def profile_origin(name: str) -> str:
    return f"profile:{name}"


def expand_profile(
    name: str,
    table: ProfileTable,
    baseline: str = "default",
) -> RawSource:
    """Flatten ``name`` and its ancestors into a single RawSource.

    Parents are applied depth-first in declared order before the profile's own
    settings, so later assignments win. The baseline profile always exists,
    even when ``table`` omits it.

    Raises:
        UnknownProfileError: If ``name`` or any ancestor is not in ``table``
        CircularProfileError: If the inheritance chain loops back on itself
    """
    values: dict[str, str] = {}
    path: list[str] = []

    def visit(current: str, parent_of: str | None) -> None:
        if current in path:
            cycle = path[path.index(current) :] + [current]
            rendered = " -> ".join(cycle)
            raise CircularProfileError(
                Diagnostic(
                    kind=ErrorKind.CIRCULAR_PROFILE,
                    source=profile_origin(name),
                    value=rendered,
                    message=f"profile inheritance cycle: {rendered}",
                    hint=f"remove one inherits entry from the cycle {rendered}",
                ),
                cycle,
            )

        profile = table.get(current)
        if profile is None:
            if current == baseline:
                return
            known = sorted(set(table) | {baseline})
            where = f" (inherited by {parent_of})" if parent_of else ""
            raise UnknownProfileError(
                Diagnostic(
                    kind=ErrorKind.UNKNOWN_PROFILE,
                    source=profile_origin(parent_of or name),
                    value=current,
                    message=f"unknown profile '{current}'{where}; known profiles: {', '.join(known)}",
                    hint=f"use one of: {', '.join(known)}",
                ),
                known,
            )

        path.append(current)
        for parent in profile.inherits:
            visit(parent, current)
        path.pop()
        values.update(profile.settings)

    visit(name, None)
    logger.debug("Expanded profile %s into %d value(s)", name, len(values))
    return RawSource(origin=profile_origin(name), values=values)


def load_profile_table(
    path: str | os.PathLike[str],
    base: ProfileTable | None = None,
) -> ProfileTable:
    """Load profiles from a YAML or JSON file.

    Entries in the file replace entries of the same name in ``base``. The
    returned table is read-only.

    Raises:
        SourceError: If the file is missing, unreadable or malformed
    """
    profile_path = Path(path)
    origin = f"file:{profile_path}"

    def malformed(message: str) -> SourceError:
        return SourceError(
            Diagnostic(
                kind=ErrorKind.SYNTAX_ERROR,
                source=origin,
                message=message,
                hint="expected a top-level 'profiles' mapping of {inherits, settings} entries",
            ),
        )

    try:
        with profile_path.open(encoding="utf-8") as f:
            if profile_path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (FileNotFoundError, IsADirectoryError) as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.FILE_NOT_FOUND,
                source=origin,
                message=f"profile file not found: {profile_path}",
                hint=f"create {profile_path} or unset PERF_PROFILES_FILE",
            ),
        ) from e
    except PermissionError as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.PERMISSION_DENIED,
                source=origin,
                message=f"profile file is not readable: {profile_path}",
                hint=f"grant read permission on {profile_path}",
            ),
        ) from e
    except OSError as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.PERMISSION_DENIED,
                source=origin,
                message=f"profile file could not be read: {profile_path} ({e.strerror or e})",
                hint=f"check that {profile_path} is a readable regular file",
            ),
        ) from e
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise malformed(f"could not parse profile file: {e}") from e

    if data is None:
        data = {}
    raw_profiles = data.get("profiles") or {} if isinstance(data, dict) else None
    if not isinstance(raw_profiles, dict):
        raise malformed("'profiles' must be a mapping")

    table: dict[str, Profile] = dict(base or {})
    for profile_name, body in raw_profiles.items():
        body = body or {}
        if not isinstance(body, dict):
            raise malformed(f"profile '{profile_name}' must be a mapping")
        try:
            table[str(profile_name)] = Profile(name=str(profile_name), **body)
        except (ValidationError, TypeError) as e:
            raise malformed(f"invalid profile '{profile_name}': {e}") from e

    logger.info("Loaded %d profile(s) from %s", len(raw_profiles), profile_path)
    return MappingProxyType(table)
