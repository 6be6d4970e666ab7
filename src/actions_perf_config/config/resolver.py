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

"""Layered configuration resolver.

This module merges defaults, the active profile, a ``KEY=value`` file, the
process environment and explicit overrides into one ResolvedConfiguration:
- fixed, configurable precedence (``env_over_file`` by default)
- per-key provenance
- aggregate error reporting: every problem is collected in one pass
- all-or-nothing results: any fatal diagnostic fails the whole resolution

Each ``resolve`` call owns all of its intermediate state, so concurrent calls
never share a merge buffer.
"""

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
import difflib
from enum import Enum
import logging
import os
import threading
from typing import Any

from ..exceptions import (
    ConfigResolutionError,
    ProfileError,
    ResolutionCancelledError,
    SettingValidationError,
    SourceError,
)
from .defaults import (
    BUILTIN_PROFILES,
    CONFIG_FILE_ENV,
    DEPENDENCY_RULES,
    PROFILES_FILE_ENV,
    SETTING_DEFINITIONS,
    definitions_by_name,
)
from .diagnostics import Diagnostic, ErrorKind
from .profiles import ProfileTable, expand_profile, load_profile_table
from .resolved import ResolvedConfiguration
from .schema import (
    DependencyRule,
    PrecedencePolicy,
    ResolverOptions,
    SettingDefinition,
    UnknownKeyPolicy,
)
from .sources import DEFAULT_ORIGIN, RawSource, SourceDescriptor, SourceKind, read_source
from .validation import ConfigValidator, check_dependencies, validate_value

logger = logging.getLogger(__name__)


class ResolutionState(str, Enum):
    """Stages of a single resolution call."""

    INIT = "INIT"
    READING_SOURCES = "READING_SOURCES"
    EXPANDING_PROFILES = "EXPANDING_PROFILES"
    MERGING = "MERGING"
    VALIDATING = "VALIDATING"
    RESOLVED = "RESOLVED"
    FAILED = "FAILED"


_TRANSITIONS: dict[ResolutionState, frozenset[ResolutionState]] = {
    ResolutionState.INIT: frozenset({ResolutionState.READING_SOURCES}),
    ResolutionState.READING_SOURCES: frozenset({ResolutionState.EXPANDING_PROFILES}),
    ResolutionState.EXPANDING_PROFILES: frozenset({ResolutionState.MERGING}),
    ResolutionState.MERGING: frozenset({ResolutionState.VALIDATING}),
    ResolutionState.VALIDATING: frozenset({ResolutionState.RESOLVED, ResolutionState.FAILED}),
    ResolutionState.RESOLVED: frozenset(),
    ResolutionState.FAILED: frozenset(),
}

# Rank of each source kind; higher wins
_PRECEDENCE_RANKS: dict[PrecedencePolicy, dict[SourceKind, int]] = {
    PrecedencePolicy.ENV_OVER_FILE: {
        SourceKind.FILE: 1,
        SourceKind.ENVIRONMENT: 2,
        SourceKind.OVERRIDE: 3,
    },
    PrecedencePolicy.FILE_OVER_ENV: {
        SourceKind.ENVIRONMENT: 1,
        SourceKind.FILE: 2,
        SourceKind.OVERRIDE: 3,
    },
}


class _ResolutionPass:
    """Mutable scratch state for exactly one resolve() call."""

    def __init__(self, cancel_event: threading.Event | None) -> None:
        self.state = ResolutionState.INIT
        self.diagnostics: list[Diagnostic] = []
        self._cancel_event = cancel_event

    def advance(self, new_state: ResolutionState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal resolution transition {self.state} -> {new_state}")
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise ResolutionCancelledError(new_state.value)
        logger.debug("Resolution state %s -> %s", self.state.value, new_state.value)
        self.state = new_state


class ConfigResolver:
    """Merge configuration sources into a validated ResolvedConfiguration.

    Features:
    - Defaults from every SettingDefinition guarantee total coverage
    - Profile inheritance flattened before merging
    - Precedence: default < profile < file < environment < override
      (file and environment swap under ``file_over_env``)
    - Unknown keys fatal by default, warn-only on request
    - Optional concurrent reads; merge order never depends on read order
    """

    def __init__(
        self,
        definitions: Iterable[SettingDefinition] = SETTING_DEFINITIONS,
        rules: Iterable[DependencyRule] = DEPENDENCY_RULES,
        profiles: ProfileTable | None = None,
        options: ResolverOptions | None = None,
    ) -> None:
        self._definitions = definitions_by_name(tuple(definitions))
        self._rules = tuple(rules)
        self._profiles: ProfileTable = dict(BUILTIN_PROFILES if profiles is None else profiles)
        self.options = options or ResolverOptions()

    @property
    def definitions(self) -> Mapping[str, SettingDefinition]:
        return self._definitions

    @property
    def profiles(self) -> ProfileTable:
        return self._profiles

    def namespace(self) -> frozenset[str]:
        """Names read from the environment: every setting plus the profile selector."""
        return frozenset(self._definitions) | {self.options.profile_selector}

    def resolve(
        self,
        sources: Sequence[SourceDescriptor] = (),
        profile: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ResolvedConfiguration:
        """Resolve configuration from ``sources``.

        Args:
            sources: Source descriptors in any order; they are ranked by kind
            profile: Explicit profile name (beats any PERF_PROFILE selector)
            cancel_event: When set, resolution stops at the next stage boundary

        Returns:
            The immutable, fully validated configuration

        Raises:
            ConfigResolutionError: With every diagnostic, if anything is fatal
            ResolutionCancelledError: If ``cancel_event`` was set
        """
        run = _ResolutionPass(cancel_event)

        run.advance(ResolutionState.READING_SOURCES)
        raw_sources = self._read_sources(sources, run)

        run.advance(ResolutionState.EXPANDING_PROFILES)
        profile_name = self._select_profile(profile, raw_sources)
        profile_source = self._expand(profile_name, run)

        run.advance(ResolutionState.MERGING)
        layers = [profile_source] if profile_source is not None else []
        layers.extend(raw_sources)
        merged, provenance = self._merge(layers, run)

        run.advance(ResolutionState.VALIDATING)
        values = self._validate(merged, provenance, run)

        fatal = [d for d in run.diagnostics if d.is_fatal]
        if fatal:
            run.advance(ResolutionState.FAILED)
            logger.warning(
                "Configuration resolution failed with %d error(s)",
                len(fatal),
            )
            raise ConfigResolutionError(run.diagnostics)

        advisor = ConfigValidator()
        advisor.advise(values)
        run.advance(ResolutionState.RESOLVED)

        warnings = [d for d in run.diagnostics if not d.is_fatal]
        for diagnostic in warnings:
            logger.warning("Configuration warning: %s", diagnostic)
        if advisor.warnings:
            logger.warning("Configuration advisories: %s", advisor.warnings)
        if advisor.recommendations:
            logger.info("Configuration recommendations: %s", advisor.recommendations)
        logger.info(
            "Configuration resolved (profile=%s, %d settings)",
            profile_name,
            len(values),
        )

        return ResolvedConfiguration(
            _values=values,
            _provenance=provenance,
            profile=profile_name,
            warnings=tuple(warnings),
            advisories=tuple(advisor.warnings + advisor.recommendations),
        )

    def _read_sources(
        self,
        descriptors: Sequence[SourceDescriptor],
        run: _ResolutionPass,
    ) -> list[RawSource]:
        ranks = _PRECEDENCE_RANKS[self.options.precedence]
        # Stable sort: sources of the same kind keep their given order
        ordered = sorted(descriptors, key=lambda d: ranks[d.kind])

        def attempt(descriptor: SourceDescriptor) -> RawSource | SourceError:
            try:
                return read_source(descriptor)
            except SourceError as e:
                return e

        if self.options.read_concurrently and len(ordered) > 1:
            with ThreadPoolExecutor(max_workers=len(ordered)) as pool:
                results = list(pool.map(attempt, ordered))
        else:
            results = [attempt(descriptor) for descriptor in ordered]

        raw_sources = []
        for result in results:
            if isinstance(result, SourceError):
                logger.debug("Source unreadable: %s", result)
                run.diagnostics.append(result.diagnostic)
                continue
            run.diagnostics.extend(result.diagnostics)
            raw_sources.append(result)
        return raw_sources

    def _select_profile(self, explicit: str | None, raw_sources: list[RawSource]) -> str:
        if explicit:
            return explicit
        selector = self.options.profile_selector
        for source in reversed(raw_sources):
            if source.values.get(selector):
                return source.values[selector]
        return self.options.baseline_profile

    def _expand(self, profile_name: str, run: _ResolutionPass) -> RawSource | None:
        try:
            return expand_profile(profile_name, self._profiles, self.options.baseline_profile)
        except ProfileError as e:
            run.diagnostics.append(e.diagnostic)
            return None

    def _merge(
        self,
        layers: list[RawSource],
        run: _ResolutionPass,
    ) -> tuple[dict[str, str], dict[str, str]]:
        merged = {name: d.raw_default for name, d in self._definitions.items()}
        provenance = dict.fromkeys(self._definitions, DEFAULT_ORIGIN)
        selector = self.options.profile_selector

        for layer in layers:
            for key, raw in layer.values.items():
                if key == selector:
                    continue
                if key not in self._definitions:
                    run.diagnostics.append(self._unknown_key(key, raw, layer))
                    continue
                merged[key] = raw
                provenance[key] = layer.origin

        return merged, provenance

    def _unknown_key(self, key: str, raw: str, layer: RawSource) -> Diagnostic:
        suggestions = difflib.get_close_matches(key, list(self._definitions), n=1)
        hint = f"did you mean {suggestions[0]}?" if suggestions else f"remove {key} from {layer.origin}"
        diagnostic = Diagnostic(
            kind=ErrorKind.UNKNOWN_KEY,
            key=key,
            source=layer.origin,
            value=raw,
            message="not a known setting",
            hint=hint,
            line=layer.lines.get(key),
        )
        if self.options.unknown_keys is UnknownKeyPolicy.WARN:
            return diagnostic.as_warning()
        return diagnostic

    def _validate(
        self,
        merged: dict[str, str],
        provenance: dict[str, str],
        run: _ResolutionPass,
    ) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name, definition in self._definitions.items():
            try:
                values[name] = validate_value(name, merged[name], definition, provenance[name])
            except SettingValidationError as e:
                run.diagnostics.append(e.diagnostic)

        run.diagnostics.extend(check_dependencies(values, self._rules, provenance))
        return values


def standard_sources(
    config_file: str | os.PathLike[str] | None,
    names: Iterable[str],
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> list[SourceDescriptor]:
    """Build the usual file + environment + override source list."""
    sources = []
    if config_file:
        sources.append(SourceDescriptor.file(config_file))
    sources.append(SourceDescriptor.environment(names, environ))
    if overrides:
        sources.append(SourceDescriptor.overrides(overrides))
    return sources


def resolve_config(
    config_file: str | os.PathLike[str] | None = None,
    overrides: Mapping[str, Any] | None = None,
    profile: str | None = None,
    environ: Mapping[str, str] | None = None,
    options: ResolverOptions | None = None,
) -> ResolvedConfiguration:
    """Resolve configuration the way the toolset scripts expect.

    ``config_file`` defaults to the ``CONFIG_FILE`` environment variable and
    extra profiles are loaded from ``PERF_PROFILES_FILE`` when set.

    Raises:
        ConfigResolutionError: If resolution fails for any reason, including
            an unreadable profile file
    """
    env = dict(os.environ if environ is None else environ)
    config_file = config_file or env.get(CONFIG_FILE_ENV) or None

    profiles: ProfileTable = BUILTIN_PROFILES
    profiles_file = env.get(PROFILES_FILE_ENV)
    if profiles_file:
        try:
            profiles = load_profile_table(profiles_file, base=BUILTIN_PROFILES)
        except SourceError as e:
            raise ConfigResolutionError([e.diagnostic]) from e

    resolver = ConfigResolver(profiles=profiles, options=options)
    sources = standard_sources(config_file, resolver.namespace(), env, overrides)
    return resolver.resolve(sources, profile=profile)
