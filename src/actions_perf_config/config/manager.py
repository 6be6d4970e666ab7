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

"""Configuration manager for long-running consumers.

This module provides the ConfigManager class that handles:
- Resolving configuration from file, environment, profile and overrides
- Thread-safe access to the current ResolvedConfiguration
- Reload on demand, keeping the last good configuration on failure
- Runtime overrides validated exactly like any other source
"""

from collections.abc import Mapping
import logging
import os
import threading
from typing import Any

from ..exceptions import PerfConfigError
from .defaults import SETTING_DEFINITIONS
from .resolved import ResolvedConfiguration
from .resolver import resolve_config
from .schema import ResolverOptions

logger = logging.getLogger(__name__)


class ConfigManager:
    """Thread-safe holder of the current configuration.

    Features:
    - Resolution through resolve_config() (CONFIG_FILE, PERF_PROFILE, PERF_PROFILES_FILE)
    - Environment read at every reload unless an explicit snapshot is given
    - Failed reloads leave the previous configuration in place and re-raise
    - Consumers get the immutable ResolvedConfiguration itself, never a copy

    Unlike a process-wide singleton, each manager is independent, so tests and
    embedding applications can hold as many as they need.
    """

    def __init__(
        self,
        config_file: str | os.PathLike[str] | None = None,
        overrides: Mapping[str, Any] | None = None,
        profile: str | None = None,
        environ: Mapping[str, str] | None = None,
        options: ResolverOptions | None = None,
        load: bool = True,
    ) -> None:
        """Initialize the manager and, unless ``load`` is False, resolve once.

        Raises:
            ConfigResolutionError: If the initial resolution fails
        """
        self._config_lock = threading.RLock()
        self._config_file = config_file
        self._overrides: dict[str, Any] = dict(overrides or {})
        self._profile = profile
        self._environ = dict(environ) if environ is not None else None
        self._options = options
        self._config: ResolvedConfiguration | None = None
        self._reload_count = 0
        self._last_error: PerfConfigError | None = None

        if load:
            self.reload()

    def _resolve(self, overrides: Mapping[str, Any]) -> ResolvedConfiguration:
        return resolve_config(
            config_file=self._config_file,
            overrides=overrides,
            profile=self._profile,
            environ=self._environ,
            options=self._options,
        )

    @property
    def config(self) -> ResolvedConfiguration:
        """Get the current configuration, resolving on first access."""
        with self._config_lock:
            if self._config is None:
                self.reload()
            assert self._config is not None
            return self._config

    @property
    def last_error(self) -> PerfConfigError | None:
        """Error from the most recent failed reload, cleared by a successful one."""
        return self._last_error

    def reload(self) -> ResolvedConfiguration:
        """Re-resolve every source and swap in the new configuration.

        Raises:
            PerfConfigError: If resolution fails; the previous configuration stays current
        """
        with self._config_lock:
            try:
                new_config = self._resolve(self._overrides)
            except PerfConfigError as e:
                self._last_error = e
                if self._config is not None:
                    logger.warning(
                        "Configuration reload failed, keeping previous configuration: %s",
                        e,
                    )
                raise

            changed = self._config is None or new_config.fingerprint() != self._config.fingerprint()
            self._config = new_config
            self._last_error = None
            self._reload_count += 1
            if changed:
                logger.info("Configuration loaded (profile=%s)", new_config.profile)
            else:
                logger.debug("Configuration reloaded without changes")
            return new_config

    def update_config(self, **overrides: Any) -> ResolvedConfiguration:
        """Apply runtime overrides on top of the current ones and re-resolve.

        Example:
            manager.update_config(MAX_PARALLEL_JOBS=8, DRY_RUN=True)

        Raises:
            PerfConfigError: If the overrides are invalid; nothing is changed
        """
        with self._config_lock:
            merged = {**self._overrides, **overrides}
            try:
                new_config = self._resolve(merged)
            except PerfConfigError as e:
                self._last_error = e
                logger.warning("Configuration update rejected: %s", e)
                raise

            self._overrides = merged
            self._config = new_config
            self._last_error = None
            logger.info("Configuration updated: %s", sorted(overrides))
            return new_config

    def get_config_summary(self) -> dict[str, Any]:
        """Get a summary of the current configuration and where it came from."""
        config = self.config
        origins = sorted(set(config.provenance.values()))
        return {
            "profile": config.profile,
            "fingerprint": config.fingerprint(),
            "setting_count": len(config),
            "origins": origins,
            "overridden": sorted(k for k, origin in config.provenance.items() if origin != "default"),
            "warnings": [str(d) for d in config.warnings],
            "advisories": list(config.advisories),
            "reload_count": self._reload_count,
            "last_error": str(self._last_error) if self._last_error else None,
        }

    def export_config(self, format: str = "json", include_provenance: bool = False) -> str:
        """Export current configuration to JSON or YAML format."""
        return self.config.export(format, include_provenance=include_provenance)


def describe_settings() -> dict[str, str]:
    """Get help text for every supported setting."""
    help_text = {}

    for definition in SETTING_DEFINITIONS:
        help_text[definition.name] = (
            f"{definition.description} "
            f"(Type: {definition.describe_constraints()}, Default: {definition.raw_default})"
        )

    return help_text
