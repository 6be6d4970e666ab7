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

"""Layered configuration resolution for the performance toolset.

This package provides:
- A typed catalog of settings with built-in defaults and profiles
- Readers for ``KEY=value`` files, the environment and explicit overrides
- Profile inheritance with cycle detection
- A precedence merge that reports every problem in one pass
- An immutable, provenance-aware result and a thread-safe manager
"""

from .defaults import BUILTIN_PROFILES, DEPENDENCY_RULES, SETTING_DEFINITIONS
from .diagnostics import Diagnostic, ErrorKind, Severity
from .manager import ConfigManager, describe_settings
from .profiles import Profile, expand_profile, load_profile_table
from .resolved import ResolvedConfiguration
from .resolver import ConfigResolver, ResolutionState, resolve_config, standard_sources
from .schema import (
    DependencyRule,
    PrecedencePolicy,
    ResolverOptions,
    SettingDefinition,
    SettingKind,
    UnknownKeyPolicy,
)
from .sources import RawSource, SourceDescriptor, SourceKind, parse_assignment, read_source
from .validation import ConfigValidator, check_dependencies, validate_value

__all__ = [
    "BUILTIN_PROFILES",
    "DEPENDENCY_RULES",
    "SETTING_DEFINITIONS",
    "ConfigManager",
    "ConfigResolver",
    "ConfigValidator",
    "DependencyRule",
    "Diagnostic",
    "ErrorKind",
    "PrecedencePolicy",
    "Profile",
    "RawSource",
    "ResolutionState",
    "ResolvedConfiguration",
    "ResolverOptions",
    "SettingDefinition",
    "SettingKind",
    "Severity",
    "SourceDescriptor",
    "SourceKind",
    "UnknownKeyPolicy",
    "check_dependencies",
    "describe_settings",
    "expand_profile",
    "load_profile_table",
    "parse_assignment",
    "read_source",
    "resolve_config",
    "standard_sources",
    "validate_value",
]
