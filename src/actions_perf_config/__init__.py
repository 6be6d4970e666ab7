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

"""actions-perf-config.

Layered configuration for the GitHub Actions performance toolset. Consumers
call ``resolve_config()`` (or hold a ``ConfigManager``) and read settings from
the returned ResolvedConfiguration:

    config = resolve_config()
    jobs = config["MAX_PARALLEL_JOBS"]

Resolution either yields a fully validated configuration or raises
ConfigResolutionError listing every problem found.
"""

from .config import (
    ConfigManager,
    ConfigResolver,
    Diagnostic,
    ErrorKind,
    PrecedencePolicy,
    Profile,
    ResolvedConfiguration,
    ResolverOptions,
    SettingDefinition,
    SourceDescriptor,
    UnknownKeyPolicy,
    resolve_config,
)
from .exceptions import (
    CircularProfileError,
    ConfigResolutionError,
    PerfConfigError,
    ProfileError,
    ResolutionCancelledError,
    SettingValidationError,
    SourceError,
    UnknownProfileError,
)
from .formatting import DiagnosticFormatter

__version__ = "0.1.0"

__all__ = [
    "CircularProfileError",
    "ConfigManager",
    "ConfigResolutionError",
    "ConfigResolver",
    "Diagnostic",
    "DiagnosticFormatter",
    "ErrorKind",
    "PerfConfigError",
    "PrecedencePolicy",
    "Profile",
    "ProfileError",
    "ResolutionCancelledError",
    "ResolvedConfiguration",
    "ResolverOptions",
    "SettingDefinition",
    "SettingValidationError",
    "SourceDescriptor",
    "SourceError",
    "UnknownKeyPolicy",
    "UnknownProfileError",
    "resolve_config",
]
