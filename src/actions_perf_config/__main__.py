#!/usr/bin/env python3
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

"""Entry point: resolve configuration from the environment and print it."""

import logging
import os
import sys

from .config.diagnostics import ErrorKind
from .config.resolver import resolve_config
from .exceptions import ConfigResolutionError, PerfConfigError
from .formatting import DiagnosticFormatter

OUTPUT_FORMAT_ENV = "PERF_OUTPUT_FORMAT"
LOG_LEVEL_ENV = "PERF_LOG_LEVEL"

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_UNREADABLE = 2

_UNREADABLE_KINDS = frozenset({ErrorKind.FILE_NOT_FOUND, ErrorKind.PERMISSION_DENIED})

logger = logging.getLogger(__name__)


def _exit_code(error: PerfConfigError) -> int:
    if isinstance(error, ConfigResolutionError) and any(
        d.kind in _UNREADABLE_KINDS for d in error.errors
    ):
        return EXIT_UNREADABLE
    return EXIT_INVALID


def main() -> int:
    """Resolve, print the result to stdout and return the process exit code."""
    # Logging goes to stderr so stdout carries only the rendered configuration
    level = getattr(logging, os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(), None)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    output_format = os.environ.get(OUTPUT_FORMAT_ENV, DiagnosticFormatter.TEXT)
    try:
        formatter = DiagnosticFormatter(output_format)
    except ValueError:
        logger.warning("Unknown %s=%s, using text", OUTPUT_FORMAT_ENV, output_format)
        formatter = DiagnosticFormatter()

    try:
        config = resolve_config()
    except PerfConfigError as e:
        print(formatter.format_error(e))
        return _exit_code(e)

    print(formatter.format_resolved(config))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
