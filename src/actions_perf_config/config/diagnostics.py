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

"""Diagnostic records produced while resolving configuration.

A diagnostic describes one problem with one key in one source. Resolution
collects every diagnostic it finds instead of stopping at the first, so a
single failed run reports the complete problem set.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    """Stable identifiers for every class of resolution problem."""

    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    SYNTAX_ERROR = "SYNTAX_ERROR"
    UNKNOWN_PROFILE = "UNKNOWN_PROFILE"
    CIRCULAR_PROFILE = "CIRCULAR_PROFILE"
    UNKNOWN_KEY = "UNKNOWN_KEY"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    NOT_NUMERIC = "NOT_NUMERIC"
    INVALID_BOOLEAN = "INVALID_BOOLEAN"
    INVALID_ENUM = "INVALID_ENUM"
    PATTERN_MISMATCH = "PATTERN_MISMATCH"
    DEPENDENCY_VIOLATION = "DEPENDENCY_VIOLATION"


class Severity(str, Enum):
    """Whether a diagnostic blocks resolution."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A single resolution problem.

    Attributes:
        kind: Class of problem
        key: Offending setting name (None for whole-source problems)
        source: Origin tag of the offending source (``file:<path>``, ``environment``...)
        value: Raw value as found in the source, if any
        message: Short description of what is wrong
        hint: One-line remediation suggestion
        severity: ``error`` blocks resolution, ``warning`` does not
        line: 1-based line number for file sources
        column: 1-based column number for file sources
    """

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    key: str | None = None
    source: str
    value: str | None = None
    message: str
    hint: str = ""
    severity: Severity = Severity.ERROR
    line: int | None = Field(default=None, ge=1)
    column: int | None = Field(default=None, ge=1)

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.ERROR

    def as_warning(self) -> "Diagnostic":
        """Return a copy of this diagnostic downgraded to a warning."""
        return self.model_copy(update={"severity": Severity.WARNING})

    @property
    def location(self) -> str:
        """Source plus line/column when known, e.g. ``file:perf.conf:3:7``."""
        if self.line is None:
            return self.source
        if self.column is None:
            return f"{self.source}:{self.line}"
        return f"{self.source}:{self.line}:{self.column}"

    def __str__(self) -> str:
        subject = self.key or self.source
        if self.key is not None and self.value is not None:
            subject = f"{self.key}={self.value}"
        return f"{self.kind.value} {subject} ({self.message})"
