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

"""Custom exceptions for actions-perf-config."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config.diagnostics import Diagnostic


class PerfConfigError(Exception):
    """Base exception for all configuration resolution errors."""

    ERROR_CATEGORY = "GENERAL"
    ERROR_CODE = "PCF_0000"

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        recovery_suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.user_message = user_message or "Configuration could not be resolved"
        self.error_code = error_code or self.ERROR_CODE
        self.error_category = self.ERROR_CATEGORY
        self.context = context or {}
        self.recovery_suggestion = recovery_suggestion
        self.timestamp = datetime.now(timezone.utc)


class DiagnosticError(PerfConfigError):
    """Error that wraps exactly one diagnostic."""

    def __init__(self, diagnostic: "Diagnostic", user_message: str | None = None) -> None:
        context = {"kind": diagnostic.kind.value, "key": diagnostic.key, "source": diagnostic.source}
        super().__init__(
            str(diagnostic),
            user_message or diagnostic.message,
            self.ERROR_CODE,
            context,
            diagnostic.hint or None,
        )
        self.diagnostic = diagnostic


class SourceError(DiagnosticError):
    """A configuration source could not be read at all."""

    ERROR_CATEGORY = "CLIENT_ERROR"
    ERROR_CODE = "PCF_1000"


class ProfileError(DiagnosticError):
    """Errors related to profile lookup and expansion."""

    ERROR_CATEGORY = "CLIENT_ERROR"
    ERROR_CODE = "PCF_2000"


class UnknownProfileError(ProfileError):
    """Requested profile (or one of its parents) is not defined."""

    ERROR_CODE = "PCF_2001"

    def __init__(self, diagnostic: "Diagnostic", known_profiles: list[str]) -> None:
        super().__init__(diagnostic)
        self.known_profiles = known_profiles
        self.context["known_profiles"] = known_profiles


class CircularProfileError(ProfileError):
    """Profile inheritance contains a cycle."""

    ERROR_CODE = "PCF_2002"

    def __init__(self, diagnostic: "Diagnostic", cycle: list[str]) -> None:
        super().__init__(diagnostic)
        self.cycle = cycle
        self.context["cycle"] = cycle


class SettingValidationError(DiagnosticError):
    """A single setting value failed validation."""

    ERROR_CATEGORY = "CLIENT_ERROR"
    ERROR_CODE = "PCF_3000"


class ConfigResolutionError(PerfConfigError):
    """Resolution failed; carries every diagnostic found in the attempt."""

    ERROR_CATEGORY = "CLIENT_ERROR"
    ERROR_CODE = "PCF_4000"

    def __init__(self, diagnostics: list["Diagnostic"]) -> None:
        fatal = [d for d in diagnostics if d.is_fatal]
        message = f"Configuration resolution failed with {len(fatal)} error(s)"
        if fatal:
            message += ": " + "; ".join(str(d) for d in fatal)
        super().__init__(
            message,
            "Configuration is invalid",
            self.ERROR_CODE,
            {"error_count": len(fatal)},
            "Fix every listed problem and resolve again",
        )
        self.diagnostics = list(diagnostics)

    @property
    def errors(self) -> list["Diagnostic"]:
        return [d for d in self.diagnostics if d.is_fatal]

    @property
    def warnings(self) -> list["Diagnostic"]:
        return [d for d in self.diagnostics if not d.is_fatal]


class ResolutionCancelledError(PerfConfigError):
    """Resolution was abandoned before completion."""

    ERROR_CATEGORY = "SERVER_ERROR"
    ERROR_CODE = "PCF_4001"

    def __init__(self, stage: str) -> None:
        super().__init__(
            f"Configuration resolution cancelled during {stage}",
            "Configuration resolution was cancelled",
            self.ERROR_CODE,
            {"stage": stage},
            "Retry once the process is no longer shutting down",
        )
        self.stage = stage
