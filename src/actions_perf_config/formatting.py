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

"""Human and machine readable rendering of resolution results."""

import json
from typing import Any

from .config.diagnostics import Diagnostic
from .config.resolved import ResolvedConfiguration
from .exceptions import ConfigResolutionError, DiagnosticError, PerfConfigError


class DiagnosticFormatter:
    """Format resolved configurations and resolution failures."""

    # Output formats
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"

    def __init__(self, output_format: str = TEXT) -> None:
        """Initialize formatter with an output format."""
        self.set_format(output_format)

    def set_format(self, output_format: str) -> None:
        """Change output format."""
        if output_format in [self.TEXT, self.MARKDOWN, self.JSON]:
            self.output_format = output_format
        else:
            raise ValueError(f"Invalid output format: {output_format}")

    def format_diagnostic(self, diagnostic: Diagnostic) -> str:
        """One line per diagnostic: location, summary and hint."""
        line = f"{diagnostic.location}: {diagnostic}"
        if not diagnostic.is_fatal:
            line = f"warning: {line}"
        if diagnostic.hint:
            line += f" - {diagnostic.hint}"
        return line

    def format_resolved(self, config: ResolvedConfiguration) -> str:
        """Format a successful resolution."""
        if self.output_format == self.JSON:
            return json.dumps(
                {
                    "status": "resolved",
                    "profile": config.profile,
                    "fingerprint": config.fingerprint(),
                    "values": config.to_dict(),
                    "provenance": dict(config.provenance),
                    "warnings": [self._diagnostic_dict(d) for d in config.warnings],
                    "advisories": list(config.advisories),
                },
                indent=2,
                sort_keys=True,
            )

        if self.output_format == self.MARKDOWN:
            lines = [
                "# ✅ Configuration Resolved",
                "",
                f"**Profile**: {config.profile}",
                f"**Fingerprint**: `{config.fingerprint()[:12]}`",
                "",
                "| Setting | Value | Origin |",
                "|---|---|---|",
            ]
            for key, value in sorted(config.to_dict().items()):
                lines.append(f"| {key} | `{self._render(value)}` | {config.origin(key)} |")
        else:
            lines = [f"# profile: {config.profile}"]
            for key, value in sorted(config.to_dict().items()):
                lines.append(f"{key}={self._render(value)}  # {config.origin(key)}")

        lines.extend(self._notes(config))
        return "\n".join(lines)

    def format_error(self, error: PerfConfigError) -> str:
        """Format a failed resolution with every diagnostic it carries."""
        diagnostics = self._diagnostics_of(error)

        if self.output_format == self.JSON:
            return json.dumps(
                {
                    "status": "failed",
                    "error_code": error.error_code,
                    "message": error.user_message,
                    "diagnostics": [self._diagnostic_dict(d) for d in diagnostics],
                    "recovery_suggestion": error.recovery_suggestion,
                },
                indent=2,
            )

        errors = [d for d in diagnostics if d.is_fatal]
        if self.output_format == self.MARKDOWN:
            lines = [
                "## ❌ Configuration Invalid",
                "",
                f"**Issue**: {error.user_message} ({len(errors)} error(s))",
                "",
            ]
            for diagnostic in diagnostics:
                lines.append(f"- `{diagnostic.location}` {diagnostic}")
                if diagnostic.hint:
                    lines.append(f"  - 💡 {diagnostic.hint}")
            if error.recovery_suggestion:
                lines.extend(["", f"**Next step**: {error.recovery_suggestion}"])
            return "\n".join(lines)

        lines = [f"error [{error.error_code}]: {error.user_message} ({len(errors)} error(s))"]
        lines.extend(f"  {self.format_diagnostic(d)}" for d in diagnostics)
        return "\n".join(lines)

    def _notes(self, config: ResolvedConfiguration) -> list[str]:
        lines: list[str] = []
        if not config.warnings and not config.advisories:
            return lines

        if self.output_format == self.MARKDOWN:
            lines.extend(["", "## ⚠️ Notes"])
            lines.extend(f"- {self.format_diagnostic(d)}" for d in config.warnings)
            lines.extend(f"- {advisory}" for advisory in config.advisories)
        else:
            lines.extend(f"# {self.format_diagnostic(d)}" for d in config.warnings)
            lines.extend(f"# advisory: {advisory}" for advisory in config.advisories)
        return lines

    @staticmethod
    def _diagnostics_of(error: PerfConfigError) -> list[Diagnostic]:
        if isinstance(error, ConfigResolutionError):
            return error.diagnostics
        if isinstance(error, DiagnosticError):
            return [error.diagnostic]
        return []

    @staticmethod
    def _diagnostic_dict(diagnostic: Diagnostic) -> dict[str, Any]:
        return diagnostic.model_dump(mode="json", exclude_none=True)

    @staticmethod
    def _render(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
