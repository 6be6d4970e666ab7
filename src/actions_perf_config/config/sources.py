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

"""Readers that turn one configuration source into a RawSource.

Three kinds of source are supported:
- ``KEY=value`` files (blank lines and ``#`` comments ignored)
- the process environment, restricted to known setting names
- explicit override pairs supplied programmatically

Readers never mutate global state. A file that exists but contains bad lines
still yields a RawSource: the bad lines become SYNTAX_ERROR diagnostics so the
resolver can report them together with every other problem.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
import logging
import os
from pathlib import Path
import re
from types import MappingProxyType
from typing import Any

from ..exceptions import SourceError
from .diagnostics import Diagnostic, ErrorKind
from .schema import render_raw

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

ENVIRONMENT_ORIGIN = "environment"
OVERRIDE_ORIGIN = "override"
DEFAULT_ORIGIN = "default"


class SourceKind(str, Enum):
    """Kinds of raw configuration source."""

    FILE = "file"
    ENVIRONMENT = "environment"
    OVERRIDE = "override"


@dataclass(frozen=True)
class RawSource:
    """Untyped key/value data from one origin, prior to validation.

    Attributes:
        origin: Provenance tag (``default``, ``environment``, ``file:<path>``,
            ``override`` or ``profile:<name>``)
        values: Setting name to raw string, in first-seen order
        diagnostics: Problems found while reading (syntax errors)
        lines: Line number of the winning assignment per key (file sources)
    """

    origin: str
    values: Mapping[str, str] = field(default_factory=dict)
    diagnostics: tuple[Diagnostic, ...] = ()
    lines: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "lines", MappingProxyType(dict(self.lines)))
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class SourceDescriptor:
    """Describes where a RawSource should be read from.

    Use the ``file``, ``environment`` and ``overrides`` constructors rather
    than building descriptors by hand.
    """

    kind: SourceKind
    path: Path | None = None
    names: frozenset[str] = frozenset()
    environ: Mapping[str, str] | None = None
    pairs: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def file(cls, path: str | os.PathLike[str]) -> "SourceDescriptor":
        return cls(kind=SourceKind.FILE, path=Path(path))

    @classmethod
    def environment(
        cls,
        names: Iterable[str],
        environ: Mapping[str, str] | None = None,
    ) -> "SourceDescriptor":
        """Environment source limited to ``names``; ``environ`` defaults to os.environ."""
        snapshot = dict(environ) if environ is not None else None
        return cls(kind=SourceKind.ENVIRONMENT, names=frozenset(names), environ=snapshot)

    @classmethod
    def overrides(
        cls,
        values: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> "SourceDescriptor":
        items = values.items() if isinstance(values, Mapping) else values
        return cls(kind=SourceKind.OVERRIDE, pairs=tuple((str(k), v) for k, v in items))

    @property
    def origin(self) -> str:
        if self.kind is SourceKind.FILE:
            return f"file:{self.path}"
        if self.kind is SourceKind.ENVIRONMENT:
            return ENVIRONMENT_ORIGIN
        return OVERRIDE_ORIGIN


class _LineError(ValueError):
    def __init__(self, column: int, message: str, hint: str) -> None:
        super().__init__(message)
        self.column = column
        self.message = message
        self.hint = hint


def parse_assignment(text: str) -> tuple[str, str]:
    """Parse one ``KEY=value`` line.

    Returns:
        Tuple of (key, unquoted value)

    Raises:
        ValueError: Subclass carrying the 1-based column of the problem
    """
    stripped = text.lstrip()
    indent = len(text) - len(stripped)

    match = _KEY_RE.match(stripped)
    if not match:
        raise _LineError(indent + 1, "expected KEY=value", "start the line with a setting name")

    key = match.group()
    pos = match.end()
    if pos >= len(stripped) or stripped[pos] != "=":
        if pos < len(stripped) and stripped[pos].isspace():
            raise _LineError(
                indent + pos + 1,
                "spaces are not allowed around '='",
                f"write {key}=value without spaces",
            )
        raise _LineError(indent + pos + 1, "expected '=' after key", f"write {key}=value")

    value = stripped[pos + 1 :]
    value_col = indent + pos + 2

    if value[:1].isspace():
        raise _LineError(
            value_col,
            "spaces are not allowed around '='",
            f"write {key}=value without spaces",
        )

    if value[:1] in ("'", '"'):
        quote = value[0]
        end = value.find(quote, 1)
        if end == -1:
            raise _LineError(value_col, "unterminated quoted value", f"close the {quote} quote")
        if end != len(value) - 1:
            raise _LineError(
                value_col + end + 1,
                "unexpected text after closing quote",
                "remove everything after the closing quote",
            )
        return key, value[1:end]

    for offset, char in enumerate(value):
        if char.isspace():
            if not value[offset:].strip():
                raise _LineError(
                    value_col + offset,
                    "trailing whitespace after value",
                    "remove the trailing whitespace",
                )
            raise _LineError(
                value_col + offset,
                "multi-word values must be quoted",
                f'write {key}="{value}"',
            )
        if char in ("'", '"'):
            raise _LineError(
                value_col + offset,
                "unexpected quote in unquoted value",
                "quote the whole value or remove the quote",
            )

    return key, value


def _read_file(descriptor: SourceDescriptor) -> RawSource:
    path = descriptor.path
    origin = descriptor.origin
    if path is None:
        raise ValueError("file source requires a path")

    try:
        text = path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError) as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.FILE_NOT_FOUND,
                source=origin,
                message=f"config file not found: {path}",
                hint=f"create {path} or point CONFIG_FILE at an existing file",
            ),
        ) from e
    except PermissionError as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.PERMISSION_DENIED,
                source=origin,
                message=f"config file is not readable: {path}",
                hint=f"grant read permission on {path}",
            ),
        ) from e
    except UnicodeDecodeError as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.SYNTAX_ERROR,
                source=origin,
                message=f"config file is not valid UTF-8: {e.reason}",
                hint="save the file with UTF-8 encoding",
            ),
        ) from e
    except OSError as e:
        raise SourceError(
            Diagnostic(
                kind=ErrorKind.PERMISSION_DENIED,
                source=origin,
                message=f"config file could not be read: {path} ({e.strerror or e})",
                hint=f"check that {path} is a readable regular file",
            ),
        ) from e

    values: dict[str, str] = {}
    lines: dict[str, int] = {}
    diagnostics: list[Diagnostic] = []

    # Only \n ends a line; splitlines() would also break on \x0c, \x85 and \u2028
    for number, line in enumerate(text.split("\n"), start=1):
        line = line.removesuffix("\r")
        content = line.strip()
        if not content or content.startswith("#"):
            continue
        try:
            key, value = parse_assignment(line)
        except _LineError as e:
            diagnostics.append(
                Diagnostic(
                    kind=ErrorKind.SYNTAX_ERROR,
                    source=origin,
                    value=line,
                    message=f"line {number}, column {e.column}: {e.message}",
                    hint=e.hint,
                    line=number,
                    column=e.column,
                ),
            )
            continue
        values[key] = value
        lines[key] = number

    logger.debug(
        "Read %d value(s) from %s (%d syntax error(s))",
        len(values),
        path,
        len(diagnostics),
    )
    return RawSource(origin=origin, values=values, diagnostics=tuple(diagnostics), lines=lines)


def _read_environment(descriptor: SourceDescriptor) -> RawSource:
    environ = descriptor.environ if descriptor.environ is not None else os.environ
    values = {name: environ[name] for name in sorted(descriptor.names) if name in environ}
    logger.debug("Read %d value(s) from environment", len(values))
    return RawSource(origin=ENVIRONMENT_ORIGIN, values=values)


def _read_overrides(descriptor: SourceDescriptor) -> RawSource:
    values: dict[str, str] = {}
    diagnostics: list[Diagnostic] = []

    for key, value in descriptor.pairs:
        if not _KEY_RE.fullmatch(key):
            diagnostics.append(
                Diagnostic(
                    kind=ErrorKind.SYNTAX_ERROR,
                    key=key,
                    source=OVERRIDE_ORIGIN,
                    message="invalid setting name",
                    hint="use letters, digits and underscores only",
                ),
            )
            continue
        if not isinstance(value, str | bool | int | float | Path):
            diagnostics.append(
                Diagnostic(
                    kind=ErrorKind.SYNTAX_ERROR,
                    key=key,
                    source=OVERRIDE_ORIGIN,
                    value=repr(value),
                    message=f"unsupported override type {type(value).__name__}",
                    hint=f"pass {key} as a string",
                ),
            )
            continue
        values[key] = render_raw(value)

    return RawSource(origin=OVERRIDE_ORIGIN, values=values, diagnostics=tuple(diagnostics))


def read_source(descriptor: SourceDescriptor) -> RawSource:
    """Read one source.

    Raises:
        SourceError: If a file source is missing, unreadable or not UTF-8
    """
    if descriptor.kind is SourceKind.FILE:
        return _read_file(descriptor)
    if descriptor.kind is SourceKind.ENVIRONMENT:
        return _read_environment(descriptor)
    return _read_overrides(descriptor)
