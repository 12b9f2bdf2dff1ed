# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, structured output)."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.text import Text

from ..catalog.errors import ManifestError
from ..logging import configure_debug_logging, detect_tty
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import section as core_section
from ..logging import warn as core_warn

ResultT = TypeVar("ResultT")


class OutputFormat(str, Enum):
    """Rendering used for command results and errors."""

    TEXT = "text"
    JSON = "json"


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int = 1,
        records: Sequence[Mapping[str, str]] = (),
    ) -> None:
        """Initialise the error with a message, exit code and structured records.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
            records: Structured description of every reported problem.
        """

        super().__init__(message)
        self.exit_code = exit_code
        self.records: tuple[Mapping[str, str], ...] = tuple(records) or ({"message": message},)

    @classmethod
    def from_manifest_error(cls, exc: ManifestError) -> CLIError:
        """Translate a compiler error into a CLI error keeping its exit code."""

        return cls(str(exc), exit_code=exc.exit_code, records=exc.records())


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    console: Console
    use_emoji: bool
    output_format: OutputFormat = OutputFormat.TEXT
    debug_enabled: bool = False
    _key_value_re: re.Pattern[str] = field(default=re.compile(r"([\w-]+)=(\".*?\"|\S+)"), repr=False)

    @property
    def structured(self) -> bool:
        return self.output_format is OutputFormat.JSON

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences.

        Args:
            message: Text describing the failure state.
        """

        core_fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences.

        Args:
            message: Text describing the warning condition.
        """

        core_warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences.

        Args:
            message: Text describing the successful state.
        """

        core_ok(message, use_emoji=self.use_emoji)

    def info(self, message: str) -> None:
        core_info(message, use_emoji=self.use_emoji)

    def section(self, title: str) -> None:
        """Print a section header separating blocks of command output."""

        core_section(title, use_color=detect_tty())

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper.

        Args:
            message: Text written to standard output.
        """

        typer.echo(message)

    def emit_json(self, payload: Mapping[str, Any]) -> None:
        """Write ``payload`` to stdout as indented JSON."""

        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload rendered with simple highlighting.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in self._key_value_re.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            text.append(match.group(1), style="bold magenta")
            text.append("=", style="dim")
            text.append(match.group(2), style="bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)


def build_cli_logger(
    *,
    emoji: bool,
    debug: bool = False,
    no_color: bool = False,
    output_format: OutputFormat = OutputFormat.TEXT,
) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided preferences.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.
        output_format: ``text`` for console messages, ``json`` for structured output.

    Returns:
        CLILogger: Logger instance bound to a dedicated Rich console.
    """

    configure_debug_logging(debug)
    console = Console(no_color=no_color, highlight=False, stderr=True)
    return CLILogger(console=console, use_emoji=emoji, output_format=output_format, debug_enabled=debug)


def run_command(logger: CLILogger, action: Callable[[], ResultT]) -> ResultT:
    """Run ``action`` translating compiler errors into ``typer.Exit``.

    Args:
        logger: Logger used to report failures.
        action: Zero-argument callable performing the command's work.

    Returns:
        ResultT: Whatever ``action`` returned.

    Raises:
        typer.Exit: When ``action`` raised a :class:`ManifestError` or :class:`CLIError`.
    """

    try:
        return action()
    except ManifestError as exc:
        error = CLIError.from_manifest_error(exc)
    except CLIError as exc:
        error = exc
    report_cli_error(error, logger)
    raise typer.Exit(code=error.exit_code)


def report_cli_error(error: CLIError, logger: CLILogger) -> None:
    """Print ``error`` as JSON or as one console line per record."""

    if logger.structured:
        logger.emit_json({"ok": False, "exitCode": error.exit_code, "errors": list(error.records)})
        return
    if len(error.records) == 1:
        logger.fail(str(error))
        return
    headline, _, _details = str(error).partition(": ")
    logger.fail(headline)
    for record in error.records:
        logger.echo(f"  - {describe_record(record)}")


def describe_record(record: Mapping[str, str]) -> str:
    """Return a one-line rendering of a structured error record."""

    if "field" in record:
        return f"{record.get('entry', '')}.{record['field']}: {record.get('reason', '')}"
    if "cycle" in record:
        return f"cycle {record['cycle']}"
    if "artifact" in record and "diff" in record:
        return f"{record['artifact']} ({record.get('path', '')}) drifted"
    return record.get("message", ", ".join(f"{key}={value}" for key, value in record.items()))


__all__ = [
    "CLIError",
    "CLILogger",
    "OutputFormat",
    "build_cli_logger",
    "describe_record",
    "report_cli_error",
    "run_command",
]
