# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer option declarations shared by the manifest commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

from ..config.loader import load_config
from ..config.models import CompilerConfig
from .shared import CLILogger, OutputFormat, build_cli_logger

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root used to resolve relative paths."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file replacing pgext-manifest.toml."),
]
MANIFEST_OPTION = Annotated[
    Path | None,
    typer.Option("--manifest", "-m", help="Extension manifest JSON file."),
]
OUTPUT_OPTION = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Directory receiving generated artifacts."),
]
PG_VERSION_OPTION = Annotated[
    str | None,
    typer.Option("--pg-version", help="PostgreSQL version recorded in generated metadata."),
]
FORMAT_OPTION = Annotated[
    OutputFormat,
    typer.Option("--format", "-f", case_sensitive=False, help="Output format."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print diagnostic log records."),
]
ARTIFACT_OPTION = Annotated[
    list[str] | None,
    typer.Option("--artifact", "-a", help="Limit the run to this artifact (repeatable)."),
]
TIMESTAMP_OPTION = Annotated[
    str | None,
    typer.Option("--timestamp", help="Generation timestamp (YYYY-MM-DDTHH:MM:SSZ) instead of now."),
]


@dataclass(slots=True)
class CommonOptions:
    """Options accepted by every manifest command."""

    root: Path
    config_file: Path | None
    manifest: Path | None
    output: Path | None
    pg_version: str | None
    output_format: OutputFormat
    emoji: bool
    debug: bool

    def overrides(self) -> dict[str, Any]:
        """Return the configuration values supplied explicitly on the command line."""

        return {
            "manifest": _absolute(self.manifest),
            "output_dir": _absolute(self.output),
            "pg_version": self.pg_version,
        }

    def logger(self) -> CLILogger:
        """Build the command logger honouring the emoji, debug and format flags."""

        return build_cli_logger(emoji=self.emoji, debug=self.debug, output_format=self.output_format)

    def load_config(self) -> CompilerConfig:
        """Load layered configuration with the command-line values on top.

        Raises:
            ConfigError: If a configuration layer is unreadable or invalid.
        """

        return load_config(self.root, config_file=self.config_file, overrides=self.overrides())


def _absolute(path: Path | None) -> Path | None:
    return None if path is None else path.expanduser().resolve()


def selected_artifacts(values: list[str] | None) -> tuple[str, ...] | None:
    """Return the stripped ``--artifact`` values, or ``None`` for every artifact."""

    if not values:
        return None
    cleaned = tuple(value.strip() for value in values if value and value.strip())
    return cleaned or None


__all__ = [
    "ARTIFACT_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "FORMAT_OPTION",
    "MANIFEST_OPTION",
    "OUTPUT_OPTION",
    "PG_VERSION_OPTION",
    "ROOT_OPTION",
    "TIMESTAMP_OPTION",
    "CommonOptions",
    "selected_artifacts",
]
