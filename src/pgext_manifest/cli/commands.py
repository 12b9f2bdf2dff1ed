# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Manifest commands: compile, verify, validate, order and artifacts."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import typer
from rich.table import Table

from ..catalog.errors import ConfigError, DriftError
from ..generators.registry import DEFAULT_REGISTRY
from ..graph.resolver import CreationOrder, resolve
from ..logging import detect_tty, get_console
from ..pipeline.compiler import CompileResult, check_manifest, compile_manifest, load_configured_catalog
from ..validation.report import ConstraintViolation
from ..verify.verifier import ConsistencyVerifier, VerificationResult
from .options import (
    ARTIFACT_OPTION,
    CONFIG_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    FORMAT_OPTION,
    MANIFEST_OPTION,
    OUTPUT_OPTION,
    PG_VERSION_OPTION,
    ROOT_OPTION,
    TIMESTAMP_OPTION,
    CommonOptions,
    selected_artifacts,
)
from .shared import CLILogger, OutputFormat, run_command

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def compile_command(
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    manifest: MANIFEST_OPTION = None,
    output: OUTPUT_OPTION = None,
    pg_version: PG_VERSION_OPTION = None,
    output_format: FORMAT_OPTION = OutputFormat.TEXT,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
    artifact: ARTIFACT_OPTION = None,
    timestamp: TIMESTAMP_OPTION = None,
) -> None:
    """Regenerate every artifact from the manifest."""

    options = CommonOptions(root, config_file, manifest, output, pg_version, output_format, emoji, debug)
    logger = options.logger()
    names = selected_artifacts(artifact)

    def action() -> CompileResult:
        generated_at = _checked_timestamp(timestamp)
        config = options.load_config()
        logger.debug(f"manifest={config.manifest_path} output={config.output_path}")
        return compile_manifest(config, generated_at=generated_at, names=names)

    result = run_command(logger, action)
    if logger.structured:
        logger.emit_json(
            {
                "ok": True,
                "generatedAt": result.generated_at,
                "outputDir": str(result.output_dir),
                "order": list(result.order),
                "artifacts": [
                    {"name": item.name, "path": item.relpath, "size": item.size, "sha256": item.sha256}
                    for item in result.artifacts
                ],
                "warnings": [finding.to_record() for finding in result.report.warnings],
            }
        )
        return
    _print_warnings(logger, result.report.warnings)
    logger.info(f"Creation order holds {len(result.order)} entries")
    for item in result.artifacts:
        logger.echo(f"  {item.name:<16} {item.relpath}")
    logger.ok(f"Generated {len(result.artifacts)} artifact(s) in {result.output_dir}")


def verify_command(
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    manifest: MANIFEST_OPTION = None,
    output: OUTPUT_OPTION = None,
    pg_version: PG_VERSION_OPTION = None,
    output_format: FORMAT_OPTION = OutputFormat.TEXT,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
    artifact: ARTIFACT_OPTION = None,
) -> None:
    """Check that committed artifacts match a fresh regeneration."""

    options = CommonOptions(root, config_file, manifest, output, pg_version, output_format, emoji, debug)
    logger = options.logger()
    names = selected_artifacts(artifact)

    def action() -> VerificationResult:
        return ConsistencyVerifier(options.load_config(), names=names).run()

    result = run_command(logger, action)
    if logger.structured:
        logger.emit_json(
            {
                "ok": result.clean,
                "state": result.state.value,
                "checked": list(result.checked),
                "drifts": [
                    {"artifact": drift.artifact, "path": drift.path, "kind": drift.kind, "diff": drift.diff}
                    for drift in result.drifts
                ],
                "remediation": None if result.clean else result.remediation,
            }
        )
    elif result.clean:
        logger.ok(f"{len(result.checked)} artifact(s) are up to date")
    else:
        for drift in result.drifts:
            logger.section(drift.artifact)
            logger.fail(f"{drift.artifact} ({drift.path}) is {drift.kind}")
            logger.echo(drift.diff)
        logger.warn(result.remediation)
    if not result.clean:
        raise typer.Exit(code=DriftError.exit_code)


def validate_command(
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    manifest: MANIFEST_OPTION = None,
    output_format: FORMAT_OPTION = OutputFormat.TEXT,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Load, resolve and validate the manifest without writing anything."""

    options = CommonOptions(root, config_file, manifest, None, None, output_format, emoji, debug)
    logger = options.logger()
    result = run_command(logger, lambda: check_manifest(options.load_config()))
    if logger.structured:
        logger.emit_json(
            {
                "ok": True,
                "entries": len(result.catalog),
                "ordered": len(result.order),
                "warnings": [finding.to_record() for finding in result.report.warnings],
            }
        )
        return
    _print_warnings(logger, result.report.warnings)
    logger.ok(f"Manifest is valid: {len(result.catalog)} entries, {len(result.order)} in creation order")


def order_command(
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    manifest: MANIFEST_OPTION = None,
    output_format: FORMAT_OPTION = OutputFormat.TEXT,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Print the CREATE EXTENSION order and the entries left out of it."""

    options = CommonOptions(root, config_file, manifest, None, None, output_format, emoji, debug)
    logger = options.logger()
    order = run_command(logger, lambda: resolve(load_configured_catalog(options.load_config())))
    if logger.structured:
        logger.emit_json({"order": list(order), "excluded": dict(sorted(order.excluded.items()))})
        return
    _print_order(logger, order)


def artifacts_command(
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    output: OUTPUT_OPTION = None,
    output_format: FORMAT_OPTION = OutputFormat.TEXT,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """List the registered artifacts and where they are written."""

    options = CommonOptions(root, config_file, None, output, None, output_format, emoji, debug)
    logger = options.logger()
    config = run_command(logger, options.load_config)
    rows = [
        (generator.name, config.artifact_relpath(generator.name), generator.format, generator.description)
        for generator in DEFAULT_REGISTRY.generators()
    ]
    if logger.structured:
        logger.emit_json(
            {
                "outputDir": str(config.output_path),
                "artifacts": [
                    {"name": name, "path": path, "format": fmt, "description": description}
                    for name, path, fmt, description in rows
                ],
            }
        )
        return
    table = Table(title=f"Artifacts ({config.output_path})", show_lines=False)
    for column in ("Artifact", "Path", "Format", "Description"):
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    get_console(color=detect_tty(), emoji=emoji).print(table)


def register(app: typer.Typer) -> None:
    """Register every manifest command on ``app``.

    Args:
        app: Typer application receiving the commands.
    """

    app.command("compile")(compile_command)
    app.command("verify")(verify_command)
    app.command("validate")(validate_command)
    app.command("order")(order_command)
    app.command("artifacts")(artifacts_command)


def _checked_timestamp(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise ConfigError(f"Invalid --timestamp {value!r}: expected YYYY-MM-DDTHH:MM:SSZ") from exc
    return value


def _print_warnings(logger: CLILogger, warnings: Sequence[ConstraintViolation]) -> None:
    for finding in warnings:
        logger.warn(f"[{finding.rule}] {finding.message}")


def _print_order(logger: CLILogger, order: CreationOrder) -> None:
    width = len(str(len(order)))
    for position, name in enumerate(order, start=1):
        logger.echo(f"{position:>{width}}. {name}")
    if order.excluded:
        logger.section("Excluded")
        for name, reason in sorted(order.excluded.items()):
            logger.echo(f"  {name}: {reason}")


__all__ = [
    "artifacts_command",
    "compile_command",
    "order_command",
    "register",
    "validate_command",
    "verify_command",
]
