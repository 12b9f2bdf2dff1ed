# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end compilation of the manifest into artifact files."""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import partial
from pathlib import Path
from typing import Any, Final

from ..catalog.errors import GenerationError
from ..catalog.loader import ManifestLoader
from ..catalog.model_catalog import Catalog
from ..config.models import CompilerConfig
from ..generators.base import GenerationParams
from ..generators.registry import DEFAULT_REGISTRY, render_artifact
from ..graph.resolver import CreationOrder, resolve
from ..validation.constraints import ConstraintRules, validate
from ..validation.report import ValidationReport
from .scheduler import PhasedScheduler, Task

LOGGER = logging.getLogger(__name__)

ORDER_TASK: Final[str] = "creation-order"


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Catalog, creation order and findings of a validation-only run."""

    catalog: Catalog
    order: CreationOrder
    report: ValidationReport


@dataclass(frozen=True, slots=True)
class RenderedArtifact:
    """Artifact written by a generation task."""

    name: str
    relpath: str
    size: int
    sha256: str


@dataclass(frozen=True, slots=True)
class GenerationOutcome:
    """Everything a generation run produced inside its target directory."""

    order: CreationOrder
    report: ValidationReport
    artifacts: tuple[RenderedArtifact, ...]


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Outcome of :func:`compile_manifest`."""

    catalog: Catalog
    order: CreationOrder
    report: ValidationReport
    generated_at: str
    output_dir: Path
    artifacts: tuple[RenderedArtifact, ...]

    def paths(self) -> tuple[Path, ...]:
        """Return the absolute paths of every promoted artifact."""

        return tuple(self.output_dir / artifact.relpath for artifact in self.artifacts)


def utc_timestamp() -> str:
    """Return the current UTC time in ISO 8601 form with second precision."""

    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def load_configured_catalog(config: CompilerConfig) -> Catalog:
    """Load the manifest named by ``config`` with its protected set applied."""

    return ManifestLoader(protected=frozenset(config.protected)).load_path(config.manifest_path)


def check_manifest(config: CompilerConfig) -> CheckResult:
    """Load, resolve and validate the manifest without generating anything.

    Args:
        config: Compiler configuration.

    Returns:
        CheckResult: Catalog, order and warnings of a valid manifest.

    Raises:
        StructuralError: If the manifest is malformed.
        CycleError: If dependencies are cyclic.
        ConstraintError: If a cross-entry constraint is violated.
    """

    catalog = load_configured_catalog(config)
    order = resolve(catalog)
    report = validate(catalog, order, rules=config.constraint_rules())
    report.raise_for_errors()
    return CheckResult(catalog=catalog, order=order, report=report)


def generate_artifacts(
    catalog: Catalog,
    config: CompilerConfig,
    params: GenerationParams,
    directory: Path,
    *,
    names: Sequence[str] | None = None,
) -> GenerationOutcome:
    """Resolve, validate and render artifacts of ``catalog`` into ``directory``.

    Resolution and constraint validation form the first phase; every
    generator runs in the second phase, only once validation found no errors.

    Args:
        catalog: Loaded catalog.
        config: Compiler configuration supplying rules and artifact paths.
        params: Generation parameters shared by every generator.
        directory: Directory receiving the rendered files.
        names: Artifact names to render; all registered artifacts when ``None``.

    Returns:
        GenerationOutcome: Order, findings and rendered artifacts.

    Raises:
        CycleError: If dependencies are cyclic.
        ConstraintError: If a cross-entry constraint is violated.
        GenerationError: If an artifact is unknown or cannot be written.
    """

    selected = tuple(DEFAULT_REGISTRY) if names is None else tuple(dict.fromkeys(names))
    unknown = [name for name in selected if name not in DEFAULT_REGISTRY]
    if unknown:
        raise GenerationError(f"unknown artifact(s): {', '.join(unknown)}")

    tasks = [Task(ORDER_TASK, partial(_resolve_task, catalog=catalog, rules=config.constraint_rules()))]
    for name in selected:
        task = partial(
            _render_task,
            name=name,
            catalog=catalog,
            params=params,
            target=directory / config.artifact_relpath(name),
            relpath=config.artifact_relpath(name),
            uses_order=DEFAULT_REGISTRY[name].requires_order,
        )
        tasks.append(Task(name, task, depends_on=(ORDER_TASK,)))

    results = PhasedScheduler(tasks).run()
    resolution: _Resolution = results[ORDER_TASK]
    return GenerationOutcome(
        order=resolution.order,
        report=resolution.report,
        artifacts=tuple(results[name] for name in selected),
    )


def compile_manifest(
    config: CompilerConfig,
    *,
    generated_at: str | None = None,
    names: Sequence[str] | None = None,
) -> CompileResult:
    """Compile the configured manifest and promote artifacts into place.

    Files are rendered into a scratch directory beside the output directory
    and moved into place with :func:`os.replace` only after every task
    succeeded, so a failing run leaves the output directory untouched.

    Args:
        config: Compiler configuration.
        generated_at: Timestamp embedded in every artifact; now when ``None``.
        names: Artifact names to produce; all registered artifacts when ``None``.

    Returns:
        CompileResult: Catalog, order, findings and promoted artifacts.

    Raises:
        ManifestError: Any stage failure; nothing is promoted in that case.
    """

    stamp = generated_at or utc_timestamp()
    catalog = load_configured_catalog(config)
    output_dir = config.output_path
    try:
        output_dir.parent.mkdir(parents=True, exist_ok=True)
        scratch = Path(tempfile.mkdtemp(prefix=f".{output_dir.name}-", dir=output_dir.parent))
    except OSError as exc:
        raise GenerationError(f"cannot prepare scratch space next to {output_dir}: {exc}") from exc
    try:
        outcome = generate_artifacts(catalog, config, config.generation_params(stamp), scratch, names=names)
        _promote(scratch, output_dir, outcome.artifacts)
    finally:
        shutil.rmtree(scratch, ignore_errors=True)
    LOGGER.debug("promoted %d artifact(s) into %s", len(outcome.artifacts), output_dir)
    return CompileResult(
        catalog=catalog,
        order=outcome.order,
        report=outcome.report,
        generated_at=stamp,
        output_dir=output_dir,
        artifacts=outcome.artifacts,
    )


@dataclass(frozen=True, slots=True)
class _Resolution:
    order: CreationOrder
    report: ValidationReport


def _resolve_task(_results: Mapping[str, Any], *, catalog: Catalog, rules: ConstraintRules) -> _Resolution:
    order = resolve(catalog)
    report = validate(catalog, order, rules=rules)
    report.raise_for_errors()
    return _Resolution(order=order, report=report)


def _render_task(
    results: Mapping[str, Any],
    *,
    name: str,
    catalog: Catalog,
    params: GenerationParams,
    target: Path,
    relpath: str,
    uses_order: bool,
) -> RenderedArtifact:
    order = results[ORDER_TASK].order if uses_order else None
    content = render_artifact(name, catalog, order, params)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as exc:
        raise GenerationError(f"cannot write {target}: {exc}", artifact=name) from exc
    return RenderedArtifact(name=name, relpath=relpath, size=len(content), sha256=hashlib.sha256(content).hexdigest())


def _promote(scratch: Path, output_dir: Path, artifacts: Sequence[RenderedArtifact]) -> None:
    """Move every artifact into ``output_dir`` once all destinations are usable.

    Destination directories are created and checked before the first
    :func:`os.replace`, so a blocked path fails the run with nothing promoted.
    """

    destinations = [(artifact, output_dir / artifact.relpath) for artifact in artifacts]
    for artifact, destination in destinations:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise GenerationError(f"cannot create {destination.parent}: {exc}", artifact=artifact.name) from exc
        if destination.is_dir():
            raise GenerationError(f"cannot promote to {destination}: a directory is in the way", artifact=artifact.name)
    for artifact, destination in destinations:
        try:
            os.replace(scratch / artifact.relpath, destination)
        except OSError as exc:
            raise GenerationError(f"cannot promote to {destination}: {exc}", artifact=artifact.name) from exc


__all__ = [
    "CheckResult",
    "CompileResult",
    "GenerationOutcome",
    "RenderedArtifact",
    "check_manifest",
    "compile_manifest",
    "generate_artifacts",
    "load_configured_catalog",
    "utc_timestamp",
]
