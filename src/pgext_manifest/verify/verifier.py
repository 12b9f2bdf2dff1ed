# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Drift detection between committed artifacts and a fresh regeneration."""

from __future__ import annotations

import difflib
import json
import logging
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final, Literal, TypeAlias

from ..catalog.errors import DriftError
from ..config.models import CompilerConfig
from ..generators.base import JSON_TIMESTAMP_KEY, TIMESTAMP_LINE_RE
from ..generators.registry import DEFAULT_REGISTRY
from ..pipeline.compiler import generate_artifacts, load_configured_catalog, utc_timestamp

LOGGER = logging.getLogger(__name__)

REMEDIATION: Final[str] = "Run `pgext-manifest compile` and commit the regenerated artifacts."
TIMESTAMP_SENTINEL: Final[str] = "<generated-at>"

DriftKind: TypeAlias = Literal["missing", "modified"]


class VerifierState(str, Enum):
    """Lifecycle of a single verification run."""

    IDLE = "idle"
    REGENERATING = "regenerating"
    COMPARING = "comparing"
    CLEAN = "clean"
    DRIFTED = "drifted"


_TRANSITIONS: Final[Mapping[VerifierState, frozenset[VerifierState]]] = {
    VerifierState.IDLE: frozenset({VerifierState.REGENERATING}),
    VerifierState.REGENERATING: frozenset({VerifierState.COMPARING}),
    VerifierState.COMPARING: frozenset({VerifierState.CLEAN, VerifierState.DRIFTED}),
    VerifierState.CLEAN: frozenset(),
    VerifierState.DRIFTED: frozenset(),
}


class IllegalTransitionError(RuntimeError):
    """Raised when the verifier is driven through an unsupported transition."""


@dataclass(frozen=True, slots=True)
class ArtifactDrift:
    """Committed artifact that no longer matches the regenerated one."""

    artifact: str
    path: str
    kind: DriftKind
    diff: str


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Terminal state of a verification run plus any drift found."""

    state: VerifierState
    checked: tuple[str, ...]
    drifts: tuple[ArtifactDrift, ...] = ()
    remediation: str = REMEDIATION

    @property
    def clean(self) -> bool:
        return self.state is VerifierState.CLEAN

    def raise_for_drift(self) -> None:
        """Raise :class:`DriftError` when the run ended in ``DRIFTED``.

        Raises:
            DriftError: If any artifact drifted.
        """

        if self.drifts:
            raise DriftError(self.drifts, remediation=self.remediation)


class ConsistencyVerifier:
    """Regenerate artifacts privately and compare them with the committed ones.

    Committed files are only read. Each instance performs a single run; the
    state machine rejects a second :meth:`run`.
    """

    def __init__(self, config: CompilerConfig, *, names: Sequence[str] | None = None) -> None:
        """Create a verifier for ``config``.

        Args:
            config: Compiler configuration locating manifest and artifacts.
            names: Artifacts to verify; every registered artifact when ``None``.
        """

        self._config = config
        self._names = tuple(DEFAULT_REGISTRY) if names is None else tuple(names)
        self._state = VerifierState.IDLE

    @property
    def state(self) -> VerifierState:
        return self._state

    def run(self) -> VerificationResult:
        """Regenerate, compare and return the terminal result.

        Returns:
            VerificationResult: ``CLEAN`` or ``DRIFTED`` with per-artifact diffs.

        Raises:
            IllegalTransitionError: If the verifier has already run.
            ManifestError: If regeneration fails; no comparison happens then.
        """

        self._transition(VerifierState.REGENERATING)
        catalog = load_configured_catalog(self._config)
        params = self._config.generation_params(utc_timestamp())
        with tempfile.TemporaryDirectory(prefix="pgext-verify-") as scratch:
            outcome = generate_artifacts(catalog, self._config, params, Path(scratch), names=self._names)
            self._transition(VerifierState.COMPARING)
            drifts = [
                drift
                for artifact in outcome.artifacts
                if (drift := self._compare(artifact.name, Path(scratch) / artifact.relpath)) is not None
            ]
        self._transition(VerifierState.DRIFTED if drifts else VerifierState.CLEAN)
        LOGGER.debug("verified %d artifact(s), %d drifted", len(outcome.artifacts), len(drifts))
        return VerificationResult(
            state=self._state,
            checked=tuple(artifact.name for artifact in outcome.artifacts),
            drifts=tuple(drifts),
        )

    def _transition(self, target: VerifierState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise IllegalTransitionError(f"cannot move from {self._state.value} to {target.value}")
        LOGGER.debug("verifier %s -> %s", self._state.value, target.value)
        self._state = target

    def _compare(self, name: str, fresh_path: Path) -> ArtifactDrift | None:
        relpath = self._config.artifact_relpath(name)
        committed_path = self._config.artifact_path(name)
        is_json = DEFAULT_REGISTRY[name].format == "json"
        fresh = fresh_path.read_text(encoding="utf-8")
        if not committed_path.is_file():
            diff = _unified([], _diff_lines(fresh, is_json=is_json), relpath, committed_label="(missing)")
            return ArtifactDrift(artifact=name, path=relpath, kind="missing", diff=diff)
        committed = committed_path.read_text(encoding="utf-8", errors="replace")
        normalise = normalise_json if is_json else normalise_text
        if normalise(committed) == normalise(fresh):
            return None
        diff = _unified(_diff_lines(committed, is_json=is_json), _diff_lines(fresh, is_json=is_json), relpath)
        return ArtifactDrift(artifact=name, path=relpath, kind="modified", diff=diff)


def normalise_json(text: str) -> Any:
    """Return the parsed document of ``text`` with the top-level timestamp masked.

    Documents compare as trees, so key order and whitespace never count as
    drift. Text that is not valid JSON is returned line by line.
    """

    try:
        return _masked_document(text)
    except json.JSONDecodeError:
        return text.splitlines()


def normalise_text(text: str) -> list[str]:
    """Return the lines of ``text`` without its generated timestamp line.

    Only the first line shaped exactly like the emitted timestamp header is
    dropped; content lines that merely mention the marker are compared.
    """

    lines = text.splitlines()
    for index, line in enumerate(lines):
        if TIMESTAMP_LINE_RE.match(line):
            return [*lines[:index], *lines[index + 1 :]]
    return lines


def _masked_document(text: str) -> Any:
    document = json.loads(text)
    if isinstance(document, dict) and JSON_TIMESTAMP_KEY in document:
        document[JSON_TIMESTAMP_KEY] = TIMESTAMP_SENTINEL
    return document


def _diff_lines(text: str, *, is_json: bool) -> list[str]:
    """Return the lines a unified diff is rendered from; JSON keys are sorted."""

    if not is_json:
        return normalise_text(text)
    try:
        document = _masked_document(text)
    except json.JSONDecodeError:
        return text.splitlines()
    return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False).splitlines()


def _unified(committed: list[str], fresh: list[str], relpath: str, *, committed_label: str = "") -> str:
    header = f"committed/{relpath}" + (f" {committed_label}" if committed_label else "")
    lines = difflib.unified_diff(committed, fresh, fromfile=header, tofile=f"regenerated/{relpath}", lineterm="")
    return "\n".join(lines)


__all__ = [
    "REMEDIATION",
    "TIMESTAMP_SENTINEL",
    "ArtifactDrift",
    "ConsistencyVerifier",
    "IllegalTransitionError",
    "VerificationResult",
    "VerifierState",
    "normalise_json",
    "normalise_text",
]
