# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised by the manifest compiler stages."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

if TYPE_CHECKING:  # pragma: no cover - import cycles only matter for typing
    from ..validation.report import ConstraintViolation
    from ..verify.verifier import ArtifactDrift

ROOT_CONTEXT: Final[str] = "<root>"


@dataclass(frozen=True, slots=True)
class StructuralIssue:
    """Single structural problem found while loading a manifest."""

    entry: str
    field: str
    reason: str

    def describe(self) -> str:
        """Return a one-line description suitable for console output.

        Returns:
            str: ``entry.field: reason`` rendering of the issue.
        """

        return f"{self.entry}.{self.field}: {self.reason}"

    def to_record(self) -> dict[str, str]:
        """Return the issue as a JSON-friendly mapping."""

        return {"entry": self.entry, "field": self.field, "reason": self.reason}


class ManifestError(RuntimeError):
    """Base class for every fatal compiler error."""

    exit_code: ClassVar[int] = 1
    stage: ClassVar[str] = "compile"

    def records(self) -> list[dict[str, str]]:
        """Return a structured description of the failure.

        Returns:
            list[dict[str, str]]: One mapping per reported problem.
        """

        return [{"stage": self.stage, "message": str(self)}]


class StructuralError(ManifestError):
    """Raised when the manifest is malformed; carries every issue found."""

    exit_code = 2
    stage = "load"

    def __init__(self, issues: Iterable[StructuralIssue]) -> None:
        """Collect ``issues`` and build a summary message.

        Args:
            issues: Structural problems detected in the manifest.
        """

        self.issues: tuple[StructuralIssue, ...] = tuple(issues)
        summary = "; ".join(issue.describe() for issue in self.issues)
        super().__init__(f"manifest has {len(self.issues)} structural issue(s): {summary}")

    def records(self) -> list[dict[str, str]]:
        return [{"stage": self.stage, **issue.to_record()} for issue in self.issues]


class CycleError(ManifestError):
    """Raised when ``dependsOn`` edges form one or more cycles."""

    exit_code = 3
    stage = "resolve"

    def __init__(self, cycles: Sequence[Sequence[str]]) -> None:
        """Record every cycle detected in the dependency graph.

        Args:
            cycles: Each cycle as the ordered node path, without repeating the start node.
        """

        self.cycles: tuple[tuple[str, ...], ...] = tuple(tuple(cycle) for cycle in cycles)
        rendered = ", ".join(" -> ".join((*cycle, cycle[0])) for cycle in self.cycles)
        super().__init__(f"dependency cycle detected: {rendered}")

    @property
    def nodes(self) -> tuple[str, ...]:
        """Return every node that participates in a cycle, sorted by name."""

        return tuple(sorted({node for cycle in self.cycles for node in cycle}))

    def records(self) -> list[dict[str, str]]:
        return [
            {"stage": self.stage, "cycle": " -> ".join((*cycle, cycle[0])), "nodes": ",".join(sorted(cycle))}
            for cycle in self.cycles
        ]


class ConstraintError(ManifestError):
    """Raised when cross-entry invariants are violated."""

    exit_code = 4
    stage = "validate"

    def __init__(self, violations: Sequence[ConstraintViolation]) -> None:
        """Store the violations reported by the constraint validator.

        Args:
            violations: Error-level findings of the constraint validator.
        """

        self.violations: tuple[ConstraintViolation, ...] = tuple(violations)
        summary = "; ".join(violation.message for violation in self.violations)
        super().__init__(f"{len(self.violations)} constraint violation(s): {summary}")

    @property
    def entries(self) -> tuple[str, ...]:
        """Return every entry name involved in a violation."""

        return tuple(sorted({name for violation in self.violations for name in violation.entries}))

    def records(self) -> list[dict[str, str]]:
        return [{"stage": self.stage, **violation.to_record()} for violation in self.violations]


class GenerationError(ManifestError):
    """Raised when an artifact could not be produced or written."""

    exit_code = 5
    stage = "generate"

    def __init__(self, message: str, *, artifact: str | None = None) -> None:
        """Create the error for ``artifact``.

        Args:
            message: Description of the failure.
            artifact: Name of the artifact whose generation failed, when known.
        """

        self.artifact = artifact
        prefix = f"{artifact}: " if artifact else ""
        super().__init__(f"{prefix}{message}")

    def records(self) -> list[dict[str, str]]:
        return [{"stage": self.stage, "artifact": self.artifact or "", "message": str(self)}]


class DriftError(ManifestError):
    """Raised when committed artifacts no longer match the manifest."""

    exit_code = 6
    stage = "verify"

    def __init__(self, drifts: Sequence[ArtifactDrift], *, remediation: str) -> None:
        """Record the mismatched artifacts and the remediation hint.

        Args:
            drifts: Artifacts whose committed content differs from a fresh build.
            remediation: Instruction telling the author how to resynchronise.
        """

        self.drifts: tuple[ArtifactDrift, ...] = tuple(drifts)
        self.remediation = remediation
        names = ", ".join(drift.artifact for drift in self.drifts)
        super().__init__(f"committed artifacts are stale: {names}. {remediation}")

    def records(self) -> list[dict[str, str]]:
        return [
            {"stage": self.stage, "artifact": drift.artifact, "path": drift.path, "diff": drift.diff}
            for drift in self.drifts
        ]


class ConfigError(ManifestError):
    """Raised when compiler configuration is invalid."""

    exit_code = 7
    stage = "config"


__all__ = (
    "ROOT_CONTEXT",
    "ConfigError",
    "ConstraintError",
    "CycleError",
    "DriftError",
    "GenerationError",
    "ManifestError",
    "StructuralError",
    "StructuralIssue",
)
