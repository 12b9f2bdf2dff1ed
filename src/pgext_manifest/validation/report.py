# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Findings produced by the constraint validator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from ..catalog.errors import ConstraintError

Severity: TypeAlias = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class ConstraintViolation:
    """Single rule finding naming every entry it involves."""

    rule: str
    entries: tuple[str, ...]
    message: str
    severity: Severity = "error"

    def to_record(self) -> dict[str, str]:
        """Return the finding as a JSON-friendly mapping."""

        return {
            "rule": self.rule,
            "severity": self.severity,
            "entries": ",".join(self.entries),
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class ValidationReport:
    """Outcome of running every constraint rule over a catalog."""

    errors: tuple[ConstraintViolation, ...] = ()
    warnings: tuple[ConstraintViolation, ...] = ()

    @property
    def ok(self) -> bool:
        """Return ``True`` when no error-level finding was recorded."""

        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise :class:`ConstraintError` when the report holds errors.

        Raises:
            ConstraintError: If ``errors`` is not empty.
        """

        if self.errors:
            raise ConstraintError(self.errors)

    def records(self) -> list[dict[str, str]]:
        """Return errors followed by warnings as JSON-friendly mappings."""

        return [finding.to_record() for finding in (*self.errors, *self.warnings)]


__all__ = ["ConstraintViolation", "Severity", "ValidationReport"]
