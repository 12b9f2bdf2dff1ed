# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Cross-entry constraint rules evaluated after resolution."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Final

from ..catalog.model_catalog import Catalog
from ..graph.resolver import CreationOrder, EXCLUDED_DISABLED, EXCLUDED_NO_CREATION
from .report import ConstraintViolation, ValidationReport

LOGGER = logging.getLogger(__name__)

DEFAULT_PROTECTED: Final[frozenset[str]] = frozenset(
    {"auto_explain", "pg_cron", "pg_stat_statements", "pgaudit"},
)
DEFAULT_SOFT_CONFLICTS: Final[tuple[tuple[str, str], ...]] = (("pg_stat_monitor", "pg_stat_statements"),)
DEFAULT_OVERRIDE_ENV_VAR: Final[str] = "POSTGRES_SHARED_PRELOAD_LIBRARIES"

RULE_DISABLEMENT: Final[str] = "disablement-safety"
RULE_PROTECTED: Final[str] = "protected-set"
RULE_SOFT_CONFLICT: Final[str] = "soft-conflict"
RULE_PROTECTED_MISSING: Final[str] = "protected-missing"
RULE_PRELOAD_ONLY: Final[str] = "preload-only-without-preload"
RULE_UNORDERED: Final[str] = "enabled-but-unordered"


@dataclass(frozen=True, slots=True)
class ConstraintRules:
    """Injectable parameters of the constraint rules."""

    protected: frozenset[str] = DEFAULT_PROTECTED
    soft_conflicts: tuple[tuple[str, str], ...] = DEFAULT_SOFT_CONFLICTS
    override_env_var: str = DEFAULT_OVERRIDE_ENV_VAR


Rule = Callable[[Catalog, CreationOrder, ConstraintRules], Iterable[ConstraintViolation]]


def validate(catalog: Catalog, order: CreationOrder, *, rules: ConstraintRules | None = None) -> ValidationReport:
    """Run every constraint rule and collect the findings.

    No rule short-circuits another; a catalog with several problems reports all
    of them in one pass.

    Args:
        catalog: Catalog produced by the loader.
        order: Creation order produced by the resolver.
        rules: Rule parameters; defaults apply when omitted.

    Returns:
        ValidationReport: Errors and warnings, each sorted by rule then entries.
    """

    active = rules or ConstraintRules()
    findings: list[ConstraintViolation] = []
    for rule in _RULES:
        findings.extend(rule(catalog, order, active))
    errors = tuple(sorted((f for f in findings if f.severity == "error"), key=_sort_key))
    warnings = tuple(sorted((f for f in findings if f.severity == "warning"), key=_sort_key))
    LOGGER.debug("constraint validation: %d error(s), %d warning(s)", len(errors), len(warnings))
    return ValidationReport(errors=errors, warnings=warnings)


def _disablement_safety(catalog: Catalog, _order: CreationOrder, _rules: ConstraintRules) -> Iterable[ConstraintViolation]:
    for entry in catalog.disabled_entries():
        dependents = tuple(dep.name for dep in catalog.dependents_of(entry.name) if dep.enabled)
        if not dependents:
            continue
        yield ConstraintViolation(
            rule=RULE_DISABLEMENT,
            entries=(entry.name, *dependents),
            message=(
                f"'{entry.name}' is disabled but enabled entries depend on it: "
                f"{', '.join(dependents)}; disable them too or re-enable '{entry.name}'"
            ),
        )


def _protected_set(catalog: Catalog, _order: CreationOrder, rules: ConstraintRules) -> Iterable[ConstraintViolation]:
    for entry in catalog.disabled_entries():
        if entry.name not in rules.protected:
            continue
        yield ConstraintViolation(
            rule=RULE_PROTECTED,
            entries=(entry.name,),
            message=(
                f"'{entry.name}' is part of the protected core set and cannot be disabled in the manifest; "
                f"keep it enabled and drop it at container start by setting {rules.override_env_var} "
                f"without '{entry.preload_library}'"
            ),
        )


def _soft_conflicts(catalog: Catalog, _order: CreationOrder, rules: ConstraintRules) -> Iterable[ConstraintViolation]:
    for first, second in rules.soft_conflicts:
        if first not in catalog or second not in catalog:
            continue
        pair = tuple(sorted((catalog.get(first), catalog.get(second)), key=lambda entry: entry.name))
        if not all(entry.enabled and entry.runtime.default_enable for entry in pair):
            continue
        names = tuple(entry.name for entry in pair)
        yield ConstraintViolation(
            rule=RULE_SOFT_CONFLICT,
            entries=names,
            message=f"'{names[0]}' and '{names[1]}' are both enabled by default and overlap in function",
            severity="warning",
        )


def _protected_missing(catalog: Catalog, _order: CreationOrder, rules: ConstraintRules) -> Iterable[ConstraintViolation]:
    for name in sorted(rules.protected):
        if name in catalog:
            continue
        yield ConstraintViolation(
            rule=RULE_PROTECTED_MISSING,
            entries=(name,),
            message=f"protected entry '{name}' is not declared in the manifest",
            severity="warning",
        )


def _preload_only(catalog: Catalog, _order: CreationOrder, _rules: ConstraintRules) -> Iterable[ConstraintViolation]:
    for entry in catalog.enabled_entries():
        if entry.runtime.preload_only and not entry.runtime.shared_preload:
            yield ConstraintViolation(
                rule=RULE_PRELOAD_ONLY,
                entries=(entry.name,),
                message=f"'{entry.name}' is preloadOnly but not sharedPreload, so it is never loaded",
                severity="warning",
            )


def _unordered(catalog: Catalog, order: CreationOrder, _rules: ConstraintRules) -> Iterable[ConstraintViolation]:
    for entry in catalog.enabled_entries():
        reason = order.excluded.get(entry.name)
        if reason is None or reason in (EXCLUDED_DISABLED, EXCLUDED_NO_CREATION):
            continue
        yield ConstraintViolation(
            rule=RULE_UNORDERED,
            entries=(entry.name,),
            message=f"'{entry.name}' is enabled but left out of the creation order: {reason}",
            severity="warning",
        )


def _sort_key(finding: ConstraintViolation) -> tuple[str, tuple[str, ...]]:
    return finding.rule, finding.entries


_RULES: Final[tuple[Rule, ...]] = (
    _disablement_safety,
    _protected_set,
    _soft_conflicts,
    _protected_missing,
    _preload_only,
    _unordered,
)


__all__ = [
    "DEFAULT_OVERRIDE_ENV_VAR",
    "DEFAULT_PROTECTED",
    "DEFAULT_SOFT_CONFLICTS",
    "ConstraintRules",
    "validate",
]
