# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Constraint validation for resolved catalogs."""

from __future__ import annotations

from typing import Final

from .constraints import (
    DEFAULT_OVERRIDE_ENV_VAR,
    DEFAULT_PROTECTED,
    DEFAULT_SOFT_CONFLICTS,
    ConstraintRules,
    validate,
)
from .report import ConstraintViolation, Severity, ValidationReport

__all__: Final[tuple[str, ...]] = (
    "DEFAULT_OVERRIDE_ENV_VAR",
    "DEFAULT_PROTECTED",
    "DEFAULT_SOFT_CONFLICTS",
    "ConstraintRules",
    "ConstraintViolation",
    "Severity",
    "ValidationReport",
    "validate",
)
