# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compile a declarative PostgreSQL extension manifest into derived artifacts."""

from __future__ import annotations

from typing import Final

from .catalog import (
    Catalog,
    CatalogEntry,
    ConfigError,
    ConstraintError,
    CycleError,
    DriftError,
    GenerationError,
    ManifestError,
    StructuralError,
    load_catalog,
)
from .graph import CreationOrder, resolve
from .validation import ConstraintRules, ValidationReport, validate

__version__: Final[str] = "0.1.0"

__all__: Final[tuple[str, ...]] = (
    "Catalog",
    "CatalogEntry",
    "ConfigError",
    "ConstraintError",
    "ConstraintRules",
    "CreationOrder",
    "CycleError",
    "DriftError",
    "GenerationError",
    "ManifestError",
    "StructuralError",
    "ValidationReport",
    "__version__",
    "load_catalog",
    "resolve",
    "validate",
)
