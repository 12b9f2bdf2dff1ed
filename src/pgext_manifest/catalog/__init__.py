# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Public export surface for manifest loading and catalog models."""

from __future__ import annotations

from typing import Final

from .errors import (
    ConfigError,
    ConstraintError,
    CycleError,
    DriftError,
    GenerationError,
    ManifestError,
    StructuralError,
    StructuralIssue,
)
from .loader import ManifestLoader, load_catalog
from .model_catalog import Catalog, CatalogMetadata
from .model_entry import CatalogEntry, RuntimeFlags, SourceSpec

__all__: Final[tuple[str, ...]] = (
    "Catalog",
    "CatalogEntry",
    "CatalogMetadata",
    "ConfigError",
    "ConstraintError",
    "CycleError",
    "DriftError",
    "GenerationError",
    "ManifestError",
    "ManifestLoader",
    "RuntimeFlags",
    "SourceSpec",
    "StructuralError",
    "StructuralIssue",
    "load_catalog",
)
