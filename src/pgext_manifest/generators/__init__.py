# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Artifact generators rendering a validated catalog into output files."""

from __future__ import annotations

from typing import Final

from .base import (
    DEFAULT_CATEGORY_ORDER,
    DEFAULT_CATEGORY_TITLES,
    JSON_TIMESTAMP_KEY,
    TIMESTAMP_MARKER,
    ArtifactGenerator,
    GenerationParams,
)
from .registry import DEFAULT_REGISTRY, ArtifactRegistry, render_artifact

__all__: Final[tuple[str, ...]] = (
    "DEFAULT_CATEGORY_ORDER",
    "DEFAULT_CATEGORY_TITLES",
    "DEFAULT_REGISTRY",
    "JSON_TIMESTAMP_KEY",
    "TIMESTAMP_MARKER",
    "ArtifactGenerator",
    "ArtifactRegistry",
    "GenerationParams",
    "render_artifact",
)
