# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compiler configuration models and layered loading."""

from __future__ import annotations

from typing import Final

from ..catalog.errors import ConfigError
from .loader import ConfigLoader, load_config
from .models import DEFAULT_MANIFEST_PATH, DEFAULT_OUTPUT_DIR, CompilerConfig
from .sources import (
    PROJECT_CONFIG_NAME,
    PYPROJECT_SECTION_KEY,
    DefaultConfigSource,
    MappingConfigSource,
    ProjectConfigSource,
    PyProjectConfigSource,
    TomlConfigSource,
)

__all__: Final[tuple[str, ...]] = (
    "DEFAULT_MANIFEST_PATH",
    "DEFAULT_OUTPUT_DIR",
    "PROJECT_CONFIG_NAME",
    "PYPROJECT_SECTION_KEY",
    "CompilerConfig",
    "ConfigError",
    "ConfigLoader",
    "DefaultConfigSource",
    "MappingConfigSource",
    "ProjectConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_config",
)
