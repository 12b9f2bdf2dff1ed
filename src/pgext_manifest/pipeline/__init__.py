# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Compilation pipeline orchestrating load, resolve, validate and generate."""

from __future__ import annotations

from typing import Final

from .compiler import (
    CheckResult,
    CompileResult,
    GenerationOutcome,
    RenderedArtifact,
    check_manifest,
    compile_manifest,
    generate_artifacts,
    load_configured_catalog,
    utc_timestamp,
)
from .scheduler import PhasedScheduler, Task, plan_phases

__all__: Final[tuple[str, ...]] = (
    "CheckResult",
    "CompileResult",
    "GenerationOutcome",
    "PhasedScheduler",
    "RenderedArtifact",
    "Task",
    "check_manifest",
    "compile_manifest",
    "generate_artifacts",
    "load_configured_catalog",
    "plan_phases",
    "utc_timestamp",
)
