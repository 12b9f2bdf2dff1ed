# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Dependency graph resolution for catalog entries."""

from __future__ import annotations

from typing import Final

from .cycles import find_cycles, strongly_connected_components
from .resolver import CreationOrder, DependencyGraph, resolve

__all__: Final[tuple[str, ...]] = (
    "CreationOrder",
    "DependencyGraph",
    "find_cycles",
    "resolve",
    "strongly_connected_components",
)
