# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared type aliases and constants for the extension manifest."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final, Literal, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]

EntryKind: TypeAlias = Literal["builtin", "extension", "tool"]
SUPPORTED_KINDS: Final[tuple[EntryKind, ...]] = ("builtin", "extension", "tool")

SourceType: TypeAlias = Literal["builtin", "git", "git-ref"]

MANIFEST_SCHEMA_VERSION: Final[str] = "1.0.0"
DEFAULT_CATEGORY: Final[str] = "uncategorized"

# Authored keys accepted as aliases of the canonical manifest keys.
KEY_ALIASES: Final[Mapping[str, str]] = {
    "dependencies": "dependsOn",
    "runtimeFlags": "runtime",
}

__all__ = [
    "DEFAULT_CATEGORY",
    "KEY_ALIASES",
    "MANIFEST_SCHEMA_VERSION",
    "SUPPORTED_KINDS",
    "EntryKind",
    "JSONPrimitive",
    "JSONValue",
    "SourceType",
]
