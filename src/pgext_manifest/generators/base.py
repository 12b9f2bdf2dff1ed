# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared generator types, parameters and rendering helpers."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, Literal, TypeAlias

from ..catalog.model_catalog import Catalog
from ..catalog.model_entry import CatalogEntry
from ..catalog.types import JSONValue
from ..graph.resolver import CreationOrder
from ..validation.constraints import DEFAULT_OVERRIDE_ENV_VAR

ArtifactFormat: TypeAlias = Literal["text", "json"]

TIMESTAMP_MARKER: Final[str] = "generated-at:"
JSON_TIMESTAMP_KEY: Final[str] = "generatedAt"
TIMESTAMP_PREFIXES: Final[tuple[str, ...]] = ("# ", "-- ", "<!-- ", "")
# Exact shape of every line produced by ``timestamp_line``, optionally wrapped in an HTML comment.
TIMESTAMP_LINE_RE: Final[re.Pattern[str]] = re.compile(
    rf"^(?:{'|'.join(re.escape(prefix) for prefix in TIMESTAMP_PREFIXES)}){re.escape(TIMESTAMP_MARKER)} \S+(?: -->)?$",
)
DEFAULT_PROJECT_NAME: Final[str] = "pgext-manifest"

DEFAULT_CATEGORY_ORDER: Final[tuple[str, ...]] = (
    "ai",
    "timeseries",
    "search",
    "analytics",
    "security",
    "observability",
    "performance",
    "operations",
    "maintenance",
    "integration",
    "queueing",
    "cdc",
    "validation",
    "safety",
    "quality",
    "gis",
    "utilities",
    "indexing",
    "language",
)

DEFAULT_CATEGORY_TITLES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "ai": "AI/ML & Vector Search",
        "timeseries": "Time-Series",
        "search": "Full-Text Search",
        "analytics": "Analytics",
        "security": "Security & Auditing",
        "observability": "Observability & Monitoring",
        "performance": "Performance",
        "operations": "Operations & Automation",
        "maintenance": "Maintenance",
        "integration": "Integration & FDW",
        "queueing": "Queueing & Messaging",
        "cdc": "Change Data Capture",
        "validation": "Validation",
        "safety": "Safety & Guards",
        "quality": "Quality & Testing",
        "gis": "GIS & Spatial",
        "utilities": "Utilities",
        "indexing": "Indexing",
        "language": "Languages",
    },
)


@dataclass(frozen=True, slots=True)
class GenerationParams:
    """Inputs every generator receives besides the catalog and order.

    ``generated_at`` is the only value allowed to differ between two runs over
    the same manifest; everything else is part of the reproducible output.
    """

    generated_at: str
    pg_version: str | None = None
    base_image_sha: str | None = None
    category_order: tuple[str, ...] = DEFAULT_CATEGORY_ORDER
    category_aliases: Mapping[str, str] = field(default_factory=dict)
    category_titles: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_TITLES))
    project_name: str = DEFAULT_PROJECT_NAME
    override_env_var: str = DEFAULT_OVERRIDE_ENV_VAR

    def resolved_pg_version(self, catalog: Catalog) -> str | None:
        """Return the explicit PostgreSQL version or the manifest's declared one."""

        return self.pg_version or catalog.metadata.pg_version

    def resolved_base_image_sha(self, catalog: Catalog) -> str | None:
        """Return the explicit base image digest or the manifest's declared one."""

        return self.base_image_sha or catalog.metadata.base_image_sha

    def category_of(self, entry: CatalogEntry) -> str:
        """Return the merged documentation category of ``entry``."""

        return self.category_aliases.get(entry.category, entry.category)

    def category_title(self, category: str) -> str:
        return self.category_titles.get(category, category)

    def ordered_categories(self, categories: Iterable[str]) -> tuple[str, ...]:
        """Return ``categories`` with configured ones first, the rest sorted.

        Args:
            categories: Category names present in the catalog.

        Returns:
            tuple[str, ...]: Unique categories in display order.
        """

        present = set(categories)
        known = [category for category in self.category_order if category in present]
        extra = sorted(present.difference(self.category_order))
        return (*known, *extra)


RenderFunction: TypeAlias = Callable[[Catalog, CreationOrder | None, GenerationParams], bytes]


@dataclass(frozen=True, slots=True)
class ArtifactGenerator:
    """Registered generator producing one artifact file."""

    name: str
    default_path: str
    format: ArtifactFormat
    description: str
    render: RenderFunction
    requires_order: bool = False


def text_artifact(lines: Sequence[str]) -> bytes:
    """Join ``lines`` into UTF-8 bytes terminated by a single newline."""

    return ("\n".join(lines).rstrip("\n") + "\n").encode("utf-8")


def json_artifact(payload: Mapping[str, JSONValue], params: GenerationParams) -> bytes:
    """Serialise ``payload`` with the timestamp as its first top-level key.

    Args:
        payload: Artifact body; must not contain the timestamp key itself.
        params: Generation parameters providing the timestamp.

    Returns:
        bytes: Indented, newline-terminated UTF-8 JSON.
    """

    document: dict[str, JSONValue] = {JSON_TIMESTAMP_KEY: params.generated_at, **payload}
    return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def timestamp_line(prefix: str, params: GenerationParams) -> str:
    """Return the single delimited timestamp line for text artifacts."""

    return f"{prefix}{TIMESTAMP_MARKER} {params.generated_at}"


def preload_libraries(catalog: Catalog) -> tuple[str, ...]:
    """Return libraries preloaded by default, sorted and de-duplicated."""

    return tuple(
        sorted(
            {
                entry.preload_library
                for entry in catalog.enabled_entries()
                if entry.runtime.shared_preload and entry.runtime.default_enable
            },
        ),
    )


def auto_created_names(catalog: Catalog) -> frozenset[str]:
    """Return the enabled entries created at first start.

    These are the creatable ``defaultEnable`` entries plus every enabled,
    creatable entry they depend on, directly or through entries without a
    creation step.
    """

    visited: set[str] = set()
    pending = [entry.name for entry in catalog.enabled_entries() if entry.runtime.default_enable]
    while pending:
        name = pending.pop()
        if name in visited:
            continue
        visited.add(name)
        pending.extend(catalog.get(name).depends_on)
    return frozenset(
        name for name in visited if catalog.get(name).enabled and catalog.get(name).needs_creation
    )


def auto_created(catalog: Catalog, order: CreationOrder) -> tuple[str, ...]:
    """Return :func:`auto_created_names` in creation order."""

    return order.restricted_to(auto_created_names(catalog))


__all__ = [
    "DEFAULT_CATEGORY_ORDER",
    "DEFAULT_CATEGORY_TITLES",
    "DEFAULT_PROJECT_NAME",
    "JSON_TIMESTAMP_KEY",
    "TIMESTAMP_LINE_RE",
    "TIMESTAMP_MARKER",
    "ArtifactFormat",
    "ArtifactGenerator",
    "GenerationParams",
    "RenderFunction",
    "auto_created",
    "auto_created_names",
    "json_artifact",
    "preload_libraries",
    "text_artifact",
    "timestamp_line",
]
