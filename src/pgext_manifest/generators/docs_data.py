# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Generator for the documentation data consumed by the docs tooling."""

from __future__ import annotations

from collections import defaultdict

from ..catalog.model_catalog import Catalog
from ..catalog.model_entry import CatalogEntry
from ..catalog.types import SUPPORTED_KINDS, JSONValue
from ..graph.resolver import CreationOrder
from .base import GenerationParams, auto_created_names, json_artifact


def docs_payload(catalog: Catalog, params: GenerationParams) -> dict[str, JSONValue]:
    """Return the documentation counts and name lists for ``catalog``.

    Args:
        catalog: Validated catalog.
        params: Generation parameters providing category merging and order.

    Returns:
        dict[str, JSONValue]: Payload without the timestamp key.
    """

    enabled = catalog.enabled_entries()
    disabled = catalog.disabled_entries()
    by_category: dict[str, list[str]] = defaultdict(list)
    for entry in enabled:
        by_category[params.category_of(entry)].append(entry.name)

    def names(kind: str, *, pool: tuple[CatalogEntry, ...] = enabled) -> list[JSONValue]:
        return [entry.name for entry in pool if entry.kind == kind]

    preloaded = [entry for entry in enabled if entry.runtime.shared_preload and entry.runtime.default_enable]
    return {
        "catalog": {"total": len(catalog), "enabled": len(enabled), "disabled": len(disabled)},
        "byKind": {kind: len(names(kind)) for kind in SUPPORTED_KINDS},
        "builtins": names("builtin"),
        "extensions": names("extension"),
        "tools": names("tool"),
        "disabled": {
            "extensions": names("extension", pool=disabled),
            "tools": names("tool", pool=disabled),
            "entries": [
                {"name": entry.name, "kind": entry.kind, "reason": entry.disabled_reason or ""} for entry in disabled
            ],
        },
        "preloaded": {
            "modules": [entry.name for entry in preloaded if entry.runtime.preload_only],
            "extensions": [entry.name for entry in preloaded if not entry.runtime.preload_only],
        },
        "autoCreated": sorted(auto_created_names(catalog)),
        "byCategory": {
            category: sorted(by_category[category]) for category in params.ordered_categories(by_category)
        },
    }


def render_docs_json(catalog: Catalog, _order: CreationOrder | None, params: GenerationParams) -> bytes:
    return json_artifact(docs_payload(catalog, params), params)


__all__ = ["docs_payload", "render_docs_json"]
