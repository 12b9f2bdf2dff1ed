# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Image version metadata in machine- and human-readable form."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from ..catalog.model_catalog import Catalog
from ..catalog.model_entry import CatalogEntry
from ..catalog.types import JSONValue
from ..graph.resolver import CreationOrder
from .base import GenerationParams, auto_created_names, json_artifact, text_artifact, timestamp_line

_RULE: Final[str] = "=" * 79
_NAME_WIDTH: Final[int] = 25
_VERSION_WIDTH: Final[int] = 15


@dataclass(frozen=True, slots=True)
class _Groups:
    """Entry groupings shared by both version-info renderings."""

    enabled: tuple[CatalogEntry, ...]
    disabled: tuple[CatalogEntry, ...]
    preloaded: tuple[CatalogEntry, ...]
    auto_created: tuple[CatalogEntry, ...]
    available: tuple[CatalogEntry, ...]
    tools: tuple[CatalogEntry, ...]
    builtins: tuple[CatalogEntry, ...]

    @classmethod
    def of(cls, catalog: Catalog) -> _Groups:
        enabled = catalog.enabled_entries()
        auto = auto_created_names(catalog)
        return cls(
            enabled=enabled,
            disabled=catalog.disabled_entries(),
            preloaded=tuple(entry for entry in enabled if entry.runtime.shared_preload),
            auto_created=tuple(entry for entry in enabled if entry.name in auto),
            available=tuple(
                entry
                for entry in enabled
                if entry.kind == "extension" and entry.needs_creation and entry.name not in auto
            ),
            tools=tuple(entry for entry in enabled if entry.kind == "tool"),
            builtins=tuple(entry for entry in enabled if entry.kind == "builtin"),
        )


def version_payload(catalog: Catalog, params: GenerationParams) -> dict[str, JSONValue]:
    """Return the structured version metadata for ``catalog``.

    Args:
        catalog: Validated catalog.
        params: Generation parameters supplying image-wide versions.

    Returns:
        dict[str, JSONValue]: Payload without the timestamp key.
    """

    groups = _Groups.of(catalog)
    return {
        "project": params.project_name,
        "postgres_version": params.resolved_pg_version(catalog),
        "base_image_sha": params.resolved_base_image_sha(catalog),
        "manifest_checksum": catalog.checksum(),
        "extensions": {
            "total": len(catalog),
            "enabled": len(groups.enabled),
            "disabled": len(groups.disabled),
        },
        "categories": {
            "preloaded": len(groups.preloaded),
            "auto_created": len(groups.auto_created),
            "builtin": len(groups.builtins),
            "pgdg": sum(1 for entry in groups.enabled if entry.install_via == "pgdg"),
            "compiled": sum(
                1 for entry in groups.enabled if entry.kind != "builtin" and entry.install_via is None
            ),
            "tools": len(groups.tools),
        },
        "preloaded_modules": sorted(entry.label for entry in groups.preloaded),
        "disabled_extensions": [
            {"name": entry.name, "reason": entry.disabled_reason or "No reason provided"} for entry in groups.disabled
        ],
    }


def render_version_json(catalog: Catalog, _order: CreationOrder | None, params: GenerationParams) -> bytes:
    return json_artifact(version_payload(catalog, params), params)


def render_version_text(catalog: Catalog, _order: CreationOrder | None, params: GenerationParams) -> bytes:
    """Render the human-readable version summary shipped inside the image."""

    groups = _Groups.of(catalog)
    pg_version = params.resolved_pg_version(catalog)
    heading = f"PostgreSQL {pg_version.split('.')[0]}" if pg_version else "PostgreSQL"
    lines = [
        _RULE,
        f"{params.project_name} - {heading} with Extensions",
        _RULE,
        "",
        timestamp_line("", params),
        f"Manifest checksum: {catalog.checksum()}",
        "",
        "POSTGRESQL",
        f"  PostgreSQL {pg_version}" if pg_version else "  PostgreSQL (version not pinned)",
        "",
    ]
    lines.extend(_section("PRELOADED MODULES", [_preload_row(entry) for entry in groups.preloaded]))
    lines.extend(_section("AUTO-CREATED EXTENSIONS", [_row(entry) for entry in groups.auto_created]))
    lines.extend(_section("AVAILABLE EXTENSIONS", [_row(entry) for entry in groups.available]))
    lines.extend(_section("TOOLS", [_row(entry) for entry in groups.tools]))
    lines.extend(
        _section(
            "DISABLED",
            [f"  {entry.label.ljust(_NAME_WIDTH)} {entry.disabled_reason or ''}".rstrip() for entry in groups.disabled],
        ),
    )
    lines.extend(
        [
            "SUMMARY",
            f"  Total Enabled: {len(groups.enabled)}",
            f"  Extensions: {sum(1 for entry in groups.enabled if entry.kind == 'extension')}",
            f"  Tools: {len(groups.tools)}",
            f"  Preloaded: {len(groups.preloaded)}",
            f"  Auto-created: {len(groups.auto_created)}",
            "",
            _RULE,
            "Use CREATE EXTENSION <name>; to enable available extensions",
            _RULE,
        ],
    )
    return text_artifact(lines)


def _row(entry: CatalogEntry) -> str:
    return f"  {entry.label.ljust(_NAME_WIDTH)} {entry.version}"


def _preload_row(entry: CatalogEntry) -> str:
    kind = "module" if entry.runtime.preload_only else "extension"
    return f"  {entry.label.ljust(_NAME_WIDTH)} {entry.version.ljust(_VERSION_WIDTH)} ({kind})"


def _section(title: str, rows: Sequence[str]) -> list[str]:
    if not rows:
        return []
    return [title, *rows, ""]


__all__ = ["render_version_json", "render_version_text", "version_payload"]
