# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Markdown extension catalogue grouped by documentation category."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Final

from ..catalog.model_catalog import Catalog
from ..catalog.model_entry import CatalogEntry
from ..graph.resolver import CreationOrder
from .base import GenerationParams, text_artifact, timestamp_line

_GITHUB_REPOSITORY: Final[re.Pattern[str]] = re.compile(r"github\.com[:/]([^/]+/[^/]+?)(?:\.git)?/?$")
_COMMIT_LABEL_LENGTH: Final[int] = 8
_EMPTY_CELL: Final[str] = "-"

_TABLE_HEADER: Final[tuple[str, str]] = (
    "| Extension | Version | Enabled by Default | Shared Preload | Documentation | Notes |",
    "|-----------|---------|--------------------|----------------|---------------|-------|",
)


def render_markdown(catalog: Catalog, _order: CreationOrder | None, params: GenerationParams) -> bytes:
    """Render ``EXTENSIONS.md``.

    Enabled extensions and tools are tabulated per merged category in the
    configured display order. Builtins get a short list and disabled entries
    a table carrying their ``disabledReason``.

    Args:
        catalog: Validated catalog.
        _order: Unused; the document is ordered by category and name.
        params: Generation parameters providing category order and aliases.

    Returns:
        bytes: Markdown document.
    """

    enabled = catalog.enabled_entries()
    disabled = catalog.disabled_entries()
    groups: dict[str, list[CatalogEntry]] = defaultdict(list)
    for entry in enabled:
        if entry.kind != "builtin":
            groups[params.category_of(entry)].append(entry)

    lines = [
        "# Extensions",
        "",
        f"<!-- Generated by {params.project_name} from the extension manifest; do not edit. -->",
        f"<!-- {timestamp_line('', params)} -->",
        "",
        f"{len(enabled)} of {len(catalog)} catalog entries are enabled in this image.",
        "",
    ]
    for category in params.ordered_categories(groups):
        lines.extend([f"## {_escape(params.category_title(category))}", "", *_TABLE_HEADER])
        lines.extend(_table_row(entry) for entry in groups[category])
        lines.append("")

    builtins = [entry for entry in enabled if entry.kind == "builtin"]
    if builtins:
        lines.extend(["## Built-in modules", ""])
        lines.extend(f"- `{entry.name}`: {_escape(entry.description) or _EMPTY_CELL}" for entry in builtins)
        lines.append("")

    if disabled:
        lines.extend(["## Disabled", "", "| Entry | Kind | Reason |", "|-------|------|--------|"])
        lines.extend(
            f"| `{_escape(entry.name)}` | {entry.kind} | {_escape(entry.disabled_reason or '')} |" for entry in disabled
        )
        lines.append("")
    return text_artifact(lines)


def version_link(entry: CatalogEntry) -> str:
    """Return the entry version, linked to its GitHub release or commit when possible.

    Args:
        entry: Catalog entry to describe.

    Returns:
        str: Markdown link or plain version label.
    """

    source = entry.source
    match = _GITHUB_REPOSITORY.search(source.repository or "")
    if match is None or entry.pgdg_version:
        return entry.version
    owner_repo = match.group(1)
    if source.tag:
        return f"[{entry.version}](https://github.com/{owner_repo}/releases/tag/{source.tag})"
    if source.commit:
        label = source.commit[:_COMMIT_LABEL_LENGTH]
        return f"[{label}](https://github.com/{owner_repo}/commit/{source.commit})"
    return entry.version


def _table_row(entry: CatalogEntry) -> str:
    display = entry.name
    if entry.display_name and entry.display_name != entry.name:
        display = f"{entry.name} ({entry.display_name})"
    name_cell = f"`{_escape(display)}`"
    if entry.source_url:
        name_cell = f"[{name_cell}]({entry.source_url})"
    if entry.docs_url:
        docs_cell = f"[Docs]({entry.docs_url})"
    elif entry.source_url:
        docs_cell = f"[README]({entry.source_url}#readme)"
    else:
        docs_cell = _EMPTY_CELL
    cells = (
        name_cell,
        version_link(entry),
        _yes_no(entry.runtime.default_enable),
        _yes_no(entry.runtime.shared_preload),
        docs_cell,
        _escape(entry.description),
    )
    return "| " + " | ".join(cells) + " |"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _escape(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


__all__ = ["render_markdown", "version_link"]
