# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Generator for the first-start ``CREATE EXTENSION`` bootstrap script."""

from __future__ import annotations

from ..catalog.errors import GenerationError
from ..catalog.model_catalog import Catalog
from ..graph.resolver import CreationOrder
from .base import GenerationParams, auto_created, text_artifact, timestamp_line


def render_sql_script(catalog: Catalog, order: CreationOrder | None, params: GenerationParams) -> bytes:
    """Render the bootstrap SQL executed on the first cluster start.

    Statements follow ``order`` so every extension is created after the
    extensions it depends on.

    Args:
        catalog: Validated catalog.
        order: Creation order from the resolver.
        params: Generation parameters.

    Returns:
        bytes: SQL script contents.

    Raises:
        GenerationError: If ``order`` was not supplied.
    """

    if order is None:
        raise GenerationError("creation order is required", artifact="sql-script")
    names = auto_created(catalog, order)
    lines = [
        "-- PostgreSQL initialization: enable baseline extensions",
        "-- Runs automatically on first cluster start.",
        f"-- Generated by {params.project_name} from the extension manifest; do not edit.",
        timestamp_line("-- ", params),
        "",
    ]
    lines.extend(f"CREATE EXTENSION IF NOT EXISTS {_quote_identifier(name)};" for name in names)
    summary = ", ".join(names) if names else "none"
    lines.extend(
        [
            "",
            "DO $$",
            "BEGIN",
            f"  RAISE NOTICE 'Baseline extensions enabled ({summary}). "
            "Additional extensions are available but disabled by default.';",
            "END;",
            "$$;",
        ],
    )
    return text_artifact(lines)


def _quote_identifier(name: str) -> str:
    """Return ``name`` quoted only when PostgreSQL would otherwise fold or reject it."""

    if name.isidentifier() and name == name.lower() and name.isascii():
        return name
    return '"' + name.replace('"', '""') + '"'


__all__ = ["render_sql_script"]
