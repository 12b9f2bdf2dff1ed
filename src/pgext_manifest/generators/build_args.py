# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Build-argument and package-list generators consumed by the image build."""

from __future__ import annotations

import re
from typing import Final

from ..catalog.errors import GenerationError
from ..catalog.model_catalog import Catalog
from ..graph.resolver import CreationOrder
from .base import GenerationParams, preload_libraries, text_artifact, timestamp_line

_KEY_UNSAFE: Final[re.Pattern[str]] = re.compile(r"[^A-Z0-9]+")
PRELOAD_KEY: Final[str] = "DEFAULT_SHARED_PRELOAD_LIBRARIES"
IMAGE_KEYS: Final[frozenset[str]] = frozenset({PRELOAD_KEY, "PG_VERSION", "PG_BASE_IMAGE_SHA"})


def version_key(name: str) -> str:
    """Return the ``<NAME>_VERSION`` build-argument key for entry ``name``.

    Example:
        ``pg_stat_monitor`` becomes ``PG_STAT_MONITOR_VERSION``.
    """

    return f"{_KEY_UNSAFE.sub('_', name.upper()).strip('_')}_VERSION"


def build_arguments(catalog: Catalog, params: GenerationParams) -> dict[str, str]:
    """Return every build argument keyed by variable name.

    Args:
        catalog: Validated catalog.
        params: Generation parameters supplying image-wide versions.

    Returns:
        dict[str, str]: Build arguments; order is applied by the renderer.

    Raises:
        GenerationError: If two entries, or an entry and an image-wide key,
            map to the same variable name.
    """

    arguments: dict[str, str] = {PRELOAD_KEY: ",".join(preload_libraries(catalog))}
    pg_version = params.resolved_pg_version(catalog)
    if pg_version:
        arguments["PG_VERSION"] = pg_version
    base_image_sha = params.resolved_base_image_sha(catalog)
    if base_image_sha:
        arguments["PG_BASE_IMAGE_SHA"] = base_image_sha
    owners: dict[str, str] = {}
    for entry in catalog.enabled_entries():
        if entry.kind == "builtin":
            continue
        key = version_key(entry.name)
        if key in IMAGE_KEYS:
            raise GenerationError(
                f"'{entry.name}' maps to {key}, which is reserved for the image",
                artifact="build-args",
            )
        if key in owners:
            raise GenerationError(
                f"'{entry.name}' maps to {key}, already used by '{owners[key]}'",
                artifact="build-args",
            )
        owners[key] = entry.name
        arguments[key] = entry.version
    return arguments


def render_build_args(catalog: Catalog, _order: CreationOrder | None, params: GenerationParams) -> bytes:
    lines = [
        f"# Build arguments derived from the extension manifest by {params.project_name}.",
        "# Do not edit; regenerate instead.",
        timestamp_line("# ", params),
    ]
    lines.extend(f"{key}={value}" for key, value in sorted(build_arguments(catalog, params).items()))
    return text_artifact(lines)


def render_build_packages(catalog: Catalog, _order: CreationOrder | None, params: GenerationParams) -> bytes:
    packages = sorted({package for entry in catalog.enabled_entries() for package in entry.apt_packages})
    lines = [
        f"# System packages required by enabled entries, generated by {params.project_name}.",
        timestamp_line("# ", params),
        *packages,
    ]
    return text_artifact(lines)


__all__ = ["IMAGE_KEYS", "PRELOAD_KEY", "build_arguments", "render_build_args", "render_build_packages", "version_key"]
