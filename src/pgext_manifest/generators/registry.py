# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Artifact registry providing generator discovery by name."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from ..catalog.errors import GenerationError
from ..catalog.model_catalog import Catalog
from ..graph.resolver import CreationOrder
from .base import ArtifactGenerator, GenerationParams
from .build_args import render_build_args, render_build_packages
from .docs_data import render_docs_json
from .markdown import render_markdown
from .sql_script import render_sql_script
from .version_info import render_version_json, render_version_text

LOGGER = logging.getLogger(__name__)


class ArtifactRegistry(Mapping[str, ArtifactGenerator]):
    """Central registry for artifact generators.

    ``ArtifactRegistry`` behaves like a read-only mapping whose keys are
    artifact names and whose values are :class:`ArtifactGenerator` instances,
    iterated in registration order.
    """

    def __init__(self, generators: Iterable[ArtifactGenerator] = ()) -> None:
        """Initialise the registry with optional ``generators``."""

        self._generators: dict[str, ArtifactGenerator] = {}
        for generator in generators:
            self.register(generator)

    def register(self, generator: ArtifactGenerator) -> None:
        """Register ``generator`` enforcing uniqueness of names and paths.

        Args:
            generator: Generator definition to insert into the registry.

        Raises:
            ValueError: If the name or default path is already registered.
        """

        if generator.name in self._generators:
            raise ValueError(f"Artifact '{generator.name}' already registered")
        for existing in self._generators.values():
            if existing.default_path == generator.default_path:
                raise ValueError(f"Artifacts '{existing.name}' and '{generator.name}' share {generator.default_path}")
        self._generators[generator.name] = generator

    def try_get(self, name: str) -> ArtifactGenerator | None:
        """Return the generator named ``name`` when registered, otherwise ``None``."""

        return self._generators.get(name)

    def generators(self) -> tuple[ArtifactGenerator, ...]:
        return tuple(self._generators.values())

    def __len__(self) -> int:
        return len(self._generators)

    def __iter__(self) -> Iterator[str]:
        return iter(self._generators)

    def __getitem__(self, name: str) -> ArtifactGenerator:
        return self._generators[name]


DEFAULT_REGISTRY = ArtifactRegistry(
    (
        ArtifactGenerator(
            name="build-args",
            default_path="build/extension-build-args.env",
            format="text",
            description="KEY=value build arguments with versions and default preload libraries",
            render=render_build_args,
        ),
        ArtifactGenerator(
            name="build-packages",
            default_path="build/extension-build-packages.txt",
            format="text",
            description="System packages required by enabled entries",
            render=render_build_packages,
        ),
        ArtifactGenerator(
            name="sql-script",
            default_path="initdb/01-extensions.sql",
            format="text",
            description="CREATE EXTENSION bootstrap script in dependency order",
            render=render_sql_script,
            requires_order=True,
        ),
        ArtifactGenerator(
            name="docs-json",
            default_path="docs/docs-data.json",
            format="json",
            description="Counts and name lists for documentation tooling",
            render=render_docs_json,
        ),
        ArtifactGenerator(
            name="docs-markdown",
            default_path="docs/EXTENSIONS.md",
            format="text",
            description="Extension tables grouped by category",
            render=render_markdown,
        ),
        ArtifactGenerator(
            name="metadata",
            default_path="image/version-info.json",
            format="json",
            description="Machine-readable image version metadata",
            render=render_version_json,
        ),
        ArtifactGenerator(
            name="metadata-text",
            default_path="image/version-info.txt",
            format="text",
            description="Human-readable image version summary",
            render=render_version_text,
        ),
    ),
)


def render_artifact(
    name: str,
    catalog: Catalog,
    order: CreationOrder | None,
    params: GenerationParams,
    *,
    registry: Mapping[str, ArtifactGenerator] = DEFAULT_REGISTRY,
) -> bytes:
    """Render the artifact called ``name``.

    Args:
        name: Registered artifact name.
        catalog: Validated catalog.
        order: Creation order; required by generators that declare it.
        params: Generation parameters.
        registry: Registry to look ``name`` up in.

    Returns:
        bytes: Rendered artifact contents.

    Raises:
        GenerationError: If the artifact is unknown, lacks its order, or fails.
    """

    generator = registry.get(name)
    if generator is None:
        raise GenerationError(f"unknown artifact; choose from {', '.join(registry)}", artifact=name)
    if generator.requires_order and order is None:
        raise GenerationError("creation order is required", artifact=name)
    try:
        content = generator.render(catalog, order, params)
    except GenerationError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise GenerationError(str(exc), artifact=name) from exc
    LOGGER.debug("rendered %s (%d bytes)", name, len(content))
    return content


__all__ = ["DEFAULT_REGISTRY", "ArtifactRegistry", "render_artifact"]
