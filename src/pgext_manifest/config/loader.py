# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading with layered precedence."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..catalog.errors import ConfigError
from .models import CompilerConfig
from .sources import (
    PROJECT_CONFIG_NAME,
    ConfigSource,
    DefaultConfigSource,
    MappingConfigSource,
    ProjectConfigSource,
    PyProjectConfigSource,
)
from .utils import deep_merge

LOGGER = logging.getLogger(__name__)


class ConfigLoader:
    """Apply layered configuration sources with predictable precedence."""

    def __init__(self, *, project_root: Path, sources: Sequence[ConfigSource]) -> None:
        """Initialise a loader that merges the supplied configuration sources.

        Args:
            project_root: Directory that anchors relative paths.
            sources: Ordered collection of configuration sources, lowest
                precedence first.
        """

        if not sources:
            raise ValueError("at least one configuration source is required")
        self._sources = list(sources)
        self._project_root = project_root.resolve()

    @classmethod
    def for_root(
        cls,
        project_root: Path,
        *,
        config_file: Path | None = None,
        overrides: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ConfigLoader:
        """Build a loader for ``project_root`` using the standard layers.

        Precedence, lowest first: defaults, ``[tool.pgext-manifest]`` in
        ``pyproject.toml``, ``pgext-manifest.toml`` (or ``config_file``), then
        ``overrides``.

        Args:
            project_root: Workspace root used to discover configuration files.
            config_file: Optional replacement for the project configuration file.
            overrides: Explicit values, typically from CLI options.
            env: Environment used for ``${VAR}`` expansion.

        Returns:
            ConfigLoader: Loader configured with default precedence ordering.

        Raises:
            ConfigError: If an explicitly requested ``config_file`` does not exist.
        """

        root = project_root.resolve()
        if config_file is not None and not config_file.exists():
            raise ConfigError(f"Configuration file {config_file} does not exist")
        project_file = config_file if config_file is not None else root / PROJECT_CONFIG_NAME
        sources: list[ConfigSource] = [
            DefaultConfigSource(),
            PyProjectConfigSource(root / "pyproject.toml", env=env),
            ProjectConfigSource(project_file, name=str(project_file), env=env),
        ]
        if overrides:
            sources.append(MappingConfigSource(overrides))
        return cls(project_root=root, sources=sources)

    def load(self) -> CompilerConfig:
        """Return the merged configuration.

        Returns:
            CompilerConfig: Validated configuration anchored at the project root.

        Raises:
            ConfigError: If any layer is unreadable or the merged values are invalid.
        """

        merged: dict[str, Any] = {}
        for source in self._sources:
            fragment = source.load()
            if not fragment:
                continue
            LOGGER.debug("applying %s", source.describe())
            merged = deep_merge(merged, fragment)
        root_value = merged.pop("project_root", None)
        project_root = self._project_root if root_value is None else self._project_root / Path(root_value)
        try:
            return CompilerConfig(project_root=project_root, **merged)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}" for error in exc.errors()
            )
            raise ConfigError(f"Invalid configuration: {problems}") from exc


def load_config(
    project_root: Path,
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CompilerConfig:
    """Load configuration for ``project_root`` using the default tiered sources."""

    return ConfigLoader.for_root(project_root, config_file=config_file, overrides=overrides).load()


__all__ = ["ConfigLoader", "load_config"]
