# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete configuration sources (defaults, TOML, pyproject, overrides)."""

from __future__ import annotations

import os
import tomllib
from abc import abstractmethod
from collections.abc import Iterable, Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final, Protocol

from ..catalog.errors import ConfigError
from .utils import deep_merge, expand_env, normalise_keys

DEFAULT_INCLUDE_KEY: Final[str] = "include"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "pgext-manifest"
PROJECT_CONFIG_NAME: Final[str] = "pgext-manifest.toml"


class ConfigSource(Protocol):
    """Provide configuration data loaded from disk or other mediums."""

    name: str

    @abstractmethod
    def load(self) -> Mapping[str, Any]:
        """Return configuration values as a mapping."""

    @abstractmethod
    def describe(self) -> str:
        """Return a human-readable description of the source."""


class DefaultConfigSource:
    """Contribute nothing; the model defaults are the lowest layer."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return {}

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document with include support."""

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._root_path = path
        self.name = name or str(path)
        self._include_key = include_key
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        return self._load(self._root_path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> Mapping[str, Any]:
        if not path.exists():
            return {}
        if path in stack:
            include_chain = " -> ".join(str(entry) for entry in (*stack, path))
            raise ConfigError(f"Circular include detected: {include_chain}")
        document = self._read(path)
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, path.parent):
            merged = deep_merge(merged, self._load(include_path, (*stack, path)))
        merged = deep_merge(merged, document)
        return expand_env(merged, self._env)

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            with path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Unable to read {path}: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigError(f"Configuration at {path} must be a table")
        return dict(data)

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, str):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, list):
            return [self._resolve_path(Path(item), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else (base_dir / path)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class ProjectConfigSource(TomlConfigSource):
    """Read a dedicated ``pgext-manifest.toml`` with kebab-case keys allowed."""

    def load(self) -> Mapping[str, Any]:
        return normalise_keys(super().load())


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.pgext-manifest]`` within ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=str(path), env=env)

    def load(self) -> Mapping[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return normalise_keys(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


class MappingConfigSource:
    """Wrap explicit overrides, typically collected from CLI options."""

    def __init__(self, data: Mapping[str, Any], *, name: str = "overrides") -> None:
        self.name = name
        self._data = {key: value for key, value in data.items() if value is not None}

    def load(self) -> Mapping[str, Any]:
        return dict(self._data)

    def describe(self) -> str:
        return f"Explicit overrides ({self.name})"


__all__ = [
    "PROJECT_CONFIG_NAME",
    "PYPROJECT_SECTION_KEY",
    "ConfigSource",
    "DefaultConfigSource",
    "MappingConfigSource",
    "ProjectConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
]
