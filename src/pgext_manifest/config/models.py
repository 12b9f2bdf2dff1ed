# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Pydantic model describing compiler configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..generators.base import DEFAULT_CATEGORY_ORDER, DEFAULT_CATEGORY_TITLES, DEFAULT_PROJECT_NAME, GenerationParams
from ..generators.registry import DEFAULT_REGISTRY
from ..validation.constraints import (
    DEFAULT_OVERRIDE_ENV_VAR,
    DEFAULT_PROTECTED,
    DEFAULT_SOFT_CONFLICTS,
    ConstraintRules,
)

DEFAULT_MANIFEST_PATH: Final[Path] = Path("extensions.manifest.json")
DEFAULT_OUTPUT_DIR: Final[Path] = Path("generated")
_ENV_VAR_NAME_CHARS: Final[frozenset[str]] = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


class CompilerConfig(BaseModel):
    """Resolved settings for a manifest compilation run.

    Relative paths are interpreted against ``project_root``; artifact path
    overrides are interpreted against the output directory.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    project_root: Path = Field(default_factory=Path.cwd)
    manifest: Path = DEFAULT_MANIFEST_PATH
    output_dir: Path = DEFAULT_OUTPUT_DIR
    artifacts: dict[str, str] = Field(default_factory=dict)
    protected: list[str] = Field(default_factory=lambda: sorted(DEFAULT_PROTECTED))
    soft_conflicts: list[tuple[str, str]] = Field(default_factory=lambda: list(DEFAULT_SOFT_CONFLICTS))
    category_order: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORY_ORDER))
    category_aliases: dict[str, str] = Field(default_factory=dict)
    category_titles: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_TITLES))
    override_env_var: str = DEFAULT_OVERRIDE_ENV_VAR
    pg_version: str | None = None
    base_image_sha: str | None = None
    project_name: str = DEFAULT_PROJECT_NAME

    @field_validator("artifacts")
    @classmethod
    def _known_artifacts(cls, value: dict[str, str]) -> dict[str, str]:
        unknown = sorted(set(value).difference(DEFAULT_REGISTRY))
        if unknown:
            raise ValueError(f"unknown artifact(s): {', '.join(unknown)}")
        for name, path in value.items():
            if not path or Path(path).is_absolute() or ".." in Path(path).parts:
                raise ValueError(f"artifact '{name}' must use a relative path inside the output directory")
        return value

    @field_validator("override_env_var")
    @classmethod
    def _env_var_name(cls, value: str) -> str:
        if not value or value[0].isdigit() or not set(value) <= _ENV_VAR_NAME_CHARS:
            raise ValueError("override_env_var must be an upper-case environment variable name")
        return value

    @model_validator(mode="after")
    def _distinct_artifact_paths(self) -> CompilerConfig:
        seen: dict[str, str] = {}
        for name in DEFAULT_REGISTRY:
            path = self.artifact_relpath(name)
            if path in seen:
                raise ValueError(f"artifacts '{seen[path]}' and '{name}' both write {path}")
            seen[path] = name
        return self

    @property
    def manifest_path(self) -> Path:
        """Return the absolute manifest path."""

        return self.manifest if self.manifest.is_absolute() else self.project_root / self.manifest

    @property
    def output_path(self) -> Path:
        """Return the absolute output directory."""

        return self.output_dir if self.output_dir.is_absolute() else self.project_root / self.output_dir

    def artifact_relpath(self, name: str) -> str:
        """Return the POSIX path of artifact ``name`` relative to the output directory."""

        return self.artifacts.get(name, DEFAULT_REGISTRY[name].default_path)

    def artifact_path(self, name: str) -> Path:
        """Return the absolute destination of artifact ``name``."""

        return self.output_path / self.artifact_relpath(name)

    def constraint_rules(self) -> ConstraintRules:
        """Return constraint rule parameters derived from this configuration."""

        return ConstraintRules(
            protected=frozenset(self.protected),
            soft_conflicts=tuple(self.soft_conflicts),
            override_env_var=self.override_env_var,
        )

    def generation_params(self, generated_at: str) -> GenerationParams:
        """Return generation parameters stamped with ``generated_at``.

        Args:
            generated_at: Timestamp embedded in every artifact.

        Returns:
            GenerationParams: Parameters shared by all generators of a run.
        """

        return GenerationParams(
            generated_at=generated_at,
            pg_version=self.pg_version,
            base_image_sha=self.base_image_sha,
            category_order=tuple(self.category_order),
            category_aliases=dict(self.category_aliases),
            category_titles=dict(self.category_titles),
            project_name=self.project_name,
            override_env_var=self.override_env_var,
        )


__all__ = ["DEFAULT_MANIFEST_PATH", "DEFAULT_OUTPUT_DIR", "CompilerConfig"]
