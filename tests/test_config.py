# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for layered compiler configuration."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from pgext_manifest.config import CompilerConfig, ConfigError, ConfigLoader, load_config
from pgext_manifest.config.utils import deep_merge, expand_env, normalise_keys


def _write(path: Path, text: str) -> Path:
    path.write_text(dedent(text), encoding="utf-8")
    return path


def test_defaults_without_any_configuration(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.project_root == tmp_path.resolve()
    assert config.manifest_path == tmp_path.resolve() / "extensions.manifest.json"
    assert config.output_path == tmp_path.resolve() / "generated"
    assert set(config.protected) == {"auto_explain", "pg_cron", "pg_stat_statements", "pgaudit"}
    assert config.override_env_var == "POSTGRES_SHARED_PRELOAD_LIBRARIES"


def test_layers_apply_in_precedence_order(tmp_path: Path) -> None:
    _write(
        tmp_path / "pyproject.toml",
        """
        [tool.pgext-manifest]
        output-dir = "from-pyproject"
        pg-version = "16"
        category-aliases = { gis = "utilities" }
        """,
    )
    _write(
        tmp_path / "pgext-manifest.toml",
        """
        pg-version = "17"
        [category-aliases]
        search = "analytics"
        """,
    )
    config = load_config(tmp_path, overrides={"pg_version": "17.2", "manifest": None})

    assert config.output_dir == Path("from-pyproject")
    assert config.pg_version == "17.2"
    assert config.category_aliases == {"gis": "utilities", "search": "analytics"}
    assert config.manifest == Path("extensions.manifest.json")


def test_environment_references_are_expanded(tmp_path: Path) -> None:
    _write(
        tmp_path / "pgext-manifest.toml",
        """
        base-image-sha = "${BASE_SHA}"
        project-name = "$PROJECT"
        """,
    )
    config = ConfigLoader.for_root(tmp_path, env={"BASE_SHA": "sha256:feed", "PROJECT": "aza-pg"}).load()
    assert config.base_image_sha == "sha256:feed"
    assert config.project_name == "aza-pg"


def test_includes_are_merged_below_the_including_file(tmp_path: Path) -> None:
    _write(tmp_path / "shared.toml", 'pg-version = "15"\nproject-name = "shared"\n')
    _write(tmp_path / "pgext-manifest.toml", 'include = "shared.toml"\npg-version = "17"\n')
    config = load_config(tmp_path)
    assert config.pg_version == "17"
    assert config.project_name == "shared"


def test_circular_includes_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path / "a.toml", 'include = "pgext-manifest.toml"\n')
    _write(tmp_path / "pgext-manifest.toml", 'include = "a.toml"\n')
    with pytest.raises(ConfigError, match="Circular include"):
        load_config(tmp_path)


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    _write(tmp_path / "pgext-manifest.toml", 'colour = "blue"\n')
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert "colour" in str(excinfo.value)
    assert excinfo.value.exit_code == 7


def test_invalid_toml_is_a_config_error(tmp_path: Path) -> None:
    _write(tmp_path / "pgext-manifest.toml", "pg-version = \n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_missing_explicit_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path, config_file=tmp_path / "absent.toml")


def test_explicit_config_file_replaces_project_file(tmp_path: Path) -> None:
    _write(tmp_path / "pgext-manifest.toml", 'pg-version = "15"\n')
    custom = _write(tmp_path / "ci.toml", 'pg-version = "18"\n')
    assert load_config(tmp_path, config_file=custom).pg_version == "18"


def test_artifact_overrides_are_validated(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        CompilerConfig(project_root=tmp_path, artifacts={"changelog": "CHANGES.md"})
    with pytest.raises(ValueError):
        CompilerConfig(project_root=tmp_path, artifacts={"sql-script": "../escape.sql"})
    with pytest.raises(ValueError):
        CompilerConfig(project_root=tmp_path, artifacts={"sql-script": "build/extension-build-args.env"})
    config = CompilerConfig(project_root=tmp_path, artifacts={"sql-script": "init/00.sql"})
    assert config.artifact_path("sql-script") == tmp_path / "generated" / "init/00.sql"


def test_override_env_var_must_be_an_env_name(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        CompilerConfig(project_root=tmp_path, override_env_var="not-valid")


def test_generation_params_and_rules(tmp_path: Path) -> None:
    config = CompilerConfig(
        project_root=tmp_path,
        protected=["pg_cron"],
        soft_conflicts=[("a", "b")],
        category_aliases={"gis": "utilities"},
    )
    rules = config.constraint_rules()
    assert rules.protected == frozenset({"pg_cron"})
    assert rules.soft_conflicts == (("a", "b"),)
    params = config.generation_params("2025-01-01T00:00:00Z")
    assert params.generated_at == "2025-01-01T00:00:00Z"
    assert params.category_aliases == {"gis": "utilities"}


def test_utils() -> None:
    assert deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4}) == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert expand_env({"a": ["$HOME", "${MISSING}"]}, {"HOME": "/root"}) == {"a": ["/root", "${MISSING}"]}
    assert normalise_keys({"output-dir": "x", "nested": {"keep-me": 1}}) == {"output_dir": "x", "nested": {"keep-me": 1}}
