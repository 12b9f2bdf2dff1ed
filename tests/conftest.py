# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from pgext_manifest.catalog import Catalog, load_catalog
from pgext_manifest.config import CompilerConfig

EntryFactory = Callable[..., dict[str, Any]]
ManifestWriter = Callable[[Sequence[dict[str, Any]]], Path]

FIXED_TIMESTAMP = "2025-01-02T03:04:05Z"


def _entry(name: str, kind: str = "extension", **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": name, "kind": kind}
    payload.update(fields)
    return payload


def _document(entries: Sequence[dict[str, Any]]) -> dict[str, Any]:
    return {"generatedAt": "authored", "entries": list(entries)}


@pytest.fixture
def entry() -> EntryFactory:
    """Return a factory building a single manifest entry mapping."""

    return _entry


@pytest.fixture
def manifest_bytes() -> Callable[[Sequence[dict[str, Any]]], bytes]:
    """Return a factory serialising entries into a manifest document."""

    def _build(entries: Sequence[dict[str, Any]]) -> bytes:
        return json.dumps(_document(entries)).encode("utf-8")

    return _build


@pytest.fixture
def write_manifest(tmp_path: Path) -> ManifestWriter:
    """Return a factory writing ``extensions.manifest.json`` under ``tmp_path``."""

    def _write(entries: Sequence[dict[str, Any]]) -> Path:
        path = tmp_path / "extensions.manifest.json"
        path.write_text(json.dumps(_document(entries), indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def compiler_config(tmp_path: Path) -> Callable[..., CompilerConfig]:
    """Return a factory building configuration rooted at ``tmp_path``."""

    def _config(**overrides: Any) -> CompilerConfig:
        return CompilerConfig(project_root=tmp_path, **overrides)

    return _config


@pytest.fixture
def sample_entries() -> list[dict[str, Any]]:
    """Return a small but realistic catalog covering every entry kind."""

    return [
        _entry(
            "vectorscale",
            category="ai",
            dependsOn=["vector"],
            source={"type": "git-ref", "repository": "https://github.com/timescale/pgvectorscale.git", "ref": "abcdef1234567"},
            build={"type": "cargo-pgrx"},
        ),
        _entry(
            "vector",
            displayName="pgvector",
            category="ai",
            description="Vector similarity search",
            source={"type": "git", "repository": "https://github.com/pgvector/pgvector.git", "tag": "v0.8.0"},
            runtime={"defaultEnable": True},
            docsUrl="https://github.com/pgvector/pgvector#readme",
        ),
        _entry(
            "postgis",
            category="gis",
            install_via="pgdg",
            pgdgVersion="3.5.2",
            aptPackages=["postgresql-17-postgis-3"],
        ),
        _entry(
            "pg_stat_statements",
            "builtin",
            category="observability",
            description="Query statistics",
            runtime={"sharedPreload": True, "defaultEnable": True},
        ),
        _entry(
            "auto_explain",
            "builtin",
            category="observability",
            runtime={"sharedPreload": True, "defaultEnable": True, "preloadOnly": True},
        ),
        _entry(
            "pg_cron",
            category="operations",
            source={"type": "git", "repository": "https://github.com/citusdata/pg_cron.git", "tag": "v1.6.4"},
            runtime={"sharedPreload": True, "defaultEnable": True},
        ),
        _entry(
            "pgaudit",
            category="security",
            source={"type": "git", "repository": "https://github.com/pgaudit/pgaudit.git", "tag": "17.0"},
            runtime={"sharedPreload": True, "defaultEnable": True},
        ),
        _entry(
            "pgbackrest",
            "tool",
            category="operations",
            source={"type": "git", "repository": "https://github.com/pgbackrest/pgbackrest.git", "tag": "release/2.54.0"},
            aptPackages=["pgbackrest", "libssh2-1"],
        ),
        _entry(
            "timescaledb",
            category="timeseries",
            enabled=False,
            disabledReason="License incompatible with the image",
            runtime={"sharedPreload": True},
        ),
    ]


@pytest.fixture
def sample_catalog(sample_entries: list[dict[str, Any]]) -> Catalog:
    """Return the loaded sample catalog with the default protected set."""

    return load_catalog(
        json.dumps(_document(sample_entries)),
        protected=("auto_explain", "pg_cron", "pg_stat_statements", "pgaudit"),
    )
