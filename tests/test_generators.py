# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the artifact generators."""

from __future__ import annotations

import json

import pytest

from pgext_manifest.catalog import GenerationError, load_catalog
from pgext_manifest.generators import DEFAULT_REGISTRY, ArtifactRegistry, GenerationParams, render_artifact
from pgext_manifest.generators.build_args import build_arguments, version_key
from pgext_manifest.generators.docs_data import docs_payload
from pgext_manifest.generators.markdown import version_link
from pgext_manifest.generators.version_info import version_payload
from pgext_manifest.graph import resolve

STAMP = "2025-01-02T03:04:05Z"


@pytest.fixture
def params() -> GenerationParams:
    return GenerationParams(generated_at=STAMP)


def _render(name, catalog, params) -> str:
    return render_artifact(name, catalog, resolve(catalog), params).decode("utf-8")


def test_version_key() -> None:
    assert version_key("pg_stat_monitor") == "PG_STAT_MONITOR_VERSION"
    assert version_key("postgresql-hll") == "POSTGRESQL_HLL_VERSION"


def test_build_arguments(sample_catalog, params) -> None:
    arguments = build_arguments(sample_catalog, params)
    assert arguments == {
        "DEFAULT_SHARED_PRELOAD_LIBRARIES": "auto_explain,pg_cron,pg_stat_statements,pgaudit",
        "PGAUDIT_VERSION": "17.0",
        "PGBACKREST_VERSION": "release/2.54.0",
        "PG_CRON_VERSION": "1.6.4",
        "POSTGIS_VERSION": "3.5.2",
        "VECTORSCALE_VERSION": "abcdef1",
        "VECTOR_VERSION": "0.8.0",
    }


def test_build_args_file_is_sorted_key_value_pairs(sample_catalog) -> None:
    params = GenerationParams(generated_at=STAMP, pg_version="17.2", base_image_sha="sha256:abc")
    text = _render("build-args", sample_catalog, params)
    pairs = [line for line in text.splitlines() if not line.startswith("#")]
    assert pairs == sorted(pairs)
    assert "PG_VERSION=17.2" in pairs
    assert "PG_BASE_IMAGE_SHA=sha256:abc" in pairs
    assert "TIMESCALEDB_VERSION" not in text
    assert f"# generated-at: {STAMP}" in text.splitlines()


def test_preload_library_name_is_used(entry, manifest_bytes, params) -> None:
    catalog = load_catalog(
        manifest_bytes(
            [entry("timescaledb_toolkit", runtime={"sharedPreload": True, "defaultEnable": True, "preloadLibraryName": "tsl"})],
        ),
    )
    assert build_arguments(catalog, params)["DEFAULT_SHARED_PRELOAD_LIBRARIES"] == "tsl"


def test_build_packages_are_unique_and_sorted(sample_catalog, params) -> None:
    text = _render("build-packages", sample_catalog, params)
    packages = [line for line in text.splitlines() if not line.startswith("#")]
    assert packages == ["libssh2-1", "pgbackrest", "postgresql-17-postgis-3"]


def test_sql_script_creates_auto_created_entries_in_order(sample_catalog, params) -> None:
    text = _render("sql-script", sample_catalog, params)
    statements = [line for line in text.splitlines() if line.startswith("CREATE EXTENSION")]
    assert statements == [
        "CREATE EXTENSION IF NOT EXISTS pg_cron;",
        "CREATE EXTENSION IF NOT EXISTS pg_stat_statements;",
        "CREATE EXTENSION IF NOT EXISTS pgaudit;",
        "CREATE EXTENSION IF NOT EXISTS vector;",
    ]
    assert "RAISE NOTICE 'Baseline extensions enabled (pg_cron, pg_stat_statements, pgaudit, vector)" in text


def test_sql_script_pulls_in_dependencies_before_dependents(entry, manifest_bytes, params) -> None:
    catalog = load_catalog(
        manifest_bytes([entry("b", dependsOn=["a"], runtime={"defaultEnable": True}), entry("a"), entry("z")]),
    )
    text = _render("sql-script", catalog, params)
    statements = [line for line in text.splitlines() if line.startswith("CREATE EXTENSION")]
    assert statements == ["CREATE EXTENSION IF NOT EXISTS a;", "CREATE EXTENSION IF NOT EXISTS b;"]


def test_sql_script_requires_creation_order(sample_catalog, params) -> None:
    with pytest.raises(GenerationError) as excinfo:
        render_artifact("sql-script", sample_catalog, None, params)
    assert excinfo.value.artifact == "sql-script"
    assert excinfo.value.exit_code == 5


def test_unknown_artifact_is_rejected(sample_catalog, params) -> None:
    with pytest.raises(GenerationError):
        render_artifact("changelog", sample_catalog, None, params)


def test_docs_payload_lists_disabled_entries_with_reason(sample_catalog, params) -> None:
    payload = docs_payload(sample_catalog, params)
    assert payload["catalog"] == {"total": 9, "enabled": 8, "disabled": 1}
    assert payload["byKind"] == {"builtin": 2, "extension": 5, "tool": 1}
    assert payload["disabled"]["entries"] == [
        {"name": "timescaledb", "kind": "extension", "reason": "License incompatible with the image"},
    ]
    assert payload["preloaded"] == {
        "modules": ["auto_explain"],
        "extensions": ["pg_cron", "pg_stat_statements", "pgaudit"],
    }
    assert payload["autoCreated"] == ["pg_cron", "pg_stat_statements", "pgaudit", "vector"]
    assert list(payload["byCategory"]) == ["ai", "security", "observability", "operations", "gis"]


def test_docs_json_puts_timestamp_first(sample_catalog, params) -> None:
    document = json.loads(_render("docs-json", sample_catalog, params))
    assert next(iter(document)) == "generatedAt"
    assert document["generatedAt"] == STAMP


def test_category_aliases_merge_categories(sample_catalog) -> None:
    params = GenerationParams(generated_at=STAMP, category_aliases={"gis": "utilities", "security": "observability"})
    by_category = docs_payload(sample_catalog, params)["byCategory"]
    assert list(by_category) == ["ai", "observability", "operations", "utilities"]
    assert by_category["observability"] == ["auto_explain", "pg_stat_statements", "pgaudit"]


def test_markdown_groups_entries_and_lists_disabled(sample_catalog, params) -> None:
    text = _render("docs-markdown", sample_catalog, params)
    assert text.startswith("# Extensions\n")
    assert text.index("## AI/ML & Vector Search") < text.index("## Security & Auditing") < text.index("## GIS & Spatial")
    assert "[0.8.0](https://github.com/pgvector/pgvector/releases/tag/v0.8.0)" in text
    assert "| `vector (pgvector)` |" in text
    assert "[Docs](https://github.com/pgvector/pgvector#readme)" in text
    assert "## Built-in modules" in text
    assert "- `pg_stat_statements`: Query statistics" in text
    assert "| `timescaledb` | extension | License incompatible with the image |" in text


def test_version_link_prefers_commit_when_no_tag(entry, manifest_bytes) -> None:
    catalog = load_catalog(
        manifest_bytes(
            [
                entry(
                    "pg_hashids",
                    source={
                        "type": "git-ref",
                        "repository": "https://github.com/iCyberon/pg_hashids",
                        "ref": "main",
                        "commit": "8c404dd86408f3a987a3ff6825ac7e42bd618b98",
                    },
                ),
            ],
        ),
    )
    assert version_link(catalog.get("pg_hashids")) == (
        "[8c404dd8](https://github.com/iCyberon/pg_hashids/commit/8c404dd86408f3a987a3ff6825ac7e42bd618b98)"
    )


def test_version_payload(sample_catalog) -> None:
    params = GenerationParams(generated_at=STAMP, pg_version="17.2")
    payload = version_payload(sample_catalog, params)
    assert payload["postgres_version"] == "17.2"
    assert payload["manifest_checksum"] == sample_catalog.checksum()
    assert payload["extensions"] == {"total": 9, "enabled": 8, "disabled": 1}
    assert payload["disabled_extensions"] == [
        {"name": "timescaledb", "reason": "License incompatible with the image"},
    ]


def test_version_text_sections(sample_catalog) -> None:
    text = _render("metadata-text", sample_catalog, GenerationParams(generated_at=STAMP, pg_version="17.2"))
    lines = text.splitlines()
    for heading in ("POSTGRESQL", "PRELOADED MODULES", "AUTO-CREATED EXTENSIONS", "TOOLS", "DISABLED", "SUMMARY"):
        assert heading in lines
    assert "  PostgreSQL 17.2" in lines
    assert any(line.startswith("  pgbackrest") for line in lines)


@pytest.mark.parametrize("name", list(DEFAULT_REGISTRY))
def test_every_artifact_embeds_the_timestamp_once(sample_catalog, params, name) -> None:
    text = _render(name, sample_catalog, params)
    assert text.count(STAMP) == 1
    assert text.endswith("\n")


@pytest.mark.parametrize("name", list(DEFAULT_REGISTRY))
def test_artifacts_are_deterministic(sample_entries, manifest_bytes, params, name) -> None:
    forward = load_catalog(manifest_bytes(sample_entries))
    backward = load_catalog(manifest_bytes(list(reversed(sample_entries))))
    assert _render(name, forward, params) == _render(name, backward, params)


def test_registry_rejects_duplicate_names_and_paths() -> None:
    generator = DEFAULT_REGISTRY["build-args"]
    registry = ArtifactRegistry([generator])
    with pytest.raises(ValueError):
        registry.register(generator)
    assert registry.try_get("sql-script") is None
    assert len(DEFAULT_REGISTRY) == 7


@pytest.mark.parametrize(
    ("names", "message"),
    [
        (("pg-foo", "pg_foo"), "already used by 'pg-foo'"),
        (("pg",), "reserved for the image"),
    ],
)
def test_colliding_version_keys_are_a_generation_error(entry, manifest_bytes, params, names, message) -> None:
    catalog = load_catalog(manifest_bytes([entry(name) for name in names]))
    with pytest.raises(GenerationError, match=message) as excinfo:
        render_artifact("build-args", catalog, None, params)
    assert excinfo.value.artifact == "build-args"
    assert excinfo.value.exit_code == 5
