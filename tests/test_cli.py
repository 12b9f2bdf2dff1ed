# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the pgext-manifest command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from pgext_manifest.cli.app import app

STAMP = "2025-01-02T03:04:05Z"

runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(app, [*args, "--no-emoji"])


def test_compile_then_verify(tmp_path: Path, write_manifest, sample_entries) -> None:
    write_manifest(sample_entries)
    result = _invoke("compile", "--root", str(tmp_path), "--timestamp", STAMP)
    assert result.exit_code == 0, result.stdout
    assert "Generated 7 artifact(s)" in result.stdout
    assert (tmp_path / "generated" / "initdb" / "01-extensions.sql").is_file()

    verify = _invoke("verify", "--root", str(tmp_path))
    assert verify.exit_code == 0, verify.stdout
    assert "up to date" in verify.stdout


def test_compile_json_output(tmp_path: Path, write_manifest, sample_entries) -> None:
    write_manifest(sample_entries)
    result = _invoke("compile", "--root", str(tmp_path), "--timestamp", STAMP, "--format", "json", "-a", "build-args")
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["ok"] is True
    assert payload["generatedAt"] == STAMP
    assert [artifact["name"] for artifact in payload["artifacts"]] == ["build-args"]


def test_verify_reports_drift_with_exit_code(tmp_path: Path, write_manifest, sample_entries) -> None:
    write_manifest(sample_entries)
    assert _invoke("compile", "--root", str(tmp_path)).exit_code == 0
    (tmp_path / "generated" / "docs" / "EXTENSIONS.md").write_text("# hand edited\n", encoding="utf-8")

    result = _invoke("verify", "--root", str(tmp_path))
    assert result.exit_code == 6
    assert "docs-markdown" in result.stdout
    assert "+# Extensions" in result.stdout
    assert "pgext-manifest compile" in result.stdout


def test_verify_json_output_on_drift(tmp_path: Path, write_manifest, sample_entries) -> None:
    write_manifest(sample_entries)
    result = _invoke("verify", "--root", str(tmp_path), "--format", "json", "--artifact", "sql-script")
    assert result.exit_code == 6
    payload = json.loads(result.stdout)
    assert payload["ok"] is False
    assert payload["state"] == "drifted"
    assert payload["drifts"][0]["kind"] == "missing"


def test_structural_errors_exit_2_with_every_issue(tmp_path: Path, write_manifest, entry) -> None:
    write_manifest([entry("a", dependsOn=["ghost"]), entry("b", enabled=False)])
    result = _invoke("validate", "--root", str(tmp_path), "--format", "json")
    assert result.exit_code == 2
    payload = json.loads(result.stdout)
    assert payload["exitCode"] == 2
    assert {(error["entry"], error["field"]) for error in payload["errors"]} == {
        ("a", "dependsOn"),
        ("b", "disabledReason"),
    }


def test_cycle_exits_3(tmp_path: Path, write_manifest, entry) -> None:
    write_manifest([entry("a", dependsOn=["b"]), entry("b", dependsOn=["a"])])
    result = _invoke("compile", "--root", str(tmp_path))
    assert result.exit_code == 3
    assert "a -> b -> a" in result.stdout
    assert not (tmp_path / "generated").exists()


def test_constraint_violation_exits_4(tmp_path: Path, write_manifest, sample_entries, entry) -> None:
    entries = [item for item in sample_entries if item["name"] != "pg_cron"]
    entries.append(entry("pg_cron", enabled=False, disabledReason="not wanted"))
    write_manifest(entries)
    result = _invoke("validate", "--root", str(tmp_path))
    assert result.exit_code == 4
    assert "protected core set" in result.stdout


def test_invalid_config_exits_7(tmp_path: Path, write_manifest, sample_entries) -> None:
    write_manifest(sample_entries)
    (tmp_path / "pgext-manifest.toml").write_text('colour = "blue"\n', encoding="utf-8")
    result = _invoke("validate", "--root", str(tmp_path))
    assert result.exit_code == 7


def test_invalid_timestamp_is_rejected(tmp_path: Path, write_manifest, sample_entries) -> None:
    write_manifest(sample_entries)
    result = _invoke("compile", "--root", str(tmp_path), "--timestamp", "yesterday")
    assert result.exit_code == 7
    assert not (tmp_path / "generated").exists()


def test_validate_prints_warnings(tmp_path: Path, write_manifest, entry) -> None:
    write_manifest([entry("pgaudit")])
    result = _invoke("validate", "--root", str(tmp_path))
    assert result.exit_code == 0
    assert "protected-missing" in result.stdout
    assert "Manifest is valid" in result.stdout


def test_order_command(tmp_path: Path, write_manifest, entry) -> None:
    write_manifest([entry("b", dependsOn=["a"]), entry("a"), entry("c", enabled=False, disabledReason="off")])
    text = _invoke("order", "--root", str(tmp_path))
    assert text.exit_code == 0
    assert text.stdout.splitlines()[:2] == ["1. a", "2. b"]
    assert "c: disabled" in text.stdout

    as_json = _invoke("order", "--root", str(tmp_path), "--format", "json")
    assert json.loads(as_json.stdout) == {"order": ["a", "b"], "excluded": {"c": "disabled"}}


def test_artifacts_command_lists_configured_paths(tmp_path: Path) -> None:
    (tmp_path / "pgext-manifest.toml").write_text('[artifacts]\nsql-script = "init/00.sql"\n', encoding="utf-8")
    result = _invoke("artifacts", "--root", str(tmp_path), "--format", "json")
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    paths = {artifact["name"]: artifact["path"] for artifact in payload["artifacts"]}
    assert paths["sql-script"] == "init/00.sql"
    assert paths["build-args"] == "build/extension-build-args.env"
    assert len(paths) == 7


def test_manifest_and_output_options(tmp_path: Path, write_manifest, sample_entries) -> None:
    manifest = write_manifest(sample_entries).rename(tmp_path / "custom.json")
    out = tmp_path / "elsewhere"
    result = _invoke(
        "compile", "--root", str(tmp_path), "--manifest", str(manifest), "--output", str(out), "-a", "docs-json"
    )
    assert result.exit_code == 0, result.stdout
    assert (out / "docs" / "docs-data.json").is_file()
