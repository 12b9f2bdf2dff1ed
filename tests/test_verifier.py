# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for committed-artifact drift detection."""

from __future__ import annotations

import json

import pytest

from pgext_manifest.catalog import DriftError
from pgext_manifest.pipeline import compile_manifest
from pgext_manifest.verify import ConsistencyVerifier, IllegalTransitionError, VerifierState
from pgext_manifest.verify.verifier import normalise_json, normalise_text

STAMP = "2025-01-02T03:04:05Z"


@pytest.fixture
def compiled(write_manifest, sample_entries, compiler_config):
    write_manifest(sample_entries)
    config = compiler_config()
    compile_manifest(config, generated_at=STAMP)
    return config


def test_fresh_compile_verifies_clean(compiled) -> None:
    verifier = ConsistencyVerifier(compiled)
    assert verifier.state is VerifierState.IDLE
    result = verifier.run()
    assert result.clean
    assert result.state is VerifierState.CLEAN
    assert verifier.state is VerifierState.CLEAN
    assert len(result.checked) == 7
    result.raise_for_drift()


def test_manual_edit_is_reported_with_an_isolated_diff(compiled) -> None:
    target = compiled.artifact_path("build-args")
    text = target.read_text(encoding="utf-8")
    target.write_text(text.replace("VECTOR_VERSION=0.8.0", "VECTOR_VERSION=0.7.4"), encoding="utf-8")

    result = ConsistencyVerifier(compiled).run()

    assert result.state is VerifierState.DRIFTED
    (drift,) = result.drifts
    assert drift.artifact == "build-args"
    assert drift.kind == "modified"
    changed = [
        line
        for line in drift.diff.splitlines()
        if line[:1] in "+-" and not line.startswith(("+++", "---"))
    ]
    assert changed == ["-VECTOR_VERSION=0.7.4", "+VECTOR_VERSION=0.8.0"]
    assert "committed/build/extension-build-args.env" in drift.diff
    assert "pgext-manifest compile" in result.remediation


def test_missing_committed_artifact_is_drift(compiled) -> None:
    compiled.artifact_path("sql-script").unlink()
    result = ConsistencyVerifier(compiled).run()
    (drift,) = result.drifts
    assert drift.kind == "missing"
    assert "(missing)" in drift.diff
    with pytest.raises(DriftError) as excinfo:
        result.raise_for_drift()
    assert excinfo.value.exit_code == 6
    assert excinfo.value.records()[0]["artifact"] == "sql-script"


def test_manifest_change_without_recompile_is_drift(compiled, write_manifest, sample_entries, entry) -> None:
    write_manifest([*sample_entries, entry("hstore", "builtin")])
    result = ConsistencyVerifier(compiled).run()
    assert {drift.artifact for drift in result.drifts} >= {"docs-json", "metadata"}


def test_timestamps_are_ignored(compiled) -> None:
    target = compiled.artifact_path("docs-json")
    document = json.loads(target.read_text(encoding="utf-8"))
    document["generatedAt"] = "1999-12-31T00:00:00Z"
    target.write_text(json.dumps(document, indent=2), encoding="utf-8")
    assert ConsistencyVerifier(compiled, names=["docs-json", "sql-script"]).run().clean


def test_verifier_never_touches_committed_files(compiled) -> None:
    before = {path: path.read_bytes() for path in compiled.output_path.rglob("*") if path.is_file()}
    ConsistencyVerifier(compiled).run()
    after = {path: path.read_bytes() for path in compiled.output_path.rglob("*") if path.is_file()}
    assert before == after


def test_verifier_runs_only_once(compiled) -> None:
    verifier = ConsistencyVerifier(compiled)
    verifier.run()
    with pytest.raises(IllegalTransitionError):
        verifier.run()


def test_normalisers_mask_timestamps() -> None:
    assert normalise_text("# generated-at: x\nA=1\n") == ["A=1"]
    assert normalise_json('{"generatedAt": "x", "a": 1}') == normalise_json('{"generatedAt": "y", "a": 1}')
    assert normalise_json("not json") == ["not json"]


def test_key_order_in_json_is_not_drift(compiled) -> None:
    target = compiled.artifact_path("docs-json")
    document = json.loads(target.read_text(encoding="utf-8"))
    target.write_text(json.dumps(document, indent=4, sort_keys=True) + "\n", encoding="utf-8")
    assert ConsistencyVerifier(compiled, names=["docs-json", "metadata"]).run().clean


def test_json_diff_is_rendered_with_sorted_keys(compiled) -> None:
    target = compiled.artifact_path("docs-json")
    document = json.loads(target.read_text(encoding="utf-8"))
    document["tools"] = "edited"
    target.write_text(json.dumps(document), encoding="utf-8")
    (drift,) = ConsistencyVerifier(compiled, names=["docs-json"]).run().drifts
    assert drift.kind == "modified"
    assert '-  "tools": "edited"' in drift.diff.splitlines()


def test_edits_to_rows_mentioning_the_marker_are_detected(write_manifest, sample_entries, entry, compiler_config) -> None:
    write_manifest([*sample_entries, entry("stamper", category="utilities", description="records generated-at: columns")])
    config = compiler_config()
    compile_manifest(config, generated_at=STAMP)
    target = config.artifact_path("docs-markdown")
    text = target.read_text(encoding="utf-8")
    assert "records generated-at: columns" in text
    target.write_text(text.replace("records generated-at: columns", "records generated-at: rows"), encoding="utf-8")

    (drift,) = ConsistencyVerifier(config, names=["docs-markdown"]).run().drifts
    assert "records generated-at: rows" in drift.diff


def test_normalise_text_keeps_content_lines_with_the_marker() -> None:
    text = "-- generated-at: x\nCOMMENT ON TABLE t IS 'generated-at: y';\n"
    assert normalise_text(text) == ["COMMENT ON TABLE t IS 'generated-at: y';"]
    assert normalise_text("<!-- generated-at: x -->\n| a | generated-at: b |\n") == ["| a | generated-at: b |"]
