# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""I/O helpers for reading manifest documents and the bundled schema."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from importlib import resources
from pathlib import Path
from typing import Final, cast

from .errors import ROOT_CONTEXT, StructuralError, StructuralIssue
from .types import JSONValue

SCHEMA_PACKAGE: Final[str] = "pgext_manifest.catalog.data"
SCHEMA_FILENAME: Final[str] = "manifest.schema.json"


def load_schema() -> Mapping[str, JSONValue]:
    """Load the manifest JSON schema shipped with the package.

    Returns:
        Mapping[str, JSONValue]: Parsed JSON schema mapping.
    """

    text = resources.files(SCHEMA_PACKAGE).joinpath(SCHEMA_FILENAME).read_text(encoding="utf-8")
    payload = cast(JSONValue, json.loads(text))
    if not isinstance(payload, Mapping):  # pragma: no cover - bundled schema is an object
        raise TypeError(f"{SCHEMA_FILENAME}: expected a JSON object")
    return payload


def read_manifest_bytes(path: Path) -> bytes:
    """Return the raw bytes of the manifest at ``path``.

    Args:
        path: Filesystem path to the manifest document.

    Returns:
        bytes: Manifest contents.

    Raises:
        StructuralError: If the manifest does not exist or cannot be read.
    """

    try:
        return path.read_bytes()
    except OSError as exc:
        raise StructuralError([StructuralIssue(ROOT_CONTEXT, "path", f"cannot read {path}: {exc.strerror}")]) from exc


def load_document(data: bytes | str, *, context: str = ROOT_CONTEXT) -> JSONValue:
    """Parse ``data`` as JSON and validate the payload.

    Args:
        data: Serialized manifest document.
        context: Human-readable context string used in error messages.

    Returns:
        JSONValue: Parsed JSON value extracted from the document.

    Raises:
        StructuralError: If the document is not valid UTF-8 JSON.
    """

    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        payload = cast(JSONValue, json.loads(text))
    except UnicodeDecodeError as exc:
        raise StructuralError([StructuralIssue(context, "encoding", "manifest is not valid UTF-8")]) from exc
    except json.JSONDecodeError as exc:
        reason = f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}"
        raise StructuralError([StructuralIssue(context, "document", reason)]) from exc
    return _ensure_json_value(payload, context=context)


def dump_json(payload: JSONValue) -> bytes:
    """Serialise ``payload`` the way every JSON artifact is written.

    Args:
        payload: JSON-compatible value.

    Returns:
        bytes: Two-space indented UTF-8 JSON terminated by a newline.
    """

    return (json.dumps(payload, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


__all__ = ["dump_json", "load_document", "load_schema", "read_manifest_bytes"]


def _ensure_json_value(value: JSONValue, *, context: str) -> JSONValue:
    """Ensure ``value`` is composed of JSON-compatible structures.

    Args:
        value: Parsed JSON payload to validate recursively.
        context: Human-readable context string used in error messages.

    Returns:
        JSONValue: Validated JSON value.

    Raises:
        StructuralError: If ``value`` contains unsupported JSON constructs.
    """

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _ensure_json_value(item, context=f"{context}.{key}") for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [_ensure_json_value(item, context=f"{context}[]") for item in value]
    raise StructuralError([StructuralIssue(context, "document", "value is not valid JSON")])
