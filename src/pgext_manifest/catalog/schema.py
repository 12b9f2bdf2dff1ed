# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Schema loading utilities for validating manifest documents."""

from __future__ import annotations

import importlib
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Final, Protocol, cast, runtime_checkable

from .errors import ROOT_CONTEXT, StructuralIssue
from .io import load_schema
from .types import JSONValue

_REQUIRED_RE: Final[re.Pattern[str]] = re.compile(r"^'(?P<name>[^']+)' is a required property$")


class SchemaValidationError(Protocol):
    """Represent the subset of jsonschema validation errors used here."""

    message: str
    validator: str
    absolute_path: Sequence[str | int]


@runtime_checkable
class SchemaValidator(Protocol):
    """Protocol describing the minimal interface exposed by jsonschema validators."""

    def iter_errors(self, instance: JSONValue) -> Iterable[SchemaValidationError]:
        """Iterate over validation errors for ``instance``.

        Args:
            instance: JSON payload to validate against the schema.

        Returns:
            Iterable[SchemaValidationError]: Iterator yielding validation errors.
        """


SchemaValidatorFactory = Callable[[JSONValue], SchemaValidator]

jsonschema_module = importlib.import_module("jsonschema")
Draft202012Validator = cast(SchemaValidatorFactory, jsonschema_module.Draft202012Validator)


@dataclass(slots=True)
class SchemaRepository:
    """Hold the compiled manifest validator."""

    manifest_validator: SchemaValidator

    @classmethod
    def load(cls) -> SchemaRepository:
        """Compile the bundled manifest schema.

        Returns:
            SchemaRepository: Repository configured with the manifest validator.
        """

        return cls(manifest_validator=Draft202012Validator(load_schema()))

    def collect_issues(self, document: JSONValue) -> tuple[StructuralIssue, ...]:
        """Return every schema violation in ``document`` as structural issues.

        Args:
            document: Parsed manifest document.

        Returns:
            tuple[StructuralIssue, ...]: Issues ordered by their position in the document.
        """

        errors = sorted(
            self.manifest_validator.iter_errors(document),
            key=lambda error: tuple(str(part).zfill(8) for part in error.absolute_path),
        )
        return tuple(_issue_from_error(error, document) for error in errors)


def _issue_from_error(error: SchemaValidationError, document: JSONValue) -> StructuralIssue:
    """Translate a jsonschema error into a :class:`StructuralIssue`."""

    path = list(error.absolute_path)
    entry = ROOT_CONTEXT
    if len(path) >= 2 and path[0] == "entries" and isinstance(path[1], int):
        entry = _entry_label(document, path[1])
        path = path[2:]
    field_parts = [str(part) for part in path]
    reason = error.message
    if error.validator == "required":
        match = _REQUIRED_RE.match(error.message)
        if match is not None:
            field_parts.append(match.group("name"))
            reason = "is required"
    return StructuralIssue(entry=entry, field=".".join(field_parts) or "document", reason=reason)


def _entry_label(document: JSONValue, index: int) -> str:
    """Return the entry name at ``index`` or a positional label when it has none."""

    if isinstance(document, Mapping):
        entries = document.get("entries")
        if isinstance(entries, Sequence) and index < len(entries):
            candidate = entries[index]
            if isinstance(candidate, Mapping):
                name = candidate.get("name")
                if isinstance(name, str) and name:
                    return name
    return f"entries[{index}]"


__all__ = ["SchemaRepository", "SchemaValidator"]
