# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High-level loader that materialises a validated :class:`Catalog`."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ROOT_CONTEXT, StructuralError, StructuralIssue
from .io import load_document, read_manifest_bytes
from .model_catalog import Catalog, CatalogMetadata
from .model_entry import CatalogEntry
from .schema import SchemaRepository
from .types import KEY_ALIASES, JSONValue

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ManifestLoader:
    """Parse and structurally validate manifest documents.

    Every structural problem is collected before failing so a single run
    reports all of them. ``protected`` names the entries whose ``protected``
    flag is derived as ``True``.
    """

    protected: frozenset[str] = frozenset()
    _schemas: SchemaRepository = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Compile the bundled schema once per loader."""

        self._schemas = SchemaRepository.load()

    def load_path(self, path: Path) -> Catalog:
        """Load the manifest stored at ``path``.

        Args:
            path: Filesystem path to the manifest JSON document.

        Returns:
            Catalog: Validated catalog.
        """

        return self.load(read_manifest_bytes(path))

    def load(self, data: bytes | str) -> Catalog:
        """Parse ``data`` into a :class:`Catalog`.

        Args:
            data: Serialized manifest document.

        Returns:
            Catalog: Validated catalog with derived ``protected`` flags.

        Raises:
            StructuralError: When the document is malformed; carries every issue.
        """

        document = load_document(data)
        if not isinstance(document, Mapping):
            raise StructuralError([StructuralIssue(ROOT_CONTEXT, "document", "expected a JSON object")])

        issues: list[StructuralIssue] = list(self._schemas.collect_issues(document))
        raw_entries = document.get("entries")
        mappings: list[Mapping[str, JSONValue]] = []
        if isinstance(raw_entries, Sequence) and not isinstance(raw_entries, (str, bytes)):
            mappings = [item if isinstance(item, Mapping) else {} for item in raw_entries]
        normalised, alias_issues = _normalise_aliases(mappings)
        issues.extend(alias_issues)
        issues.extend(_check_entries(normalised))
        if issues:
            LOGGER.debug("manifest rejected with %d structural issue(s)", len(issues))
            raise StructuralError(_dedupe(issues))

        entries = tuple(
            CatalogEntry.from_mapping(mapping, protected=mapping["name"] in self.protected) for mapping in normalised
        )
        generated_at = document.get("generatedAt")
        metadata = document.get("metadata")
        catalog = Catalog(
            entries=entries,
            generated_at=generated_at if isinstance(generated_at, str) else None,
            metadata=_metadata_from(metadata if isinstance(metadata, Mapping) else {}),
        )
        LOGGER.debug("loaded manifest with %d entries", len(catalog))
        return catalog


def load_catalog(data: bytes | str, *, protected: Iterable[str] = ()) -> Catalog:
    """Convenience wrapper around :class:`ManifestLoader`.

    Args:
        data: Serialized manifest document.
        protected: Names of entries that may never be disabled.

    Returns:
        Catalog: Validated catalog.
    """

    return ManifestLoader(protected=frozenset(protected)).load(data)


def _normalise_aliases(
    mappings: Sequence[Mapping[str, JSONValue]],
) -> tuple[list[dict[str, JSONValue]], list[StructuralIssue]]:
    """Rewrite alias keys to their canonical names, flagging conflicting pairs."""

    normalised: list[dict[str, JSONValue]] = []
    issues: list[StructuralIssue] = []
    for index, mapping in enumerate(mappings):
        label = _label(mapping, index)
        payload = dict(mapping)
        for alias, canonical in KEY_ALIASES.items():
            if alias not in payload:
                continue
            if canonical in payload:
                issues.append(StructuralIssue(label, alias, f"conflicts with '{canonical}'; use only '{canonical}'"))
                payload.pop(alias)
                continue
            payload[canonical] = payload.pop(alias)
        normalised.append(payload)
    return normalised, issues


def _check_entries(mappings: Sequence[Mapping[str, JSONValue]]) -> list[StructuralIssue]:
    """Return cross-entry structural issues (duplicates, dangling references)."""

    issues: list[StructuralIssue] = []
    first_seen: dict[str, int] = {}
    for index, mapping in enumerate(mappings):
        name = mapping.get("name")
        if not isinstance(name, str) or not name:
            continue
        if name in first_seen:
            issues.append(StructuralIssue(name, "name", f"duplicate name (first defined at entries[{first_seen[name]}])"))
        else:
            first_seen[name] = index

    for index, mapping in enumerate(mappings):
        label = _label(mapping, index)
        if mapping.get("enabled") is False and not mapping.get("disabledReason"):
            issues.append(StructuralIssue(label, "disabledReason", "is required when enabled is false"))
        dependencies = mapping.get("dependsOn")
        if not isinstance(dependencies, Sequence) or isinstance(dependencies, str):
            continue
        for dependency in dependencies:
            if not isinstance(dependency, str):
                continue
            if dependency == mapping.get("name"):
                issues.append(StructuralIssue(label, "dependsOn", "entry cannot depend on itself"))
            elif dependency not in first_seen:
                issues.append(StructuralIssue(label, "dependsOn", f"references unknown entry '{dependency}'"))
    return issues


def _metadata_from(data: Mapping[str, JSONValue]) -> CatalogMetadata:
    pg_version = data.get("pgVersion")
    base_image_sha = data.get("baseImageSha")
    return CatalogMetadata(
        pg_version=pg_version if isinstance(pg_version, str) else None,
        base_image_sha=base_image_sha if isinstance(base_image_sha, str) else None,
    )


def _label(mapping: Mapping[str, JSONValue], index: int) -> str:
    name = mapping.get("name")
    return name if isinstance(name, str) and name else f"entries[{index}]"


def _dedupe(issues: Iterable[StructuralIssue]) -> list[StructuralIssue]:
    """Return ``issues`` with duplicates removed while preserving order."""

    seen: set[StructuralIssue] = set()
    ordered: list[StructuralIssue] = []
    for issue in issues:
        if issue in seen:
            continue
        seen.add(issue)
        ordered.append(issue)
    return ordered


__all__ = ["ManifestLoader", "load_catalog"]
