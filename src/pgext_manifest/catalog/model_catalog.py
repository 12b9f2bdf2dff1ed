# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Catalog aggregate model produced by the manifest loader."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .checksum import compute_catalog_checksum
from .model_entry import CatalogEntry


@dataclass(frozen=True, slots=True)
class CatalogMetadata:
    """Image-wide values declared next to the entries."""

    pg_version: str | None = None
    base_image_sha: str | None = None


@dataclass(frozen=True, slots=True)
class Catalog:
    """Validated manifest entries plus the free-form generation timestamp."""

    entries: tuple[CatalogEntry, ...]
    generated_at: str | None = None
    metadata: CatalogMetadata = field(default_factory=CatalogMetadata)
    _index: Mapping[str, CatalogEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Index entries by name for constant-time lookups."""

        object.__setattr__(self, "_index", {entry.name: entry for entry in self.entries})

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str) -> CatalogEntry:
        """Return the entry called ``name``.

        Raises:
            KeyError: If ``name`` is not part of the catalog.
        """

        return self._index[name]

    @property
    def names(self) -> tuple[str, ...]:
        """Return every entry name in canonical (sorted) order."""

        return tuple(sorted(self._index))

    def canonical_entries(self) -> tuple[CatalogEntry, ...]:
        """Return entries sorted by name, independent of manifest order."""

        return tuple(self._index[name] for name in self.names)

    def enabled_entries(self) -> tuple[CatalogEntry, ...]:
        """Return enabled entries in canonical order."""

        return tuple(entry for entry in self.canonical_entries() if entry.enabled)

    def disabled_entries(self) -> tuple[CatalogEntry, ...]:
        """Return disabled entries in canonical order."""

        return tuple(entry for entry in self.canonical_entries() if not entry.enabled)

    def dependents_of(self, name: str) -> tuple[CatalogEntry, ...]:
        """Return entries that list ``name`` in ``dependsOn``, sorted by name."""

        return tuple(entry for entry in self.canonical_entries() if name in entry.depends_on)

    def checksum(self) -> str:
        """Return the order-independent SHA-256 checksum of the entries."""

        return compute_catalog_checksum(self.entries)


__all__ = ["Catalog", "CatalogMetadata"]
