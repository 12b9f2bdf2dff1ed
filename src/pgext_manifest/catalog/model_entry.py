# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typed models for individual manifest entries."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final, cast

from .errors import StructuralError, StructuralIssue
from .types import DEFAULT_CATEGORY, SUPPORTED_KINDS, EntryKind, JSONValue, SourceType
from .utils import (
    expect_string,
    optional_bool,
    optional_mapping,
    optional_string,
    sorted_unique,
    string_array,
)

_SHORT_REF_LENGTH: Final[int] = 7


@dataclass(frozen=True, slots=True)
class RuntimeFlags:
    """Runtime attributes consumed by the preload and bootstrap generators."""

    shared_preload: bool = False
    default_enable: bool = False
    preload_only: bool = False
    preload_library_name: str | None = None
    notes: tuple[str, ...] = ()

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, entry: str) -> RuntimeFlags:
        """Create runtime flags from the ``runtime`` object of an entry.

        Args:
            data: Mapping describing runtime behaviour.
            entry: Entry label used in error messages.

        Returns:
            RuntimeFlags: Frozen runtime flags.
        """

        return RuntimeFlags(
            shared_preload=optional_bool(data.get("sharedPreload"), key="runtime.sharedPreload", entry=entry, default=False),
            default_enable=optional_bool(data.get("defaultEnable"), key="runtime.defaultEnable", entry=entry, default=False),
            preload_only=optional_bool(data.get("preloadOnly"), key="runtime.preloadOnly", entry=entry, default=False),
            preload_library_name=optional_string(
                data.get("preloadLibraryName"),
                key="runtime.preloadLibraryName",
                entry=entry,
            ),
            notes=string_array(data.get("notes"), key="runtime.notes", entry=entry),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        """Return the canonical JSON representation of the flags."""

        payload: dict[str, JSONValue] = {
            "sharedPreload": self.shared_preload,
            "defaultEnable": self.default_enable,
            "preloadOnly": self.preload_only,
        }
        if self.preload_library_name is not None:
            payload["preloadLibraryName"] = self.preload_library_name
        if self.notes:
            payload["notes"] = list(self.notes)
        return payload


@dataclass(frozen=True, slots=True)
class SourceSpec:
    """Where an entry's code comes from."""

    kind: SourceType = "builtin"
    repository: str | None = None
    tag: str | None = None
    ref: str | None = None
    commit: str | None = None

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, entry: str) -> SourceSpec:
        """Create a source specification from JSON data.

        Args:
            data: Mapping describing the source.
            entry: Entry label used in error messages.

        Returns:
            SourceSpec: Frozen source specification.
        """

        if not data:
            return SourceSpec()
        source_type = expect_string(data.get("type"), key="source.type", entry=entry)
        if source_type not in ("builtin", "git", "git-ref"):
            raise StructuralError([StructuralIssue(entry, "source.type", f"unsupported source type '{source_type}'")])
        return SourceSpec(
            kind=cast(SourceType, source_type),
            repository=optional_string(data.get("repository"), key="source.repository", entry=entry),
            tag=optional_string(data.get("tag"), key="source.tag", entry=entry),
            ref=optional_string(data.get("ref"), key="source.ref", entry=entry),
            commit=optional_string(data.get("commit"), key="source.commit", entry=entry),
        )

    @property
    def version(self) -> str:
        """Return the human-facing version label derived from the source."""

        if self.tag:
            return self.tag[1:] if self.tag.startswith("v") and self.tag[1:2].isdigit() else self.tag
        if self.ref:
            return self.ref[:_SHORT_REF_LENGTH]
        return "builtin"

    def to_dict(self) -> dict[str, JSONValue]:
        """Return the canonical JSON representation of the source."""

        payload: dict[str, JSONValue] = {"type": self.kind}
        for key, value in (("repository", self.repository), ("tag", self.tag), ("ref", self.ref), ("commit", self.commit)):
            if value is not None:
                payload[key] = value
        return payload


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One extension, tool, or builtin described by the manifest."""

    name: str
    kind: EntryKind
    category: str = DEFAULT_CATEGORY
    description: str = ""
    display_name: str | None = None
    enabled: bool = True
    depends_on: tuple[str, ...] = ()
    runtime: RuntimeFlags = field(default_factory=RuntimeFlags)
    protected: bool = False
    disabled_reason: str | None = None
    source: SourceSpec = field(default_factory=SourceSpec)
    install_via: str | None = None
    pgdg_version: str | None = None
    apt_packages: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()
    source_url: str | None = None
    docs_url: str | None = None

    @staticmethod
    def from_mapping(data: Mapping[str, JSONValue], *, protected: bool) -> CatalogEntry:
        """Create an entry from a schema-validated, alias-normalised mapping.

        Args:
            data: Mapping describing the entry using canonical keys.
            protected: Whether the entry belongs to the protected set.

        Returns:
            CatalogEntry: Frozen entry instance.

        Raises:
            StructuralError: If a field has an unexpected shape.
        """

        name = expect_string(data.get("name"), key="name", entry="<entry>")
        kind_value = expect_string(data.get("kind"), key="kind", entry=name)
        if kind_value not in SUPPORTED_KINDS:
            raise StructuralError([StructuralIssue(name, "kind", f"unsupported kind '{kind_value}'")])
        return CatalogEntry(
            name=name,
            kind=cast(EntryKind, kind_value),
            category=optional_string(data.get("category"), key="category", entry=name) or DEFAULT_CATEGORY,
            description=optional_string(data.get("description"), key="description", entry=name) or "",
            display_name=optional_string(data.get("displayName"), key="displayName", entry=name),
            enabled=optional_bool(data.get("enabled"), key="enabled", entry=name, default=True),
            depends_on=sorted_unique(string_array(data.get("dependsOn"), key="dependsOn", entry=name)),
            runtime=RuntimeFlags.from_mapping(
                optional_mapping(data.get("runtime"), key="runtime", entry=name),
                entry=name,
            ),
            protected=protected,
            disabled_reason=optional_string(data.get("disabledReason"), key="disabledReason", entry=name),
            source=SourceSpec.from_mapping(optional_mapping(data.get("source"), key="source", entry=name), entry=name),
            install_via=optional_string(data.get("install_via"), key="install_via", entry=name),
            pgdg_version=optional_string(data.get("pgdgVersion"), key="pgdgVersion", entry=name),
            apt_packages=string_array(data.get("aptPackages"), key="aptPackages", entry=name),
            notes=string_array(data.get("notes"), key="notes", entry=name),
            source_url=optional_string(data.get("sourceUrl"), key="sourceUrl", entry=name),
            docs_url=optional_string(data.get("docsUrl"), key="docsUrl", entry=name),
        )

    @property
    def label(self) -> str:
        """Return the display name, falling back to the entry name."""

        return self.display_name or self.name

    @property
    def version(self) -> str:
        """Return the packaged version when known, else the source version."""

        return self.pgdg_version or self.source.version

    @property
    def needs_creation(self) -> bool:
        """Return ``True`` when the entry requires ``CREATE EXTENSION``."""

        return self.kind != "tool" and not self.runtime.preload_only

    @property
    def preload_library(self) -> str:
        """Return the library name used in ``shared_preload_libraries``."""

        return self.runtime.preload_library_name or self.name

    def to_dict(self) -> dict[str, JSONValue]:
        """Return the canonical JSON representation used for checksums."""

        payload: dict[str, JSONValue] = {
            "name": self.name,
            "kind": self.kind,
            "category": self.category,
            "description": self.description,
            "enabled": self.enabled,
            "dependsOn": list(self.depends_on),
            "runtime": self.runtime.to_dict(),
            "source": self.source.to_dict(),
        }
        optional: tuple[tuple[str, JSONValue], ...] = (
            ("displayName", self.display_name),
            ("disabledReason", self.disabled_reason),
            ("install_via", self.install_via),
            ("pgdgVersion", self.pgdg_version),
            ("sourceUrl", self.source_url),
            ("docsUrl", self.docs_url),
        )
        for key, value in optional:
            if value is not None:
                payload[key] = value
        if self.apt_packages:
            payload["aptPackages"] = list(self.apt_packages)
        if self.notes:
            payload["notes"] = list(self.notes)
        return payload


__all__ = ["CatalogEntry", "RuntimeFlags", "SourceSpec"]
