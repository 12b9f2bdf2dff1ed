# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Utility helpers for coercing manifest JSON values into typed fields."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .errors import StructuralError, StructuralIssue
from .types import JSONValue


def _reject(entry: str, key: str, reason: str) -> StructuralError:
    return StructuralError([StructuralIssue(entry=entry, field=key, reason=reason)])


def expect_string(value: JSONValue | None, *, key: str, entry: str) -> str:
    """Return ``value`` as ``str`` or raise a structural error.

    Args:
        value: Raw JSON value extracted from the manifest payload.
        key: Attribute name used in error messages.
        entry: Entry label used in error messages.

    Returns:
        str: Value coerced to a string.

    Raises:
        StructuralError: If ``value`` is not a non-empty string.
    """
    if not isinstance(value, str) or not value:
        raise _reject(entry, key, "expected a non-empty string")
    return value


def optional_string(value: JSONValue | None, *, key: str, entry: str) -> str | None:
    """Return ``value`` as an optional string with validation.

    Args:
        value: Raw JSON value extracted from the manifest payload.
        key: Attribute name used in error messages.
        entry: Entry label used in error messages.

    Returns:
        str | None: ``value`` when present, otherwise ``None``.

    Raises:
        StructuralError: If ``value`` is present but not a string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise _reject(entry, key, "expected a string if present")
    return value


def optional_bool(value: JSONValue | None, *, key: str, entry: str, default: bool) -> bool:
    """Return ``value`` coerced to ``bool`` falling back to ``default``.

    Args:
        value: Raw JSON value extracted from the manifest payload.
        key: Attribute name used in error messages.
        entry: Entry label used in error messages.
        default: Value returned when ``value`` is ``None``.

    Returns:
        bool: Boolean value derived from ``value`` or ``default``.

    Raises:
        StructuralError: If ``value`` is present and not a bool.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise _reject(entry, key, "expected a boolean")


def string_array(value: JSONValue | None, *, key: str, entry: str) -> tuple[str, ...]:
    """Return ``value`` as a tuple of strings with validation.

    Args:
        value: Raw JSON value extracted from the manifest payload.
        key: Attribute name used in error messages.
        entry: Entry label used in error messages.

    Returns:
        tuple[str, ...]: Tuple containing all string entries from ``value``.

    Raises:
        StructuralError: If ``value`` is not a sequence of strings.
    """
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise _reject(entry, key, "expected an array of strings")
    result: list[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            raise _reject(entry, f"{key}[{index}]", "expected a string")
        result.append(item)
    return tuple(result)


def optional_mapping(value: JSONValue | None, *, key: str, entry: str) -> Mapping[str, JSONValue]:
    """Return ``value`` as a mapping, treating ``None`` as empty.

    Args:
        value: Raw JSON value extracted from the manifest payload.
        key: Attribute name used in error messages.
        entry: Entry label used in error messages.

    Returns:
        Mapping[str, JSONValue]: Mapping derived from ``value``.

    Raises:
        StructuralError: If ``value`` is present and not a mapping.
    """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _reject(entry, key, "expected an object")
    return value


def sorted_unique(values: Sequence[str]) -> tuple[str, ...]:
    """Return ``values`` de-duplicated and sorted lexicographically."""

    return tuple(sorted(set(values)))


__all__ = [
    "expect_string",
    "optional_bool",
    "optional_mapping",
    "optional_string",
    "sorted_unique",
    "string_array",
]
