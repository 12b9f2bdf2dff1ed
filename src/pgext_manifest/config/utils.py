# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for merging and normalising configuration fragments."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested tables."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Return ``data`` with ``$VAR`` and ``${VAR}`` references expanded.

    Unknown variables are left untouched so the validation error points at
    the literal reference.

    Args:
        data: Configuration fragment.
        env: Environment used for lookups.

    Returns:
        dict[str, Any]: Expanded copy of ``data``.
    """

    return {key: _expand_value(value, env) for key, value in data.items()}


def normalise_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``data`` with top-level ``kebab-case`` keys rewritten to ``snake_case``."""

    return {key.replace("-", "_"): value for key, value in data.items()}


def _expand_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _expand_string(value, env)
    if isinstance(value, Mapping):
        return {key: _expand_value(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_value(item, env) for item in value]
    return value


def _expand_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


__all__ = ["deep_merge", "expand_env", "normalise_keys"]
