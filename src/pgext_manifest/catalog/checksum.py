# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Checksum utilities for catalog contents."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .model_entry import CatalogEntry


def compute_catalog_checksum(entries: Sequence[CatalogEntry]) -> str:
    """Calculate the checksum for ``entries`` independent of their input order.

    Args:
        entries: Catalog entries contributing to the checksum.

    Returns:
        str: Hex-encoded SHA-256 checksum covering the canonical entry payloads.
    """
    hasher = hashlib.sha256()
    for entry in sorted(entries, key=lambda item: item.name):
        hasher.update(entry.name.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(json.dumps(entry.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8"))
    return hasher.hexdigest()


__all__ = ["compute_catalog_checksum"]
