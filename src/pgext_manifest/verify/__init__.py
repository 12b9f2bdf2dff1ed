# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Consistency verification of committed artifacts."""

from __future__ import annotations

from typing import Final

from .verifier import (
    REMEDIATION,
    ArtifactDrift,
    ConsistencyVerifier,
    IllegalTransitionError,
    VerificationResult,
    VerifierState,
)

__all__: Final[tuple[str, ...]] = (
    "REMEDIATION",
    "ArtifactDrift",
    "ConsistencyVerifier",
    "IllegalTransitionError",
    "VerificationResult",
    "VerifierState",
)
