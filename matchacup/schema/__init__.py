# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Schema definitions for matcha detection.

All types in this module are immutable (frozen dataclasses).
Once a result is produced, downstream code treats it as a fact.
"""

from matchacup.schema.detection import (
    IDEAL_MATCHA_COLORS,
    NEUTRAL_GRAY,
    ColorStatistics,
    DetectionResult,
    ReferenceColor,
    SamplerKind,
    ScoringMethod,
)
from matchacup.schema.rating import RatingRecord

__all__ = [
    # Constants
    "NEUTRAL_GRAY",
    "IDEAL_MATCHA_COLORS",
    # Strategy tags
    "SamplerKind",
    "ScoringMethod",
    # Core types
    "ReferenceColor",
    "ColorStatistics",
    "DetectionResult",
    # Collaborator entity
    "RatingRecord",
]
