# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Matchacup -- Is this a cup of matcha, and how good is its green?

Heuristic, model-free analysis of a beverage photo: samples the cup
region, classifies matcha-green pixels and scores the color.

Quick start::

    from matchacup import analyze

    result = analyze("cup.jpg")
    result.cup_found    # True / False
    result.color_score  # 0-10 (default scale)
    result.avg_color    # "#7baf5c"
"""

from __future__ import annotations

__version__ = "1.0.0"

from matchacup.detect import analyze, analyze_async, DetectorConfig, load_config
from matchacup.errors import InvalidImageError, MatchaCupError
from matchacup.schema import (
    DetectionResult,
    RatingRecord,
    SamplerKind,
    ScoringMethod,
)

__all__ = [
    # Core API
    "analyze",
    "analyze_async",
    "DetectionResult",
    # Configuration
    "DetectorConfig",
    "load_config",
    "SamplerKind",
    "ScoringMethod",
    # Errors
    "MatchaCupError",
    "InvalidImageError",
    # Collaborator entity
    "RatingRecord",
    # Version
    "__version__",
]
