# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Detection core for matchacup.

This module turns pixels into a DetectionResult.
All operations are deterministic, side-effect free and model-agnostic.
"""

from matchacup.detect.analyze import analyze, analyze_async, analyze_pixels
from matchacup.detect.config import DetectorConfig, load_config

__all__ = [
    "analyze",
    "analyze_async",
    "analyze_pixels",
    "DetectorConfig",
    "load_config",
]
