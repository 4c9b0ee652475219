# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Glue around the detection core.

1. Ratings -- Combine a verdict with the user's score and persist it
2. Capture session -- Step machine deciding when analysis runs

Nothing here changes a DetectionResult.
"""

from matchacup.runtime.ratings import (
    InMemoryRatingStore,
    RatingStore,
    build_rating_record,
)
from matchacup.runtime.session import CaptureSession, CaptureStep

__all__ = [
    "RatingStore",
    "InMemoryRatingStore",
    "build_rating_record",
    "CaptureSession",
    "CaptureStep",
]
