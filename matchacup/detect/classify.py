# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Per-pixel matcha classification and aggregate statistics.

A pixel is "matcha-like" when green clearly dominates red and blue and
the green channel sits in a mid-to-bright band: saturated green, not
washed out to white/cream and not dark or brown.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from matchacup.schema import ColorStatistics, ReferenceColor
from matchacup.detect.colorspace import rgb_distance_batch

# Pixels per distance batch; bounds the (N, K) distance matrix
_DISTANCE_CHUNK = 1 << 16


@dataclass(frozen=True)
class MatchaPixelRule:
    """Channel thresholds for a matcha-like pixel."""

    # Green channel brightness band (inclusive)
    # Below: dark/olive/brown. Above: pastel, cream, white.
    green_min: int = 100
    green_max: int = 210

    # Required green dominance: G > R + red_margin and G > B + blue_margin
    red_margin: int = 10
    blue_margin: int = 20

    def __post_init__(self) -> None:
        """Validate the band."""
        if not 0 <= self.green_min <= self.green_max <= 255:
            raise ValueError(
                f"Need 0 <= green_min <= green_max <= 255, "
                f"got {self.green_min}..{self.green_max}"
            )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "green_min": self.green_min,
            "green_max": self.green_max,
            "red_margin": self.red_margin,
            "blue_margin": self.blue_margin,
        }

    @classmethod
    def from_dict(cls, data: dict) -> MatchaPixelRule:
        """Deserialize from dictionary, defaults for missing keys."""
        return cls(**{k: int(v) for k, v in data.items()})


def classify_pixels(
    rgb_pixels: NDArray[np.uint8],
    rule: MatchaPixelRule,
) -> NDArray[np.bool_]:
    """
    Flag matcha-like pixels.

    Args:
        rgb_pixels: Array of shape (N, 3) with uint8 RGB values
        rule: Thresholds to apply

    Returns:
        Boolean array of shape (N,)
    """
    # Widen before subtracting so uint8 never wraps
    px = np.asarray(rgb_pixels).astype(np.int32)
    r, g, b = px[:, 0], px[:, 1], px[:, 2]

    return (
        (g >= rule.green_min)
        & (g <= rule.green_max)
        & (g > r + rule.red_margin)
        & (g > b + rule.blue_margin)
    )


def compute_statistics(
    rgb_pixels: NDArray[np.uint8],
    rule: MatchaPixelRule,
    references: tuple[ReferenceColor, ...],
    reference_radius: float,
) -> ColorStatistics:
    """
    Aggregate color statistics over the sampled pixels.

    Args:
        rgb_pixels: Array of shape (N, 3) with the sampled, opaque pixels
        rule: Matcha pixel rule
        references: Reference matcha colors
        reference_radius: Euclidean RGB distance under which a matcha
            pixel counts as close to a reference color

    Returns:
        ColorStatistics (all zeros when N == 0)
    """
    n = len(rgb_pixels)
    if n == 0:
        return ColorStatistics(
            pixel_count=0,
            mean_rgb=(0.0, 0.0, 0.0),
            matcha_count=0,
            reference_count=0,
        )

    # Integer sums keep the means exact and order-independent
    sums = np.asarray(rgb_pixels).astype(np.int64).sum(axis=0)
    mean_rgb = tuple(float(s) / n for s in sums)

    matcha_mask = classify_pixels(rgb_pixels, rule)
    matcha_count = int(np.count_nonzero(matcha_mask))

    reference_count = 0
    if matcha_count > 0 and references:
        palette = np.array([ref.rgb for ref in references], dtype=np.float64)
        matcha_pixels = np.asarray(rgb_pixels)[matcha_mask]
        for start in range(0, len(matcha_pixels), _DISTANCE_CHUNK):
            chunk = matcha_pixels[start:start + _DISTANCE_CHUNK]
            nearest = rgb_distance_batch(chunk, palette).min(axis=1)
            reference_count += int(np.count_nonzero(nearest < reference_radius))

    return ColorStatistics(
        pixel_count=n,
        mean_rgb=mean_rgb,
        matcha_count=matcha_count,
        reference_count=reference_count,
    )
