# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Color score strategies.

A scorer turns ColorStatistics into a number on its own fixed scale.
Scorers are only consulted when a cup was found; the caller handles the
"not found → 0" rule. Two calibrations are provided:

- RatioBlendScorer (0-10): weighted blend of matcha coverage, closeness
  to the reference palette, green dominance and green brightness.
- PerceptualDistanceScorer (0-5, half points): HSV distance from the
  average color to the nearest reference color.

Any object with ``max_score`` and ``score(stats, references)`` can be
passed to ``analyze(..., scorer=...)``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from matchacup.schema import ColorStatistics, ReferenceColor, ScoringMethod
from matchacup.detect.colorspace import HSV_WEIGHTS, hsv_distance, rgb_to_hsv


class Scorer(Protocol):
    """Interface shared by all score strategies."""

    @property
    def max_score(self) -> float: ...

    def score(
        self,
        stats: ColorStatistics,
        references: tuple[ReferenceColor, ...],
    ) -> float: ...


def _round_half_up(value: float, step: float = 1.0) -> float:
    """Round to the nearest multiple of step, halves going up."""
    return math.floor(value / step + 0.5) * step


# =============================================================================
# Ratio Blend (0-10)
# =============================================================================


@dataclass(frozen=True)
class RatioBlendScorer:
    """Heuristic blend on a 0-10 scale. A found cup never scores below 1."""

    max_score: float = 10.0
    min_found_score: float = 1.0

    # Matcha coverage: min(ratio_cap, matcha_ratio * ratio_weight)
    ratio_weight: float = 10.0
    ratio_cap: float = 4.0

    # Closeness to reference colors: min(reference_cap, reference_ratio * reference_weight)
    reference_weight: float = 15.0
    reference_cap: float = 3.0

    # Green dominance of the average color
    strong_dominance: tuple[float, float] = (20.0, 30.0)  # (over red, over blue) → 2 points
    mild_dominance: tuple[float, float] = (10.0, 15.0)    # → 1 point

    # Average green inside this band → 1 point
    ideal_green_band: tuple[float, float] = (130.0, 180.0)

    def score(
        self,
        stats: ColorStatistics,
        references: tuple[ReferenceColor, ...] = (),
    ) -> float:
        """Blend the four components, round and clamp to [min_found_score, max_score]."""
        avg_r, avg_g, avg_b = stats.mean_rgb

        ratio_points = min(self.ratio_cap, stats.matcha_ratio * self.ratio_weight)
        reference_points = min(self.reference_cap, stats.reference_ratio * self.reference_weight)

        if avg_g > avg_r + self.strong_dominance[0] and avg_g > avg_b + self.strong_dominance[1]:
            dominance_points = 2.0
        elif avg_g > avg_r + self.mild_dominance[0] and avg_g > avg_b + self.mild_dominance[1]:
            dominance_points = 1.0
        else:
            dominance_points = 0.0

        low, high = self.ideal_green_band
        band_points = 1.0 if low <= avg_g <= high else 0.0

        total = _round_half_up(ratio_points + reference_points + dominance_points + band_points)
        return float(min(self.max_score, max(self.min_found_score, total)))


# =============================================================================
# Perceptual Distance (0-5)
# =============================================================================


@dataclass(frozen=True)
class PerceptualDistanceScorer:
    """
    Distance-to-reference score on a 0-5 scale in half-point steps.

    The average color and each reference color are compared in HSV
    (hue in degrees, saturation/value in percent) with a weighted,
    hue-circular distance. The smallest distance is mapped through a
    decreasing piecewise-linear curve: very close matches stay near 5,
    the score falls quickly after that and is 0 from ``cutoff`` on.
    """

    max_score: float = 5.0
    weights: tuple[float, float, float] = HSV_WEIGHTS

    # (distance, score) knots; distances must increase
    curve: tuple[tuple[float, float], ...] = (
        (0.0, 5.0),
        (5.0, 4.5),
        (10.0, 3.5),
        (20.0, 1.5),
        (30.0, 0.0),
    )
    step: float = 0.5

    @property
    def cutoff(self) -> float:
        """Distance at and beyond which the score is 0."""
        return self.curve[-1][0]

    def min_distance(
        self,
        stats: ColorStatistics,
        references: tuple[ReferenceColor, ...],
    ) -> float:
        """Smallest weighted HSV distance from the average color to a reference."""
        if not references:
            return math.inf
        avg_hsv = rgb_to_hsv(np.array(stats.mean_rgb, dtype=np.float64))
        ref_hsv = rgb_to_hsv(np.array([ref.rgb for ref in references], dtype=np.float64))
        return float(np.min(hsv_distance(avg_hsv, ref_hsv, self.weights)))

    def score_distance(self, distance: float) -> float:
        """Map a distance through the curve and round to the step."""
        if distance >= self.cutoff:
            return 0.0
        xs = [d for d, _ in self.curve]
        ys = [s for _, s in self.curve]
        raw = float(np.interp(distance, xs, ys))
        return float(min(self.max_score, max(0.0, _round_half_up(raw, self.step))))

    def score(
        self,
        stats: ColorStatistics,
        references: tuple[ReferenceColor, ...],
    ) -> float:
        """Score the average color by its distance to the reference palette."""
        return self.score_distance(self.min_distance(stats, references))


# =============================================================================
# Lookup & Labels
# =============================================================================


def get_scorer(method: ScoringMethod) -> Scorer:
    """Return the default scorer for a scoring method."""
    return {
        ScoringMethod.RATIO_BLEND: RatioBlendScorer,
        ScoringMethod.PERCEPTUAL: PerceptualDistanceScorer,
    }[method]()


_RATING_LABELS: tuple[tuple[float, str], ...] = (
    (0.9, "Top grade: Vibrant Ceremonial!"),
    (0.7, "Great: Rich and lively green"),
    (0.5, "Average: A bit dull, maybe 2nd flush"),
    (0.3, "Low: Pale or brownish, culinary matcha?"),
)


def rating_label(score: float, max_score: float = 10.0) -> str:
    """
    Caption for a score, independent of the scale it was produced on.

    Args:
        score: The color score
        max_score: Top of the score's scale (10 or 5)

    Returns:
        Short human-readable verdict
    """
    fraction = score / max_score if max_score > 0 else 0.0
    for threshold, label in _RATING_LABELS:
        if fraction >= threshold:
            return label
    return "Poor: Not matcha-signature color"
