# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Detection schema: the verdict produced by ``analyze()``.

Design principles:
- Immutable: All types are frozen dataclasses
- Deterministic: Same pixels + same config → same result
- Self-checking: Invariants are validated on construction

Wire shape (camelCase, as consumed by the presentation layer)::

    {"cupFound": true, "colorScore": 9.0, "avgColor": "#7baf5c", "maxScore": 10.0}
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Constants
# =============================================================================

NEUTRAL_GRAY = "#888888"

_HEX_RE = re.compile(r"^#[0-9a-f]{6}$")


# =============================================================================
# Strategy Tags
# =============================================================================


class SamplerKind(Enum):
    """
    Region sampling policy.

    The policies are NOT equivalent: the same photo scores differently
    under each. CUP_SILHOUETTE is the default contract.
    """
    DISC = "disc"                      # centered circle, radius = min(W, H) * k
    CUP_SILHOUETTE = "cup_silhouette"  # tapered ellipse, wider at the rim
    FULL_FRAME = "full_frame"          # every opaque pixel


class ScoringMethod(Enum):
    """Score strategy, which also fixes the output scale."""
    RATIO_BLEND = "ratio_blend"  # 0-10, whole points
    PERCEPTUAL = "perceptual"    # 0-5, half points


# =============================================================================
# Reference Colors
# =============================================================================


@dataclass(frozen=True, slots=True)
class ReferenceColor:
    """
    A named "ideal matcha" color.

    Attributes:
        name: Human-readable label (e.g., "Bright ceremonial")
        hex: Lowercase ``#rrggbb`` string
    """
    name: str
    hex: str

    def __post_init__(self) -> None:
        """Normalize and validate the hex string."""
        normalized = self.hex.lower()
        if not normalized.startswith("#"):
            normalized = "#" + normalized
        if not _HEX_RE.match(normalized):
            raise ValueError(f"Reference color must be #rrggbb, got {self.hex!r}")
        object.__setattr__(self, "hex", normalized)

    @property
    def rgb(self) -> tuple[int, int, int]:
        """The color as an (r, g, b) tuple of ints."""
        return (
            int(self.hex[1:3], 16),
            int(self.hex[3:5], 16),
            int(self.hex[5:7], 16),
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"name": self.name, "hex": self.hex}

    @classmethod
    def from_dict(cls, data: dict) -> ReferenceColor:
        """Deserialize from dictionary."""
        return cls(name=data.get("name", data["hex"]), hex=data["hex"])


IDEAL_MATCHA_COLORS: tuple[ReferenceColor, ...] = (
    ReferenceColor("Bright ceremonial", "#7baf5c"),
    ReferenceColor("Creamy latte", "#a3c585"),
    ReferenceColor("Earthy mid-tone", "#8fb26b"),
    ReferenceColor("Vibrant whisked", "#76a646"),
)


# =============================================================================
# Aggregate Statistics
# =============================================================================


@dataclass(frozen=True, slots=True)
class ColorStatistics:
    """
    Aggregates over the sampled pixels of one ``analyze`` call.

    Attributes:
        pixel_count: Number of sampled, opaque pixels
        mean_rgb: Mean (R, G, B) over those pixels, (0, 0, 0) when empty
        matcha_count: Pixels satisfying the matcha pixel rule
        reference_count: Matcha pixels close to a reference color
    """
    pixel_count: int
    mean_rgb: tuple[float, float, float]
    matcha_count: int
    reference_count: int

    def __post_init__(self) -> None:
        """Validate counts are consistent."""
        if self.pixel_count < 0:
            raise ValueError(f"pixel_count must be >= 0, got {self.pixel_count}")
        if not 0 <= self.matcha_count <= self.pixel_count:
            raise ValueError(
                f"matcha_count must be 0-{self.pixel_count}, got {self.matcha_count}"
            )
        if not 0 <= self.reference_count <= self.matcha_count:
            raise ValueError(
                f"reference_count must be 0-{self.matcha_count}, "
                f"got {self.reference_count}"
            )

    @property
    def is_empty(self) -> bool:
        """True if no pixel was sampled."""
        return self.pixel_count == 0

    @property
    def matcha_ratio(self) -> float:
        """Fraction of sampled pixels that are matcha-like (0 when empty)."""
        if self.pixel_count == 0:
            return 0.0
        return self.matcha_count / self.pixel_count

    @property
    def reference_ratio(self) -> float:
        """Fraction of sampled pixels close to a reference color (0 when empty)."""
        if self.pixel_count == 0:
            return 0.0
        return self.reference_count / self.pixel_count

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "pixel_count": self.pixel_count,
            "mean_rgb": list(self.mean_rgb),
            "matcha_count": self.matcha_count,
            "reference_count": self.reference_count,
            "matcha_ratio": self.matcha_ratio,
            "reference_ratio": self.reference_ratio,
        }


# =============================================================================
# Detection Result
# =============================================================================


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """
    The verdict for one image.

    Attributes:
        cup_found: True if the sampled region plausibly holds matcha
        color_score: Quality of the green, 0..max_score (0 when not found)
        avg_color: Mean color of the sampled region as ``#rrggbb``
            (``#888888`` when nothing was sampled)
        max_score: Upper bound of the scale that produced color_score
    """
    cup_found: bool
    color_score: float
    avg_color: str
    max_score: float = 10.0

    def __post_init__(self) -> None:
        """Validate result invariants."""
        if self.max_score <= 0:
            raise ValueError(f"max_score must be > 0, got {self.max_score}")
        if not 0.0 <= self.color_score <= self.max_score:
            raise ValueError(
                f"color_score must be 0-{self.max_score}, got {self.color_score}"
            )
        if not self.cup_found and self.color_score != 0:
            raise ValueError(
                f"color_score must be 0 when no cup is found, got {self.color_score}"
            )
        if not _HEX_RE.match(self.avg_color):
            raise ValueError(f"avg_color must be #rrggbb lowercase, got {self.avg_color!r}")

    @classmethod
    def failure(cls, max_score: float = 10.0) -> DetectionResult:
        """The fixed result for undecodable or empty input."""
        return cls(
            cup_found=False,
            color_score=0.0,
            avg_color=NEUTRAL_GRAY,
            max_score=max_score,
        )

    @property
    def label(self) -> Optional[str]:
        """Rating caption for a found cup, None otherwise."""
        if not self.cup_found:
            return None
        from matchacup.detect.scoring import rating_label
        return rating_label(self.color_score, self.max_score)

    def to_dict(self) -> dict:
        """Serialize to the camelCase wire shape."""
        return {
            "cupFound": self.cup_found,
            "colorScore": self.color_score,
            "avgColor": self.avg_color,
            "maxScore": self.max_score,
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> DetectionResult:
        """Deserialize from the camelCase wire shape."""
        cup_found = data["cupFound"]
        if not isinstance(cup_found, bool):
            raise TypeError(f"cupFound must be a bool, got {cup_found!r}")
        return cls(
            cup_found=cup_found,
            color_score=float(data["colorScore"]),
            avg_color=data["avgColor"],
            max_score=float(data.get("maxScore", 10.0)),
        )

    @classmethod
    def from_json(cls, json_str: str) -> DetectionResult:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))
