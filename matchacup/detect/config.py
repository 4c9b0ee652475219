# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Detector configuration.

Every threshold the verdict depends on lives here, visible to callers.
The ``(min_pixels, min_green_ratio)`` pair is the most sensitive tuning
point: looser samplers see more background and need a lower ratio,
tighter cup-shaped samplers can demand a higher one. Left unset, the
pair comes from the calibrated preset of the chosen sampler.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Union

from matchacup.schema import (
    IDEAL_MATCHA_COLORS,
    ReferenceColor,
    SamplerKind,
    ScoringMethod,
)
from matchacup.detect.classify import MatchaPixelRule

logger = logging.getLogger(__name__)


# (min_pixels, min_green_ratio) per sampler
_SAMPLER_PRESETS: dict[SamplerKind, tuple[int, float]] = {
    SamplerKind.CUP_SILHOUETTE: (1000, 0.10),
    SamplerKind.DISC: (100, 0.15),
    SamplerKind.FULL_FRAME: (50, 0.04),
}


@dataclass(frozen=True)
class DetectorConfig:
    """Configuration for one analysis."""

    # Region sampler
    sampler: SamplerKind = SamplerKind.CUP_SILHOUETTE

    # Disc: radius = min(W, H) * disc_fraction
    disc_fraction: float = 0.25

    # Cup silhouette: half-width/half-height as fractions of W/H,
    # linear narrowing toward the base, rim/base cut-off in normalized rows
    cup_width_fraction: float = 0.35
    cup_height_fraction: float = 0.40
    cup_taper: float = 0.3
    cup_vertical_limit: float = 0.8

    # Pixels with alpha below this are never sampled
    alpha_cutoff: int = 200

    # Cup-found decision: n >= min_pixels and matcha_ratio >= min_green_ratio
    # None takes the calibrated pair of the chosen sampler
    min_pixels: Optional[int] = None
    min_green_ratio: Optional[float] = None

    # Per-pixel matcha rule
    rule: MatchaPixelRule = field(default_factory=MatchaPixelRule)

    # Reference palette and the RGB radius that counts as "close"
    reference_colors: tuple[ReferenceColor, ...] = IDEAL_MATCHA_COLORS
    reference_radius: float = 50.0

    # Score strategy (fixes the scale: 0-10 or 0-5)
    scoring: ScoringMethod = ScoringMethod.RATIO_BLEND

    def __post_init__(self) -> None:
        """Fill sampler presets and validate parameter ranges."""
        preset_pixels, preset_ratio = _SAMPLER_PRESETS[self.sampler]
        if self.min_pixels is None:
            object.__setattr__(self, "min_pixels", preset_pixels)
        if self.min_green_ratio is None:
            object.__setattr__(self, "min_green_ratio", preset_ratio)

        if not 0.0 < self.disc_fraction <= 1.0:
            raise ValueError(f"disc_fraction must be in (0, 1], got {self.disc_fraction}")
        if self.cup_width_fraction <= 0 or self.cup_height_fraction <= 0:
            raise ValueError("cup_width_fraction and cup_height_fraction must be > 0")
        if not 0.0 < self.cup_vertical_limit <= 1.0:
            raise ValueError(
                f"cup_vertical_limit must be in (0, 1], got {self.cup_vertical_limit}"
            )
        if not 0.0 <= self.cup_taper * self.cup_vertical_limit < 1.0:
            raise ValueError(
                "cup_taper * cup_vertical_limit must be in [0, 1) "
                "or the silhouette collapses"
            )
        if not 0 <= self.alpha_cutoff <= 255:
            raise ValueError(f"alpha_cutoff must be 0-255, got {self.alpha_cutoff}")
        if self.min_pixels < 1:
            raise ValueError(f"min_pixels must be >= 1, got {self.min_pixels}")
        if not 0.0 <= self.min_green_ratio <= 1.0:
            raise ValueError(f"min_green_ratio must be 0-1, got {self.min_green_ratio}")
        if not self.reference_colors:
            raise ValueError("reference_colors cannot be empty")
        if self.reference_radius < 0:
            raise ValueError(f"reference_radius must be >= 0, got {self.reference_radius}")

    @classmethod
    def for_sampler(cls, sampler: SamplerKind, **overrides) -> DetectorConfig:
        """
        Config for a sampler with its calibrated cup-found thresholds.

        Args:
            sampler: Region sampler to use
            **overrides: Any other DetectorConfig field

        Example:
            >>> cfg = DetectorConfig.for_sampler(SamplerKind.FULL_FRAME)
            >>> cfg.min_pixels, cfg.min_green_ratio
            (50, 0.04)
        """
        return cls(sampler=sampler, **overrides)

    def with_overrides(self, **overrides) -> DetectorConfig:
        """
        Return a copy with some fields replaced.

        Switching ``sampler`` resets the cup-found thresholds to the new
        sampler's preset unless they are overridden too.
        """
        if "sampler" in overrides:
            overrides.setdefault("min_pixels", None)
            overrides.setdefault("min_green_ratio", None)
        return replace(self, **overrides)

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dictionary."""
        return {
            "sampler": self.sampler.value,
            "disc_fraction": self.disc_fraction,
            "cup_width_fraction": self.cup_width_fraction,
            "cup_height_fraction": self.cup_height_fraction,
            "cup_taper": self.cup_taper,
            "cup_vertical_limit": self.cup_vertical_limit,
            "alpha_cutoff": self.alpha_cutoff,
            "min_pixels": self.min_pixels,
            "min_green_ratio": self.min_green_ratio,
            "rule": self.rule.to_dict(),
            "reference_colors": [ref.to_dict() for ref in self.reference_colors],
            "reference_radius": self.reference_radius,
            "scoring": self.scoring.value,
        }

    @classmethod
    def from_dict(cls, data: dict, *, strict_unknown: bool = False) -> DetectorConfig:
        """
        Deserialize from dictionary.

        Missing keys take the defaults of the chosen sampler's preset.

        Args:
            data: Mapping of field names to values
            strict_unknown: Raise instead of warning on unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            if strict_unknown:
                raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

        params = {k: v for k, v in data.items() if k in known}
        sampler = SamplerKind(params.pop("sampler", SamplerKind.CUP_SILHOUETTE.value))

        if "scoring" in params:
            params["scoring"] = ScoringMethod(params["scoring"])
        if "rule" in params:
            params["rule"] = MatchaPixelRule.from_dict(params["rule"])
        if "reference_colors" in params:
            params["reference_colors"] = tuple(
                ReferenceColor(name=ref, hex=ref) if isinstance(ref, str)
                else ReferenceColor.from_dict(ref)
                for ref in params["reference_colors"]
            )

        return cls.for_sampler(sampler, **params)


def load_config(
    path: Union[str, Path],
    *,
    strict_unknown: bool = False,
) -> DetectorConfig:
    """
    Load a DetectorConfig from a JSON file.

    Args:
        path: Path to a JSON object with DetectorConfig fields
        strict_unknown: Raise ValueError on unknown keys instead of warning

    Returns:
        DetectorConfig
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    logger.debug("Loaded detector config from %s", path)
    return DetectorConfig.from_dict(data, strict_unknown=strict_unknown)
