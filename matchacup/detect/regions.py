# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Region sampling.

Decides which pixel coordinates count as "the cup" without any
segmentation model. Every sampler is a pure function of the image
size and its shape parameters, returning a boolean (H, W) mask.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from matchacup.schema import SamplerKind

if TYPE_CHECKING:
    from matchacup.detect.config import DetectorConfig


def _pixel_grid(width: int, height: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Column (1, W) and row (H, 1) coordinate grids."""
    ys, xs = np.ogrid[0:height, 0:width]
    return xs.astype(np.float64), ys.astype(np.float64)


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")


def disc_mask(
    width: int,
    height: int,
    fraction: float = 0.25,
) -> NDArray[np.bool_]:
    """
    Pixels within ``min(W, H) * fraction`` of the image center.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        fraction: Radius as a fraction of the shorter side

    Returns:
        Boolean array of shape (H, W)
    """
    _check_size(width, height)
    xs, ys = _pixel_grid(width, height)
    cx, cy = width / 2, height / 2
    radius = min(width, height) * fraction
    return (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2


def cup_silhouette_mask(
    width: int,
    height: int,
    width_fraction: float = 0.35,
    height_fraction: float = 0.40,
    taper: float = 0.3,
    vertical_limit: float = 0.8,
) -> NDArray[np.bool_]:
    """
    Pixels inside a tapered ellipse shaped like a cup seen from the side.

    Offsets from the center are normalized by the cup half-width and
    half-height. The ellipse narrows linearly toward the base (image y
    grows downward), and the rim and base are cut off at
    ``±vertical_limit``::

        rel_x = (x - W/2) / (W * width_fraction)
        rel_y = (y - H/2) / (H * height_fraction)
        inside = (rel_x / (1 - rel_y * taper))^2 + rel_y^2 <= 1
                 and -vertical_limit < rel_y < vertical_limit

    Returns:
        Boolean array of shape (H, W)
    """
    _check_size(width, height)
    xs, ys = _pixel_grid(width, height)
    rel_x = (xs - width / 2) / (width * width_fraction)
    rel_y = (ys - height / 2) / (height * height_fraction)

    # Inside the vertical limit with taper < 1/limit the row width stays positive
    row_width = 1.0 - rel_y * taper
    ellipse = (rel_x / row_width) ** 2 + rel_y ** 2

    return (ellipse <= 1.0) & (rel_y > -vertical_limit) & (rel_y < vertical_limit)


def full_frame_mask(width: int, height: int) -> NDArray[np.bool_]:
    """Every pixel (transparency is filtered separately)."""
    _check_size(width, height)
    return np.ones((height, width), dtype=bool)


def sample_region(
    width: int,
    height: int,
    config: DetectorConfig,
) -> NDArray[np.bool_]:
    """
    Build the sample mask for the sampler selected in config.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        config: Detector configuration (sampler kind and shape parameters)

    Returns:
        Boolean array of shape (H, W)
    """
    if config.sampler is SamplerKind.DISC:
        return disc_mask(width, height, fraction=config.disc_fraction)
    if config.sampler is SamplerKind.CUP_SILHOUETTE:
        return cup_silhouette_mask(
            width,
            height,
            width_fraction=config.cup_width_fraction,
            height_fraction=config.cup_height_fraction,
            taper=config.cup_taper,
            vertical_limit=config.cup_vertical_limit,
        )
    if config.sampler is SamplerKind.FULL_FRAME:
        return full_frame_mask(width, height)
    raise ValueError(f"Unknown sampler: {config.sampler!r}")
