# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Color space helpers.

Conversions used by the classifier and scorers:
- RGB [0,255] ↔ ``#rrggbb`` hex
- RGB [0,255] → HSV (H in degrees [0, 360), S and V in percent [0, 100])
- Weighted, hue-aware HSV distance
- Euclidean RGB distance against a small palette

All conversions are pure NumPy for determinism.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


# Default HSV distance weights (hue, saturation, value)
HSV_WEIGHTS: tuple[float, float, float] = (1.0, 0.5, 0.5)


# =============================================================================
# Hex
# =============================================================================


def _round_half_up(values: NDArray[np.float64]) -> NDArray[np.float64]:
    """Round .5 away from zero for non-negative values (not banker's rounding)."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """
    Format an RGB triple as a lowercase hex string.

    Channels are clamped to [0, 255] and rounded half-up, so fractional
    means are accepted.

    Returns:
        Hex string like "#7baf5c"
    """
    channels = np.clip(np.array([r, g, b], dtype=np.float64), 0.0, 255.0)
    r_i, g_i, b_i = _round_half_up(channels).astype(int)
    return f"#{r_i:02x}{g_i:02x}{b_i:02x}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """
    Parse a hex color string.

    Args:
        hex_color: Hex string like "#7BAF5C" or "7baf5c"

    Returns:
        Tuple of (r, g, b) ints in [0, 255]
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Expected 6 hex digits, got {hex_color!r}")
    return (
        int(hex_color[0:2], 16),
        int(hex_color[2:4], 16),
        int(hex_color[4:6], 16),
    )


# =============================================================================
# RGB → HSV
# =============================================================================


def rgb_to_hsv(rgb: NDArray) -> NDArray[np.float64]:
    """
    Convert RGB values [0, 255] to HSV.

    Args:
        rgb: Array of shape (..., 3) with RGB values in [0, 255]

    Returns:
        Array of shape (..., 3) with:
        - H: Hue in degrees [0, 360), 0 for grays
        - S: Saturation in percent [0, 100]
        - V: Value in percent [0, 100]
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0

    r = rgb[..., 0]
    g = rgb[..., 1]
    b = rgb[..., 2]

    max_c = np.max(rgb, axis=-1)
    min_c = np.min(rgb, axis=-1)
    delta = max_c - min_c

    # Avoid division by zero for grays; their hue is forced to 0 below
    safe_delta = np.where(delta > 0, delta, 1.0)
    safe_max = np.where(max_c > 0, max_c, 1.0)

    hue = np.where(
        max_c == r,
        ((g - b) / safe_delta) % 6.0,
        np.where(
            max_c == g,
            (b - r) / safe_delta + 2.0,
            (r - g) / safe_delta + 4.0,
        ),
    )
    hue = np.where(delta > 0, hue * 60.0, 0.0) % 360.0

    saturation = np.where(max_c > 0, delta / safe_max, 0.0) * 100.0
    value = max_c * 100.0

    return np.stack([hue, saturation, value], axis=-1)


# =============================================================================
# Distances
# =============================================================================


def hue_difference(h1: NDArray, h2: NDArray) -> NDArray[np.float64]:
    """Shortest angular distance between hues in degrees, in [0, 180]."""
    diff = np.abs(np.asarray(h1, dtype=np.float64) - np.asarray(h2, dtype=np.float64)) % 360.0
    return np.minimum(diff, 360.0 - diff)


def hsv_distance(
    hsv1: NDArray,
    hsv2: NDArray,
    weights: tuple[float, float, float] = HSV_WEIGHTS,
) -> NDArray[np.float64]:
    """
    Weighted Euclidean distance between HSV colors.

    Hue is compared on the circle, so 355° and 5° are 10° apart.
    Inputs broadcast against each other.

    Args:
        hsv1: Array of shape (..., 3) as returned by rgb_to_hsv
        hsv2: Array of shape (..., 3)
        weights: Per-component weights (hue, saturation, value)

    Returns:
        Array of shape (...) with distances (lower = more similar)
    """
    hsv1 = np.asarray(hsv1, dtype=np.float64)
    hsv2 = np.asarray(hsv2, dtype=np.float64)
    w_h, w_s, w_v = weights

    d_h = hue_difference(hsv1[..., 0], hsv2[..., 0]) * w_h
    d_s = (hsv1[..., 1] - hsv2[..., 1]) * w_s
    d_v = (hsv1[..., 2] - hsv2[..., 2]) * w_v

    return np.sqrt(d_h ** 2 + d_s ** 2 + d_v ** 2)


def rgb_distance_batch(
    pixels: NDArray,
    palette: NDArray,
) -> NDArray[np.float64]:
    """
    Euclidean RGB distance from every pixel to every palette color.

    Args:
        pixels: Array of shape (N, 3)
        palette: Array of shape (K, 3)

    Returns:
        Array of shape (N, K)
    """
    pixels = np.asarray(pixels, dtype=np.float64)
    palette = np.asarray(palette, dtype=np.float64)
    delta = pixels[:, np.newaxis, :] - palette[np.newaxis, :, :]
    return np.sqrt(np.sum(delta ** 2, axis=-1))
