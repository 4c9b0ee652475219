# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Main analysis API.

This is the primary entry point: one image in, one DetectionResult out.
The computation is pure and single-shot. Each call owns its pixel buffer
and counters, so concurrent calls never share state.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
from numpy.typing import NDArray

from matchacup.errors import ImageDecodeError, InvalidImageError
from matchacup.schema import NEUTRAL_GRAY, ColorStatistics, DetectionResult
from matchacup.detect.classify import compute_statistics
from matchacup.detect.colorspace import rgb_to_hex
from matchacup.detect.config import DetectorConfig
from matchacup.detect.regions import sample_region
from matchacup.detect.scoring import Scorer, get_scorer

logger = logging.getLogger(__name__)

ImageInput = Union[str, Path, bytes, bytearray, NDArray[np.uint8], Any]

_DATA_URL_PREFIX = "data:"


def analyze(
    image: ImageInput,
    *,
    config: Optional[DetectorConfig] = None,
    scorer: Optional[Scorer] = None,
) -> DetectionResult:
    """
    Decide whether an image shows a cup of matcha and score its green.

    Args:
        image: One of:
            - Path to an image file (str or Path)
            - ``data:image/...;base64,...`` URL (as produced by a browser
              canvas or file reader)
            - Encoded image bytes (PNG, JPEG, ...)
            - A ``PIL.Image.Image``
            - NumPy uint8 array of shape (H, W, 3) or (H, W, 4); RGB
              arrays are treated as fully opaque
        config: Detector configuration (defaults: cup silhouette sampler,
            ratio-blend 0-10 score)
        scorer: Optional score strategy overriding ``config.scoring``

    Returns:
        DetectionResult. Undecodable input yields the failure result
        ``(False, 0, "#888888")`` rather than an exception.

    Raises:
        InvalidImageError: No image, empty data, zero-sized image, or an
            array with the wrong shape/dtype
        TypeError: Unsupported input type
        FileNotFoundError: Path does not exist

    Example:
        >>> import numpy as np
        >>> from matchacup import analyze
        >>> pixels = np.full((100, 100, 3), [123, 175, 92], dtype=np.uint8)
        >>> analyze(pixels).to_dict()
        {'cupFound': True, 'colorScore': 10.0, 'avgColor': '#7baf5c', 'maxScore': 10.0}
    """
    cfg = config or DetectorConfig()
    active_scorer = scorer or get_scorer(cfg.scoring)

    try:
        rgba = load_rgba(image)
    except ImageDecodeError as exc:
        logger.warning("Image decode failed, reporting no cup: %s", exc)
        return DetectionResult.failure(max_score=float(active_scorer.max_score))

    return analyze_pixels(rgba, config=cfg, scorer=active_scorer)


async def analyze_async(
    image: ImageInput,
    *,
    config: Optional[DetectorConfig] = None,
    scorer: Optional[Scorer] = None,
) -> DetectionResult:
    """
    Run ``analyze`` off the event loop.

    Awaiting the worker thread is the only suspension point; decode and
    analysis always run to completion. Callers that no longer want the
    result simply drop it.
    """
    return await asyncio.to_thread(analyze, image, config=config, scorer=scorer)


def analyze_pixels(
    rgba: NDArray[np.uint8],
    *,
    config: Optional[DetectorConfig] = None,
    scorer: Optional[Scorer] = None,
) -> DetectionResult:
    """
    Analyze already-decoded pixels.

    Args:
        rgba: uint8 array of shape (H, W, 4), or (H, W, 3) for opaque images
        config: Detector configuration
        scorer: Optional score strategy overriding ``config.scoring``

    Returns:
        DetectionResult
    """
    cfg = config or DetectorConfig()
    rgba = _validate_array(rgba)
    height, width = rgba.shape[:2]

    region = sample_region(width, height, cfg)
    eligible = region & (rgba[..., 3] >= cfg.alpha_cutoff)
    sampled = rgba[..., :3][eligible]

    stats = compute_statistics(
        sampled,
        rule=cfg.rule,
        references=cfg.reference_colors,
        reference_radius=cfg.reference_radius,
    )
    return build_result(stats, cfg, scorer=scorer)


def build_result(
    stats: ColorStatistics,
    config: DetectorConfig,
    *,
    scorer: Optional[Scorer] = None,
) -> DetectionResult:
    """
    Turn aggregate statistics into the final verdict.

    The cup is found when ``n >= min_pixels`` and
    ``matcha_ratio >= min_green_ratio``. Only then is the scorer consulted;
    otherwise the score is 0. The average color is always reported,
    ``#888888`` when nothing was sampled.
    """
    active_scorer = scorer or get_scorer(config.scoring)
    max_score = float(active_scorer.max_score)

    cup_found = (
        stats.pixel_count >= config.min_pixels
        and stats.matcha_ratio >= config.min_green_ratio
    )

    color_score = 0.0
    if cup_found:
        raw = float(active_scorer.score(stats, config.reference_colors))
        color_score = min(max_score, max(0.0, raw))

    avg_color = NEUTRAL_GRAY if stats.is_empty else rgb_to_hex(*stats.mean_rgb)

    logger.debug(
        "matcha detection: sampler=%s pixels=%d matcha=%d reference=%d "
        "ratio=%.3f reference_ratio=%.3f avg=%s found=%s score=%s/%s",
        config.sampler.value,
        stats.pixel_count,
        stats.matcha_count,
        stats.reference_count,
        stats.matcha_ratio,
        stats.reference_ratio,
        avg_color,
        cup_found,
        color_score,
        max_score,
    )

    return DetectionResult(
        cup_found=cup_found,
        color_score=color_score,
        avg_color=avg_color,
        max_score=max_score,
    )


# =============================================================================
# Image Loading
# =============================================================================


def load_rgba(image: ImageInput) -> NDArray[np.uint8]:
    """
    Load any supported image input as an (H, W, 4) uint8 RGBA array.

    Raises:
        ImageDecodeError: Data could not be decoded
        InvalidImageError: Missing, empty or zero-sized image
        TypeError: Unsupported input type
    """
    if image is None:
        raise InvalidImageError("No image provided")

    if isinstance(image, np.ndarray):
        return _validate_array(image)

    if isinstance(image, (bytes, bytearray, memoryview)):
        if len(image) == 0:
            raise InvalidImageError("Image data is empty")
        return _decode(io.BytesIO(bytes(image)))

    if isinstance(image, str) and image.startswith(_DATA_URL_PREFIX):
        return _decode(io.BytesIO(_decode_data_url(image)))

    if isinstance(image, (str, Path)):
        if not str(image):
            raise InvalidImageError("Image path is empty")
        return _decode(image)

    Image = _require_pillow()
    if isinstance(image, Image.Image):
        # Opened images load lazily; corrupt data only surfaces on convert
        try:
            return _pil_to_rgba(image)
        except InvalidImageError:
            raise
        except _decode_errors(Image) as exc:
            raise ImageDecodeError(f"Could not decode image: {exc}") from exc

    raise TypeError(
        f"Expected file path, data URL, bytes, PIL image or numpy array, "
        f"got {type(image)}"
    )


def _require_pillow():
    try:
        from PIL import Image
    except ImportError as e:
        raise ImportError(
            "Pillow is required for image decoding. "
            "Install with: pip install Pillow"
        ) from e
    return Image


def _decode_errors(Image) -> tuple[type[BaseException], ...]:
    """Exceptions Pillow raises for corrupt, truncated or oversized data."""
    return (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


def _decode_data_url(url: str) -> bytes:
    """Extract the payload of a base64 data URL."""
    header, sep, payload = url.partition(",")
    if not sep or ";base64" not in header:
        raise ImageDecodeError("Only base64 data URLs are supported")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ImageDecodeError(f"Invalid base64 payload: {exc}") from exc
    if not data:
        raise InvalidImageError("Data URL carries no image data")
    return data


def _decode(source: Union[str, Path, io.BytesIO]) -> NDArray[np.uint8]:
    """Open and fully decode an image with Pillow."""
    Image = _require_pillow()
    try:
        with Image.open(source) as img:
            return _pil_to_rgba(img)
    except (FileNotFoundError, InvalidImageError):
        raise
    except _decode_errors(Image) as exc:
        raise ImageDecodeError(f"Could not decode image: {exc}") from exc


def _pil_to_rgba(img) -> NDArray[np.uint8]:
    """
    Convert a PIL image to RGBA pixels in sRGB.

    Applies the embedded ICC profile, if any, so colors match what a
    browser canvas would show. Conversion forces the full decode.
    """
    if img.width == 0 or img.height == 0:
        raise InvalidImageError(f"Image is zero-sized ({img.width}x{img.height})")

    rgba = img.convert("RGBA")

    icc_profile = img.info.get("icc_profile")
    if icc_profile:
        from PIL import ImageCms

        try:
            embedded = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
            srgb = ImageCms.createProfile("sRGB")
            rgb = ImageCms.profileToProfile(rgba.convert("RGB"), embedded, srgb)
            rgb.putalpha(rgba.getchannel("A"))
            rgba = rgb
        except (OSError, ImageCms.PyCMSError) as exc:
            # Keep the unconverted pixels
            logger.debug("ICC profile conversion skipped: %s", exc)

    return np.array(rgba, dtype=np.uint8)


def _validate_array(pixels: NDArray) -> NDArray[np.uint8]:
    """Check layout and return an (H, W, 4) view/copy."""
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise InvalidImageError(
            f"Expected (H, W, 3) or (H, W, 4) array, got shape {pixels.shape}"
        )

    if pixels.dtype != np.uint8:
        raise InvalidImageError(f"Expected uint8 array, got {pixels.dtype}")

    height, width = pixels.shape[:2]
    if height == 0 or width == 0:
        raise InvalidImageError(f"Image is zero-sized ({width}x{height})")

    if pixels.shape[2] == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        pixels = np.concatenate([pixels, alpha], axis=2)

    return pixels
