"""Pixel-level difference counting between two equal-shaped RGBA buffers.

The colour metric follows pixelmatch: each pixel is blended over white by
its alpha, converted to YIQ, and the weighted squared distance is compared
against ``35215 * tolerance ** 2`` (35215 being the largest possible delta).
Anti-aliased pixels are not detected separately, so they count as different.
"""

import numpy as np

from image_dedupe.core.normalizer import NormalizedImage

MAX_YIQ_DELTA = 35215.0


def _to_yiq(pixels: np.ndarray) -> np.ndarray:
    """Blend RGBA pixels over white and return Y, I, Q planes stacked on the last axis."""
    rgb = pixels[..., :3].astype(np.float64)
    alpha = pixels[..., 3:4].astype(np.float64) / 255.0
    rgb = 255.0 + (rgb - 255.0) * alpha

    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    y = r * 0.29889531 + g * 0.58662247 + b * 0.11448223
    i = r * 0.59597799 - g * 0.27417610 - b * 0.32180189
    q = r * 0.21147017 - g * 0.52261711 + b * 0.31114694
    return np.stack([y, i, q], axis=-1)


def count_different_pixels(
    image_a: NormalizedImage,
    image_b: NormalizedImage,
    tolerance: float = 0.1,
) -> int:
    """
    Count pixels whose perceptual colour difference exceeds the tolerance.

    Args:
        image_a: First normalized image (4 channels)
        image_b: Second normalized image, same shape as the first
        tolerance: Matching threshold from 0 to 1; smaller is stricter

    Returns:
        Number of differing pixels

    Raises:
        ValueError: If the shapes differ or the buffers are not RGBA
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes differ: {image_a.shape} vs {image_b.shape}"
        )
    if image_a.channels != 4:
        raise ValueError(f"Expected 4 channels, got {image_a.channels}")

    if image_a.data == image_b.data:
        return 0

    yiq_a = _to_yiq(image_a.as_array())
    yiq_b = _to_yiq(image_b.as_array())
    dy, di, dq = np.moveaxis(yiq_a - yiq_b, -1, 0)
    delta = 0.5053 * dy * dy + 0.299 * di * di + 0.1957 * dq * dq

    max_delta = MAX_YIQ_DELTA * tolerance * tolerance
    return int(np.count_nonzero(delta > max_delta))
