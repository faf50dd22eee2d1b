"""Pairwise duplicate decision: exact pixel hash first, pixel difference second."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from image_dedupe.core.normalizer import ImageNormalizer, NormalizedImage
from image_dedupe.core.similarity import count_different_pixels

logger = logging.getLogger(__name__)

SimilarityOracle = Callable[[NormalizedImage, NormalizedImage, float], int]


@dataclass(frozen=True)
class ComparatorConfig:
    """Thresholds used by PairwiseComparator."""

    max_width: int = 800
    max_height: int = 533
    pixel_tolerance: float = 0.1
    max_diff_pixels: int = 200  # Absolute count so small and large images are judged alike

    def __post_init__(self):
        if not 0.0 <= self.pixel_tolerance <= 1.0:
            raise ValueError(
                f"pixel_tolerance must be between 0 and 1, got {self.pixel_tolerance}"
            )
        if self.max_diff_pixels < 0:
            raise ValueError(
                f"max_diff_pixels must be non-negative, got {self.max_diff_pixels}"
            )


class PairwiseComparator:
    """Decides whether two images are visual duplicates.

    Comparison never raises: a decode failure or an oracle failure makes the
    pair "not duplicate", since a false negative only keeps a redundant file
    while a false positive deletes one.
    """

    def __init__(
        self,
        config: Optional[ComparatorConfig] = None,
        oracle: Optional[SimilarityOracle] = count_different_pixels,
    ):
        """
        Initialize the comparator.

        Args:
            config: Thresholds and normalization envelope (defaults if None)
            oracle: Pixel difference counter; None disables the fallback
                comparison so only exact pixel hashes match
        """
        self.config = config or ComparatorConfig()
        self.oracle = oracle
        self.normalizer = ImageNormalizer(self.config.max_width, self.config.max_height)

    def are_duplicates(self, content_a: bytes, content_b: bytes) -> bool:
        """
        Compare two encoded images.

        Args:
            content_a: Bytes of the first image file
            content_b: Bytes of the second image file

        Returns:
            True if the images are duplicates
        """
        image_a = self.normalize(content_a)
        if image_a is None:
            return False
        image_b = self.normalize(content_b)
        if image_b is None:
            return False
        return self.compare(image_a, image_b)

    def normalize(self, content: bytes) -> Optional[NormalizedImage]:
        """Normalize image bytes, returning None if they cannot be decoded."""
        try:
            image = self.normalizer.normalize(content)
        except Exception as e:
            logger.error(f"Image normalization failed: {e}")
            return None

        logger.debug(f"Normalized: {image.width}x{image.height}, channels: {image.channels}")
        return image

    def compare(self, image_a: NormalizedImage, image_b: NormalizedImage) -> bool:
        """
        Compare two normalized images.

        Args:
            image_a: First normalized image
            image_b: Second normalized image

        Returns:
            True if the images are duplicates
        """
        if image_a.shape != image_b.shape:
            logger.debug("Images differ in dimensions or channels")
            return False

        try:
            identical = image_a.digest == image_b.digest
        except Exception as e:
            logger.error(f"Hashing failed: {e}")
            return False

        if identical:
            logger.debug("Images identical by hash")
            return True

        if self.oracle is None:
            logger.debug("No similarity oracle configured, using hash result")
            return identical

        try:
            diff_pixels = self.oracle(image_a, image_b, self.config.pixel_tolerance)
        except Exception as e:
            logger.error(f"Pixel comparison failed, falling back to hash comparison: {e}")
            return identical

        logger.debug(f"Pixel differences: {diff_pixels}")
        return diff_pixels < self.config.max_diff_pixels
