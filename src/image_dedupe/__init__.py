"""
Image Dedupe - find visually duplicate images and decide which copies to keep.

Images in a directory are compared pairwise (exact pixel hash, then a pixel
difference count), grouped, resolved under a retention policy, and every run
leaves a JSON report behind.
"""

__version__ = "0.1.0"
__author__ = "Image Dedupe Contributors"

from image_dedupe.core.comparator import ComparatorConfig, PairwiseComparator
from image_dedupe.core.finder import DuplicateFinder
from image_dedupe.core.grouper import DuplicateGrouper
from image_dedupe.core.resolver import DuplicateResolver, RetentionPolicy

__all__ = [
    "ComparatorConfig",
    "DuplicateFinder",
    "DuplicateGrouper",
    "DuplicateResolver",
    "PairwiseComparator",
    "RetentionPolicy",
    "__version__",
]
