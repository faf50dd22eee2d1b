"""User interface components (interactive review and result display)."""

from image_dedupe.ui.review import ImageMetadata, ReviewUI

__all__ = ["ImageMetadata", "ReviewUI"]
