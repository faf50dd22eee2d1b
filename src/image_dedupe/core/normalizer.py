"""Decode image bytes into a bounded, fixed-channel pixel buffer."""

import hashlib
import io
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from PIL import Image


@dataclass
class NormalizedImage:
    """Raw interleaved pixel buffer (row-major, ``channels`` bytes per pixel)."""

    width: int
    height: int
    channels: int
    data: bytes = field(repr=False)
    _digest: Optional[str] = field(default=None, init=False, repr=False, compare=False)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.height, self.width, self.channels)

    @property
    def digest(self) -> str:
        """SHA-256 of the pixel data, computed once."""
        if self._digest is None:
            self._digest = hashlib.sha256(self.data).hexdigest()
        return self._digest

    def as_array(self) -> np.ndarray:
        """View the buffer as a (height, width, channels) uint8 array."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.shape)


class ImageNormalizer:
    """Resizes images to fit inside a bounding box and forces an alpha channel.

    Images are shrunk with their aspect ratio preserved and are never
    enlarged. Animated formats contribute their first frame only.
    """

    MODE = "RGBA"

    def __init__(self, max_width: int = 800, max_height: int = 533):
        if max_width <= 0 or max_height <= 0:
            raise ValueError(
                f"Envelope must be positive, got {max_width}x{max_height}"
            )
        self.max_width = max_width
        self.max_height = max_height

    def normalize(self, content: bytes) -> NormalizedImage:
        """
        Decode and normalize image bytes.

        Args:
            content: Encoded image file content

        Returns:
            NormalizedImage within the configured envelope

        Raises:
            PIL.UnidentifiedImageError: If the bytes are not a known image format
            OSError: If the image data is truncated or corrupt
        """
        with Image.open(io.BytesIO(content)) as img:
            img.seek(0)
            rgba = img.convert(self.MODE)

        if rgba.width > self.max_width or rgba.height > self.max_height:
            rgba.thumbnail(
                (self.max_width, self.max_height), Image.Resampling.LANCZOS
            )

        return NormalizedImage(
            width=rgba.width,
            height=rgba.height,
            channels=len(rgba.getbands()),
            data=rgba.tobytes(),
        )
