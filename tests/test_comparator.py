"""Tests for normalization, the similarity oracle and the pairwise comparator."""

import io
from unittest.mock import Mock

import pytest
from PIL import Image

from image_dedupe.core.comparator import ComparatorConfig, PairwiseComparator
from image_dedupe.core.normalizer import ImageNormalizer, NormalizedImage
from image_dedupe.core.similarity import count_different_pixels


def encode(size=(64, 64), color=(255, 0, 0), fmt="PNG", mode="RGB", **kwargs) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color=color).save(buffer, fmt, **kwargs)
    return buffer.getvalue()


def rgba(width, height, pixels) -> NormalizedImage:
    """Build a NormalizedImage from a flat list of (r, g, b, a) tuples."""
    data = bytes(channel for pixel in pixels for channel in pixel)
    return NormalizedImage(width=width, height=height, channels=4, data=data)


class TestImageNormalizer:
    """Test ImageNormalizer class."""

    def test_forces_alpha_channel(self):
        image = ImageNormalizer().normalize(encode(mode="RGB"))

        assert image.channels == 4
        assert len(image.data) == image.width * image.height * 4

    def test_shrinks_into_envelope_preserving_aspect(self):
        image = ImageNormalizer(800, 533).normalize(encode(size=(1600, 800)))

        assert image.width == 800
        assert image.height == 400

    def test_tall_image_bounded_by_height(self):
        image = ImageNormalizer(800, 533).normalize(encode(size=(300, 1066)))

        assert image.height <= 533
        assert image.width <= 800
        assert image.width == pytest.approx(150, abs=1)

    def test_never_upscales(self):
        image = ImageNormalizer(800, 533).normalize(encode(size=(10, 20)))

        assert (image.width, image.height) == (10, 20)

    def test_gif_palette_image(self):
        image = ImageNormalizer().normalize(encode(fmt="GIF"))

        assert image.channels == 4
        assert (image.width, image.height) == (64, 64)

    def test_invalid_bytes_raise(self):
        with pytest.raises(Exception):
            ImageNormalizer().normalize(b"definitely not an image")

    def test_invalid_envelope(self):
        with pytest.raises(ValueError):
            ImageNormalizer(0, 533)

    def test_digest_is_stable(self):
        first = ImageNormalizer().normalize(encode())
        second = ImageNormalizer().normalize(encode())

        assert first.digest == second.digest
        assert len(first.digest) == 64


class TestCountDifferentPixels:
    """Test the pixel difference oracle."""

    def test_identical_buffers(self):
        a = rgba(2, 1, [(10, 20, 30, 255), (40, 50, 60, 255)])
        b = rgba(2, 1, [(10, 20, 30, 255), (40, 50, 60, 255)])

        assert count_different_pixels(a, b) == 0

    def test_counts_strongly_different_pixels(self):
        a = rgba(2, 2, [(255, 255, 255, 255)] * 4)
        b = rgba(2, 2, [(0, 0, 0, 255)] + [(255, 255, 255, 255)] * 3)

        assert count_different_pixels(a, b, 0.1) == 1

    def test_small_change_within_tolerance(self):
        a = rgba(1, 1, [(200, 100, 50, 255)])
        b = rgba(1, 1, [(205, 100, 50, 255)])

        assert count_different_pixels(a, b, 0.1) == 0
        assert count_different_pixels(a, b, 0.0) == 1

    def test_transparent_pixels_blend_to_white(self):
        a = rgba(1, 1, [(0, 0, 0, 0)])
        b = rgba(1, 1, [(255, 255, 255, 0)])

        assert count_different_pixels(a, b, 0.0) == 0

    def test_shape_mismatch_raises(self):
        a = rgba(1, 1, [(0, 0, 0, 255)])
        b = rgba(2, 1, [(0, 0, 0, 255)] * 2)

        with pytest.raises(ValueError):
            count_different_pixels(a, b)


class TestComparatorConfig:
    """Test ComparatorConfig defaults and validation."""

    def test_reference_defaults(self):
        config = ComparatorConfig()

        assert (config.max_width, config.max_height) == (800, 533)
        assert config.pixel_tolerance == 0.1
        assert config.max_diff_pixels == 200

    @pytest.mark.parametrize("kwargs", [{"pixel_tolerance": 1.5}, {"max_diff_pixels": -1}])
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ComparatorConfig(**kwargs)


class TestPairwiseComparator:
    """Test PairwiseComparator class."""

    def test_identical_bytes_use_hash_fast_path(self):
        oracle = Mock(return_value=10_000)
        comparator = PairwiseComparator(oracle=oracle)
        content = encode()

        assert comparator.are_duplicates(content, content) is True
        oracle.assert_not_called()

    def test_reencoded_copy_matches_by_hash(self):
        oracle = Mock(return_value=10_000)
        comparator = PairwiseComparator(oracle=oracle)

        fast = encode(compress_level=1)
        small = encode(compress_level=9, optimize=True)

        assert comparator.are_duplicates(fast, small) is True
        oracle.assert_not_called()

    def test_dimension_mismatch_skips_oracle(self):
        oracle = Mock(return_value=0)
        comparator = PairwiseComparator(oracle=oracle)

        assert comparator.are_duplicates(encode(size=(64, 64)), encode(size=(64, 32))) is False
        oracle.assert_not_called()

    def test_oracle_below_threshold_is_duplicate(self):
        oracle = Mock(return_value=199)
        comparator = PairwiseComparator(oracle=oracle)

        assert comparator.are_duplicates(encode(color=(255, 0, 0)), encode(color=(0, 0, 255))) is True
        oracle.assert_called_once()
        assert oracle.call_args[0][2] == 0.1

    def test_oracle_at_threshold_is_not_duplicate(self):
        comparator = PairwiseComparator(oracle=Mock(return_value=200))

        assert comparator.are_duplicates(encode(color=(255, 0, 0)), encode(color=(0, 0, 255))) is False

    def test_custom_thresholds_are_used(self):
        oracle = Mock(return_value=500)
        config = ComparatorConfig(pixel_tolerance=0.3, max_diff_pixels=1000)
        comparator = PairwiseComparator(config, oracle=oracle)

        assert comparator.are_duplicates(encode(color=(255, 0, 0)), encode(color=(0, 0, 255))) is True
        assert oracle.call_args[0][2] == 0.3

    def test_oracle_error_falls_back_to_hash_result(self):
        comparator = PairwiseComparator(oracle=Mock(side_effect=RuntimeError("boom")))

        assert comparator.are_duplicates(encode(color=(255, 0, 0)), encode(color=(0, 0, 255))) is False

    def test_missing_oracle_falls_back_to_hash_result(self):
        comparator = PairwiseComparator(oracle=None)
        content = encode()

        assert comparator.are_duplicates(content, content) is True
        assert comparator.are_duplicates(encode(color=(255, 0, 0)), encode(color=(0, 0, 255))) is False

    def test_undecodable_input_is_not_duplicate(self):
        oracle = Mock(return_value=0)
        comparator = PairwiseComparator(oracle=oracle)

        assert comparator.are_duplicates(b"garbage", encode()) is False
        assert comparator.are_duplicates(encode(), b"garbage") is False
        oracle.assert_not_called()

    def test_real_oracle_small_edit_is_duplicate(self):
        comparator = PairwiseComparator()
        base = Image.new("RGB", (64, 64), color=(255, 0, 0))
        edited = base.copy()
        for x in range(5):
            for y in range(5):
                edited.putpixel((x, y), (0, 0, 0))

        a, b = io.BytesIO(), io.BytesIO()
        base.save(a, "PNG")
        edited.save(b, "PNG")

        assert comparator.are_duplicates(a.getvalue(), b.getvalue()) is True

    def test_real_oracle_distinct_images(self):
        comparator = PairwiseComparator()

        assert comparator.are_duplicates(encode(color=(255, 0, 0)), encode(color=(0, 0, 255))) is False
