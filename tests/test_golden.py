"""
Unit tests for golden image synthesis.
"""

import numpy as np
import pytest

from golden_anomaly.processing import GoldenImageSynthesizer
from golden_anomaly.utils import (
    DimensionMismatchError, EmptyInputError, InvalidSampleCountError
)


def _uniform(value, shape=(20, 20)):
    return np.full(shape, value, dtype=np.uint8)


class TestGoldenImageSynthesizer:
    """Tests for GoldenImageSynthesizer."""

    def test_identical_images_reproduce_input(self, gradient_image):
        images = [gradient_image.copy() for _ in range(5)]
        golden = GoldenImageSynthesizer().synthesize(images)
        assert golden.dtype == np.uint8
        assert np.abs(golden.astype(int) - gradient_image.astype(int)).max() <= 1

    def test_full_count_equals_all(self):
        images = [_uniform(10), _uniform(20), _uniform(31)]
        synthesizer = GoldenImageSynthesizer()
        np.testing.assert_array_equal(
            synthesizer.synthesize(images, count=3),
            synthesizer.synthesize(images, count=-1)
        )

    def test_mean_is_rounded_once(self):
        golden = GoldenImageSynthesizer().synthesize([_uniform(10), _uniform(20), _uniform(31)])
        assert np.all(golden == 20)

    def test_prefix_only(self):
        images = [_uniform(10), _uniform(20), _uniform(200)]
        golden = GoldenImageSynthesizer(sample_count=2).synthesize(images)
        assert np.all(golden == 15)

    def test_no_overflow_at_full_scale(self):
        golden = GoldenImageSynthesizer().synthesize([_uniform(255) for _ in range(8)])
        assert np.all(golden == 255)

    def test_three_channel_images(self):
        images = [np.full((5, 5, 3), v, dtype=np.uint8) for v in (0, 100)]
        golden = GoldenImageSynthesizer().synthesize(images)
        assert golden.shape == (5, 5, 3)
        assert np.all(golden == 50)

    @pytest.mark.parametrize("count", [0, 4])
    def test_out_of_range_count(self, count):
        images = [_uniform(1), _uniform(2), _uniform(3)]
        with pytest.raises(InvalidSampleCountError):
            GoldenImageSynthesizer().synthesize(images, count=count)

    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            GoldenImageSynthesizer().synthesize([])

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            GoldenImageSynthesizer().synthesize([_uniform(1), _uniform(1, shape=(10, 20))])
