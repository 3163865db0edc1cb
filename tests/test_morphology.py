"""
Unit tests for the morphology helpers.
"""

import numpy as np
import pytest

from golden_anomaly.processing import close_gaps, remove_speckles


@pytest.fixture
def single_pixel():
    mask = np.zeros((31, 31), dtype=np.uint8)
    mask[15, 15] = 255
    return mask


class TestCloseGaps:
    """Tests for close_gaps (dilate k, erode k - 1)."""

    def test_leaves_net_growth_of_one_step(self, single_pixel):
        result = close_gaps(single_pixel, 3)
        assert np.count_nonzero(result) == 9
        assert np.all(result[14:17, 14:17] == 255)

    def test_single_iteration_only_dilates(self, single_pixel):
        assert np.count_nonzero(close_gaps(single_pixel, 1)) == 9

    def test_bridges_gap_between_segments(self):
        mask = np.zeros((20, 40), dtype=np.uint8)
        mask[10, 5:15] = 255
        mask[10, 19:30] = 255
        result = close_gaps(mask, 3)
        assert np.all(result[10, 5:30] == 255)

    def test_input_not_modified(self, single_pixel):
        original = single_pixel.copy()
        close_gaps(single_pixel, 2)
        np.testing.assert_array_equal(single_pixel, original)

    def test_invalid_iterations(self, single_pixel):
        with pytest.raises(ValueError):
            close_gaps(single_pixel, 0)


class TestRemoveSpeckles:
    """Tests for remove_speckles (erode k, dilate k)."""

    def test_removes_isolated_pixel(self, single_pixel):
        assert np.count_nonzero(remove_speckles(single_pixel, 1)) == 0

    def test_preserves_large_region(self):
        mask = np.zeros((40, 40), dtype=np.uint8)
        mask[10:20, 10:20] = 255
        result = remove_speckles(mask, 2)
        np.testing.assert_array_equal(result, mask)

    def test_invalid_iterations(self, single_pixel):
        with pytest.raises(ValueError):
            remove_speckles(single_pixel, -1)
